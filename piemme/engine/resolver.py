"""
Resolver — Expands a prompt's raw text into its final form.

Three passes, always in this order:

    1. Files       [[file:path]]  inlined once, never re-scanned for files
    2. Prompts     [[name]]       inlined depth-first through the lookup
    3. Commands    {{command}}    reported, and run if execution is on

Prompts are flattened before commands are scanned so that commands
living inside referenced prompts are found by the outer pass.

Guarantees:
- Total: a bad token never aborts the call; it becomes an inline marker
  or stays verbatim, and the flags on ResolveResult say what happened.
- Cycle-safe: 'visited' holds the prompts being expanded on the current
  path only, so a prompt may appear twice in sibling branches.
- Bounded: expansion stops at max_depth, never past MAX_DEPTH_LIMIT,
  even without a cycle.
- Commands run last to first, here and in resolve_commands_in_content.

Usage:
    from piemme.engine import resolve

    prompts = {"greeting": "Hello, World!"}
    result = resolve("Say [[greeting]]!", prompts.get, execute_commands=False)
    result.content       # "Say Hello, World!!"
    result.references    # ["greeting"]
"""

import logging
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .commands import ShellCommandToken, execute_safe, has_commands, scan_commands
from .files import FileNotFoundReferenceError, FileReferenceError, read_file
from .references import has_file_references, has_references, scan_file_refs, scan_prompt_refs
from .result import MAX_DEPTH_LIMIT, ResolveOptions, ResolveResult


logger = logging.getLogger(__name__)

# name -> content, or None when there is no such prompt
Lookup = Callable[[str], Optional[str]]

CIRCULAR_MARKER = "<!-- [CIRCULAR REFERENCE DETECTED: {name}] -->"
FILE_NOT_FOUND_MARKER = "<!-- [FILE NOT FOUND: {path}] -->"
FILE_READ_ERROR_MARKER = "<!-- [FILE READ ERROR: {path} - {reason}] -->"


def splice(content: str, replacements: Iterable[Tuple[int, int, str]]) -> str:
    """
    Build a new string with each [start, end) span replaced.

    Spans come from one scan of content, so they never overlap. They are
    applied in ascending order against the original string, which keeps
    every offset valid no matter how long the replacements are.
    """
    parts: List[str] = []
    cursor = 0
    for start, end, text in sorted(replacements, key=lambda r: r[0]):
        parts.append(content[cursor:start])
        parts.append(text)
        cursor = end
    parts.append(content[cursor:])
    return "".join(parts)


def _execute_tokens(
    content: str,
    tokens: List[ShellCommandToken],
    timeout: Optional[float],
    cwd: Optional[str],
) -> str:
    """Run tokens last to first and splice their output into content."""
    replacements = [
        (token.start, token.end, execute_safe(token.command, timeout=timeout, cwd=cwd))
        for token in reversed(tokens)
    ]
    return splice(content, replacements)


class _Resolution:
    """Working state of one resolve call. Discarded when the call returns."""

    def __init__(self, lookup: Lookup, options: ResolveOptions):
        self.lookup = lookup
        self.options = options
        # Never deeper than MAX_DEPTH_LIMIT, whatever the options say
        self.max_depth = min(options.max_depth, MAX_DEPTH_LIMIT)

        self.visited: Set[str] = set()
        self.commands: List[str] = []
        self.references: List[str] = []
        self.file_references: List[str] = []
        self.had_circular_refs = False
        self.max_depth_exceeded = False

    # -------------------------------------------------------------------------
    # Pass 1: files
    # -------------------------------------------------------------------------

    def inline_files(self, content: str) -> str:
        """Replace each [[file:path]] with the file's text or an error marker."""
        if not has_file_references(content):
            return content

        replacements = []
        for ref in reversed(list(scan_file_refs(content))):
            try:
                text = read_file(ref.path, self.options.base_dir)
            except FileNotFoundReferenceError:
                logger.debug("File reference not found: %s", ref.path)
                text = FILE_NOT_FOUND_MARKER.format(path=ref.path)
            except FileReferenceError as e:
                logger.debug("File reference unreadable: %s (%s)", ref.path, e.reason)
                text = FILE_READ_ERROR_MARKER.format(path=ref.path, reason=e.reason)
            else:
                self.file_references.append(ref.path)
            replacements.append((ref.start, ref.end, text))

        return splice(content, replacements)

    # -------------------------------------------------------------------------
    # Pass 2: prompt references
    # -------------------------------------------------------------------------

    def expand_references(self, content: str, depth: int) -> str:
        """Recursively inline [[name]] tokens found in content."""
        if depth >= self.max_depth:
            logger.debug("Max depth %d reached, not expanding further", self.max_depth)
            self.max_depth_exceeded = True
            return content

        if not has_references(content):
            return content

        replacements = []
        for ref in reversed(list(scan_prompt_refs(content))):
            if ref.name in self.visited:
                logger.debug("Circular reference to '%s' at depth %d", ref.name, depth)
                self.had_circular_refs = True
                replacements.append((ref.start, ref.end, CIRCULAR_MARKER.format(name=ref.name)))
                continue

            ref_content = self.lookup(ref.name)
            if ref_content is None:
                # Left verbatim so the caller can still show it as broken
                continue

            self.visited.add(ref.name)
            try:
                expanded = self.expand_references(ref_content, depth + 1)
            finally:
                self.visited.discard(ref.name)

            replacements.append((ref.start, ref.end, expanded))
            self.references.append(ref.name)

        return splice(content, replacements)

    # -------------------------------------------------------------------------
    # Pass 3: commands
    # -------------------------------------------------------------------------

    def run_commands(self, content: str, execute: bool) -> str:
        """Record every {{command}}; substitute output when execute is set."""
        if not has_commands(content):
            return content

        tokens = list(scan_commands(content))
        self.commands.extend(token.command for token in tokens)

        if not execute:
            return content

        return _execute_tokens(content, tokens, self.options.command_timeout, self.options.command_cwd())

    def result(self, content: str) -> ResolveResult:
        return ResolveResult(
            content=content,
            commands=list(self.commands),
            references=list(self.references),
            file_references=list(self.file_references),
            had_circular_refs=self.had_circular_refs,
            max_depth_exceeded=self.max_depth_exceeded,
        )


def resolve(
    content: str,
    lookup: Lookup,
    execute_commands: Optional[bool] = None,
    options: Optional[ResolveOptions] = None,
) -> ResolveResult:
    """
    Resolve references and (optionally) commands in content.

    Args:
        content: Raw prompt text
        lookup: Returns a prompt's raw content by name, or None if unknown.
                Only ever called from this thread, one call at a time.
        execute_commands: Overrides options.execute_commands when given
        options: Depth limit, base directory, command timeout

    Returns:
        ResolveResult. This function does not raise for bad tokens.
    """
    options = options or ResolveOptions()
    execute = options.execute_commands if execute_commands is None else execute_commands

    state = _Resolution(lookup, options)

    text = state.inline_files(content)
    text = state.expand_references(text, 0)
    text = state.run_commands(text, execute)

    result = state.result(text)
    logger.debug("Resolved prompt: %s", result.summary())
    return result


def resolve_commands_in_content(
    content: str,
    timeout: Optional[float] = None,
    cwd: Optional[str] = None
) -> str:
    """
    Run every {{command}} in already-resolved content.

    Second half of the confirm-then-execute flow: resolve with execution
    off, show the user result.commands, then call this on result.content.
    """
    tokens = list(scan_commands(content))
    if not tokens:
        return content
    return _execute_tokens(content, tokens, timeout, cwd)


def needs_resolution(content: str) -> bool:
    """Check if content has anything resolve() would change."""
    return has_references(content) or has_file_references(content) or has_commands(content)


class PromptResolver:
    """
    Resolver bound to one prompt source and one set of options.

    Keeps no state between calls; every resolve() starts from scratch.
    """

    def __init__(self, lookup: Lookup, options: Optional[ResolveOptions] = None):
        self.lookup = lookup
        self.options = options or ResolveOptions()
        error = self.options.validate()
        if error:
            raise ValueError(error)

    def resolve(self, content: str, execute_commands: Optional[bool] = None) -> ResolveResult:
        """Resolve raw content."""
        return resolve(content, self.lookup, execute_commands=execute_commands, options=self.options)

    def resolve_name(self, name: str, execute_commands: Optional[bool] = None) -> Optional[ResolveResult]:
        """Resolve the prompt called name, or None if the lookup has no such prompt."""
        content = self.lookup(name)
        if content is None:
            return None
        return self.resolve(content, execute_commands=execute_commands)

    def execute_commands(self, content: str) -> str:
        """Run the commands left in content by a non-executing resolve()."""
        return resolve_commands_in_content(
            content, timeout=self.options.command_timeout, cwd=self.options.command_cwd()
        )
