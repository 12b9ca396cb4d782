"""
Prompt Resolution Engine

Turns a prompt's raw markup into final text by inlining files, inlining
other prompts by name, and substituting shell command output.

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │  File pass (once, flat)                                 │
    │  - [[file:path]] → file text, or an inline error marker │
    └─────────────────────────────────────────────────────────┘
                            │
                            ▼
    ┌─────────────────────────────────────────────────────────┐
    │  Prompt pass (recursive, depth-first)                   │
    │  - [[name]] → lookup(name), itself resolved             │
    │  - cycles cut with a marker, depth capped at max_depth  │
    └─────────────────────────────────────────────────────────┘
                            │
                            ▼
    ┌─────────────────────────────────────────────────────────┐
    │  Command pass (optional)                                │
    │  - {{command}} always reported in result.commands       │
    │  - replaced by stdout only when execution is enabled    │
    └─────────────────────────────────────────────────────────┘

The engine knows nothing about storage. It reads other prompts only
through the lookup callable the caller passes in.

Usage:
    from piemme.engine import resolve, ResolveOptions

    result = resolve(raw, store.lookup, execute_commands=False)
    if result.commands:
        # ask the user first, then:
        final = resolve_commands_in_content(result.content)
"""

# Result types
from .result import (
    ResolveOptions,
    ResolveResult,
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_LIMIT,
)

# Reference scanning
from .references import (
    PromptReference,
    FileReference,
    scan_prompt_refs,
    scan_file_refs,
    has_references,
    has_file_references,
    is_valid_name,
    validate_reference,
    find_and_validate_references,
    validate_file_reference,
    find_and_validate_file_references,
)

# Commands
from .commands import (
    ShellCommandToken,
    CommandError,
    scan_commands,
    has_commands,
    find_commands,
    run_command,
    execute_safe,
)

# Files
from .files import (
    FileReferenceError,
    FileNotFoundReferenceError,
    read_file,
    resolve_path,
)

# Orchestration
from .resolver import (
    PromptResolver,
    resolve,
    resolve_commands_in_content,
    needs_resolution,
    splice,
)


__all__ = [
    # Result
    "ResolveOptions",
    "ResolveResult",
    "DEFAULT_MAX_DEPTH",
    "MAX_DEPTH_LIMIT",

    # References
    "PromptReference",
    "FileReference",
    "scan_prompt_refs",
    "scan_file_refs",
    "has_references",
    "has_file_references",
    "is_valid_name",
    "validate_reference",
    "find_and_validate_references",
    "validate_file_reference",
    "find_and_validate_file_references",

    # Commands
    "ShellCommandToken",
    "CommandError",
    "scan_commands",
    "has_commands",
    "find_commands",
    "run_command",
    "execute_safe",

    # Files
    "FileReferenceError",
    "FileNotFoundReferenceError",
    "read_file",
    "resolve_path",

    # Resolver
    "PromptResolver",
    "resolve",
    "resolve_commands_in_content",
    "needs_resolution",
    "splice",
]
