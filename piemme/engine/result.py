"""
ResolveResult — Return type of prompt resolution.

ResolveOptions carries the per-call knobs; ResolveResult is the immutable
record handed back to the caller. Neither holds state between calls.

Design principles:
- Immutable after creation (frozen dataclass)
- Lists only what actually resolved (failures stay visible in content)
- Flags are the only out-of-band signal; there is no error return path
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any, Union


DEFAULT_MAX_DEPTH = 10

# Upper bound for max_depth. Expansion recurses once per level and must
# stay below the interpreter's recursion limit.
MAX_DEPTH_LIMIT = 500


@dataclass
class ResolveOptions:
    """Options for a single resolve call."""

    # Recursion ceiling for [[name]] expansion
    max_depth: int = DEFAULT_MAX_DEPTH

    # Run {{command}} tokens, or only report them
    execute_commands: bool = True

    # Directory that relative [[file:path]] references are joined onto.
    # None means the process working directory at call time.
    base_dir: Optional[Union[str, Path]] = None

    # Seconds before a running command is abandoned (None = wait forever)
    command_timeout: Optional[float] = None

    def validate(self) -> Optional[str]:
        """Validate options. Returns error message or None if valid."""
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            return f"max_depth must be between 0 and {MAX_DEPTH_LIMIT}, got {self.max_depth}"
        if self.command_timeout is not None and self.command_timeout <= 0:
            return f"command_timeout must be positive, got {self.command_timeout}"
        return None

    def command_cwd(self) -> Optional[str]:
        """Working directory for {{command}} execution (None = inherit)."""
        return str(self.base_dir) if self.base_dir is not None else None


@dataclass(frozen=True)
class ResolveResult:
    """
    Result of resolving a prompt.

    Returned by resolve() and PromptResolver.resolve().
    The caller owns it; nothing in the engine keeps a reference.
    """

    # Final text
    content: str

    # Every {{command}} found after references were expanded, in order
    commands: List[str] = field(default_factory=list)

    # Prompt names that were inlined, in resolution order (duplicates allowed)
    references: List[str] = field(default_factory=list)

    # File paths that were inlined
    file_references: List[str] = field(default_factory=list)

    # Status flags
    had_circular_refs: bool = False
    max_depth_exceeded: bool = False

    @property
    def has_commands(self) -> bool:
        """True when the resolved text contained command tokens."""
        return bool(self.commands)

    @property
    def has_issues(self) -> bool:
        """True when a cycle was cut or the depth limit was hit."""
        return self.had_circular_refs or self.max_depth_exceeded

    def summary(self) -> str:
        """One-line summary for status display."""
        parts = [
            f"{len(self.references)} ref(s)",
            f"{len(self.file_references)} file(s)",
            f"{len(self.commands)} command(s)",
        ]
        if self.had_circular_refs:
            parts.append("circular")
        if self.max_depth_exceeded:
            parts.append("max depth exceeded")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "content": self.content,
            "commands": list(self.commands),
            "references": list(self.references),
            "file_references": list(self.file_references),
            "had_circular_refs": self.had_circular_refs,
            "max_depth_exceeded": self.max_depth_exceeded,
        }
