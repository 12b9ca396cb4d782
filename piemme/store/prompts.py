"""
Prompt Store — Prompts as markdown files with YAML frontmatter

Structure:
    .piemme/
    ├── config.yaml
    └── prompts/
        ├── greeting.md
        └── code_review.md

File format:
    ---
    id: 6f1c...
    tags: [writing]
    created: '2026-01-01T10:00:00+00:00'
    modified: '2026-01-01T10:00:00+00:00'
    ---
    Body text, may contain [[other_prompt]] references.

The file stem is the prompt name. Names follow the reference grammar
([a-z0-9_]+) so every stored prompt can be referenced.

The resolution engine only sees this store through lookup().
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable

import yaml
from rapidfuzz import fuzz, process

from ..engine.references import is_valid_name, scan_prompt_refs


logger = logging.getLogger(__name__)

MAX_GENERATED_NAME_CHARS = 20


class PromptStoreError(Exception):
    """Raised when a prompt cannot be loaded or saved."""


class InvalidPromptNameError(PromptStoreError):
    """Raised when a name does not match [a-z0-9_]+."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid prompt name: '{name}'. Use lowercase letters, digits and underscores.")


class DuplicatePromptError(PromptStoreError):
    """Raised when creating a prompt whose name is taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A prompt with name '{name}' already exists")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Prompt:
    """A stored prompt with its metadata."""
    name: str
    content: str = ""
    tags: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created: str = field(default_factory=_now)
    modified: str = field(default_factory=_now)

    def set_content(self, content: str):
        """Replace the body and touch the modified time."""
        self.content = content
        self.modified = _now()

    def add_tag(self, tag: str):
        """Add tag if not already present."""
        if tag not in self.tags:
            self.tags.append(tag)
            self.modified = _now()

    def remove_tag(self, tag: str) -> bool:
        """Remove tag. Returns True if it was present."""
        if tag in self.tags:
            self.tags.remove(tag)
            self.modified = _now()
            return True
        return False

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    @property
    def preview(self) -> str:
        """First non-empty line of the body."""
        for line in self.content.splitlines():
            if line.strip():
                return line.strip()
        return ""

    def frontmatter(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tags": list(self.tags),
            "created": self.created,
            "modified": self.modified,
        }

    def to_markdown(self) -> str:
        """Serialize to the on-disk format."""
        header = yaml.safe_dump(self.frontmatter(), default_flow_style=False, sort_keys=False)
        return f"---\n{header}---\n{self.content}"

    @classmethod
    def from_markdown(cls, name: str, text: str) -> 'Prompt':
        """
        Parse the on-disk format.

        Raises:
            PromptStoreError: missing or malformed frontmatter
        """
        text = text.lstrip()
        if not text.startswith("---"):
            raise PromptStoreError("Missing YAML frontmatter")

        rest = text[3:]
        end = rest.find("\n---")
        if end == -1:
            raise PromptStoreError("Invalid YAML frontmatter: missing closing ---")

        try:
            data = yaml.safe_load(rest[:end]) or {}
        except yaml.YAMLError as e:
            raise PromptStoreError(f"Failed to parse YAML frontmatter: {e}") from e

        if not isinstance(data, dict):
            raise PromptStoreError("Frontmatter must be a mapping")

        body = rest[end + 4:]
        if body.startswith("\n"):
            body = body[1:]
        now = _now()

        return cls(
            name=name,
            content=body,
            tags=[str(t) for t in data.get("tags") or []],
            id=str(data.get("id") or uuid.uuid4()),
            created=str(data.get("created") or now),
            modified=str(data.get("modified") or now),
        )


# =============================================================================
# Naming
# =============================================================================

def generate_name_from_content(content: str) -> str:
    """
    Derive a prompt name from the first line of content.

    Lowercases the first ~20 characters, turns whitespace and '-' into '_',
    drops everything else outside [a-z0-9_] and collapses underscores.
    Returns "" for empty content.
    """
    lines = content.splitlines()
    first_line = lines[0] if lines else ""
    if not first_line.strip():
        return ""

    raw = first_line[:MAX_GENERATED_NAME_CHARS].lower()
    chars = []
    for c in raw:
        if c.isspace() or c == "-":
            chars.append("_")
        elif c.isascii() and (c.isalnum() or c == "_"):
            chars.append(c)

    parts = [p for p in "".join(chars).split("_") if p]
    return "_".join(parts)


def make_unique_name(base_name: str, existing_names: Iterable[str]) -> str:
    """Append _1, _2, ... until base_name no longer collides."""
    existing = set(existing_names)

    if not base_name:
        n = 1
        while f"empty_prompt_{n}" in existing:
            n += 1
        return f"empty_prompt_{n}"

    if base_name not in existing:
        return base_name

    suffix = 1
    while f"{base_name}_{suffix}" in existing:
        suffix += 1
    return f"{base_name}_{suffix}"


# =============================================================================
# Store
# =============================================================================

class PromptStore:
    """
    File-backed prompt collection.

    Reads lazily and caches in memory; writes go straight to disk.
    """

    def __init__(self, prompts_dir: Path):
        self.prompts_dir = Path(prompts_dir)
        self._cache: Dict[str, Prompt] = {}
        self._loaded = False

    # =========================================================================
    # Core Operations
    # =========================================================================

    def get(self, name: str) -> Optional[Prompt]:
        """Get a prompt by name."""
        self._ensure_loaded()
        return self._cache.get(name)

    def lookup(self, name: str) -> Optional[str]:
        """Raw content of a prompt, or None. This is what the resolver calls."""
        prompt = self.get(name)
        return prompt.content if prompt else None

    def names(self) -> List[str]:
        """All prompt names, sorted."""
        self._ensure_loaded()
        return sorted(self._cache.keys())

    def list_prompts(self, tag: Optional[str] = None) -> List[Prompt]:
        """All prompts sorted by name, optionally filtered by tag."""
        self._ensure_loaded()
        prompts = [self._cache[n] for n in sorted(self._cache)]
        if tag:
            prompts = [p for p in prompts if p.has_tag(tag)]
        return prompts

    def exists(self, name: str) -> bool:
        self._ensure_loaded()
        return name in self._cache

    def similar_names(self, name: str, limit: int = 3, min_score: float = 60.0) -> List[str]:
        """
        Names that look like a typo of name, best first.

        Uses rapidfuzz ratio so 'greting' finds 'greeting'.
        """
        self._ensure_loaded()
        matches = process.extract(
            name,
            list(self._cache.keys()),
            scorer=fuzz.ratio,
            limit=limit,
            score_cutoff=min_score,
        )
        return [match[0] for match in matches if match[0] != name]

    def create(self, content: str, name: Optional[str] = None, tags: Optional[List[str]] = None) -> Prompt:
        """
        Create and persist a new prompt.

        Without a name, one is generated from the first line of content.

        Raises:
            InvalidPromptNameError: name outside [a-z0-9_]+
            DuplicatePromptError: name already taken
        """
        self._ensure_loaded()

        if name is None:
            name = make_unique_name(generate_name_from_content(content), self._cache.keys())
        elif not is_valid_name(name):
            raise InvalidPromptNameError(name)
        elif name in self._cache:
            raise DuplicatePromptError(name)

        prompt = Prompt(name=name, content=content, tags=list(tags or []))
        self.save(prompt)
        return prompt

    def save(self, prompt: Prompt) -> Path:
        """Write a prompt to disk, replacing any existing file."""
        if not is_valid_name(prompt.name):
            raise InvalidPromptNameError(prompt.name)

        path = self._path_for(prompt.name)
        try:
            self.prompts_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(prompt.to_markdown(), encoding="utf-8")
        except OSError as e:
            raise PromptStoreError(f"Failed to write '{path}': {e}") from e

        self._cache[prompt.name] = prompt
        return path

    def delete(self, name: str) -> bool:
        """Delete a prompt. Returns True if it existed."""
        self._ensure_loaded()
        path = self._path_for(name)
        if path.exists():
            try:
                path.unlink()
            except OSError as e:
                raise PromptStoreError(f"Failed to delete '{path}': {e}") from e
        return self._cache.pop(name, None) is not None

    def rename(self, old_name: str, new_name: str) -> Prompt:
        """
        Rename a prompt and its file. Content and metadata are kept.

        References to old_name in other prompts are not rewritten.

        Raises:
            PromptStoreError: no prompt called old_name, or the move failed
            InvalidPromptNameError: new_name outside [a-z0-9_]+
            DuplicatePromptError: new_name already taken
        """
        self._ensure_loaded()
        prompt = self._cache.get(old_name)
        if prompt is None:
            raise PromptStoreError(f"No prompt named '{old_name}'")
        if not is_valid_name(new_name):
            raise InvalidPromptNameError(new_name)

        new_path = self._path_for(new_name)
        if new_name in self._cache or new_path.exists():
            raise DuplicatePromptError(new_name)

        old_path = self._path_for(old_name)
        try:
            old_path.rename(new_path)
        except OSError as e:
            raise PromptStoreError(f"Failed to rename '{old_path}': {e}") from e

        del self._cache[old_name]
        prompt.name = new_name
        self._cache[new_name] = prompt
        logger.debug("Renamed prompt %s -> %s", old_name, new_name)
        return prompt

    def duplicate(self, name: str) -> Prompt:
        """
        Copy a prompt's content and tags into a new prompt.

        The copy is named from its first line, made unique the same way
        create() does for unnamed prompts.

        Raises:
            PromptStoreError: no prompt called name
        """
        source = self.get(name)
        if source is None:
            raise PromptStoreError(f"No prompt named '{name}'")
        return self.create(source.content, tags=list(source.tags))

    def search(self, query: str, fuzzy: bool = True) -> List[Prompt]:
        """
        Prompts whose name or content contains query, ignoring case.

        With fuzzy set, names that look like a typo of query follow the
        exact matches, best first.
        """
        self._ensure_loaded()
        needle = query.lower()
        matches = [
            p for p in self.list_prompts()
            if needle in p.name.lower() or needle in p.content.lower()
        ]

        if fuzzy and query:
            seen = {p.name for p in matches}
            for similar in self.similar_names(needle):
                if similar not in seen:
                    matches.append(self._cache[similar])

        return matches

    def referrers(self, name: str) -> List[str]:
        """Names of prompts whose content contains [[name]], sorted."""
        self._ensure_loaded()
        return [
            p.name for p in self.list_prompts()
            if any(ref.name == name for ref in scan_prompt_refs(p.content))
        ]

    # =========================================================================
    # Persistence
    # =========================================================================

    def _path_for(self, name: str) -> Path:
        return self.prompts_dir / f"{name}.md"

    def _ensure_loaded(self):
        """Load prompts from disk if not cached."""
        if self._loaded:
            return

        if self.prompts_dir.exists():
            for f in sorted(self.prompts_dir.glob("*.md")):
                if not is_valid_name(f.stem):
                    logger.warning("Skipping prompt file with invalid name: %s", f)
                    continue
                try:
                    prompt = Prompt.from_markdown(f.stem, f.read_text(encoding="utf-8"))
                except (PromptStoreError, OSError, UnicodeDecodeError) as e:
                    # One broken file should not hide the rest
                    logger.warning("Failed to load prompt %s: %s", f, e)
                    continue
                self._cache[prompt.name] = prompt

        self._loaded = True
