"""
References — Scanning for [[name]] and [[file:path]] tokens

Two independent flat scans over one string:
    [[name]]         prompt reference, name in [a-z0-9_]+
    [[file:path]]    file reference, path is anything up to the first ]]

The name pattern has no ':' so a file reference is never mistaken for a
prompt reference. There is no nesting: '[[[[x]]]]' is scanned left to
right and each opening '[[' pairs with the first ']]' the regex accepts.

Scanning makes no validity judgment. Validity is filled in afterwards
against a set of known names or the file system.

Spans are character offsets into the scanned str, end exclusive.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Iterable, List, Optional, Union

from .files import resolve_path


PROMPT_REF_PATTERN = re.compile(r"\[\[([a-z0-9_]+)\]\]")
FILE_REF_PATTERN = re.compile(r"\[\[file:([^\]]+)\]\]")
NAME_PATTERN = re.compile(r"[a-z0-9_]+")


@dataclass
class PromptReference:
    """One occurrence of [[name]]."""
    full_match: str
    name: str
    start: int
    end: int
    is_valid: bool = False


@dataclass
class FileReference:
    """One occurrence of [[file:path]]."""
    full_match: str
    path: str
    start: int
    end: int
    is_valid: bool = False


def is_valid_name(name: str) -> bool:
    """Check whether a string can be used as a prompt name."""
    return NAME_PATTERN.fullmatch(name) is not None


# =============================================================================
# Scanning
# =============================================================================

def scan_prompt_refs(content: str) -> Iterator[PromptReference]:
    """
    Yield every [[name]] token in content, left to right.

    Calling again re-scans from the start; nothing is cached.
    """
    for match in PROMPT_REF_PATTERN.finditer(content):
        yield PromptReference(
            full_match=match.group(0),
            name=match.group(1),
            start=match.start(),
            end=match.end(),
        )


def scan_file_refs(content: str) -> Iterator[FileReference]:
    """Yield every [[file:path]] token in content, left to right."""
    for match in FILE_REF_PATTERN.finditer(content):
        yield FileReference(
            full_match=match.group(0),
            path=match.group(1),
            start=match.start(),
            end=match.end(),
        )


def has_references(content: str) -> bool:
    """Check if content contains any [[name]] token."""
    return "[[" in content and PROMPT_REF_PATTERN.search(content) is not None


def has_file_references(content: str) -> bool:
    """Check if content contains any [[file:path]] token."""
    return "[[file:" in content and FILE_REF_PATTERN.search(content) is not None


# =============================================================================
# Validation
# =============================================================================

def validate_reference(reference: PromptReference, existing_names: Iterable[str]) -> PromptReference:
    """Mark a reference valid if its name is one of existing_names."""
    reference.is_valid = reference.name in set(existing_names)
    return reference


def find_and_validate_references(content: str, existing_names: Iterable[str]) -> List[PromptReference]:
    """
    Scan content and validate every prompt reference.

    Args:
        content: Text to scan
        existing_names: Known prompt names (the name universe)

    Returns:
        References in source order with is_valid filled in
    """
    names = set(existing_names)
    refs = list(scan_prompt_refs(content))
    for ref in refs:
        ref.is_valid = ref.name in names
    return refs


def validate_file_reference(
    reference: FileReference,
    base_dir: Optional[Union[str, Path]] = None
) -> FileReference:
    """Mark a file reference valid if it points at a regular file."""
    try:
        reference.is_valid = resolve_path(reference.path, base_dir).is_file()
    except (OSError, ValueError):
        reference.is_valid = False
    return reference


def find_and_validate_file_references(
    content: str,
    base_dir: Optional[Union[str, Path]] = None
) -> List[FileReference]:
    """Scan content and validate every file reference against the file system."""
    return [validate_file_reference(ref, base_dir) for ref in scan_file_refs(content)]
