"""
Files — Reading the target of a [[file:path]] reference.

Flat inclusion only: the text is returned as-is, with no reference
expansion. Whatever reference syntax the file holds is picked up later by
the prompt-reference pass, because file references are resolved first.
"""

import logging
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


class FileReferenceError(Exception):
    """Raised when a referenced file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} - {reason}")


class FileNotFoundReferenceError(FileReferenceError):
    """Raised when a referenced file does not exist."""

    def __init__(self, path: str):
        super().__init__(path, "File not found")


def resolve_path(path: str, base_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Join a reference path onto the base directory.

    Absolute paths are returned unchanged. A missing base_dir means the
    current working directory. No chdir happens.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    return base / candidate


def read_file(path: str, base_dir: Optional[Union[str, Path]] = None, encoding: str = "utf-8") -> str:
    """
    Read a referenced file as text.

    Args:
        path: Path as written in the reference (absolute or relative)
        base_dir: Directory relative paths are joined onto
        encoding: Strict decoding, invalid bytes raise

    Returns:
        Full file content

    Raises:
        FileNotFoundReferenceError: path does not exist
        FileReferenceError: not a regular file, unreadable, or undecodable
    """
    try:
        file_path = resolve_path(path, base_dir)
        exists = file_path.exists()
        is_file = file_path.is_file()
    except OSError as e:
        # Includes a working directory that no longer exists
        raise FileReferenceError(path, e.strerror or str(e)) from e
    except ValueError as e:
        raise FileReferenceError(path, str(e)) from e

    if not exists:
        raise FileNotFoundReferenceError(path)

    if not is_file:
        raise FileReferenceError(path, "Not a regular file")

    try:
        content = file_path.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise FileReferenceError(path, f"Encoding error: {e}") from e
    except OSError as e:
        raise FileReferenceError(path, e.strerror or str(e)) from e

    logger.debug("Read %d chars from %s", len(content), file_path)
    return content
