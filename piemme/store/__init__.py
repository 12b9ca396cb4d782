"""
Store — File-backed prompt collection

Supplies the two things the resolution engine needs from its host:
a name -> content lookup and the set of known names.
"""

from .prompts import (
    Prompt,
    PromptStore,
    PromptStoreError,
    InvalidPromptNameError,
    DuplicatePromptError,
    generate_name_from_content,
    make_unique_name,
)

__all__ = [
    "Prompt",
    "PromptStore",
    "PromptStoreError",
    "InvalidPromptNameError",
    "DuplicatePromptError",
    "generate_name_from_content",
    "make_unique_name",
]
