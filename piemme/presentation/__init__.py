"""
Presentation — Terminal output helpers
"""

from .symbols import (
    SymbolSet,
    UNICODE,
    ASCII,
    get_symbols,
    supports_unicode,
    safe_print,
    truncate,
)

__all__ = [
    "SymbolSet",
    "UNICODE",
    "ASCII",
    "get_symbols",
    "supports_unicode",
    "safe_print",
    "truncate",
]
