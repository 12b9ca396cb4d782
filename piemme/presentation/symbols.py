"""
Symbols — Markers for prompts, references and status lines

Unicode where the terminal can show it, ASCII otherwise. The choice
follows display.symbols ("unicode", "ascii" or "auto").

Prompt bodies and command output are arbitrary text, so anything that
echoes them goes through safe_print().
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional, TextIO


# Punctuation that commonly shows up in prompt text, with plain stand-ins
ASCII_FALLBACKS = {
    '→': '->',
    '…': '...',
    '–': '-',
    '—': '--',
    '“': '"',
    '”': '"',
    '‘': "'",
    '’': "'",
    '•': '*',
}

PREVIEW_LENGTH = 60

_ENABLED = ('1', 'true', 'yes')


def _downgrade(text: str, encoding: str) -> str:
    """Swap known punctuation, then let the codec replace whatever is left."""
    for char, replacement in ASCII_FALLBACKS.items():
        text = text.replace(char, replacement)
    return text.encode(encoding, errors='replace').decode(encoding)


def safe_print(text: str, end: str = '\n', file: Optional[TextIO] = None) -> None:
    """
    Print text, degrading characters the stream cannot encode.

    Never raises UnicodeEncodeError.
    """
    stream = file if file is not None else sys.stdout
    try:
        print(text, end=end, file=stream)
    except UnicodeEncodeError:
        encoding = getattr(stream, 'encoding', None) or 'ascii'
        print(_downgrade(text, encoding), end=end, file=stream)


def truncate(text: str, length: int = PREVIEW_LENGTH, full: bool = False) -> str:
    """
    Cap a one-line preview at length characters.

        truncate("Short")                  -> "Short"
        truncate("x" * 80, 10)             -> "xxxxxxx..."
        truncate("x" * 80, 10, full=True)  -> unchanged
    """
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


@dataclass(frozen=True)
class SymbolSet:
    """Markers used in command output."""
    # Markup kinds
    ref_valid: str
    ref_broken: str
    file_ref: str
    command: str

    # Status lines
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str


UNICODE = SymbolSet(
    ref_valid='●',
    ref_broken='○',
    file_ref='▤',
    command='⚙',
    check_pass='✓',
    check_warn='⚠',
    check_fail='✗',
    arrow='→',
)

ASCII = SymbolSet(
    ref_valid='[*]',
    ref_broken='[ ]',
    file_ref='[F]',
    command='[$]',
    check_pass='[OK]',
    check_warn='[!]',
    check_fail='[ERR]',
    arrow='->',
)


def supports_unicode() -> bool:
    """
    Guess whether stdout can show the Unicode set.

    PIEMME_ASCII_ONLY and PIEMME_UNICODE force the answer. Otherwise a
    UTF stdout encoding or a UTF-8 locale says yes; anything else says no.
    """
    if os.environ.get('PIEMME_ASCII_ONLY', '').lower() in _ENABLED:
        return False
    if os.environ.get('PIEMME_UNICODE', '').lower() in _ENABLED:
        return True

    encoding = (getattr(sys.stdout, 'encoding', None) or '').lower()
    if encoding:
        return encoding.replace('-', '').replace('_', '').startswith('utf')

    locale = (os.environ.get('LC_ALL') or os.environ.get('LANG') or '').lower()
    return 'utf-8' in locale or 'utf8' in locale


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """Symbol set for a display.symbols value ("auto" or None detects)."""
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII
