"""Object name sanitizing for GCS.

See https://cloud.google.com/storage/docs/objects#naming
"""

from __future__ import annotations

import re
import unicodedata

# XML control characters
XML_CHARS = re.compile(r"[\x7F-\x84\x86-\x9F]")
# GCS wildcard and versioning characters
GCS_CHARS = re.compile(r"[\[\]*?#]")
WHITESPACE = re.compile(r"\s+")
SLASHES = re.compile(r"[\\/]+")
TEMPLATE_KEY = re.compile(r"\[([^\[\]]+)\]")

MAX_NAME_SIZE = 1024

# Latin letters without a canonical decomposition
_LETTERS = {
    "Æ": "Ae", "æ": "ae", "Ð": "D", "ð": "d", "Ø": "O", "ø": "o",
    "Þ": "Th", "þ": "th", "ß": "ss", "Đ": "D", "đ": "d", "Ħ": "H",
    "ħ": "h", "ı": "i", "Ĳ": "IJ", "ĳ": "ij", "ĸ": "k", "Ŀ": "L",
    "ŀ": "l", "Ł": "L", "ł": "l", "ŉ": "'n", "Ŋ": "N", "ŋ": "n",
    "Œ": "Oe", "œ": "oe", "ſ": "s", "Ŧ": "T", "ŧ": "t", "ẞ": "SS",
}
_LETTER_TABLE = str.maketrans(_LETTERS)


def deburr(value: str) -> str:
    """Fold accented letters to their basic latin form."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped).translate(_LETTER_TABLE)


def _collapse_slashes(match: re.Match[str]) -> str:
    run = match.group(0)
    start = match.start()
    # Keep the double slash after a scheme, eg: https://
    if start and match.string[start - 1] == ":" and "\\" not in run and len(run) > 1:
        return "//"
    return "/"


def sanitize(value: str = "", *, lowercase: bool = True, strip_diacritics: bool = True) -> str:
    """Sanitize a file path or URL for use as a GCS object name.

    >>> sanitize("Bayern München")
    'bayern-munchen'
    """
    value = XML_CHARS.sub("", value or "")
    value = GCS_CHARS.sub("", value)
    value = WHITESPACE.sub("-", value)
    if strip_diacritics:
        value = deburr(value)
    if lowercase:
        value = value.lower()
    return SLASHES.sub(_collapse_slashes, value)


def split_path(value: str | None) -> list[str]:
    """Split a path on forward or back slashes, dropping empty segments."""
    if not value:
        return []
    return [segment for segment in SLASHES.split(value) if segment]


__all__ = ["sanitize", "deburr", "split_path", "MAX_NAME_SIZE", "TEMPLATE_KEY"]
