"""
Text helpers shared by transcript parsing and speaker resolution.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")

# Letters that NFD does not decompose into base + combining mark
_EXTRA_FOLDS = str.maketrans({"ł": "l", "Ł": "L", "đ": "d", "Đ": "D", "ø": "o", "Ø": "O"})


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def fold_diacritics(text: str) -> str:
    """
    Remove diacritics: "Łódź" -> "Lodz".
    """
    decomposed = unicodedata.normalize("NFD", (text or "").translate(_EXTRA_FOLDS))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(text: str) -> str:
    """Fold diacritics, lower-case and collapse whitespace for name matching."""
    return collapse_whitespace(fold_diacritics(text)).lower()
