"""Canonical comparison form for free-text answers."""
import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, strip diacritics and punctuation, collapse whitespace."""
    if not text:
        return ""
    s = text.strip().lower()
    s = unicodedata.normalize("NFD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = _NON_ALNUM.sub(" ", s)
    s = _WHITESPACE.sub(" ", s)
    return s.strip()


def answers_match(given: str, expected: str) -> bool:
    return normalize(given) == normalize(expected)
