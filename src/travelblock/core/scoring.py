# core/scoring.py
"""
Relevance scoring for airport text search.

Every record carries four pre-normalized search keys. A query term is
normalized once by the caller and compared against each key:

    field        exact   prefix   substring
    code         1000    500      -
    short_code   900     450      -
    name         -       300      100
    city         -       250      80

Field scores are independent and summed; 0 means "no match".
"""

import unicodedata
from typing import NamedTuple


class SearchKeys(NamedTuple):
    code: str
    short_code: str
    name: str
    city: str


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _passthrough(text: str) -> str:
    return text


def _select_normalizer():
    """Pick the diacritic stripper if this interpreter's Unicode tables can decompose text."""
    if len(unicodedata.normalize("NFKD", "\u00e9")) > 1:
        return _strip_diacritics
    return _passthrough


_normalize = _select_normalizer()


def normalize_for_search(text: str) -> str:
    """Case-fold and strip diacritics: 'Zürich' -> 'zurich'."""
    return _normalize(text).casefold()


def score_code(code: str, term: str) -> int:
    if not code or not term:
        return 0
    if code == term:
        return 1000
    if code.startswith(term):
        return 500
    return 0


def score_short_code(short_code: str, term: str) -> int:
    if not short_code or not term:
        return 0
    if short_code == term:
        return 900
    if short_code.startswith(term):
        return 450
    return 0


def score_name(name: str, term: str) -> int:
    if not name or not term:
        return 0
    if name.startswith(term):
        return 300
    if term in name:
        return 100
    return 0


def score_city(city: str, term: str) -> int:
    if not city or not term:
        return 0
    if city.startswith(term):
        return 250
    if term in city:
        return 80
    return 0


def compute_score(keys: SearchKeys, term: str) -> int:
    """Total relevance of one record for an already-normalized term."""
    return (
        score_code(keys.code, term)
        + score_short_code(keys.short_code, term)
        + score_name(keys.name, term)
        + score_city(keys.city, term)
    )
