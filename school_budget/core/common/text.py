# -*- coding: utf-8 -*-
"""
Text normalization helpers for matching free-text labels (Python 3.10+).

Public API:
- normalize_text(value: Any) -> str         fuzzy category matching
- normalize_name(value: Any) -> str         discount override lookup key
- normalize_variant(value: Any) -> str      tuition variant lookup key
- parse_academic_start_year(value: Any) -> int | None
- previous_academic_year(value: Any) -> str | None

Design notes:
- Side-effect free; deterministic; no exceptions escape to callers.
- Only standard library.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Any

__all__ = [
    "normalize_name",
    "normalize_text",
    "normalize_variant",
    "parse_academic_start_year",
    "previous_academic_year",
    "strip_marks",
]

# Turkish letters that do not decompose into ASCII + combining mark.
_TR_TRANSLATION = str.maketrans(
    {
        "ş": "s",
        "Ş": "s",
        "ı": "i",
        "İ": "i",
        "ğ": "g",
        "Ğ": "g",
        "ü": "u",
        "Ü": "u",
        "ö": "o",
        "Ö": "o",
        "ç": "c",
        "Ç": "c",
    }
)

_RE_PARENS = re.compile(r"\([^)]*\)")
_RE_PUNCT = re.compile(r"[^\w\s]", re.ASCII)
_RE_WHITESPACE = re.compile(r"\s+")
_RE_NAME_UNSAFE = re.compile(r"[^a-zA-Z0-9 ]")
_RE_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_RE_YEAR_RANGE = re.compile(r"(\d{4})\s*-\s*(\d{4})")
_RE_YEAR_RANGE_STRICT = re.compile(r"^(\d{4})\s*-\s*(\d{4})$")
_RE_YEAR_SINGLE = re.compile(r"^(\d{4})$")


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def strip_marks(value: Any) -> str:
    """NFD-decompose and drop combining marks (``ü`` → ``u``)."""

    decomposed = unicodedata.normalize("NFD", _as_text(value))
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def normalize_text(value: Any) -> str:
    """Normalize a free-text label for fuzzy comparison.

    Steps: strip diacritics, map Turkish special letters, lowercase, drop
    parenthetical text, turn punctuation into spaces, collapse whitespace.

    Example::

        >>> normalize_text("Öğrenci Servis Ücreti (aylık)")
        'ogrenci servis ucreti'
    """

    text = strip_marks(value).translate(_TR_TRANSLATION).lower()
    text = _RE_PARENS.sub(" ", text)
    text = _RE_PUNCT.sub(" ", text)
    return _RE_WHITESPACE.sub(" ", text).strip()


def normalize_name(value: Any) -> str:
    """Uppercase ASCII key used to match discount overrides to the catalog.

    Example::

        >>> normalize_name("Kardeş İndirimi")
        'KARDES INDIRIMI'
    """

    text = strip_marks(value).translate(_TR_TRANSLATION)
    return _RE_NAME_UNSAFE.sub(" ", text).strip().upper()


def normalize_variant(value: Any) -> str:
    """Compact lowercase key for tuition variants (``"Lise Yerel"`` → ``liseyerel``)."""

    if value is None:
        return ""
    text = strip_marks(value).translate(_TR_TRANSLATION)
    return _RE_NON_ALNUM.sub("", text).lower()


def parse_academic_start_year(value: Any) -> int | None:
    """Return the start year of ``"2025-2026"`` or ``"2025"``; otherwise ``None``."""

    raw = _as_text(value).strip()
    match = _RE_YEAR_RANGE.search(raw)
    if match:
        return int(match.group(1))
    match = _RE_YEAR_SINGLE.match(raw)
    if match:
        return int(match.group(1))
    return None


def previous_academic_year(value: Any) -> str | None:
    """Academic year label that precedes ``value``.

    Example::

        >>> previous_academic_year("2025-2026")
        '2024-2025'
        >>> previous_academic_year("2025")
        '2024-2025'
    """

    raw = _as_text(value).strip()
    match = _RE_YEAR_RANGE_STRICT.match(raw)
    if match:
        start, end = int(match.group(1)) - 1, int(match.group(2)) - 1
        if start > 0 and end > 0:
            return f"{start}-{end}"
        return None
    match = _RE_YEAR_SINGLE.match(raw)
    if match:
        start = int(match.group(1))
        if start - 1 > 0:
            return f"{start - 1}-{start}"
    return None
