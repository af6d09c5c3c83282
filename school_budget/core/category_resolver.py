"""Fuzzy resolution of per-student counts from free-text fee rows.

Fee and income rows are typed in by different country offices under their
own naming conventions ("Öğrenci Servis Ücreti", "School bus", "Ulaşım").
Each category (meal, uniform, book, transport) has an alias list. Each row
label is scored against the aliases, and the best row's declared student
count is used.

Scores:

=====================  =====
match                  score
=====================  =====
exact                  100
prefix                 80
whole word             70
substring              60
=====================  =====
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, Mapping, Sequence, Tuple

from .catalogs import BOOK_ALIASES, MEAL_ALIASES, TRANSPORT_ALIASES, UNIFORM_ALIASES
from .common.numeric import as_list, first_defined, safe_num
from .common.text import normalize_text
from .common.types import CategoryCounts

__all__ = [
    "COUNT_ACCESSORS",
    "LABEL_ACCESSORS",
    "find_best_count",
    "resolve_category_counts",
    "row_count",
    "row_label",
    "score_match",
]

Accessor = Callable[[Mapping[str, Any]], Any]

SCORE_EXACT = 100
SCORE_PREFIX = 80
SCORE_WORD = 70
SCORE_SUBSTRING = 60


def _field(name: str) -> Accessor:
    return lambda row: row.get(name)


LABEL_ACCESSORS: Tuple[Accessor, ...] = tuple(
    _field(name)
    for name in ("key", "code", "name", "title", "label", "description", "item_name")
)
COUNT_ACCESSORS: Tuple[Accessor, ...] = tuple(
    _field(name) for name in ("studentCount", "count", "students", "qty", "quantity")
)


def row_label(row: Any) -> str:
    return str(first_defined(row, LABEL_ACCESSORS, ""))


def row_count(row: Any) -> float:
    return safe_num(first_defined(row, COUNT_ACCESSORS, 0))


def score_match(label: str, aliases: Iterable[str]) -> int:
    """Best score of an already normalized ``label`` against normalized aliases."""

    best = 0
    if not label:
        return best
    for alias in aliases:
        if not alias:
            continue
        if label == alias:
            score = SCORE_EXACT
        elif label.startswith(alias):
            score = SCORE_PREFIX
        elif re.search(rf"(^|\s){re.escape(alias)}(\s|$)", label):
            score = SCORE_WORD
        elif alias in label:
            score = SCORE_SUBSTRING
        else:
            continue
        best = max(best, score)
    return best


def find_best_count(rows: Any, aliases: Sequence[str]) -> float:
    """Declared count of the best-matching row; ``0`` when nothing matches.

    Ties on score go to the row with the larger declared count, not to the
    first row seen.
    """

    normalized_aliases = [normalize_text(alias) for alias in aliases]
    best_score = 0
    best_count = 0.0
    for row in as_list(rows):
        score = score_match(normalize_text(row_label(row)), normalized_aliases)
        if score <= 0:
            continue
        count = row_count(row)
        if score > best_score or (score == best_score and count > best_count):
            best_score, best_count = score, count
    return best_count


def resolve_category_counts(rows: Any) -> CategoryCounts:
    return CategoryCounts(
        meal=find_best_count(rows, MEAL_ALIASES),
        uniform=find_best_count(rows, UNIFORM_ALIASES),
        book=find_best_count(rows, BOOK_ALIASES),
        transport=find_best_count(rows, TRANSPORT_ALIASES),
    )
