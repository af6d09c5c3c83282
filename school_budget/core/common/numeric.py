"""Fail-safe numeric helpers shared by every stage of the report build.

Every helper here accepts arbitrary JSON-ish input (strings, ``None``,
booleans, nested garbage) and degrades instead of raising. Two families
exist on purpose:

* ``safe_num`` / ``clamp`` / ``clamp0`` collapse anything unusable to ``0``.
* ``num_or_null`` / ``safe_div`` keep ``None`` so callers can tell an
  unknown value apart from a real zero.

Example::

    >>> safe_num("12.5")
    12.5
    >>> safe_div(1, 0) is None
    True
"""
from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

__all__ = [
    "as_list",
    "as_mapping",
    "clamp",
    "clamp0",
    "first_defined",
    "num_or_null",
    "resolve",
    "round_half_up",
    "safe_div",
    "safe_num",
    "sum_field",
]

T = TypeVar("T")


def _coerce(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        numeric = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            numeric = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def num_or_null(value: Any) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not one."""

    return _coerce(value)


def safe_num(value: Any) -> float:
    """Return ``value`` as a finite float; anything else becomes ``0.0``."""

    numeric = _coerce(value)
    return 0.0 if numeric is None else numeric


def clamp(value: Any, lower: float, upper: float) -> float:
    return min(upper, max(lower, safe_num(value)))


def clamp0(value: Any) -> float:
    return max(0.0, safe_num(value))


def round_half_up(value: Any) -> int:
    """Round like a spreadsheet does: halves go up (``2.5`` → ``3``)."""

    return math.floor(safe_num(value) + 0.5)


def safe_div(numerator: Any, denominator: Any) -> float | None:
    """Divide without ever producing ``inf``/``nan``.

    Returns:
        float | None: ``None`` when either side is not a finite number or the
        denominator is zero.
    """

    num = _coerce(numerator)
    denom = _coerce(denominator)
    if num is None or denom is None or denom == 0:
        return None
    result = num / denom
    return result if math.isfinite(result) else None


def resolve(override: T | None, computed: T) -> T:
    """Prefer an externally supplied value; fall back to the local one."""

    return computed if override is None else override


def first_defined(
    row: Any,
    accessors: Sequence[Callable[[Mapping[str, Any]], Any]],
    default: Any = None,
) -> Any:
    """Run ``accessors`` in order and return the first truthy result.

    Example::

        >>> first_defined({"name": "Yemek"}, (lambda r: r.get("key"), lambda r: r.get("name")))
        'Yemek'
    """

    mapping = as_mapping(row)
    for accessor in accessors:
        value = accessor(mapping)
        if value:
            return value
    return default


def as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {}


def as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def sum_field(rows: Iterable[Any], field: str) -> float:
    """Sum ``field`` across mapping rows, treating junk as zero."""

    return sum((safe_num(as_mapping(row).get(field)) for row in rows), 0.0)
