"""Tuition & fee table: one row per visible tier variant plus total/average."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

from .catalogs import ANCILLARY_FEE_KEYS
from .common.numeric import as_list, as_mapping, clamp0, safe_num
from .common.types import TierConfig, TuitionRow
from .currency import CurrencyContext
from .tiers import is_tier_key_visible, tuition_base_key

__all__ = [
    "AncillaryFees",
    "TuitionTable",
    "build_fee_lookup",
    "build_tuition_table",
    "resolve_ancillary_fees",
    "visible_tuition_rows",
]

TOTAL_KEY = "total"
AVERAGE_KEY = "average"
TOTAL_LABEL = "TOPLAM"
AVERAGE_LABEL = "ORTALAMA UCRET"


@dataclass(frozen=True, slots=True)
class AncillaryFees:
    """Flat per-student fees charged on top of tuition, in reporting currency."""

    uniform: float = 0.0
    book: float = 0.0
    transport: float = 0.0
    meal: float = 0.0

    @property
    def total(self) -> float:
        return self.uniform + self.book + self.transport + self.meal


@dataclass(frozen=True, slots=True)
class TuitionTable:
    rows: Tuple[TuitionRow, ...]
    total: TuitionRow
    average: TuitionRow
    avg_tuition: float
    total_students: float
    gross_tuition: float

    def as_list(self) -> Tuple[TuitionRow, ...]:
        return (*self.rows, self.total, self.average)


def build_fee_lookup(fee_rows: Any) -> Dict[str, Mapping[str, Any]]:
    """Non-education fee rows keyed by trimmed, lower-cased ``key``."""

    lookup: Dict[str, Mapping[str, Any]] = {}
    for row in as_list(fee_rows):
        mapping = as_mapping(row)
        key = str(mapping.get("key") or "").strip().lower()
        if key:
            lookup[key] = mapping
    return lookup


def resolve_ancillary_fees(
    fee_lookup: Mapping[str, Mapping[str, Any]], currency: CurrencyContext
) -> AncillaryFees:
    def fee(name: str) -> float:
        row = fee_lookup.get(ANCILLARY_FEE_KEYS[name], {})
        return currency.to_reporting(row.get("unitFee", 0))

    return AncillaryFees(
        uniform=fee("uniform"),
        book=fee("book"),
        transport=fee("transport"),
        meal=fee("meal"),
    )


def visible_tuition_rows(
    rows: Any, tier_config: Mapping[str, TierConfig], program_type: str
) -> List[Mapping[str, Any]]:
    """Drop rows of disabled tiers and of the other program type."""

    visible: List[Mapping[str, Any]] = []
    for row in as_list(rows):
        mapping = as_mapping(row)
        base_key = tuition_base_key(mapping)
        if base_key is not None:
            tier = tier_config.get(base_key)
            if tier is not None and not tier.enabled:
                continue
        if not is_tier_key_visible(mapping.get("key"), program_type):
            continue
        visible.append(mapping)
    return visible


def _tier_row(
    row: Mapping[str, Any],
    fees: AncillaryFees,
    raise_pct: float,
    currency: CurrencyContext,
) -> TuitionRow:
    edu_fee = currency.to_reporting(row.get("unitFee")) * (1 + raise_pct)
    return TuitionRow(
        key=str(row.get("key") or row.get("level") or row.get("label") or ""),
        level=str(row.get("label") or row.get("level") or row.get("key") or ""),
        edu_fee=edu_fee,
        uniform_fee=fees.uniform,
        book_fee=fees.book,
        transport_fee=fees.transport,
        meal_fee=fees.meal,
        raise_pct=raise_pct,
        total=edu_fee + fees.total,
        student_count=safe_num(row.get("studentCount")),
    )


def build_tuition_table(
    tuition_rows: Any,
    *,
    tier_config: Mapping[str, TierConfig],
    program_type: str,
    fees: AncillaryFees,
    raise_rates: Mapping[str, Any],
    currency: CurrencyContext,
) -> TuitionTable:
    """Compute the per-tier tuition rows and the synthetic total/average rows.

    The ``total`` row is a plain column-wise sum; the ``average`` row carries
    the student-weighted education fee (unweighted mean when no student
    counts exist) next to the global ancillary fees.
    """

    rows = tuple(
        _tier_row(row, fees, clamp0(raise_rates.get(str(row.get("key") or ""))), currency)
        for row in visible_tuition_rows(tuition_rows, tier_config, program_type)
    )
    total_students = sum((row.student_count for row in rows), 0.0)
    gross_tuition = sum((row.edu_fee * row.student_count for row in rows), 0.0)
    if total_students:
        avg_tuition = gross_tuition / total_students
    elif rows:
        avg_tuition = sum(row.edu_fee for row in rows) / len(rows)
    else:
        avg_tuition = 0.0

    total_row = TuitionRow(
        key=TOTAL_KEY,
        level=TOTAL_LABEL,
        edu_fee=sum((row.edu_fee for row in rows), 0.0),
        uniform_fee=sum((row.uniform_fee for row in rows), 0.0),
        book_fee=sum((row.book_fee for row in rows), 0.0),
        transport_fee=sum((row.transport_fee for row in rows), 0.0),
        meal_fee=sum((row.meal_fee for row in rows), 0.0),
        raise_pct=None,
        total=sum((row.total for row in rows), 0.0),
        student_count=total_students,
    )
    shown = fees if rows else AncillaryFees()
    average_row = TuitionRow(
        key=AVERAGE_KEY,
        level=AVERAGE_LABEL,
        edu_fee=avg_tuition,
        uniform_fee=shown.uniform,
        book_fee=shown.book,
        transport_fee=shown.transport,
        meal_fee=shown.meal,
        raise_pct=None,
        total=shown.total + avg_tuition if rows else 0.0,
        student_count=total_students,
    )
    return TuitionTable(
        rows=rows,
        total=total_row,
        average=average_row,
        avg_tuition=avg_tuition,
        total_students=total_students,
        gross_tuition=gross_tuition,
    )
