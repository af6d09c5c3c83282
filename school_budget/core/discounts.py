"""Discount & scholarship allocation engine.

For every catalogued discount type the engine finds the user override (by
normalized name), works out how many students receive it, and prices it.
It supports two modes:

* ``percent`` (default): ``value`` is the discount rate, clamped to [0, 1];
  ``cost = avg_tuition × planned × rate``.
* ``fixed``: ``value`` is a per-student amount in input currency;
  ``cost = planned × amount`` and ``rate = amount / avg_tuition`` when the
  average tuition is known, otherwise ``None``.

Planned beneficiaries are an explicit ``studentCount`` when one is given,
else ``ratio × population``. The result is always an int in
``[0, population]``.

Example:
    >>> from school_budget.core.currency import CurrencyContext
    >>> entry = DISCOUNT_CATALOG[9]
    >>> lookup = build_discount_lookup([{"name": entry.name, "mode": "fixed", "value": 100, "studentCount": 10}])
    >>> row = build_discount_plan_row(entry, tuition_students=50, avg_tuition=1000,
    ...                               currency=CurrencyContext(), lookup=lookup)
    >>> (row.planned_count, row.cost, row.rate)
    (10, 1000.0, 0.1)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple

from .catalogs import DISCOUNT_CATALOG, SCHOLARSHIP_CATALOG
from .common.numeric import as_list, as_mapping, clamp, clamp0, round_half_up, safe_num
from .common.text import normalize_name
from .common.types import DiscountCatalogEntry, DiscountPlanRow, GroupAnalysis
from .currency import CurrencyContext

__all__ = [
    "DiscountBasis",
    "DiscountPlan",
    "build_discount_basis",
    "build_discount_lookup",
    "build_discount_plan",
    "build_discount_plan_row",
    "build_group_analysis",
    "planned_beneficiaries",
    "sum_override_costs",
    "weighted_avg_rate",
]

MODE_FIXED = "fixed"
MODE_PERCENT = "percent"

_DEFAULT_OVERRIDE: Mapping[str, Any] = {"mode": MODE_PERCENT, "value": 0, "ratio": 0}


@dataclass(frozen=True, slots=True)
class DiscountBasis:
    """Paying population and average tuition that discounts are priced on."""

    tuition_students: float
    avg_tuition: float


@dataclass(frozen=True, slots=True)
class DiscountPlan:
    scholarships: Tuple[DiscountPlanRow, ...]
    discounts: Tuple[DiscountPlanRow, ...]
    basis: DiscountBasis

    @property
    def scholarships_cost(self) -> float:
        return sum((safe_num(row.cost) for row in self.scholarships), 0.0)

    @property
    def discounts_cost(self) -> float:
        return sum((safe_num(row.cost) for row in self.discounts), 0.0)


def build_discount_basis(
    tuition_rows: Any,
    *,
    fallback_students: float,
    per_student_fee: Any,
    currency: CurrencyContext,
) -> DiscountBasis:
    """Population/average tuition from the raw tuition input rows.

    Without tuition rows the population falls back to ``fallback_students``
    (planned, else current enrolment), and the average tuition falls back
    to the flat yearly fee per student. Rows that declare no students give
    an average of ``0``, which leaves fixed-amount rates unknown.
    """

    rows = [as_mapping(row) for row in as_list(tuition_rows)]
    if rows:
        students = sum((safe_num(row.get("studentCount")) for row in rows), 0.0)
        gross = sum(
            (safe_num(row.get("studentCount")) * currency.to_reporting(row.get("unitFee")) for row in rows),
            0.0,
        )
        avg = gross / students if students > 0 else 0.0
    else:
        students = max(0.0, safe_num(fallback_students))
        avg = currency.to_reporting(per_student_fee)
    return DiscountBasis(tuition_students=students, avg_tuition=avg)


def build_discount_lookup(overrides: Any) -> Dict[str, Mapping[str, Any]]:
    """Override rows keyed by :func:`normalize_name` of their ``name``.

    Rows that carry a catalog ``key`` are also reachable under that key, so
    a key-only override resolves the same entry it is costed against in
    :func:`sum_override_costs`.
    """

    lookup: Dict[str, Mapping[str, Any]] = {}
    for row in as_list(overrides):
        mapping = as_mapping(row)
        name_key = normalize_name(mapping.get("name"))
        if name_key:
            lookup[name_key] = mapping
        catalog_key = str(mapping.get("key") or "").strip()
        if catalog_key:
            lookup[catalog_key] = mapping
    return lookup


def planned_beneficiaries(override: Mapping[str, Any], tuition_students: float) -> int:
    """Beneficiary count clamped to ``[0, tuition_students]``."""

    population = math.floor(max(0.0, safe_num(tuition_students)))
    if population <= 0:
        return 0
    raw_count = override.get("studentCount")
    if raw_count is not None and raw_count != "":
        derived = max(0, round_half_up(raw_count))
    else:
        derived = round_half_up(clamp(override.get("ratio"), 0, 1) * population)
    return max(0, min(derived, population))


def _price(
    override: Mapping[str, Any],
    planned: int,
    avg_tuition: float,
    currency: CurrencyContext,
) -> tuple[float, float | None]:
    mode = str(override.get("mode") or MODE_PERCENT).strip().lower()
    value = safe_num(override.get("value"))
    if mode == MODE_FIXED:
        amount = max(0.0, currency.to_reporting(value))
        rate = clamp(amount / avg_tuition, 0, 1) if avg_tuition > 0 else None
        return planned * amount, rate
    rate = clamp(value, 0, 1)
    return safe_num(avg_tuition) * planned * rate, rate


def build_discount_plan_row(
    entry: DiscountCatalogEntry,
    *,
    tuition_students: float,
    avg_tuition: float,
    currency: CurrencyContext,
    lookup: Mapping[str, Mapping[str, Any]],
    current_count: float | None = None,
) -> DiscountPlanRow:
    override = lookup.get(normalize_name(entry.name)) or lookup.get(entry.key) or _DEFAULT_OVERRIDE
    planned = planned_beneficiaries(override, tuition_students)
    cost, rate = _price(override, planned, avg_tuition, currency)
    return DiscountPlanRow(
        key=entry.key,
        name=entry.name,
        group=entry.group,
        planned_count=planned,
        cost=cost,
        current_count=current_count,
        rate=rate,
    )


def build_discount_plan(
    overrides: Any,
    *,
    basis: DiscountBasis,
    currency: CurrencyContext,
    current_counts: Mapping[str, Any] | None = None,
) -> DiscountPlan:
    """Plan rows for the whole catalog, split by the entries' ``group`` tag."""

    lookup = build_discount_lookup(overrides)
    counts = as_mapping(current_counts)
    rows = [
        build_discount_plan_row(
            entry,
            tuition_students=basis.tuition_students,
            avg_tuition=basis.avg_tuition,
            currency=currency,
            lookup=lookup,
            current_count=clamp0(counts.get(entry.key)),
        )
        for entry in DISCOUNT_CATALOG
    ]
    return DiscountPlan(
        scholarships=tuple(row for row in rows if row.group == "scholarship"),
        discounts=tuple(row for row in rows if row.group == "discount"),
        basis=basis,
    )


_SCHOLARSHIP_NAMES = frozenset(normalize_name(entry.name) for entry in SCHOLARSHIP_CATALOG)
_SCHOLARSHIP_KEYS = frozenset(entry.key for entry in SCHOLARSHIP_CATALOG)


def sum_override_costs(
    overrides: Any,
    *,
    basis: DiscountBasis,
    currency: CurrencyContext,
) -> tuple[float, float]:
    """Cost of every raw override row, summed as ``(scholarships, discounts)``.

    Unlike :func:`build_discount_plan` this walks the user's list itself,
    so overrides that match no catalog entry still count as discounts.
    """

    scholarships = 0.0
    discounts = 0.0
    for row in as_list(overrides):
        mapping = as_mapping(row)
        if not mapping:
            continue
        planned = planned_beneficiaries(mapping, basis.tuition_students)
        cost, _ = _price(mapping, planned, basis.avg_tuition, currency)
        name_key = normalize_name(mapping.get("name") or mapping.get("key") or "")
        if name_key in _SCHOLARSHIP_NAMES or str(mapping.get("key") or "") in _SCHOLARSHIP_KEYS:
            scholarships += cost
        else:
            discounts += cost
    return scholarships, discounts


def weighted_avg_rate(rows: Iterable[DiscountPlanRow], avg_tuition: float | None) -> float | None:
    """Beneficiary-weighted mean rate; ``None`` for an empty group.

    Rows without a direct rate derive one from ``cost / (planned × avg)``
    and are skipped when the average tuition is unknown.
    """

    items = list(rows)
    total_planned = sum(row.planned_count for row in items)
    if total_planned <= 0:
        return None
    weighted = 0.0
    for row in items:
        if row.planned_count <= 0:
            continue
        rate = row.rate
        if rate is None:
            if avg_tuition is None or not math.isfinite(avg_tuition) or avg_tuition <= 0:
                continue
            rate = safe_num(row.cost) / (row.planned_count * avg_tuition)
        weighted += row.planned_count * clamp(rate, 0, 1)
    return weighted / total_planned


def build_group_analysis(
    rows: Iterable[DiscountPlanRow],
    total_cost: float,
    *,
    target_students: float,
    capacity_y1: float,
    parent_revenue: float,
    avg_tuition: float,
) -> GroupAnalysis:
    items = list(rows)
    planned = sum(row.planned_count for row in items)
    if parent_revenue > 0:
        revenue_share: float | None = total_cost / parent_revenue if total_cost > 0 else 0.0
    else:
        revenue_share = None
    return GroupAnalysis(
        planned_students=planned,
        total_cost=total_cost,
        per_target_student=total_cost / target_students if target_students > 0 else None,
        student_share=planned / capacity_y1 if capacity_y1 > 0 else None,
        revenue_share=revenue_share,
        weighted_avg_rate=weighted_avg_rate(items, avg_tuition),
    )
