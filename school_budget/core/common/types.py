"""Data contracts of the report engine (Core-only, no I/O).

This module holds types only. Every row type is a frozen dataclass and is
rebuilt on each call of the report builder. :func:`to_plain` turns any of them
(and the final :class:`ReportModel`) into a JSON-compatible structure with the
camelCase keys that report consumers expect.

Example:
    >>> row = AmountRow(name="Yemek", amount=10.0, ratio=0.5)
    >>> to_plain(row)
    {'name': 'Yemek', 'amount': 10.0, 'ratio': 0.5}
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Literal, Mapping, Tuple

DiscountGroup = Literal["scholarship", "discount"]
ValueType = Literal["percent", "number", "currency"]

__all__ = [
    "AmountRow",
    "CapacitySummary",
    "CategoryCounts",
    "CompetitorRow",
    "DiscountCatalogEntry",
    "DiscountGroup",
    "DiscountPlanRow",
    "GroupAnalysis",
    "HrRow",
    "NamedAmount",
    "Parameter",
    "PerformanceRow",
    "ReportModel",
    "TierConfig",
    "TierDefinition",
    "TuitionRow",
    "to_plain",
]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_plain(value: Any) -> Any:
    """Recursively convert dataclasses/tuples/mappings into JSON-ready values.

    Dataclass fields are renamed to camelCase unless a field declares an
    explicit ``metadata={"json": ...}`` name. Fields flagged with
    ``metadata={"omit_none": True}`` are dropped when they hold ``None``.
    """

    if is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for item in fields(value):
            raw = getattr(value, item.name)
            if raw is None and item.metadata.get("omit_none"):
                continue
            key = item.metadata.get("json", _camel(item.name))
            out[key] = to_plain(raw)
        return out
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


@dataclass(frozen=True, slots=True)
class TierDefinition:
    """One education stage (kademe) of the static catalog."""

    key: str
    label: str
    default_from: str
    default_to: str


@dataclass(frozen=True, slots=True)
class TierConfig:
    """Normalized enablement and grade range of one tier."""

    enabled: bool
    from_grade: str = field(metadata={"json": "from"})
    to_grade: str = field(metadata={"json": "to"})


@dataclass(frozen=True, slots=True)
class DiscountCatalogEntry:
    """Catalogued discount or scholarship type; ``group`` is explicit."""

    key: str
    name: str
    group: DiscountGroup

    @property
    def is_scholarship(self) -> bool:
        return self.group == "scholarship"


@dataclass(frozen=True, slots=True)
class CategoryCounts:
    """Per-student counts recovered by the fuzzy category resolver."""

    meal: float = 0.0
    uniform: float = 0.0
    book: float = 0.0
    transport: float = 0.0


@dataclass(frozen=True, slots=True)
class TuitionRow:
    key: str
    level: str
    edu_fee: float
    uniform_fee: float
    book_fee: float
    transport_fee: float
    meal_fee: float
    raise_pct: float | None
    total: float
    student_count: float


@dataclass(frozen=True, slots=True)
class DiscountPlanRow:
    key: str
    name: str
    group: DiscountGroup
    planned_count: int
    cost: float
    current_count: float | None
    rate: float | None


@dataclass(frozen=True, slots=True)
class GroupAnalysis:
    planned_students: int
    total_cost: float
    per_target_student: float | None
    student_share: float | None
    revenue_share: float | None
    weighted_avg_rate: float | None


@dataclass(frozen=True, slots=True)
class AmountRow:
    """Named amount annotated with its share of the group total."""

    name: str
    amount: float
    ratio: float | None
    target_pct: float | None = field(default=None, metadata={"omit_none": True})


@dataclass(frozen=True, slots=True)
class NamedAmount:
    name: str
    amount: float


@dataclass(frozen=True, slots=True)
class HrRow:
    item: str
    current: float
    planned: float


@dataclass(frozen=True, slots=True)
class PerformanceRow:
    metric: str
    planned: float | None
    actual: float | None
    variance: float | None


@dataclass(frozen=True, slots=True)
class CompetitorRow:
    level: str
    a: float
    b: float
    c: float


@dataclass(frozen=True, slots=True)
class Parameter:
    """One labelled summary metric of the flat ``parameters`` list."""

    no: str
    desc: str
    value: Any
    value_type: ValueType | None = field(default=None, metadata={"omit_none": True})


@dataclass(frozen=True, slots=True)
class CapacitySummary:
    building_capacity: float
    current_students: float
    planned_students: float
    planned_utilization: float | None
    planned_branches: float
    total_branches: float
    used_branches: float
    avg_students_per_class: float | None
    avg_students_per_class_planned: float | None


@dataclass(frozen=True, slots=True)
class ReportModel:
    """Final, immutable output of :func:`build_report_model`.

    Row collections are tuples; ``parameters_meta`` and the ``*_meta`` bags
    are plain mappings intended for export-time formatting hints. Use
    :meth:`to_dict` for the JSON-compatible shape.
    """

    currency_code: str
    header_label: str
    country_name: str
    school_name: str
    principal_name: str
    reporter_name: str
    representative_name: str
    academic_start_year: int | None
    program_type: str
    period_start_date: str
    school_capacity: float
    current_students: float
    compulsory_education: str
    lesson_duration: Any
    daily_lesson_hours: Any
    weekly_lesson_hours: Any
    shift_system: str
    teacher_weekly_hours_avg: Any
    classroom_utilization: float | None
    transition_exam_info: str
    tuition_table: Tuple[TuitionRow, ...]
    parameters: Tuple[Parameter, ...]
    capacity: CapacitySummary
    hr: Tuple[HrRow, ...]
    revenues: Tuple[AmountRow, ...]
    revenues_meta: Mapping[str, Any]
    expenses: Tuple[AmountRow, ...]
    scholarships: Tuple[DiscountPlanRow, ...]
    discounts: Tuple[DiscountPlanRow, ...]
    discount_analysis: Mapping[str, Any]
    performance: Tuple[PerformanceRow, ...]
    performance_meta: Mapping[str, Any]
    competitors: Tuple[CompetitorRow, ...]
    revenues_detailed: Tuple[AmountRow, ...]
    revenues_detailed_total: float
    revenue_total: float
    expense_total: float
    net_total: float
    avg_tuition: float
    margin: float | None
    per_student_cost: float | None
    parameters_meta: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)
