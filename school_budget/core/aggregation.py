"""Revenue and expense roll-ups with ratio annotations.

Each named row carries ``ratio = amount / group_total``. The ratio is
``None`` when the group total is zero or not finite. Values that a previous
"calculate" run stored on the report take precedence over local
recomputation. There are two override styles:

* income overrides are applied only when **non-zero**
  (:meth:`ReportOverrides.income_value`);
* expense overrides are applied whenever **present**, so an explicit ``0`` is
  honoured (:meth:`ReportOverrides.expense_value`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

from .catalogs import (
    ANCILLARY_FEE_KEYS,
    BAD_DEBT_KEY,
    DORM_EXPENSE_KEYS,
    HR_EXPENSE_KEYS,
    HR_LOCAL_KEYS,
    HR_ROLE_GROUPS,
    HR_TURKISH_KEYS,
    OPERATING_EXPENSE_KEYS,
    SERVICE_COST_KEYS,
)
from .common.numeric import as_list, as_mapping, num_or_null, resolve, safe_div, safe_num
from .common.types import AmountRow, CategoryCounts, HrRow, NamedAmount
from .currency import CurrencyContext

__all__ = [
    "DormCosts",
    "OperatingCosts",
    "ReportOverrides",
    "RevenueSummary",
    "ServiceCosts",
    "build_detailed_expenses",
    "build_dorm_costs",
    "build_expense_rows",
    "build_hr_rows",
    "build_operating_costs",
    "build_revenue_summary",
    "build_service_costs",
    "extract_overrides",
    "with_ratios",
]

GOVERNMENT_INCENTIVES_LABEL = "Devlet Tesvikleri"


def with_ratios(
    rows: Iterable[tuple[str, float] | tuple[str, float, float | None]],
    total: float,
) -> Tuple[AmountRow, ...]:
    """Wrap ``(name, amount[, target_pct])`` tuples into ratio-annotated rows."""

    out = []
    for item in rows:
        name, amount = item[0], item[1]
        target = item[2] if len(item) > 2 else None
        out.append(AmountRow(name=name, amount=amount, ratio=safe_div(amount, total), target_pct=target))
    return tuple(out)


@dataclass(frozen=True, slots=True)
class ReportOverrides:
    """Year-1 totals stored by an earlier calculation of the same scenario."""

    income: Mapping[str, Any]
    expenses: Mapping[str, Any]

    def income_value(self, key: str) -> float | None:
        value = safe_num(self.income.get(key))
        return value if value else None

    def expense_value(self, key: str) -> float | None:
        return num_or_null(self.expenses.get(key))


def extract_overrides(report: Any) -> ReportOverrides:
    year = as_mapping(as_mapping(as_mapping(report).get("years")).get("y1"))
    return ReportOverrides(
        income=as_mapping(year.get("income")),
        expenses=as_mapping(year.get("expenses")),
    )


def _row_revenue(row: Mapping[str, Any], currency: CurrencyContext) -> float:
    return currency.to_reporting(row.get("unitFee")) * safe_num(row.get("studentCount"))


def _row_name(row: Mapping[str, Any]) -> str:
    return str(row.get("label") or row.get("name") or row.get("key") or "")


@dataclass(frozen=True, slots=True)
class RevenueSummary:
    gross_tuition: float
    non_education_total: float
    dorm_total: float
    other_income_pure: float
    government_incentives: float
    other_income_total: float
    gross_income_base: float
    activity_revenue: float
    rows: Tuple[AmountRow, ...]
    non_education_breakdown: Tuple[NamedAmount, ...]
    other_income_breakdown: Tuple[NamedAmount, ...]

    @property
    def rows_total(self) -> float:
        """Detailed-revenue total: the gross base, else the row sum."""

        return self.gross_income_base or sum((row.amount for row in self.rows), 0.0)


def build_revenue_summary(
    income: Mapping[str, Any],
    *,
    fee_lookup: Mapping[str, Mapping[str, Any]],
    tuition_gross: float,
    overrides: ReportOverrides,
    currency: CurrencyContext,
) -> RevenueSummary:
    """Roll up every income source into the named revenue rows."""

    fee_rows = [as_mapping(row) for row in as_list(as_mapping(income.get("nonEducationFees")).get("rows"))]
    dorm_rows = [as_mapping(row) for row in as_list(as_mapping(income.get("dormitory")).get("rows"))]
    other_rows = [
        as_mapping(row) for row in as_list(as_mapping(income.get("otherInstitutionIncome")).get("rows"))
    ]

    gross_tuition = resolve(overrides.income_value("grossTuition"), tuition_gross)
    non_education_total = resolve(
        overrides.income_value("nonEducationFeesTotal"),
        sum((_row_revenue(row, currency) for row in fee_rows), 0.0),
    )
    dorm_total = resolve(
        overrides.income_value("dormitoryRevenuesTotal"),
        sum((_row_revenue(row, currency) for row in dorm_rows), 0.0),
    )
    incentives = currency.to_reporting(income.get("governmentIncentives", 0))
    other_pure = sum((currency.to_reporting(row.get("amount")) for row in other_rows), 0.0)
    other_total = resolve(overrides.income_value("otherIncomeTotal"), other_pure + incentives)
    gross_base = resolve(
        overrides.income_value("totalGrossIncome"),
        gross_tuition + non_education_total + dorm_total + other_total,
    )
    activity = resolve(
        overrides.income_value("activityGross"),
        gross_tuition + non_education_total + dorm_total,
    )

    def fee_revenue(name: str) -> float:
        return _row_revenue(fee_lookup.get(ANCILLARY_FEE_KEYS[name], {}), currency)

    rows = with_ratios(
        (
            ("Egitim Ucreti", gross_tuition),
            ("Uniforma", fee_revenue("uniform")),
            ("Kitap Kirtasiye", fee_revenue("book")),
            ("Yemek", fee_revenue("meal")),
            ("Servis", fee_revenue("transport")),
            ("Yurt Gelirleri", dorm_total),
            ("Diger (kantin, kira vb.)", other_pure),
            (GOVERNMENT_INCENTIVES_LABEL, incentives),
        ),
        gross_base,
    )

    non_education_breakdown = tuple(
        NamedAmount(name=_row_name(row), amount=_row_revenue(row, currency))
        for row in fee_rows
        if _row_name(row) and _row_revenue(row, currency) != 0
    )
    other_breakdown = [
        NamedAmount(name=_row_name(row), amount=currency.to_reporting(row.get("amount")))
        for row in other_rows
        if _row_name(row) and currency.to_reporting(row.get("amount")) != 0
    ]
    if safe_num(income.get("governmentIncentives")):
        other_breakdown.append(NamedAmount(name=GOVERNMENT_INCENTIVES_LABEL, amount=incentives))

    return RevenueSummary(
        gross_tuition=gross_tuition,
        non_education_total=non_education_total,
        dorm_total=dorm_total,
        other_income_pure=other_pure,
        government_incentives=incentives,
        other_income_total=other_total,
        gross_income_base=gross_base,
        activity_revenue=activity,
        rows=rows,
        non_education_breakdown=non_education_breakdown,
        other_income_breakdown=tuple(other_breakdown),
    )


@dataclass(frozen=True, slots=True)
class ServiceCosts:
    """Cost of non-tuition services: unit cost × resolved student count."""

    meal: float = 0.0
    uniform: float = 0.0
    book: float = 0.0
    transport: float = 0.0

    @property
    def total(self) -> float:
        return self.meal + self.uniform + self.book + self.transport

    def as_dict(self) -> dict[str, float]:
        return {
            "yemek": self.meal,
            "uniforma": self.uniform,
            "kitapKirtasiye": self.book,
            "ulasimServis": self.transport,
            "total": self.total,
        }


def _unit_cost(items: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = as_mapping(items.get(key)).get("unitCost")
        if value is not None:
            return value
    return None


def build_service_costs(
    items: Mapping[str, Any], counts: CategoryCounts, currency: CurrencyContext
) -> ServiceCosts:
    def cost(name: str, count: float) -> float:
        return currency.to_reporting(safe_num(_unit_cost(items, SERVICE_COST_KEYS[name]))) * count

    return ServiceCosts(
        meal=cost("meal", counts.meal),
        uniform=cost("uniform", counts.uniform),
        book=cost("book", counts.book),
        transport=cost("transport", counts.transport),
    )


@dataclass(frozen=True, slots=True)
class DormCosts:
    dorm: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return max(0.0, self.dorm + self.other)

    def as_dict(self) -> dict[str, float]:
        return {"yurtGiderleri": self.dorm, "digerYurt": self.other, "total": self.total}


def build_dorm_costs(
    items: Mapping[str, Any], dorm_rows: Any, currency: CurrencyContext
) -> DormCosts:
    """Dormitory costs priced on the dormitory income rows' student counts."""

    counts: dict[str, float] = {}
    for row in as_list(dorm_rows):
        mapping = as_mapping(row)
        key = str(mapping.get("key") or "").strip().lower()
        counts[key] = safe_num(mapping.get("studentCount"))
    amounts = [
        currency.to_reporting(safe_num(as_mapping(items.get(item_key)).get("unitCost")))
        * counts.get(count_key, 0.0)
        for item_key, count_key in DORM_EXPENSE_KEYS
    ]
    return DormCosts(dorm=amounts[0], other=amounts[1])


@dataclass(frozen=True, slots=True)
class OperatingCosts:
    total: float
    hr_total: float
    hr_turkish: float
    hr_local: float
    bad_debt: float

    @property
    def excluding_hr(self) -> float:
        """Operating costs without HR and bad debt, floored at zero."""

        return max(0.0, self.total - self.hr_total - self.bad_debt)


def build_operating_costs(items: Mapping[str, Any], currency: CurrencyContext) -> OperatingCosts:
    def amount(key: str) -> float:
        return currency.to_reporting(safe_num(items.get(key)))

    return OperatingCosts(
        total=sum((amount(key) for key in OPERATING_EXPENSE_KEYS), 0.0),
        hr_total=sum((amount(key) for key in HR_EXPENSE_KEYS), 0.0),
        hr_turkish=sum((amount(key) for key in HR_TURKISH_KEYS), 0.0),
        hr_local=sum((amount(key) for key in HR_LOCAL_KEYS), 0.0),
        bad_debt=amount(BAD_DEBT_KEY),
    )


def build_hr_rows(
    current_staff: Mapping[str, Any], headcounts_by_level: Mapping[str, Any]
) -> Tuple[HrRow, ...]:
    """Current vs planned headcount per role group, summed across levels."""

    levels = [as_mapping(value) for value in headcounts_by_level.values()]
    rows = []
    for group_key, label, role_keys in HR_ROLE_GROUPS:
        planned = sum(
            (safe_num(level.get(role)) for level in levels for role in role_keys),
            0.0,
        )
        rows.append(HrRow(item=label, current=safe_num(current_staff.get(group_key)), planned=planned))
    return tuple(rows)


def build_expense_rows(
    *,
    operating: OperatingCosts,
    services: ServiceCosts,
    dorm: DormCosts,
    scholarships_amount: float,
    discounts_amount: float,
    overrides: ReportOverrides,
) -> tuple[Tuple[AmountRow, ...], float]:
    """Named expense rows and the expense total they are measured against."""

    total = safe_num(operating.total + services.total + dorm.total + scholarships_amount + discounts_amount)
    rows = with_ratios(
        (
            ("IK Giderleri (Toplam)", resolve(overrides.expense_value("hrTotal"), operating.hr_total)),
            ("Isletme Giderleri (IK Haric)", operating.excluding_hr),
            (
                "Egitim Disi Hizmet Maliyetleri",
                resolve(overrides.expense_value("nonTuitionServicesCostTotal"), services.total),
            ),
            ("Yurt Maliyetleri", dorm.total),
            ("Indirimler", discounts_amount),
            ("Burslar", scholarships_amount),
        ),
        total,
    )
    return rows, total


def build_detailed_expenses(
    *,
    operating: OperatingCosts,
    services: ServiceCosts,
    dorm: DormCosts,
    scholarships_cost: float,
    discounts_cost: float,
    targets: Mapping[str, float],
) -> tuple[Tuple[AmountRow, ...], float]:
    """Line-by-line expense view with target shares; ratios use its own sum."""

    items = (
        ("IK Giderleri (Turk Personel)", operating.hr_turkish, targets.get("hrTurkish")),
        ("IK (Yerel Personel)", operating.hr_local, targets.get("hrLocal")),
        ("Isletme Giderleri", operating.excluding_hr, None),
        ("Yemek (Ogrenci Yemegi)", services.meal, None),
        ("Uniforma", services.uniform, None),
        ("Kitap- Kirtasiye", services.book, None),
        ("Ogrenci Servisi", services.transport, None),
        ("Yurt Giderleri", dorm.total, None),
        ("Indirimler", discounts_cost, targets.get("discounts")),
        ("Burslar", scholarships_cost, targets.get("scholarships")),
        ("Tahsil Edilemeyecek Gelirler", operating.bad_debt, targets.get("badDebt")),
    )
    total = sum((amount for _, amount, _ in items), 0.0)
    return with_ratios(items, total), total
