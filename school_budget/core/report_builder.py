"""Report model assembler: one synchronous pass from raw scenario to report.

The stages run in dependency order:

1. tier normalization and program-type resolution;
2. currency setup;
3. fuzzy resolution of service student counts;
4. tuition computation;
5. discount allocation;
6. revenue/expense aggregation;
7. performance variance;
8. assembly of :class:`ReportModel`.

Inputs are never mutated and nothing survives between calls, so concurrent
builds for different scenarios are safe.

Example::

    >>> model = build_report_model({"income": {"tuition": {"rows": [
    ...     {"key": "ilkokulYerel", "label": "Ilkokul", "unitFee": 1000, "studentCount": 10}]}}})
    >>> model.avg_tuition
    1000.0
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Tuple

from .aggregation import (
    build_detailed_expenses,
    build_dorm_costs,
    build_expense_rows,
    build_hr_rows,
    build_operating_costs,
    build_revenue_summary,
    build_service_costs,
    extract_overrides,
)
from .capacity import build_capacity_figures
from .catalogs import TIER_DEFINITIONS, TIER_REPORT_LABELS
from .category_resolver import resolve_category_counts
from .common.errors import InvalidScenarioError
from .common.numeric import as_mapping, num_or_null, resolve, safe_div
from .common.text import parse_academic_start_year
from .common.types import CompetitorRow, Parameter, ReportModel, TierConfig
from .currency import CurrencyContext, build_currency_context
from .discounts import (
    build_discount_basis,
    build_discount_plan,
    build_group_analysis,
    sum_override_costs,
)
from .performance import build_performance_rows
from .report_policy import ReportPolicy
from .tiers import PROGRAM_INTERNATIONAL, format_tier_label, normalize_tier_config, resolve_program_type
from .tuition import build_fee_lookup, build_tuition_table, resolve_ancillary_fees

__all__ = ["build_report_model", "build_competitor_rows", "competitor_has_data"]

_COMPETITOR_FIELDS = ("a", "b", "c")
_PRESCHOOL_KEY = "okulOncesi"


def _section(config: Mapping[str, Any], *path: str) -> Mapping[str, Any]:
    current: Mapping[str, Any] = config
    for key in path:
        current = as_mapping(current.get(key))
    return current


def build_competitor_rows(
    competitors: Mapping[str, Any],
    tier_config: Mapping[str, TierConfig],
    program_type: str,
    currency: CurrencyContext,
) -> Tuple[CompetitorRow, ...]:
    """Benchmark fees of competitor schools A/B/C per enabled tier."""

    suffix = "INT." if program_type == PROGRAM_INTERNATIONAL else "YEREL"
    rows = []
    for definition in TIER_DEFINITIONS:
        if not tier_config[definition.key].enabled:
            continue
        label = format_tier_label(TIER_REPORT_LABELS[definition.key], tier_config, definition.key)
        level = label if definition.key == _PRESCHOOL_KEY else f"{label} - {suffix}"
        source = as_mapping(competitors.get(definition.key))
        rows.append(
            CompetitorRow(
                level=level,
                a=currency.to_reporting(source.get("a")),
                b=currency.to_reporting(source.get("b")),
                c=currency.to_reporting(source.get("c")),
            )
        )
    return tuple(rows)


def competitor_has_data(competitors: Mapping[str, Any]) -> bool:
    """True when any tier carries a positive competitor fee."""

    for definition in TIER_DEFINITIONS:
        source = as_mapping(competitors.get(definition.key))
        for field_name in _COMPETITOR_FIELDS:
            value = num_or_null(source.get(field_name))
            if value is not None and value > 0:
                return True
    return False


def _first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _inflation_years(
    inflation: Mapping[str, Any], base_year: int | None, policy: ReportPolicy
) -> list[dict[str, Any]]:
    reference = base_year if base_year is not None else policy.default_base_year
    years = (reference - 3, reference - 2, reference - 1)
    out = []
    for year, fallback_key in zip(years, policy.inflation_fallback_keys):
        exact = num_or_null(inflation.get(f"y{year}"))
        out.append({"year": year, "value": exact if exact is not None else num_or_null(inflation.get(fallback_key))})
    return out


def build_report_model(
    config: Any,
    *,
    school: Mapping[str, Any] | None = None,
    scenario: Mapping[str, Any] | None = None,
    report: Mapping[str, Any] | None = None,
    prev_report: Mapping[str, Any] | None = None,
    currency_meta: Mapping[str, Any] | None = None,
    prev_currency_meta: Mapping[str, Any] | None = None,
    program_type: str | None = None,
    policy: ReportPolicy | None = None,
) -> ReportModel:
    """Build the fully computed report model of one scenario.

    Args:
        config: raw scenario configuration (``basicInfo``, ``capacity``,
            ``income``, ``expenses``, ``staffing``, ``discounts`` ...).
        school: school identification (name, country).
        scenario: scenario identification (name, academic year, program type).
        report: earlier calculation of the same scenario; its totals win.
        prev_report: prior academic year's report, the planned baseline.
        currency_meta: current-year currency metadata.
        prev_currency_meta: prior-year currency metadata.
        program_type: explicit program type overriding inputs and scenario.
        policy: export knobs; :meth:`ReportPolicy.default` when omitted.

    Returns:
        ReportModel: immutable result; use ``to_dict()`` for JSON.

    Raises:
        InvalidScenarioError: if ``config`` is not a mapping at all.
    """

    if not isinstance(config, Mapping):
        raise InvalidScenarioError(func="build_report_model", field="config", value=type(config).__name__)
    policy = policy or ReportPolicy.default()
    school_meta = as_mapping(school)
    scenario_meta = as_mapping(scenario)
    basic = _section(config, "basicInfo")
    income = _section(config, "income")
    education = _section(basic, "schoolEducation")
    administrators = _section(basic, "administrators")
    inflation = _section(basic, "inflation")
    competitors = _section(basic, "competitors")

    # 1. tiers
    tier_config = normalize_tier_config(basic.get("tiers"))
    resolved_program = resolve_program_type(config, scenario_meta, program_type)

    # 2. currency
    currency = build_currency_context(currency_meta, prev_currency_meta, basic)
    capacity = build_capacity_figures(config)

    # 3. fuzzy counts
    fee_section = _section(income, "nonEducationFees")
    counts = resolve_category_counts(fee_section.get("rows") or fee_section.get("items"))

    # 4. tuition
    fee_lookup = build_fee_lookup(fee_section.get("rows"))
    tuition_input_rows = _section(income, "tuition").get("rows")
    tuition = build_tuition_table(
        tuition_input_rows,
        tier_config=tier_config,
        program_type=resolved_program,
        fees=resolve_ancillary_fees(fee_lookup, currency),
        raise_rates=_section(basic, "feeIncreaseRates"),
        currency=currency,
    )

    # 5. discounts
    basis = build_discount_basis(
        tuition_input_rows,
        fallback_students=capacity.planned_students or capacity.current_students,
        per_student_fee=income.get("tuitionFeePerStudentYearly"),
        currency=currency,
    )
    plan = build_discount_plan(
        config.get("discounts"),
        basis=basis,
        currency=currency,
        current_counts=basic.get("discountStudentCounts"),
    )
    scholarship_inputs, discount_inputs = sum_override_costs(config.get("discounts"), basis=basis, currency=currency)
    overrides = extract_overrides(report)
    scholarships_amount = resolve(overrides.expense_value("scholarshipsTotal"), scholarship_inputs)
    discounts_amount = resolve(overrides.expense_value("discountsTotal"), discount_inputs)

    # 6. aggregation
    revenue = build_revenue_summary(
        income,
        fee_lookup=fee_lookup,
        tuition_gross=tuition.gross_tuition,
        overrides=overrides,
        currency=currency,
    )
    operating = build_operating_costs(_section(config, "expenses", "operating", "items"), currency)
    services = build_service_costs(_section(config, "expenses", "nonTuitionServices", "items"), counts, currency)
    dorm = build_dorm_costs(
        _section(config, "expenses", "dormitory", "items"),
        _section(income, "dormitory").get("rows"),
        currency,
    )
    expense_rows, expense_total = build_expense_rows(
        operating=operating,
        services=services,
        dorm=dorm,
        scholarships_amount=scholarships_amount,
        discounts_amount=discounts_amount,
        overrides=overrides,
    )
    hr_rows = build_hr_rows(
        _section(config, "staffing", "current"),
        _section(config, "staffing", "years", "y1", "headcountsByLevel"),
    )
    detailed_expenses, detailed_total = build_detailed_expenses(
        operating=operating,
        services=services,
        dorm=dorm,
        scholarships_cost=plan.scholarships_cost,
        discounts_cost=plan.discounts_cost,
        targets=policy.expense_targets,
    )

    # 7. variance
    performance = build_performance_rows(prev_report, _section(basic, "performance", "actual"), currency)

    # 8. assembly
    target_students = capacity.planned_students if capacity.planned_students > 0 else basis.tuition_students
    group_kwargs = dict(
        target_students=target_students,
        capacity_y1=capacity.capacity_y1,
        parent_revenue=revenue.activity_revenue,
        avg_tuition=basis.avg_tuition,
    )
    discount_analysis = MappingProxyType(
        {
            "targetStudents": target_students,
            "parentStudentRevenue": revenue.activity_revenue,
            "scholarships": build_group_analysis(plan.scholarships, plan.scholarships_cost, **group_kwargs),
            "discounts": build_group_analysis(plan.discounts, plan.discounts_cost, **group_kwargs),
        }
    )

    revenue_total = revenue.gross_income_base
    net_total = revenue_total - expense_total
    per_student_cost = safe_div(expense_total, capacity.planned_students) if capacity.planned_students > 0 else None
    scholarship_discount_total = plan.scholarships_cost + plan.discounts_cost
    raise_rates = [row.raise_pct for row in tuition.rows if row.raise_pct is not None]
    planned_raise_avg = sum(raise_rates) / len(raise_rates) if raise_rates else None
    has_competitors = competitor_has_data(competitors)
    competitor_status = "VAR" if has_competitors else "YOK"
    base_year = parse_academic_start_year(scenario_meta.get("academic_year"))
    expense_deviation = num_or_null(inflation.get("expenseDeviationPct"))
    raw_season_fee = num_or_null(inflation.get("currentSeasonAvgFee"))
    current_season_fee = None if raw_season_fee is None else currency.to_reporting(raw_season_fee)
    raw_final_fee = num_or_null(inflation.get("finalFee"))
    final_fee = tuition.average.total if raw_final_fee is None else currency.to_reporting(raw_final_fee)
    planned_headcount = sum((row.planned for row in hr_rows), 0.0)

    parameters = (
        Parameter("1", "Planlanan Donem Kapasite Kullanim Orani (%)", capacity.planned_utilization, "percent"),
        Parameter("2", "Insan Kaynaklari Planlamasi (Turk + Yerel + International)", planned_headcount, "number"),
        Parameter("3", "Gelir Planlamasi", revenue_total, "currency"),
        Parameter("4", "Gider Planlamasi", expense_total, "currency"),
        Parameter("", "Gelir - Gider Farki", net_total, "currency"),
        Parameter(
            "5",
            "Tahsil Edilemeyecek Gelirler (Onceki Donemin Tahsil Edilemeyen yuzdelik rakami)",
            operating.bad_debt,
            "currency",
        ),
        Parameter("6", "Giderlerin Sapma Yuzdeligi (%... Olarak Hesaplanabilir)", expense_deviation, "percent"),
        Parameter("7", "Burs ve Indirim Giderleri (Fizibilite-G71)", scholarship_discount_total, "currency"),
        Parameter(
            "",
            "Ogrenci Basina Maliyet (Tum Giderler (Parametre 4 / Planlanan Ogrenci Sayisi))",
            per_student_cost,
            "currency",
        ),
        Parameter("8", "Rakip Kurumlarin Analizi (VAR / YOK)", competitor_status),
        Parameter("", "Planlanan Donem Egitim Ucretleri Artis Orani", planned_raise_avg, "percent"),
        Parameter(
            "9",
            "Yerel Mevzuatta uygunluk (yasal azami artis, Protokol Sinirliliklari, Son 3 yilin resmi enflasyon orn.)",
            None,
        ),
        Parameter("10", "Mevcut Egitim Sezonu Ucreti (ortalama)", current_season_fee, "currency"),
        Parameter("", "Nihai Ucret", final_fee, "currency"),
    )

    parameters_meta = MappingProxyType(
        {
            "expenseDeviationPct": expense_deviation,
            "currentSeasonAvgFee": current_season_fee,
            "perStudentCost": per_student_cost,
            "plannedRaiseAvg": planned_raise_avg,
            "scholarshipsAndDiscountsTotal": scholarship_discount_total,
            "uncollectableRevenuePct": num_or_null(
                _first_present(inflation, "uncollectableRevenuePct", "badDebtPct", "tahsilEdilemeyenGelirPct")
            ),
            "uncollectableExpenseAmount": operating.bad_debt,
            "inflationHistory": {key: num_or_null(inflation.get(key)) for key in policy.inflation_fallback_keys},
            "inflationYears": _inflation_years(inflation, base_year, policy),
            "inflationBaseYear": base_year,
            "competitorStatus": competitor_status,
            "finalFee": final_fee,
            "serviceCosts": services.as_dict(),
            "dormCosts": dorm.as_dict(),
            "hrTurkCost": operating.hr_turkish,
            "hrYerelCost": operating.hr_local,
            "detailedExpenses": detailed_expenses,
            "detailedExpenseTotal": detailed_total,
            "discountAnalysis": discount_analysis,
        }
    )

    school_name = str(school_meta.get("name") or school_meta.get("school_name") or "Okul")
    header_parts = [school_name, scenario_meta.get("name") or "", scenario_meta.get("academic_year") or ""]
    program_label = education.get("programLabel") or (
        "Uluslararasi" if resolved_program == PROGRAM_INTERNATIONAL else "Ulusal"
    )

    return ReportModel(
        currency_code=policy.currency_code,
        header_label=" > ".join(str(part) for part in header_parts if part),
        country_name=str(school_meta.get("country_name") or school_meta.get("country") or "Ülke"),
        school_name=school_name,
        principal_name=str(administrators.get("principal") or ""),
        reporter_name=str(administrators.get("reportPreparer") or ""),
        representative_name=str(administrators.get("countryRepresentative") or ""),
        academic_start_year=base_year,
        program_type=str(program_label),
        period_start_date=str(education.get("startDate") or ""),
        school_capacity=capacity.school_capacity,
        current_students=capacity.current_students,
        compulsory_education=str(education.get("compulsoryEducation") or ""),
        lesson_duration=education.get("lessonDurationMinutes"),
        daily_lesson_hours=education.get("dailyLessonHours"),
        weekly_lesson_hours=education.get("weeklyLessonHours"),
        shift_system=str(education.get("shiftSystem") or ""),
        teacher_weekly_hours_avg=education.get("teacherWeeklyHoursAvg"),
        classroom_utilization=capacity.classroom_utilization,
        transition_exam_info=str(education.get("transitionExamInfo") or ""),
        tuition_table=tuition.as_list(),
        parameters=parameters,
        capacity=capacity.summary(),
        hr=hr_rows,
        revenues=revenue.rows,
        revenues_meta=MappingProxyType(
            {
                "nonEducationBreakdown": revenue.non_education_breakdown,
                "otherIncomeBreakdown": revenue.other_income_breakdown,
            }
        ),
        expenses=expense_rows,
        scholarships=plan.scholarships,
        discounts=plan.discounts,
        discount_analysis=discount_analysis,
        performance=performance,
        performance_meta=MappingProxyType(currency.performance_meta()),
        competitors=build_competitor_rows(competitors, tier_config, resolved_program, currency),
        revenues_detailed=revenue.rows,
        revenues_detailed_total=revenue.rows_total,
        revenue_total=revenue_total,
        expense_total=expense_total,
        net_total=net_total,
        avg_tuition=tuition.avg_tuition,
        margin=safe_div(net_total, revenue_total),
        per_student_cost=per_student_cost,
        parameters_meta=parameters_meta,
    )
