"""Planned (prior-year report) vs. actual (realized) performance variance."""

from __future__ import annotations

from typing import Any, Mapping, Tuple

from .common.numeric import as_mapping, num_or_null
from .common.types import PerformanceRow
from .currency import CurrencyContext

__all__ = ["build_performance_rows", "planned_baseline", "variance"]


def variance(planned: float | None, actual: float | None) -> float | None:
    """Relative variance ``(actual - planned) / planned``.

    Returns ``None`` unless both values are known and ``planned`` is non-zero.

    Example::

        >>> variance(100, 110)
        0.1
        >>> variance(0, 10) is None
        True
    """

    if planned is None or actual is None or planned == 0:
        return None
    return (actual - planned) / planned


def _difference(left: float | None, right: float | None) -> float | None:
    if left is None or right is None:
        return None
    return left - right


def planned_baseline(prev_report: Any) -> Mapping[str, Any]:
    """Year-1 block of the prior year's report (or the report itself)."""

    report = as_mapping(prev_report)
    year = as_mapping(as_mapping(report.get("years")).get("y1"))
    return year or report


def build_performance_rows(
    prev_report: Any,
    actual: Mapping[str, Any],
    currency: CurrencyContext,
) -> Tuple[PerformanceRow, ...]:
    """Variance rows for enrolment, income, expenses, profit and discounts.

    Planned figures are already in the reporting currency. Actual money
    figures go through the performance FX path and stay ``None`` when they
    cannot be converted. Actual profit is ``income - expenses``; the stored
    profit figure is only a fallback, never blended with the derived one.
    """

    planned = planned_baseline(prev_report)
    planned_income = num_or_null(as_mapping(planned.get("income")).get("netIncome"))
    planned_expenses = num_or_null(as_mapping(planned.get("expenses")).get("totalExpenses"))
    planned_values = {
        "students": num_or_null(as_mapping(planned.get("students")).get("totalStudents")),
        "income": planned_income,
        "expenses": planned_expenses,
        "profit": _difference(planned_income, planned_expenses),
        "discounts": num_or_null(as_mapping(planned.get("income")).get("totalDiscounts")),
    }

    actual_income = currency.to_reporting_for_performance(actual.get("income"))
    actual_expenses = currency.to_reporting_for_performance(actual.get("expenses"))
    actual_profit = _difference(actual_income, actual_expenses)
    if actual_profit is None:
        actual_profit = currency.to_reporting_for_performance(actual.get("profit"))
    actual_values = {
        "students": num_or_null(actual.get("studentCount")),
        "income": actual_income,
        "expenses": actual_expenses,
        "profit": actual_profit,
        "discounts": currency.to_reporting_for_performance(actual.get("discounts")),
    }

    labels = (
        ("students", "Ogrenci Sayisi"),
        ("income", "Gelirler"),
        ("expenses", "Giderler"),
        ("profit", "Kar Zarar"),
        ("discounts", "Burs ve Indirimler"),
    )
    return tuple(
        PerformanceRow(
            metric=label,
            planned=planned_values[key],
            actual=actual_values[key],
            variance=variance(planned_values[key], actual_values[key]),
        )
        for key, label in labels
    )
