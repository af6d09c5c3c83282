import pytest

from school_budget.core.performance import build_performance_rows, planned_baseline, variance

ACTUAL = {"studentCount": 90, "income": 110000, "expenses": 88000, "discounts": 5000}


def test_variance_is_relative_to_planned():
    assert variance(100, 110) == pytest.approx(0.1)
    assert variance(100, 90) == pytest.approx(-0.1)
    assert variance(0, 10) is None
    assert variance(None, 10) is None
    assert variance(10, None) is None


def test_planned_baseline_prefers_year_one_block(prev_report):
    assert planned_baseline(prev_report)["students"]["totalStudents"] == 100
    flat = {"students": {"totalStudents": 70}}
    assert planned_baseline(flat) is flat
    assert planned_baseline(None) == {}


def test_rows_compare_prior_plan_with_actuals(prev_report, usd):
    rows = build_performance_rows(prev_report, ACTUAL, usd)
    by_metric = {row.metric: row for row in rows}
    assert list(by_metric) == ["Ogrenci Sayisi", "Gelirler", "Giderler", "Kar Zarar", "Burs ve Indirimler"]
    assert by_metric["Ogrenci Sayisi"].variance == pytest.approx(-0.1)
    profit = by_metric["Kar Zarar"]
    assert (profit.planned, profit.actual) == (20000, 22000)
    assert profit.variance == pytest.approx(0.1)
    assert by_metric["Burs ve Indirimler"].variance == pytest.approx(0.25)


def test_local_actuals_fall_back_to_realized_rate(prev_report, local_currency):
    rows = build_performance_rows(prev_report, {"income": 3200000}, local_currency)
    income = rows[1]
    assert income.actual == pytest.approx(100000)
    assert income.variance == pytest.approx(0.0)


def test_local_actuals_prefer_prior_scenario_rate(prev_report):
    from school_budget.core.currency import CurrencyContext

    context = CurrencyContext(input_currency="LOCAL", fx=40.0, realized_fx=32.0, prior_fx=30.0)
    rows = build_performance_rows(prev_report, {"income": 3000000}, context)
    assert rows[1].actual == pytest.approx(100000)


def test_unconvertible_actuals_stay_unknown(prev_report):
    from school_budget.core.currency import CurrencyContext

    rows = build_performance_rows(prev_report, ACTUAL, CurrencyContext(input_currency="LOCAL", fx=40.0))
    assert rows[1].actual is None
    assert rows[1].variance is None
    assert rows[0].actual == 90


def test_stored_profit_used_only_when_it_cannot_be_derived(usd):
    rows = build_performance_rows(None, {"income": 1000, "profit": 5}, usd)
    assert rows[3].actual == 5
    assert rows[3].planned is None
    assert rows[3].variance is None
