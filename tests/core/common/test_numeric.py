from decimal import Decimal

import pytest

from school_budget.core.common.numeric import (
    as_list,
    as_mapping,
    clamp,
    clamp0,
    first_defined,
    num_or_null,
    resolve,
    round_half_up,
    safe_div,
    safe_num,
    sum_field,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (12, 12.0),
        ("12.5", 12.5),
        ("  7 ", 7.0),
        (Decimal("1.25"), 1.25),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ([1, 2], 0.0),
        ({"a": 1}, 0.0),
    ],
)
def test_safe_num_degrades_to_zero(raw, expected):
    assert safe_num(raw) == expected


def test_num_or_null_keeps_unknown_apart_from_zero():
    assert num_or_null("0") == 0.0
    assert num_or_null(None) is None
    assert num_or_null("") is None
    assert num_or_null(float("nan")) is None
    assert num_or_null(False) is None


@pytest.mark.parametrize("denominator", [0, 0.0, float("nan"), float("inf"), None, "x"])
def test_safe_div_returns_none_for_unusable_denominator(denominator):
    assert safe_div(10, denominator) is None


def test_safe_div_regular_division():
    assert safe_div(1, "2") == 0.5
    assert safe_div(float("nan"), 2) is None


def test_round_half_up_matches_spreadsheet_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.49) == 0
    assert round_half_up(-2.5) == -2
    assert round_half_up("junk") == 0


def test_clamp_helpers():
    assert clamp("5", 0, 1) == 1
    assert clamp(-0.2, 0, 1) == 0
    assert clamp(None, 0, 1) == 0
    assert clamp0(-3) == 0
    assert clamp0("4") == 4


def test_resolve_prefers_override_even_when_zero():
    assert resolve(None, 5.0) == 5.0
    assert resolve(0.0, 5.0) == 0.0


def test_first_defined_runs_accessors_in_order():
    accessors = (lambda r: r.get("key"), lambda r: r.get("name"))
    assert first_defined({"name": "Yemek"}, accessors) == "Yemek"
    assert first_defined({"key": "", "name": "Servis"}, accessors) == "Servis"
    assert first_defined("not a row", accessors, "fallback") == "fallback"


def test_container_guards():
    assert as_mapping(None) == {}
    assert as_mapping([1]) == {}
    assert as_list((1, 2)) == [1, 2]
    assert as_list("abc") == []


def test_sum_field_ignores_junk_rows():
    rows = [{"n": 1}, {"n": "2"}, {"n": None}, "junk", {"other": 5}]
    assert sum_field(rows, "n") == 3.0
    assert sum_field([{"n": float("nan")}], "n") == 0.0
