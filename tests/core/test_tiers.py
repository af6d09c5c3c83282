import pytest

from school_budget.core.catalogs import TIER_KEYS
from school_budget.core.common.types import TierConfig
from school_budget.core.tiers import (
    PROGRAM_INTERNATIONAL,
    PROGRAM_LOCAL,
    format_tier_label,
    grade_index,
    is_tier_key_visible,
    normalize_grade,
    normalize_program_type,
    normalize_tier_config,
    resolve_program_type,
    tier_range_label,
    tuition_base_key,
)


@pytest.mark.parametrize(
    "raw,expected",
    [("kg", "KG"), (" 5 ", "5"), ("05", "5"), (12, "12"), ("13", None), ("0", None), ("x", None), (None, None)],
)
def test_normalize_grade(raw, expected):
    assert normalize_grade(raw) == expected


def test_grade_index_orders_kg_first():
    assert grade_index("KG") == 0
    assert grade_index("12") == 12
    assert grade_index("junk") == -1


def test_reversed_range_is_swapped():
    config = normalize_tier_config({"ilkokul": {"from": "5", "to": "1"}})
    assert (config["ilkokul"].from_grade, config["ilkokul"].to_grade) == ("1", "5")


def test_missing_bounds_fall_back_per_bound():
    config = normalize_tier_config({"ortaokul": {"from": "7", "to": "bogus"}})
    assert config["ortaokul"] == TierConfig(enabled=True, from_grade="7", to_grade="9")


def test_every_catalog_tier_is_present_and_enabled_by_default():
    config = normalize_tier_config(None)
    assert tuple(config) == TIER_KEYS
    assert all(tier.enabled for tier in config.values())
    assert config["okulOncesi"].from_grade == "KG"


def test_only_explicit_false_disables_a_tier():
    config = normalize_tier_config({"lise": {"enabled": False}, "ilkokul": {"enabled": 0}})
    assert config["lise"].enabled is False
    assert config["ilkokul"].enabled is True


def test_range_labels():
    config = normalize_tier_config({"okulOncesi": {}, "lise": {"enabled": False}})
    assert tier_range_label(config, "ilkokul") == "1-5"
    assert tier_range_label(config, "okulOncesi") == "KG"
    assert tier_range_label(config, "lise") == ""
    assert tier_range_label(config, "unknown") == ""
    assert format_tier_label("Ilkokul", config, "ilkokul") == "Ilkokul (1-5)"
    assert format_tier_label("Lise", config, "lise") == "Lise"


def test_program_type_normalization():
    assert normalize_program_type(" International ") == PROGRAM_INTERNATIONAL
    assert normalize_program_type("something") == PROGRAM_LOCAL
    assert normalize_program_type(None) == PROGRAM_LOCAL


def test_program_type_resolution_order():
    config = {"basicInfo": {"programType": "international"}}
    assert resolve_program_type(config) == PROGRAM_INTERNATIONAL
    assert resolve_program_type(config, explicit="local") == PROGRAM_LOCAL
    assert resolve_program_type({}, {"program_type": "international"}) == PROGRAM_INTERNATIONAL
    assert resolve_program_type({}) == PROGRAM_LOCAL


@pytest.mark.parametrize(
    "key,program,visible",
    [
        ("ilkokulYerel", PROGRAM_LOCAL, True),
        ("ilkokulYerel", PROGRAM_INTERNATIONAL, False),
        ("liseInt", PROGRAM_LOCAL, False),
        ("liseInt", PROGRAM_INTERNATIONAL, True),
        ("okulOncesi", PROGRAM_INTERNATIONAL, True),
        ("custom", PROGRAM_LOCAL, True),
        (None, PROGRAM_LOCAL, True),
    ],
)
def test_variant_visibility(key, program, visible):
    assert is_tier_key_visible(key, program) is visible


def test_tuition_base_key_uses_key_then_label():
    assert tuition_base_key({"key": "ortaokulInt"}) == "ortaokul"
    assert tuition_base_key({"label": "Lise Yerel"}) == "lise"
    assert tuition_base_key({"key": "kurs"}) is None
    assert tuition_base_key({}) is None
