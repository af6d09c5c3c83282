"""Tier (kademe) configuration normalizer and program-type visibility.

Every helper degrades to the static catalog defaults instead of raising:
unparseable grades, reversed ranges and non-mapping inputs are all repaired.

Example::

    >>> cfg = normalize_tier_config({"ilkokul": {"from": "5", "to": "1"}})
    >>> (cfg["ilkokul"].from_grade, cfg["ilkokul"].to_grade)
    ('1', '5')
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from .catalogs import GRADES, TIER_DEFINITIONS, TUITION_VARIANT_BASE, tier_definition
from .common.numeric import as_mapping
from .common.text import normalize_variant
from .common.types import TierConfig, TierDefinition

__all__ = [
    "PROGRAM_LOCAL",
    "PROGRAM_INTERNATIONAL",
    "format_tier_label",
    "grade_index",
    "is_tier_key_visible",
    "normalize_grade",
    "normalize_program_type",
    "normalize_range",
    "normalize_tier_config",
    "resolve_program_type",
    "tier_range_label",
    "tuition_base_key",
]

PROGRAM_LOCAL = "local"
PROGRAM_INTERNATIONAL = "international"
_PROGRAM_TYPES = frozenset({PROGRAM_LOCAL, PROGRAM_INTERNATIONAL})

_RE_GRADE_NUMBER = re.compile(r"^\d{1,2}$")


def normalize_grade(value: Any) -> str | None:
    """Canonical grade identifier (``"KG"`` or ``"1"``..``"12"``), else ``None``."""

    text = "" if value is None or value is False else str(value).strip().upper()
    if text == "KG":
        return "KG"
    if not _RE_GRADE_NUMBER.match(text):
        return None
    number = int(text)
    if number < 1 or number > 12:
        return None
    return str(number)


def grade_index(value: Any) -> int:
    grade = normalize_grade(value)
    if grade is None:
        return -1
    return GRADES.index(grade)


def normalize_range(from_value: Any, to_value: Any, definition: TierDefinition) -> tuple[str, str]:
    """Normalize a grade range, swapping reversed bounds.

    Each bound falls back to the tier default on its own; a reversed pair of
    valid bounds is swapped rather than reset.
    """

    from_grade = normalize_grade(from_value) or definition.default_from
    to_grade = normalize_grade(to_value) or definition.default_to
    from_idx = grade_index(from_grade)
    to_idx = grade_index(to_grade)
    if from_idx < 0 or to_idx < 0:
        return definition.default_from, definition.default_to
    if from_idx <= to_idx:
        return from_grade, to_grade
    return to_grade, from_grade


def normalize_tier_config(config: Any) -> Dict[str, TierConfig]:
    """Complete tier map covering every catalog tier, whatever was supplied."""

    raw = as_mapping(config)
    out: Dict[str, TierConfig] = {}
    for definition in TIER_DEFINITIONS:
        row = as_mapping(raw.get(definition.key))
        enabled = row.get("enabled") is not False
        from_grade, to_grade = normalize_range(row.get("from"), row.get("to"), definition)
        out[definition.key] = TierConfig(enabled=enabled, from_grade=from_grade, to_grade=to_grade)
    return out


def tier_range_label(config: Mapping[str, TierConfig], key: str) -> str:
    """``"1-5"`` style range label; empty for unknown or disabled tiers."""

    if tier_definition(key) is None:
        return ""
    tier = config.get(key)
    if tier is None or not tier.enabled:
        return ""
    if tier.from_grade == tier.to_grade:
        return tier.from_grade
    return f"{tier.from_grade}-{tier.to_grade}"


def format_tier_label(label: str, config: Mapping[str, TierConfig], key: str) -> str:
    range_label = tier_range_label(config, key)
    if not range_label:
        return label
    return f"{label} ({range_label})"


def normalize_program_type(value: Any) -> str:
    raw = "" if value is None else str(value).strip().lower()
    if raw in _PROGRAM_TYPES:
        return raw
    return PROGRAM_LOCAL


def resolve_program_type(
    config: Mapping[str, Any],
    scenario: Mapping[str, Any] | None = None,
    explicit: Any = None,
) -> str:
    """Program type: explicit argument, then inputs, then scenario metadata."""

    if explicit:
        return normalize_program_type(explicit)
    basic_info = as_mapping(config.get("basicInfo"))
    from_inputs = basic_info.get("programType") or config.get("programType")
    if from_inputs:
        return normalize_program_type(from_inputs)
    meta = as_mapping(scenario)
    from_scenario = meta.get("program_type") or meta.get("programType")
    if from_scenario:
        return normalize_program_type(from_scenario)
    return PROGRAM_LOCAL


def is_tier_key_visible(key: Any, program_type: Any = PROGRAM_LOCAL) -> bool:
    """Whether a tuition variant key belongs to the active program type.

    ``...Yerel`` variants exist only for local programs and ``...Int``
    variants only for international ones; every other key is visible.
    """

    kind = normalize_program_type(program_type)
    if not key or not isinstance(key, str):
        return True
    if key == "okulOncesi":
        return True
    if key.endswith("Yerel"):
        return kind == PROGRAM_LOCAL
    if key.endswith("Int"):
        return kind == PROGRAM_INTERNATIONAL
    return True


def tuition_base_key(row: Any) -> str | None:
    """Catalog tier a tuition row belongs to, derived from key/label/level."""

    mapping = as_mapping(row)
    source = mapping.get("key")
    if source is None:
        source = mapping.get("label")
    if source is None:
        source = mapping.get("level")
    normalized = normalize_variant(source)
    if not normalized:
        return None
    return TUITION_VARIANT_BASE.get(normalized)
