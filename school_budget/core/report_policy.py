"""Report Policy Loader (Core): small, cacheable and JSON-backed.

Architecture note: the pure path is :func:`parse_report_policy_dict`. If the
caller already holds the JSON payload (for example from a request body), it
should pass the dict there; :func:`load_report_policy` only adds file reading
and a cache keyed by path, content and mtime.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Tuple

__all__ = [
    "DEFAULT_POLICY_VERSION",
    "ReportPolicy",
    "load_report_policy",
    "parse_report_policy_dict",
]

DEFAULT_POLICY_VERSION = "1.0.0"
_DEFAULT_CURRENCY_CODE = "USD"
_DEFAULT_BASE_YEAR = 2026
_DEFAULT_INFLATION_FALLBACK_KEYS: Tuple[str, ...] = ("y2023", "y2024", "y2025")
_DEFAULT_EXPENSE_TARGETS: Mapping[str, float] = MappingProxyType(
    {
        "hrTurkish": 0.15,
        "hrLocal": 0.45,
        "discounts": 0.08,
        "scholarships": 0.05,
        "badDebt": 0.02,
    }
)
_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True)
class ReportPolicy:
    """Export-time knobs of the report builder.

    Example:
        >>> policy = ReportPolicy.default()
        >>> policy.expense_targets["hrLocal"]
        0.45
    """

    version: str = DEFAULT_POLICY_VERSION
    currency_code: str = _DEFAULT_CURRENCY_CODE
    default_base_year: int = _DEFAULT_BASE_YEAR
    inflation_fallback_keys: Tuple[str, ...] = _DEFAULT_INFLATION_FALLBACK_KEYS
    expense_targets: Mapping[str, float] = field(default_factory=lambda: _DEFAULT_EXPENSE_TARGETS)

    @staticmethod
    def default() -> "ReportPolicy":
        return ReportPolicy()


def _parse_semver(value: str) -> tuple[int, int, int]:
    match = _SEMVER.match(value.strip())
    if not match:
        raise ValueError(f"policy version must look like MAJOR.MINOR.PATCH: {value!r}")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def _normalize_ratio_value(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a number")
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise TypeError(f"{name} must be a number") from exc
    if numeric > 1:
        numeric /= 100.0
    if not 0.0 <= numeric <= 1.0:
        raise ValueError(f"{name} must be between 0 and 1 (inclusive)")
    return float(numeric)


def _normalize_expense_targets(value: object) -> Mapping[str, float]:
    if value is None:
        return _DEFAULT_EXPENSE_TARGETS
    if not isinstance(value, Mapping):
        raise TypeError("expense_targets must be an object")
    merged = dict(_DEFAULT_EXPENSE_TARGETS)
    for key, raw in value.items():
        merged[str(key)] = _normalize_ratio_value(f"expense_targets.{key}", raw)
    return MappingProxyType(merged)


def _normalize_fallback_keys(value: object) -> Tuple[str, ...]:
    if value is None:
        return _DEFAULT_INFLATION_FALLBACK_KEYS
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError("inflation_fallback_keys must list exactly three keys")
    return tuple(str(item) for item in value)


def _normalize_base_year(value: object) -> int:
    if value is None:
        return _DEFAULT_BASE_YEAR
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError("default_base_year must be an integer")
    try:
        year = int(value)
    except ValueError as exc:
        raise TypeError("default_base_year must be an integer") from exc
    if year < 1900:
        raise ValueError("default_base_year must be >= 1900")
    return year


def parse_report_policy_dict(
    data: Mapping[str, object],
    expected_version: str | None = DEFAULT_POLICY_VERSION,
) -> ReportPolicy:
    """Pure path: turn a decoded JSON object into :class:`ReportPolicy`.

    Raises:
        TypeError: when a field has the wrong type.
        ValueError: when a value is out of range or the major version differs.
    """

    if not isinstance(data, Mapping):
        raise TypeError("report policy must be a JSON object")
    version = str(data.get("version") or DEFAULT_POLICY_VERSION)
    if expected_version is not None and _parse_semver(version)[0] != _parse_semver(expected_version)[0]:
        raise ValueError(
            f"report policy version {version} is incompatible with {expected_version}"
        )
    currency_code = str(data.get("currency_code") or _DEFAULT_CURRENCY_CODE).strip().upper()
    return ReportPolicy(
        version=version,
        currency_code=currency_code,
        default_base_year=_normalize_base_year(data.get("default_base_year")),
        inflation_fallback_keys=_normalize_fallback_keys(data.get("inflation_fallback_keys")),
        expense_targets=_normalize_expense_targets(data.get("expense_targets")),
    )


@lru_cache(maxsize=8)
def _load_policy_cached(resolved_path: str, raw: str, mtime_ns: int) -> ReportPolicy:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in report policy file: {resolved_path}") from exc
    return parse_report_policy_dict(data)


def load_report_policy(path: str | Path = "config/report_policy.json") -> ReportPolicy:
    """Load the policy from a JSON file, reusing the parse for unchanged files."""

    policy_path = Path(path)
    try:
        raw = policy_path.read_text(encoding="utf-8")
        mtime_ns = policy_path.stat().st_mtime_ns
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Report policy file not found: {policy_path}") from exc
    return _load_policy_cached(str(policy_path.resolve()), raw, mtime_ns)


load_report_policy.cache_clear = _load_policy_cached.cache_clear  # type: ignore[attr-defined]
