"""Tabular views of :class:`ReportModel` as pandas DataFrames.

Each frame mirrors one section of the report with camelCase column names.
Unknown values (``None``) become ``pd.NA`` so numeric columns keep a
nullable dtype instead of silently collapsing to ``0``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pandas as pd

from .common.types import ReportModel, to_plain

__all__ = ["FRAME_NAMES", "report_to_frames", "rows_to_frame"]

FRAME_NAMES = (
    "tuition",
    "revenues",
    "expenses",
    "scholarships",
    "discounts",
    "performance",
    "competitors",
    "parameters",
    "hr",
)

_COLUMNS: Dict[str, List[str]] = {
    "tuition": [
        "key",
        "level",
        "eduFee",
        "uniformFee",
        "bookFee",
        "transportFee",
        "mealFee",
        "raisePct",
        "total",
        "studentCount",
    ],
    "revenues": ["name", "amount", "ratio"],
    "expenses": ["name", "amount", "ratio"],
    "scholarships": ["key", "name", "group", "plannedCount", "cost", "currentCount", "rate"],
    "discounts": ["key", "name", "group", "plannedCount", "cost", "currentCount", "rate"],
    "performance": ["metric", "planned", "actual", "variance"],
    "competitors": ["level", "a", "b", "c"],
    "parameters": ["no", "desc", "value", "valueType"],
    "hr": ["item", "current", "planned"],
}


def rows_to_frame(rows: Iterable[Any], columns: List[str]) -> pd.DataFrame:
    """Build a frame with a fixed column order from dataclass rows.

    Missing keys (e.g. an omitted ``valueType``) and ``None`` values end up
    as ``pd.NA``.
    """

    records = [to_plain(row) for row in rows]
    frame = pd.DataFrame.from_records(records, columns=columns)
    return frame.astype(object).where(frame.notna(), pd.NA).convert_dtypes()


def report_to_frames(model: ReportModel) -> Dict[str, pd.DataFrame]:
    """Return one DataFrame per report section, keyed by :data:`FRAME_NAMES`."""

    sources = {
        "tuition": model.tuition_table,
        "revenues": model.revenues,
        "expenses": model.expenses,
        "scholarships": model.scholarships,
        "discounts": model.discounts,
        "performance": model.performance,
        "competitors": model.competitors,
        "parameters": model.parameters,
        "hr": model.hr,
    }
    return {name: rows_to_frame(sources[name], _COLUMNS[name]) for name in FRAME_NAMES}
