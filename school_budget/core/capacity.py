"""Capacity and enrolment figures derived from capacity and grade inputs.

``studentsPerBranch`` on a grade row holds the grade's *total* students;
the field name is historical.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .common.numeric import as_list, as_mapping, safe_div, safe_num, sum_field
from .common.types import CapacitySummary

__all__ = ["CapacityFigures", "build_capacity_figures"]


@dataclass(frozen=True, slots=True)
class CapacityFigures:
    school_capacity: float
    capacity_y1: float
    current_students: float
    planned_students: float
    total_branches: float
    planned_branches: float

    @property
    def classroom_utilization(self) -> float | None:
        return safe_div(self.current_students, self.total_branches)

    @property
    def planned_utilization(self) -> float | None:
        return safe_div(self.planned_students, self.school_capacity)

    def summary(self) -> CapacitySummary:
        return CapacitySummary(
            building_capacity=self.school_capacity,
            current_students=self.current_students,
            planned_students=self.planned_students,
            planned_utilization=self.planned_utilization,
            planned_branches=self.planned_branches,
            total_branches=self.total_branches,
            used_branches=self.total_branches,
            avg_students_per_class=safe_div(self.current_students, self.total_branches),
            avg_students_per_class_planned=safe_div(self.planned_students, self.planned_branches),
        )


def _by_tier_sum(by_tier: Mapping[str, Any], period: str) -> float:
    return sum(
        (safe_num(as_mapping(as_mapping(row).get("caps")).get(period)) for row in by_tier.values()),
        0.0,
    )


def build_capacity_figures(config: Mapping[str, Any]) -> CapacityFigures:
    """Resolve capacities and enrolment through their fallback chains.

    Building capacity: ``totals.cur``, then the per-tier sum, then
    ``currentStudents``. Year-1 capacity: ``years.y1``, ``totals.y1``, the
    per-tier sum, then the building capacity.
    """

    capacity = as_mapping(config.get("capacity"))
    totals = as_mapping(capacity.get("totals"))
    by_tier = as_mapping(capacity.get("byTier"))

    school_capacity = (
        safe_num(totals.get("cur")) or _by_tier_sum(by_tier, "cur") or safe_num(capacity.get("currentStudents"))
    )
    capacity_y1 = (
        safe_num(as_mapping(capacity.get("years")).get("y1"))
        or safe_num(totals.get("y1"))
        or _by_tier_sum(by_tier, "y1")
        or school_capacity
    )

    grades_current = as_list(config.get("gradesCurrent"))
    grades_y1 = as_list(as_mapping(config.get("gradesPlannedByYear")).get("y1"))
    current_students = safe_num(capacity.get("currentStudents")) or sum_field(grades_current, "studentsPerBranch")

    return CapacityFigures(
        school_capacity=school_capacity,
        capacity_y1=capacity_y1,
        current_students=current_students,
        planned_students=sum_field(grades_y1, "studentsPerBranch"),
        total_branches=sum_field(grades_current, "branchCount"),
        planned_branches=sum_field(grades_y1, "branchCount"),
    )
