"""Pure report computation: no logging and no file I/O."""

from school_budget.core.report_builder import build_report_model

__all__ = ["build_report_model"]
