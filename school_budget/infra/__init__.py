"""Infra layer: file I/O, logging bootstrap and the CLI."""

from school_budget.infra.errors import InfraError, InputFileError, OutputWriteError

__all__ = ["InfraError", "InputFileError", "OutputWriteError"]
