"""Error model of the Infra layer (file and bundle handling)."""
from __future__ import annotations

from dataclasses import dataclass


class InfraError(RuntimeError):
    """Base of every Infra-layer error."""


@dataclass(eq=True)
class InputFileError(InfraError):
    """An input bundle or policy file is missing or cannot be decoded."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


@dataclass(eq=True)
class OutputWriteError(InfraError):
    """The report could not be written to its destination."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


__all__ = ["InfraError", "InputFileError", "OutputWriteError"]
