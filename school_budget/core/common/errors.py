"""Domain errors for the report engine core."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class DomainError(Exception):
    """Base of every domain error."""


@dataclass(frozen=True, slots=True)
class BaseDomainError(DomainError):
    """Error enriched with context for debugging and reporting.

    Attributes:
        func: name of the function that rejected the input.
        field: dotted path of the offending field, when relevant.
        value: raw value that caused the error.
    """

    func: str
    field: str | None = None
    value: Any | None = None

    def __str__(self) -> str:  # pragma: no cover - simple rendering
        parts: list[str] = [self.__class__.__name__, f"func={self.func}"]
        if self.field is not None:
            parts.append(f"field={self.field}")
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        return " ".join(parts)


class InvalidScenarioError(BaseDomainError):
    """The top-level scenario configuration is not a mapping at all."""


__all__ = [
    "DomainError",
    "BaseDomainError",
    "InvalidScenarioError",
]
