"""Currency conversion into the reporting currency.

Two converters exist side by side and must never be conflated:

* :meth:`CurrencyContext.to_reporting` uses the scenario's planning FX rate
  and collapses unusable input to ``0``.
* :meth:`CurrencyContext.to_reporting_for_performance` uses the prior
  scenario's stored FX rate, else the separately entered *realized* rate,
  and returns ``None`` when a conversion is required but no valid rate
  exists, so variance analysis can tell "zero" from "unknown".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .common.numeric import as_mapping, num_or_null, safe_num

__all__ = ["CurrencyContext", "build_currency_context"]

LOCAL_CURRENCY = "LOCAL"


def _positive(value: Any) -> float | None:
    numeric = safe_num(value)
    return numeric if numeric > 0 else None


@dataclass(frozen=True, slots=True)
class CurrencyContext:
    """FX setup of a single report build.

    Attributes:
        input_currency: declared currency of monetary inputs (``USD``/``LOCAL``).
        fx: local units per reporting unit for planning inputs.
        realized_fx: realized prior-year rate entered with performance data.
        prior_fx: rate stored on the prior year's scenario.
        local_currency_code: ISO code of the local currency, if known.
    """

    input_currency: str = "USD"
    fx: float | None = None
    realized_fx: float | None = None
    prior_fx: float | None = None
    local_currency_code: str | None = None

    @property
    def is_local_input(self) -> bool:
        return self.input_currency == LOCAL_CURRENCY

    @property
    def planned_fx(self) -> float | None:
        """Prior scenario rate, else the realized rate, else ``None``."""

        return self.prior_fx if self.prior_fx is not None else self.realized_fx

    def to_reporting(self, value: Any) -> float:
        numeric = num_or_null(value)
        if numeric is None:
            return 0.0
        if self.is_local_input and self.fx is not None:
            return numeric / self.fx
        return numeric

    def to_reporting_for_performance(self, value: Any) -> float | None:
        numeric = num_or_null(value)
        if numeric is None:
            return None
        if self.is_local_input:
            rate = self.planned_fx
            if rate is None:
                return None
            return numeric / rate
        return numeric

    def performance_meta(self) -> dict[str, Any]:
        return {
            "realized_fx_usd_to_local": self.realized_fx,
            "planned_fx_usd_to_local": self.planned_fx,
            "local_currency_code": self.local_currency_code,
        }


def build_currency_context(
    currency_meta: Mapping[str, Any] | None,
    prev_currency_meta: Mapping[str, Any] | None,
    basic_info: Mapping[str, Any] | None,
) -> CurrencyContext:
    """Assemble the FX setup from scenario metadata and performance inputs."""

    current = as_mapping(currency_meta)
    previous = as_mapping(prev_currency_meta)
    performance = as_mapping(as_mapping(basic_info).get("performance"))
    input_currency = str(current.get("input_currency") or "USD").strip().upper()
    local_code = current.get("local_currency_code") or previous.get("local_currency_code") or None
    return CurrencyContext(
        input_currency=input_currency,
        fx=_positive(current.get("fx_usd_to_local")),
        realized_fx=_positive(performance.get("realizedFxUsdToLocal")),
        prior_fx=_positive(previous.get("fx_usd_to_local")),
        local_currency_code=local_code,
    )
