import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence

from .records import METRIC_FIELDS, FinancialRecord


def _as_finite_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def calculate_average(values: Iterable[Any]) -> float:
    """Mean over the values that coerce to a finite number; 0.0 when none do."""
    valid = [n for n in (_as_finite_float(v) for v in values) if n is not None]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def metric_average(records: Sequence[FinancialRecord], name: str) -> float:
    # Chart path: missing cells are excluded rather than counted as zero.
    return calculate_average(r.get(name) for r in records)


def calculate_average_data(records: Sequence[FinancialRecord]) -> Dict[str, float]:
    # Scoring path: missing cells count as zero.
    return {
        name: calculate_average(r.metric_or_zero(name) for r in records)
        for name in METRIC_FIELDS
    }


class CreditRatioCalculator:
    def __init__(self, averages: Dict[str, float]) -> None:
        self.averages = averages

    @staticmethod
    def _safe_divide(numerator: float, denominator: float) -> Optional[float]:
        if denominator == 0:
            return None
        return numerator / denominator

    def _avg(self, name: str) -> float:
        return self.averages.get(name, 0.0)

    def total_debt(self) -> float:
        return self._avg("STD") + self._avg("CPLTD") + self._avg("LTD")

    def debt_service_years(self) -> Optional[float]:
        return self._safe_divide(self.total_debt(), self._avg("EBITDA"))

    def cash_flow_coverage_pct(self) -> Optional[float]:
        ratio = self._safe_divide(self._avg("FCF"), self.total_debt())
        return None if ratio is None else ratio * 100

    def short_term_debt_ratio_pct(self) -> Optional[float]:
        ratio = self._safe_divide(self._avg("STD"), self._avg("Assets"))
        return None if ratio is None else ratio * 100

    def capex_efficiency_pct(self) -> Optional[float]:
        ratio = self._safe_divide(self._avg("CapEx"), self._avg("FCF"))
        return None if ratio is None else ratio * 100

    def calculate_all_ratios(self) -> Dict[str, Optional[float]]:
        return {
            "debt_service_years": self.debt_service_years(),
            "cash_flow_coverage_pct": self.cash_flow_coverage_pct(),
            "short_term_debt_ratio_pct": self.short_term_debt_ratio_pct(),
            "capex_efficiency_pct": self.capex_efficiency_pct(),
        }


@dataclass(frozen=True)
class AggregateSnapshot:
    averages: Dict[str, float] = field(default_factory=dict)
    ratios: Dict[str, Optional[float]] = field(default_factory=dict)
    first_year: int = 0
    last_year: int = 0

    @property
    def period(self) -> str:
        return f"{self.first_year} - {self.last_year}"


def build_snapshot(records: Sequence[FinancialRecord]) -> AggregateSnapshot:
    averages = calculate_average_data(records)
    ratios = CreditRatioCalculator(averages).calculate_all_ratios()
    return AggregateSnapshot(
        averages=averages,
        ratios=ratios,
        first_year=records[0].year if records else 0,
        last_year=records[-1].year if records else 0,
    )
