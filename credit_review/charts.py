import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from .aggregates import metric_average
from .prompts import round_half_up
from .records import FinancialRecord


NEGATIVE_COLOR = "#ef4444"


@dataclass(frozen=True)
class ChartDefinition:
    key: str
    metric: str
    label: str
    kind: str
    color: str
    allow_negative: bool = False
    currency: bool = True


CHART_DEFINITIONS = (
    ChartDefinition("std", "STD", "短期借款", "bar", "#3b82f6"),
    ChartDefinition("cpltd", "CPLTD", "一年內到期長期負債", "bar", "#f59e0b"),
    ChartDefinition("ltd", "LTD", "長期負債", "bar", "#8b5cf6"),
    ChartDefinition("ebitda", "EBITDA", "EBITDA", "line", "#10b981"),
    ChartDefinition("sales", "Sales", "營收淨額", "line", "#6366f1"),
    ChartDefinition("fcf", "FCF", "自由現金流量", "bar", "#14b8a6", allow_negative=True),
    ChartDefinition("tie", "TIE", "利息保障倍數", "line", "#ec4899", currency=False),
    ChartDefinition("cr", "CR", "流動比率", "line", "#f97316", currency=False),
)


def format_amount(value: float) -> str:
    """Thousands-separated, rounded half up; non-finite values render as 0."""
    if value is None or not math.isfinite(value):
        return "0"
    return f"{round_half_up(value):,}"


def format_average(definition: ChartDefinition, value: float) -> str:
    if definition.currency:
        return f"平均值: {format_amount(value)} 仟元"
    return f"平均值: {value:.2f}"


def _series_value(value: Any):
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return value
    return None


def _bar_colors(definition: ChartDefinition, data: List[Any]):
    if not definition.allow_negative:
        return definition.color + "99", definition.color
    background = [
        definition.color + "99" if (v or 0) >= 0 else NEGATIVE_COLOR + "99" for v in data
    ]
    border = [definition.color if (v or 0) >= 0 else NEGATIVE_COLOR for v in data]
    return background, border


def build_chart(definition: ChartDefinition, records: Sequence[FinancialRecord]) -> Dict[str, Any]:
    years = [r.year for r in records]
    data = [_series_value(r.get(definition.metric)) for r in records]
    average = metric_average(records, definition.metric)
    if definition.kind == "bar":
        background, border = _bar_colors(definition, data)
    else:
        background, border = definition.color + "33", definition.color
    return {
        "key": definition.key,
        "metric": definition.metric,
        "type": definition.kind,
        "label": definition.label,
        "labels": years,
        "data": data,
        "background_color": background,
        "border_color": border,
        "begin_at_zero": definition.kind == "bar" and not definition.allow_negative,
        "average": average,
        "average_text": format_average(definition, average),
    }


def build_charts(records: Sequence[FinancialRecord]) -> List[Dict[str, Any]]:
    return [build_chart(definition, records) for definition in CHART_DEFINITIONS]
