import json
import re
from typing import Any, Dict

from pydantic import BaseModel, Field, StrictBool, ValidationError, field_validator

from .errors import ParseError


JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

SUB_SCORE_MAXIMA = {
    "償債年限": 20,
    "EBITDA穩定性": 20,
    "現金流償債能力": 20,
    "利息保障倍數": 10,
    "資本支出效率": 10,
    "流動比率": 5,
    "營收成長穩定性": 5,
    "短期債務結構": 10,
}

SCORE_TIER_LABELS = {"低風險": "low", "中風險": "medium", "高風險": "high"}
AML_TIER_LABELS = {"高風險": "flagged", "安全": "clear"}


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the span from the first '{' to the last '}' in a model reply."""
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise ParseError("無法解析AI回應")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ParseError(f"無法解析AI回應: {exc}")
    if not isinstance(data, dict):
        raise ParseError("無法解析AI回應")
    return data


class ScoreResult(BaseModel):
    total_score: int = Field(ge=0, le=100)
    risk_tier: str
    risk_label: str
    comment: str
    sub_scores: Dict[str, int]

    @field_validator("risk_tier")
    @classmethod
    def _known_tier(cls, value: str) -> str:
        if value not in SCORE_TIER_LABELS.values():
            raise ValueError(f"unknown risk tier {value!r}")
        return value

    @field_validator("sub_scores")
    @classmethod
    def _bounded_sub_scores(cls, value: Dict[str, int]) -> Dict[str, int]:
        missing = [name for name in SUB_SCORE_MAXIMA if name not in value]
        if missing:
            raise ValueError(f"missing sub-scores: {missing}")
        for name, maximum in SUB_SCORE_MAXIMA.items():
            if not 0 <= value[name] <= maximum:
                raise ValueError(f"{name} must be within 0-{maximum}")
        return {name: value[name] for name in SUB_SCORE_MAXIMA}


class AMLResult(BaseModel):
    has_risk: StrictBool
    risk_tier: str
    risk_label: str
    reason: str

    @field_validator("risk_tier")
    @classmethod
    def _known_tier(cls, value: str) -> str:
        if value not in AML_TIER_LABELS.values():
            raise ValueError(f"unknown AML tier {value!r}")
        return value


def _strict_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ParseError(f"{name} 不是整數")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ParseError(f"{name} 不是整數")


def parse_score_result(text: str) -> ScoreResult:
    data = extract_json_object(text)
    raw_subs = data.get("細項評分")
    if not isinstance(raw_subs, dict):
        raise ParseError("缺少細項評分")
    label = data.get("風險等級")
    comment = data.get("評語")
    if not isinstance(comment, str):
        raise ParseError("評語格式錯誤")
    try:
        return ScoreResult(
            total_score=_strict_int(data.get("總分"), "總分"),
            risk_tier=SCORE_TIER_LABELS.get(label, str(label)),
            risk_label=str(label),
            comment=comment,
            sub_scores={
                name: _strict_int(raw_subs.get(name), name) for name in SUB_SCORE_MAXIMA
            },
        )
    except ValidationError as exc:
        raise ParseError(f"AI回應欄位不符: {exc.errors()[0]['msg']}")


def parse_aml_result(text: str) -> AMLResult:
    data = extract_json_object(text)
    label = data.get("riskLevel")
    reason = data.get("reason")
    if not isinstance(reason, str):
        raise ParseError("reason 格式錯誤")
    try:
        return AMLResult(
            has_risk=data.get("hasRisk"),
            risk_tier=AML_TIER_LABELS.get(label, str(label)),
            risk_label=str(label),
            reason=reason,
        )
    except ValidationError as exc:
        raise ParseError(f"AI回應欄位不符: {exc.errors()[0]['msg']}")


def clear_aml_result(reason: str) -> AMLResult:
    return AMLResult(has_risk=False, risk_tier="clear", risk_label="安全", reason=reason)


def score_band(total_score: int) -> str:
    if total_score >= 81:
        return "low"
    if total_score >= 51:
        return "medium"
    return "high"
