import json

import pytest

from credit_review.errors import ParseError
from credit_review.response_parser import (
    extract_json_object,
    parse_aml_result,
    parse_score_result,
    score_band,
)
from tests.helpers.responses import SUB_SCORES, aml_reply, score_reply


def test_extract_json_object_from_surrounding_text():
    assert extract_json_object('prefix {"a":1} suffix') == {"a": 1}


def test_extract_json_object_is_greedy():
    assert extract_json_object('x {"a": {"b": 2}} y') == {"a": {"b": 2}}


@pytest.mark.parametrize("text", ["no braces here", "", "{not json}", "} backwards {"])
def test_extract_json_object_failures(text):
    with pytest.raises(ParseError):
        extract_json_object(text)


def test_parse_score_result_scenario_d():
    result = parse_score_result(score_reply(total=85))
    assert result.total_score == 85
    assert result.risk_tier == "low"
    assert result.risk_label == "低風險"
    assert result.sub_scores == SUB_SCORES
    assert list(result.sub_scores) == list(SUB_SCORES)


def test_parse_score_result_accepts_integral_floats():
    result = parse_score_result(score_reply(total=70.0, level="中風險"))
    assert result.total_score == 70
    assert result.risk_tier == "medium"


@pytest.mark.parametrize(
    "overrides",
    [
        {"總分": 101},
        {"總分": "85"},
        {"總分": True},
        {"風險等級": "極低風險"},
        {"評語": None},
        {"細項評分": {"償債年限": 10}},
        {"細項評分": dict(SUB_SCORES, 流動比率=6)},
        {"細項評分": dict(SUB_SCORES, 償債年限=-1)},
        {"細項評分": []},
    ],
)
def test_parse_score_result_rejects_bad_shapes(overrides):
    with pytest.raises(ParseError):
        parse_score_result(score_reply(**overrides))


def test_parse_aml_result():
    result = parse_aml_result("```json\n" + aml_reply(True, "高風險", "涉及詐欺調查") + "\n```")
    assert result.has_risk is True
    assert result.risk_tier == "flagged"
    assert result.reason == "涉及詐欺調查"


@pytest.mark.parametrize(
    "body",
    [
        {"hasRisk": "false", "riskLevel": "安全", "reason": "ok"},
        {"hasRisk": False, "riskLevel": "低", "reason": "ok"},
        {"hasRisk": False, "riskLevel": "安全"},
    ],
)
def test_parse_aml_result_rejects_bad_shapes(body):
    with pytest.raises(ParseError):
        parse_aml_result(json.dumps(body, ensure_ascii=False))


@pytest.mark.parametrize("total, band", [(100, "low"), (81, "low"), (80, "medium"), (51, "medium"), (50, "high"), (0, "high")])
def test_score_band(total, band):
    assert score_band(total) == band
