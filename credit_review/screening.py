from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .aggregates import build_snapshot
from .errors import CreditReviewError, NoCompanyDataError
from .prompts import (
    AML_CLEAR_REASON,
    build_aml_prompt,
    build_news_query,
    build_score_payload,
    build_score_prompt,
    MAX_AML_ARTICLES,
)
from .records import Company, FinancialRecord
from .response_parser import clear_aml_result, parse_aml_result, parse_score_result, score_band
from .run_logger import log_step


SCORE_TEMPERATURE = 0.3
SCORE_MAX_TOKENS = 8192
AML_TEMPERATURE = 0.2
AML_MAX_TOKENS = 1024

GEMINI_NOT_CONFIGURED = "請先點擊右上角設定按鈕並輸入 Gemini API Key"
NEWS_NOT_CONFIGURED = "請點擊右上角設定按鈕輸入 GNews API Key 以啟用 AML 檢測。"


def _outcome(status: str, generation: int, **extra: Any) -> Dict[str, Any]:
    outcome = {"status": status, "generation": generation}
    outcome.update(extra)
    return outcome


def _configured(client) -> bool:
    return client is not None and getattr(client, "enabled", True)


def run_credit_score(
    company: Company,
    records: Sequence[FinancialRecord],
    llm,
    generation: int = 0,
    output_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Score one company's averaged financials; never raises for panel errors."""
    if not _configured(llm):
        return _outcome("not_configured", generation, message=GEMINI_NOT_CONFIGURED)
    try:
        if not records:
            raise NoCompanyDataError(company.id)
        snapshot = build_snapshot(records)
        payload = build_score_payload(company, snapshot)
        log_step(output_dir, "score_prompt", {"company_id": company.id, "payload": payload})
        text = llm.generate_text(
            build_score_prompt(payload),
            temperature=SCORE_TEMPERATURE,
            max_output_tokens=SCORE_MAX_TOKENS,
        )
        result = parse_score_result(text)
    except CreditReviewError as exc:
        log_step(output_dir, "score_failed", {"company_id": company.id, "error": str(exc)})
        return _outcome("failed", generation, message=f"AI評分暫時無法使用: {exc}")

    data = result.model_dump()
    data["band"] = score_band(result.total_score)
    log_step(output_dir, "score_result", {"company_id": company.id, "result": data})
    return _outcome("ok", generation, result=data, inputs=payload)


def run_aml_check(
    company_name: str,
    news_client,
    llm,
    generation: int = 0,
    output_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Search adverse media for a company and classify it with the model."""
    if not _configured(news_client):
        return _outcome("not_configured", generation, message=NEWS_NOT_CONFIGURED)
    try:
        articles = news_client.search(build_news_query(company_name))
        log_step(
            output_dir,
            "aml_news",
            {"company": company_name, "hits": len(articles)},
        )
        if not articles:
            result = clear_aml_result(AML_CLEAR_REASON)
        else:
            if not _configured(llm):
                return _outcome("not_configured", generation, message=GEMINI_NOT_CONFIGURED)
            text = llm.generate_text(
                build_aml_prompt(company_name, articles),
                temperature=AML_TEMPERATURE,
                max_output_tokens=AML_MAX_TOKENS,
            )
            result = parse_aml_result(text)
    except CreditReviewError as exc:
        log_step(output_dir, "aml_failed", {"company": company_name, "error": str(exc)})
        return _outcome("failed", generation, message=f"無法完成 AML 檢測: {exc}")

    data = result.model_dump()
    log_step(output_dir, "aml_result", {"company": company_name, "result": data})
    return _outcome(
        "ok",
        generation,
        result=data,
        articles=[
            {"title": a.get("title"), "description": a.get("description")}
            for a in articles[:MAX_AML_ARTICLES]
        ],
    )
