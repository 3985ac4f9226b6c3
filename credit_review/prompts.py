import json
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .aggregates import AggregateSnapshot
from .records import Company


DEFAULT_INDUSTRY = "一般產業"
NOT_COMPUTABLE = "N/A"
MAX_AML_ARTICLES = 5

NEWS_RISK_KEYWORDS = (
    "洗錢",
    "非法交易",
    "詐欺",
    "金融犯罪",
    "money laundering",
    "fraud",
)

SCORE_SYSTEM_PROMPT = "你是一位專業的授信審核專員，請根據以下財務數據進行評分和分析："
AML_SYSTEM_PROMPT = "你是一位專業的反洗錢（AML）分析師。"

SCORE_OUTPUT_SHAPE = """{
  "總分": 0-100的整數,
  "風險等級": "低風險" 或 "中風險" 或 "高風險",
  "評語": "一句話的專業評語（30字以內，說明主要優勢或風險）",
  "細項評分": {
    "償債年限": 0-20的整數,
    "EBITDA穩定性": 0-20的整數,
    "現金流償債能力": 0-20的整數,
    "利息保障倍數": 0-10的整數,
    "資本支出效率": 0-10的整數,
    "流動比率": 0-5的整數,
    "營收成長穩定性": 0-5的整數,
    "短期債務結構": 0-10的整數
  }
}"""

SCORE_RUBRIC = """評分標準（請嚴格參考）：
1. 償債年限 (20分)：越低越好
2. EBITDA穩定性 (20分)：波動越小越好
3. 現金流償債能力 (20分)：越高越好
4. 利息保障倍數 (10分)：越高越好
5. 資本支出效率 (10分)：適中為佳
6. 流動比率 (5分)：>1為佳
7. 營收成長穩定性 (5分)：波動越小越好
8. 短期債務結構 (10分)：佔比越低越好

總分 = 所有細項評分之和。"""

INDUSTRY_GUIDANCE = """**重要：請根據該公司的產業別特性進行評分**
- 電信業：資本密集、現金流穩定、EBITDA高
- 半導體業：資本支出高、營收波動大、技術密集
- 電子製造業：毛利低、週轉快、營運資金需求高
- 金融保險業：槓桿高、流動性要求嚴格、利息收入為主
- 塑膠化工業：景氣循環明顯、原物料成本敏感

請綜合考慮：
1. 產業特性（根據「產業別」欄位調整評分標準）
2. 償債能力（負債/EBITDA、利息保障倍數、流動比率）
3. 現金流健康度（FCF償債能力、資本支出效率）
4. 整體財務結構與產業平均水準比較"""

AML_RISK_TOPICS = """- 洗錢（Money Laundering）
- 非法交易（Illegal Transactions）
- 詐欺（Fraud）
- 金融犯罪（Financial Crime）
- 制裁（Sanctions）
- 貪污（Corruption）"""

AML_CLEAR_REASON = "該客戶未涉及 AML 等負面新聞"

AML_OUTPUT_SHAPE = """{
  "hasRisk": true 或 false,
  "riskLevel": "高風險" 或 "安全",
  "reason": "若有風險，請說明具體原因；若無風險，則填寫：%s"
}""" % AML_CLEAR_REASON


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fixed(value: Optional[float], suffix: str = "") -> str:
    if value is None:
        return NOT_COMPUTABLE
    return f"{value:.2f}{suffix}"


def build_score_payload(company: Company, snapshot: AggregateSnapshot) -> Dict[str, Any]:
    avg = snapshot.averages
    ratios = snapshot.ratios
    return {
        "公司名稱": company.name,
        "股票代號": company.id,
        "產業別": company.industry or DEFAULT_INDUSTRY,
        "分析期間": snapshot.period,
        "平均財務指標": {
            "短期借款": round_half_up(avg["STD"]),
            "一年內到期長期負債": round_half_up(avg["CPLTD"]),
            "長期負債": round_half_up(avg["LTD"]),
            "EBITDA": round_half_up(avg["EBITDA"]),
            "營收淨額": round_half_up(avg["Sales"]),
            "自由現金流量": round_half_up(avg["FCF"]),
            "利息保障倍數": _fixed(avg["TIE"]),
            "流動比率": _fixed(avg["CR"]),
            "資本支出": round_half_up(avg["CapEx"]),
            "總資產": round_half_up(avg["Assets"]),
        },
        "計算指標": {
            "償債年限": _fixed(ratios.get("debt_service_years")),
            "現金流償債能力": _fixed(ratios.get("cash_flow_coverage_pct"), "%"),
            "短期債務結構": _fixed(ratios.get("short_term_debt_ratio_pct"), "%"),
            "資本支出效率": _fixed(ratios.get("capex_efficiency_pct"), "%"),
        },
    }


def build_score_prompt(payload: Mapping[str, Any]) -> str:
    return (
        f"{SCORE_SYSTEM_PROMPT}\n\n"
        f"{json.dumps(payload, ensure_ascii=False, indent=2)}\n\n"
        "請以JSON格式回傳評估結果（僅回傳JSON，不要其他文字）：\n"
        f"{SCORE_OUTPUT_SHAPE}\n\n"
        f"{SCORE_RUBRIC}\n\n"
        f"{INDUSTRY_GUIDANCE}"
    )


def build_news_query(company_name: str) -> str:
    return f"{company_name} ({' OR '.join(NEWS_RISK_KEYWORDS)})"


def format_articles(articles: Sequence[Mapping[str, Any]]) -> str:
    lines: List[str] = []
    for index, article in enumerate(articles[:MAX_AML_ARTICLES], start=1):
        title = article.get("title") or ""
        description = article.get("description") or ""
        lines.append(f"{index}. {title}\n   {description}")
    return "\n\n".join(lines)


def build_aml_prompt(company_name: str, articles: Sequence[Mapping[str, Any]]) -> str:
    return (
        f"{AML_SYSTEM_PROMPT}以下是關於「{company_name}」的最新新聞：\n\n"
        f"{format_articles(articles)}\n\n"
        "請分析這些新聞是否涉及以下 AML 風險：\n"
        f"{AML_RISK_TOPICS}\n\n"
        "請以JSON格式回傳評估結果（僅回傳JSON，不要其他文字）：\n"
        f"{AML_OUTPUT_SHAPE}"
    )
