import streamlit as st

from credit_review.charts import build_charts
from credit_review.config import load_config
from credit_review.directory import CompanyDirectory
from credit_review.errors import DataLoadError, NoCompanyDataError
from credit_review.llm_client import LLMClient
from credit_review.loader import load_dataset
from credit_review.news_client import NewsClient
from credit_review.records import filter_company_records
from credit_review.screening import run_aml_check, run_credit_score
from credit_review.session import SessionState, accept_outcome, select_company


st.set_page_config(page_title="授信審核儀表板", layout="wide")

st.title("授信審核儀表板")

config = load_config()


@st.cache_resource
def _dataset():
    return load_dataset(config)


try:
    dataset = _dataset()
except DataLoadError as exc:
    st.error(f"無法載入資料，請確認 {config.financials_file} 檔案存在且格式正確。({exc})")
    st.stop()

directory = CompanyDirectory(dataset.companies)
if "session" not in st.session_state:
    st.session_state.session = SessionState()

with st.sidebar:
    st.header("API 設定")
    gemini_key = st.text_input("Gemini API Key", value=config.gemini_api_key, type="password")
    news_key = st.text_input("GNews API Key", value=config.news_api_key, type="password")

companies = list(directory)
if not companies:
    st.warning("公司清單為空。")
    st.stop()

company = st.selectbox(
    "選擇公司",
    companies,
    format_func=lambda c: f"{c.id} {c.name}",
)

state = st.session_state.session
if state.company != company:
    try:
        records = filter_company_records(dataset.records, company.id)
    except NoCompanyDataError as exc:
        st.error(str(exc))
        st.stop()
    state = select_company(state, company, records, build_charts(records))
    st.session_state.session = state

st.subheader(f"{company.name} - 財務比率分析")

columns = st.columns(2)
for index, chart in enumerate(state.charts):
    with columns[index % 2]:
        st.markdown(f"**{chart['label']}**")
        data = {"Year": [str(y) for y in chart["labels"]], chart["label"]: chart["data"]}
        # Per-bar colours (negative FCF) are not supported by st.bar_chart.
        color = chart["border_color"] if isinstance(chart["border_color"], str) else None
        if chart["type"] == "bar":
            st.bar_chart(data, x="Year", y=chart["label"], color=color)
        else:
            st.line_chart(data, x="Year", y=chart["label"], color=color)
        st.caption(chart["average_text"])

llm = LLMClient(gemini_key, config.gemini_api_url, timeout=config.http_timeout_seconds) if gemini_key else None
news = NewsClient(news_key, config.news_api_url, timeout=config.http_timeout_seconds) if news_key else None

score_col, aml_col = st.columns(2)

with score_col:
    st.subheader("AI 信用評分")
    if st.button("執行評分"):
        with st.spinner("AI正在分析財務數據..."):
            outcome = run_credit_score(company, state.records, llm, generation=state.generation)
        if accept_outcome(st.session_state.session, outcome):
            if outcome["status"] == "ok":
                result = outcome["result"]
                st.metric("總分", result["total_score"], result["risk_label"])
                st.write(result["comment"])
                st.json(result["sub_scores"])
            elif outcome["status"] == "not_configured":
                st.warning(outcome["message"])
            else:
                st.error(outcome["message"])

with aml_col:
    st.subheader("AML 負面新聞檢測")
    if st.button("執行 AML 檢測"):
        with st.spinner("正在搜尋相關新聞並分析風險..."):
            outcome = run_aml_check(company.name, news, llm, generation=state.generation)
        if accept_outcome(st.session_state.session, outcome):
            if outcome["status"] == "ok":
                result = outcome["result"]
                if result["has_risk"]:
                    st.error(f"⚠️ 高風險警告：{result['reason']}")
                else:
                    st.success(f"✓ 通過 AML 檢測：{result['reason']}")
            elif outcome["status"] == "not_configured":
                st.warning(outcome["message"])
            else:
                st.error(outcome["message"])
