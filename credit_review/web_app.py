import time
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, field_validator

from .charts import build_charts
from .config import AppConfig, load_config
from .credentials import CredentialProvider, EnvCredentials, MemoryCredentials
from .directory import CompanyDirectory
from .errors import CompanyNotFoundError, DataLoadError, NoCompanyDataError
from .llm_client import LLMClient
from .loader import Dataset, load_dataset
from .news_client import NewsClient
from .records import filter_company_records, identifier_text
from .run_logger import log_step
from .screening import run_aml_check, run_credit_score
from .session import SessionState, SessionStore, is_current, select_company


BASE_DIR = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"
SUGGESTION_LIMIT = 20


class SelectRequest(BaseModel):
    company_id: str

    @field_validator("company_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return identifier_text(value)
        return value


class PanelRequest(BaseModel):
    generation: int


class SettingsRequest(BaseModel):
    gemini_api_key: Optional[str] = None
    news_api_key: Optional[str] = None


def create_app(
    config: Optional[AppConfig] = None,
    dataset: Optional[Dataset] = None,
    credentials: Optional[CredentialProvider] = None,
    llm_factory: Optional[Callable[[str], Any]] = None,
    news_factory: Optional[Callable[[str], Any]] = None,
) -> FastAPI:
    config = config or load_config()
    app = FastAPI(title="Credit Review")

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    if credentials is None:
        credentials = MemoryCredentials(fallback=EnvCredentials(config))

    if llm_factory is None:
        def llm_factory(api_key: str):
            return LLMClient(
                api_key=api_key,
                api_url=config.gemini_api_url,
                timeout=config.http_timeout_seconds,
            )

    if news_factory is None:
        def news_factory(api_key: str):
            return NewsClient(
                api_key=api_key,
                base_url=config.news_api_url,
                timeout=config.http_timeout_seconds,
            )

    load_error: Optional[str] = None
    if dataset is None:
        try:
            dataset = load_dataset(config)
        except DataLoadError as exc:
            load_error = str(exc)
            dataset = Dataset(companies=(), records=())

    directory = CompanyDirectory(dataset.companies)
    store = SessionStore()
    output_dir = _new_output_dir(config)
    log_step(
        output_dir,
        "load",
        {
            "companies": len(directory),
            "records": len(dataset.records),
            "sheet": dataset.sheet_name,
            "error": load_error,
        },
    )

    app.state.session_store = store
    app.state.directory = directory
    app.state.credentials = credentials

    def _require_data() -> None:
        if load_error:
            raise HTTPException(status_code=503, detail=f"無法載入資料: {load_error}")

    def _client(factory: Callable[[str], Any], api_key: str):
        return factory(api_key) if api_key else None

    def _current(generation: int) -> Optional[SessionState]:
        state = store.state
        return state if is_current(state, generation) else None

    def _stale(generation: int) -> JSONResponse:
        return JSONResponse({"status": "stale", "generation": generation})

    def _finish(outcome: Dict[str, Any]) -> JSONResponse:
        # A newer selection may have landed while the request was in flight.
        if not is_current(store.state, outcome["generation"]):
            return _stale(outcome["generation"])
        return JSONResponse(outcome)

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        first = directory.first()
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "load_error": load_error,
                "default_company_id": first.id if first else "",
                "credentials": credentials.status(),
            },
        )

    @app.get("/api/companies")
    def list_companies(q: str = ""):
        _require_data()
        matches = directory.search(q, limit=SUGGESTION_LIMIT) if q.strip() else list(directory)
        return JSONResponse({"companies": [c.to_dict() for c in matches]})

    @app.post("/api/select")
    def select(payload: SelectRequest):
        _require_data()
        try:
            company = directory.get(payload.company_id)
        except CompanyNotFoundError:
            raise HTTPException(status_code=404, detail="Company not found")
        try:
            records = filter_company_records(dataset.records, company.id)
        except NoCompanyDataError as exc:
            raise HTTPException(status_code=404, detail=str(exc))

        charts = build_charts(records)
        state = store.update(lambda s: select_company(s, company, records, charts))
        return JSONResponse(
            {
                "company": company.to_dict(),
                "title": f"{company.name} - 財務比率分析",
                "generation": state.generation,
                "years": [r.year for r in records],
                "charts": charts,
            }
        )

    @app.post("/api/score")
    def score(payload: PanelRequest):
        _require_data()
        state = _current(payload.generation)
        if state is None:
            return _stale(payload.generation)
        llm = _client(llm_factory, credentials.gemini_api_key())
        outcome = run_credit_score(
            state.company,
            state.records,
            llm,
            generation=state.generation,
            output_dir=output_dir,
        )
        return _finish(outcome)

    @app.post("/api/aml")
    def aml(payload: PanelRequest):
        _require_data()
        state = _current(payload.generation)
        if state is None:
            return _stale(payload.generation)
        news = _client(news_factory, credentials.news_api_key())
        llm = _client(llm_factory, credentials.gemini_api_key())
        outcome = run_aml_check(
            state.company.name,
            news,
            llm,
            generation=state.generation,
            output_dir=output_dir,
        )
        return _finish(outcome)

    @app.get("/api/settings")
    def get_settings():
        return JSONResponse(credentials.status())

    @app.post("/api/settings")
    def save_settings(payload: SettingsRequest):
        if not isinstance(credentials, MemoryCredentials):
            raise HTTPException(status_code=400, detail="Credentials are read-only")
        credentials.update(
            gemini_api_key=payload.gemini_api_key,
            news_api_key=payload.news_api_key,
        )
        return JSONResponse(credentials.status())

    return app


def _new_output_dir(config: AppConfig) -> Path:
    return config.output_dir / f"session_{time.time_ns()}_{uuid.uuid4().hex[:8]}"
