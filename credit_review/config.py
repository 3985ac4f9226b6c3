import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv


DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-flash-latest:generateContent"
)
DEFAULT_NEWS_API_URL = "https://gnews.io/api/v4/search"


@dataclass
class AppConfig:
    gemini_api_key: str
    gemini_api_url: str
    news_api_key: str
    news_api_url: str
    http_timeout_seconds: int
    data_dir: Path
    companies_file: str
    financials_file: str
    output_dir: Path
    debug: bool

    @property
    def companies_path(self) -> Path:
        return self.data_dir / self.companies_file

    @property
    def financials_path(self) -> Path:
        return self.data_dir / self.financials_file


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config() -> AppConfig:
    load_dotenv()
    timeout = max(1, _int_env("HTTP_TIMEOUT_SECONDS", 60))

    return AppConfig(
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_api_url=os.getenv("GEMINI_API_URL", DEFAULT_GEMINI_API_URL).strip(),
        news_api_key=os.getenv("NEWS_API_KEY", "").strip(),
        news_api_url=os.getenv("NEWS_API_URL", DEFAULT_NEWS_API_URL).strip(),
        http_timeout_seconds=timeout,
        data_dir=Path(os.getenv("DATA_DIR", "data")),
        companies_file=os.getenv("COMPANIES_FILE", "companies.json"),
        financials_file=os.getenv("FINANCIALS_FILE", "授信標準.xlsx"),
        output_dir=Path(os.getenv("OUTPUT_DIR", "outputs")),
        debug=os.getenv("DEBUG", "false").lower() == "true",
    )
