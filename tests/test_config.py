from pathlib import Path

import pytest

from credit_review.config import DEFAULT_GEMINI_API_URL, load_config
from credit_review.credentials import CredentialProvider, EnvCredentials, MemoryCredentials


def test_load_config_defaults(monkeypatch):
    for name in ["GEMINI_API_KEY", "GEMINI_API_URL", "NEWS_API_KEY", "HTTP_TIMEOUT_SECONDS", "DATA_DIR"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("credit_review.config.load_dotenv", lambda: None)
    config = load_config()
    assert config.gemini_api_key == ""
    assert config.gemini_api_url == DEFAULT_GEMINI_API_URL
    assert config.http_timeout_seconds == 60
    assert config.companies_path == Path("data") / "companies.json"


def test_invalid_timeout_falls_back(monkeypatch):
    monkeypatch.setattr("credit_review.config.load_dotenv", lambda: None)
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "soon")
    assert load_config().http_timeout_seconds == 60


def test_memory_credentials_override_env(monkeypatch):
    monkeypatch.setattr("credit_review.config.load_dotenv", lambda: None)
    monkeypatch.setenv("GEMINI_API_KEY", "env-gemini")
    monkeypatch.delenv("NEWS_API_KEY", raising=False)
    creds = MemoryCredentials(fallback=EnvCredentials(load_config()))
    assert creds.status() == {"gemini_configured": True, "news_configured": False}
    creds.update(news_api_key=" news ")
    assert creds.news_api_key() == "news"
    creds.update(gemini_api_key="")
    assert creds.status() == {"gemini_configured": False, "news_configured": True}


def test_credential_provider_requires_both_keys():
    with pytest.raises(TypeError):
        CredentialProvider()

    class GeminiOnly(CredentialProvider):
        def gemini_api_key(self):
            return "key"

    with pytest.raises(TypeError):
        GeminiOnly()
