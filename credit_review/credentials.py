from abc import ABC, abstractmethod
from typing import Dict, Optional

from .config import AppConfig


class CredentialProvider(ABC):
    """Source of the two API keys; an empty string means not configured."""

    @abstractmethod
    def gemini_api_key(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def news_api_key(self) -> str:
        raise NotImplementedError

    def status(self) -> Dict[str, bool]:
        return {
            "gemini_configured": bool(self.gemini_api_key()),
            "news_configured": bool(self.news_api_key()),
        }


class EnvCredentials(CredentialProvider):
    def __init__(self, config: AppConfig) -> None:
        self._config = config

    def gemini_api_key(self) -> str:
        return self._config.gemini_api_key

    def news_api_key(self) -> str:
        return self._config.news_api_key


class MemoryCredentials(CredentialProvider):
    """Keys entered at runtime, falling back to another provider."""

    def __init__(self, fallback: Optional[CredentialProvider] = None) -> None:
        self._fallback = fallback
        self._gemini: Optional[str] = None
        self._news: Optional[str] = None

    def update(self, gemini_api_key: Optional[str] = None, news_api_key: Optional[str] = None) -> None:
        if gemini_api_key is not None:
            self._gemini = gemini_api_key.strip()
        if news_api_key is not None:
            self._news = news_api_key.strip()

    def gemini_api_key(self) -> str:
        if self._gemini is not None:
            return self._gemini
        return self._fallback.gemini_api_key() if self._fallback else ""

    def news_api_key(self) -> str:
        if self._news is not None:
            return self._news
        return self._fallback.news_api_key() if self._fallback else ""
