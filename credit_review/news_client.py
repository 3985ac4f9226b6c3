from typing import Any, Callable, Dict, List, Optional

import requests

from .errors import TransportError


class NewsClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://gnews.io/api/v4/search",
        timeout: int = 30,
        lang: str = "zh",
        max_results: int = 10,
        get_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.lang = lang
        self.max_results = max_results
        self._get = get_fn or requests.get

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def search(self, query: str) -> List[Dict[str, Any]]:
        params = {
            "q": query,
            "lang": self.lang,
            "max": self.max_results,
            "token": self.api_key,
        }
        try:
            resp = self._get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"News API連線失敗: {exc}")
        if not 200 <= resp.status_code < 300:
            raise TransportError(f"News API錯誤: {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError:
            raise TransportError("News API回應不是JSON")
        articles = data.get("articles") if isinstance(data, dict) else None
        return [a for a in (articles or []) if isinstance(a, dict)]
