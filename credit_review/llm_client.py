from typing import Any, Callable, Dict, Optional

import requests

from .errors import ParseError, TransportError


class LLMClient:
    """Gemini generateContent client returning the reply's raw text."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: int = 60,
        post_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = (api_url or "").strip().rstrip("/")
        self.timeout = timeout
        self._post = post_fn or requests.post

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def generate_text(
        self,
        prompt: str,
        temperature: float = 0.3,
        max_output_tokens: int = 8192,
    ) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }
        data = self._post_json(payload)
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise ParseError("AI回應缺少文字內容")

    def _post_json(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self._post(
                self.api_url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"AI API連線失敗: {exc}")
        if not 200 <= resp.status_code < 300:
            raise TransportError(f"API錯誤: {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            raise ParseError("AI API回應不是JSON")
