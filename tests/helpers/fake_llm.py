from typing import Any, Dict, List


class FakeLLM:
    def __init__(self, responses: List[str], enabled: bool = True) -> None:
        self._responses = list(responses)
        self.enabled = enabled
        self.prompts: List[str] = []
        self.calls: List[Dict[str, Any]] = []

    def generate_text(
        self,
        prompt: str,
        temperature: float = 0.3,
        max_output_tokens: int = 8192,
    ) -> str:
        if not self._responses:
            raise RuntimeError("FakeLLM has no more responses")
        self.prompts.append(prompt)
        self.calls.append({"temperature": temperature, "max_output_tokens": max_output_tokens})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeNewsClient:
    def __init__(self, articles=None, error=None, enabled: bool = True) -> None:
        self.articles = list(articles or [])
        self.error = error
        self.enabled = enabled
        self.queries: List[str] = []

    def search(self, query: str):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.articles)
