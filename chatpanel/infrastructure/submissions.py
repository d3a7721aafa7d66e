"""Client for the quiz and survey submission endpoints."""
from __future__ import annotations

from typing import Any

import httpx

from chatpanel.core.errors import SubmissionError

QUIZ_PATH = "/api/quiz/submit"
SURVEY_PATH = "/api/survey/submit"


class SubmissionClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(f"{self._base_url}{path}", json=body)
        if not response.is_success:
            raise SubmissionError(path, response.status_code)
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def submit_quiz(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._post(QUIZ_PATH, body)

    async def submit_survey(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._post(SURVEY_PATH, body)

    async def aclose(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            await self._client.aclose()


__all__ = ["QUIZ_PATH", "SURVEY_PATH", "SubmissionClient"]
