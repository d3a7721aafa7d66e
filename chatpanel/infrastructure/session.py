"""Client for the endpoint that mints widget session credentials."""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from chatpanel.core.errors import MISSING_SECRET_MESSAGE, SessionError, extract_error_detail
from chatpanel.core.schema import SessionRequest

log = logging.getLogger(__name__)


class SessionClient:
    """Posts workflow session requests and returns the ``client_secret``."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _parse_body(raw: str) -> dict[str, Any]:
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def create_client_secret(self, workflow_id: str) -> str:
        body = SessionRequest.for_workflow(workflow_id).model_dump()
        response = await self._client.post(self._endpoint, json=body)

        data = self._parse_body(response.text)
        if not response.is_success:
            detail = extract_error_detail(data, response.reason_phrase)
            log.warning("session request failed | status=%s detail=%s", response.status_code, detail)
            raise SessionError(detail)

        client_secret = data.get("client_secret")
        if not client_secret:
            raise SessionError(MISSING_SECRET_MESSAGE)
        return str(client_secret)

    async def aclose(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            await self._client.aclose()


__all__ = ["SessionClient"]
