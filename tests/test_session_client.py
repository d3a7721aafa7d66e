from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from chatpanel.core.errors import SessionError
from chatpanel.infrastructure.session import SessionClient

ENDPOINT = "https://session.test/api/create-session"


def _client(handler) -> SessionClient:
    transport = httpx.MockTransport(handler)
    return SessionClient(ENDPOINT, http_client=httpx.AsyncClient(transport=transport))


def test_create_client_secret_posts_workflow():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"client_secret": "ek_123"})

    secret = asyncio.run(_client(handler).create_client_secret("wf_demo"))

    assert secret == "ek_123"
    assert captured["url"] == ENDPOINT
    assert captured["body"] == {
        "workflow": {"id": "wf_demo"},
        "chatkit_configuration": {"file_upload": {"enabled": True}},
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={}),
        httpx.Response(200, json={"client_secret": ""}),
        httpx.Response(200, text=""),
        httpx.Response(201, text="created"),
    ],
)
def test_success_without_secret_fails(response):
    client = _client(lambda _: response)
    with pytest.raises(SessionError, match="Missing client secret in response"):
        asyncio.run(client.create_client_secret("wf_demo"))


def test_error_payload_message_is_extracted():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"details": {"error": {"message": "Rate limit reached"}}})

    with pytest.raises(SessionError, match="Rate limit reached"):
        asyncio.run(_client(handler).create_client_secret("wf_demo"))


def test_non_json_error_falls_back_to_reason_phrase():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>upstream down</html>")

    with pytest.raises(SessionError, match="Bad Gateway"):
        asyncio.run(_client(handler).create_client_secret("wf_demo"))


def test_non_object_error_body_falls_back_to_reason_phrase():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json=["boom"])

    with pytest.raises(SessionError, match="Internal Server Error"):
        asyncio.run(_client(handler).create_client_secret("wf_demo"))
