"""Shared pytest fixtures for PromptGate tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from promptgate.api.main import create_app
from promptgate.core.config import PromptGateConfig


class FakeProvider:
    """Programmable stand-in for the inference and moderation providers.

    Each endpoint answers with a fresh ``httpx.Response`` built from a
    ``(status_code, response_kwargs)`` pair, or raises the configured
    exception.  Every request is recorded in ``calls`` so tests can assert
    what was sent upstream.
    """

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.completion: tuple[int, dict] = (
            200,
            {"json": {"id": "cmpl-1", "created": 1700000000, "choices": [{"text": "A"}, {"text": "B"}]}},
        )
        self.stream: tuple[int, dict] = (
            200,
            {
                "headers": {"content-type": "text/event-stream"},
                "content": b'data: {"choices":[{"text":"Hi"}]}\n\ndata: [DONE]\n\n',
            },
        )
        self.image: tuple[int, dict] = (200, {"json": {"data": [{"b64_json": "xyz"}], "id": "img-1"}})
        self.moderation: tuple[int, dict] | Exception = (
            200,
            {"json": {"results": [{"flagged": False}]}},
        )

    def calls_to(self, suffix: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.url.path.endswith(suffix)]

    @staticmethod
    def body_of(request: httpx.Request) -> dict:
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if path.endswith("/moderations"):
            if isinstance(self.moderation, Exception):
                raise self.moderation
            reply = self.moderation
        elif path.endswith("/images/generations"):
            reply = self.image
        elif path.endswith("/completions"):
            reply = self.stream if json.loads(request.content).get("stream") else self.completion
        else:
            reply = (404, {"text": "unknown endpoint"})
        status_code, kwargs = reply
        return httpx.Response(status_code, **kwargs)


@pytest.fixture
def test_config() -> PromptGateConfig:
    """Configuration with moderation disabled and no .env lookup."""
    return PromptGateConfig(
        ai_key="test-ai-key",
        moderation_key=None,
        _env_file=None,
    )


@pytest.fixture
def moderated_config() -> PromptGateConfig:
    """Configuration with moderation enabled."""
    return PromptGateConfig(
        ai_key="test-ai-key",
        moderation_key="test-moderation-key",
        _env_file=None,
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_client(
    provider: FakeProvider,
) -> Generator[Callable[..., TestClient], None, None]:
    """Factory building a TestClient around a fresh app.

    Server exceptions are not re-raised so the generic 500 handler can be
    observed.
    """
    clients: list[TestClient] = []

    def _make(cfg: PromptGateConfig) -> TestClient:
        app = create_app(cfg, transport=httpx.MockTransport(provider.handler))
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    try:
        yield _make
    finally:
        for client in clients:
            client.__exit__(None, None, None)


@pytest.fixture
def test_client(make_client, test_config: PromptGateConfig) -> TestClient:
    """TestClient with moderation disabled."""
    return make_client(test_config)


@pytest.fixture
def moderated_client(make_client, moderated_config: PromptGateConfig) -> TestClient:
    """TestClient with moderation enabled."""
    return make_client(moderated_config)
