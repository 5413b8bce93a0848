"""Shared test fixtures: an in-process app wired to a fake inference API."""

from __future__ import annotations

import json
from contextlib import ExitStack
from typing import AsyncIterator, Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from hf_proxy.app import create_app
from hf_proxy.shared.config import AppConfig

TEST_TOKEN = "hf_test_token_123456"
TEST_BASE_URL = "https://inference.test/models"


class FakeUpstream:
    """Records every request and answers with ``responder``."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda _request: httpx.Response(200, json=[{"generated_text": "Hello there"}])
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


async def byte_chunks(chunks: List[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def streaming_response(chunks: List[bytes], status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=byte_chunks(chunks))


def sse_data(text: str) -> List[str]:
    """Split an SSE body into the payloads of its ``data:`` events."""
    return [
        block[len("data: "):]
        for block in text.split("\n\n")
        if block.startswith("data: ")
    ]


def make_config(**huggingface) -> AppConfig:
    settings = {"token": TEST_TOKEN, "base_url": TEST_BASE_URL}
    settings.update(huggingface)
    return AppConfig(huggingface=settings)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def client_factory(upstream):
    """Build a started TestClient for a given config, closed at teardown."""
    with ExitStack() as stack:
        def _factory(config: AppConfig | None = None, **client_kwargs) -> TestClient:
            app = create_app(config or make_config(), transport=httpx.MockTransport(upstream))
            return stack.enter_context(TestClient(app, **client_kwargs))

        yield _factory


@pytest.fixture()
def api_client(client_factory) -> TestClient:
    return client_factory()
