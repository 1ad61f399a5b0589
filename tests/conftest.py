"""Shared test fixtures for ddgproxy.

Upstream DuckDuckGo is replaced by ``FakeUpstream`` behind
``httpx.MockTransport``, so no test touches the network.
"""

from __future__ import annotations

import dataclasses
import json

import httpx
import pytest

from ddgproxy.core.app import create_app
from ddgproxy.core.settings import load_settings

HI_THERE = [
    b'data: {"message":"Hi"}\n\n',
    b'data: {"message":" there"}\n\n',
    b"data: [DONE]\n\n",
]


class FakeUpstream:
    """Scripted status + chat endpoints."""

    def __init__(self):
        self.token = "vqd-token-1"
        self.status_code = 200
        self.chat_status = 200
        self.chat_chunks = list(HI_THERE)
        self.chat_exc = None
        self.requests = []

    @property
    def chat_requests(self):
        return [req for req in self.requests if req.url.path.endswith("/chat")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/status"):
            headers = {"x-vqd-4": self.token} if self.token else {}
            return httpx.Response(self.status_code, headers=headers)
        if self.chat_exc is not None:
            raise self.chat_exc
        return httpx.Response(
            self.chat_status,
            headers={"Content-Type": "text/event-stream"},
            content=iter(self.chat_chunks),
        )


def chat_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def parse_sse(text: str) -> list:
    """Split an SSE body into decoded ``data:`` payloads."""
    frames = []
    for record in text.split("\n\n"):
        if record.startswith("data: "):
            frames.append(json.loads(record[len("data: "):]))
    return frames


@pytest.fixture()
def fake_upstream():
    return FakeUpstream()


@pytest.fixture()
def make_app(fake_upstream, tmp_path):
    """Build an app wired to the fake upstream; overrides go to Settings."""

    def _make(**overrides):
        fields = {
            "api_keys": (),
            "config_path": str(tmp_path / "config.json"),
            "log_to_file": False,
            **overrides,
        }
        settings = dataclasses.replace(load_settings(), **fields)
        http_client = httpx.Client(transport=httpx.MockTransport(fake_upstream.handler))
        return create_app(settings, http_client=http_client)

    return _make


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    return app.test_client()
