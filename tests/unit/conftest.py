"""Shared fixtures for unit tests.

Provides a fake aiohttp session (so no test touches the network) and
Config instances with and without Flowise credentials.
"""

import pytest

from src.utils.config import Config


class FakeStream:
    """Async-iterable stand-in for aiohttp's response.content."""

    def __init__(self, chunks):
        self._chunks = list(chunks)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self._chunks:
            yield chunk


class FakeResponse:
    def __init__(self, status=200, content_type="application/json", body="", chunks=()):
        self.status = status
        self.content_type = content_type
        self._body = body
        self.content = FakeStream(chunks)

    async def text(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records session construction and POST calls; returns a canned response or raises."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.session_kwargs = None
        self.posts = []

    def __call__(self, **kwargs):
        self.session_kwargs = kwargs
        return self

    def post(self, url, json=None, headers=None):
        self.posts.append({"url": url, "json": json, "headers": headers})
        if self.error is not None:
            raise self.error
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def flowise_settings(monkeypatch):
    """Config with every Flowise setting present."""
    monkeypatch.setenv("FLOWISE_API_URL", "https://flowise.example.com")
    monkeypatch.setenv("FLOWISE_API_KEY", "test-key")
    monkeypatch.setenv("FLOWISE_RECIPE_FLOW_ID", "recipe-flow")
    monkeypatch.setenv("FLOWISE_MOTIVATION_FLOW_ID", "motivation-flow")
    monkeypatch.setenv("ENABLE_STREAMING", "true")
    for name in ("REQUEST_TIMEOUT_SECONDS", "TEMPERATURE", "MAX_TOKENS"):
        monkeypatch.delenv(name, raising=False)
    return Config()


@pytest.fixture
def unconfigured_settings(monkeypatch):
    """Config with no Flowise credentials (mock path)."""
    for name in ("FLOWISE_API_URL", "FLOWISE_API_KEY", "FLOWISE_RECIPE_FLOW_ID", "FLOWISE_MOTIVATION_FLOW_ID"):
        monkeypatch.delenv(name, raising=False)
    return Config()
