"""Shared pytest fixtures and test doubles for Writing Assistant tests."""

import asyncio
from typing import Any, List, Optional

import pytest

from writing_assistant.ai_service import AIService
from writing_assistant.composer import ComposerController
from writing_assistant.config import AppConfig, ComposerConfig, StorageConfig, reset_config, set_config
from writing_assistant.document import DocumentContextProvider
from writing_assistant.models import (
    BrainstormRequest,
    BrainstormResponse,
    TokenUsage,
    WebSearchRequest,
    WebSearchResponse,
    WebSearchResult,
)
from writing_assistant.storage import MemoryStorage
from writing_assistant.store import NoteStore


class FakeAIService(AIService):
    """
    Scripted AI boundary.

    Set ``bullets`` / ``results`` for success, or ``brainstorm_error`` /
    ``search_error`` to raise. When ``gate`` is an ``asyncio.Event`` the calls
    block on it after signalling ``started``, so tests control completion order.
    """

    def __init__(self) -> None:
        self.bullets: List[str] = ["Expand: one", "Alternative: two"]
        self.results: List[WebSearchResult] = [
            WebSearchResult(title="Result", url="https://example.edu/result", description="A source."),
        ]
        self.brainstorm_error: Optional[Exception] = None
        self.search_error: Optional[Exception] = None
        self.brainstorm_calls: List[BrainstormRequest] = []
        self.search_calls: List[WebSearchRequest] = []
        self.gate: Optional[asyncio.Event] = None
        self.started: Optional[asyncio.Event] = None

    async def _wait(self) -> None:
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()

    async def brainstorm(self, request: BrainstormRequest) -> BrainstormResponse:
        self.brainstorm_calls.append(request)
        await self._wait()
        if self.brainstorm_error is not None:
            raise self.brainstorm_error
        return BrainstormResponse(bullet_points=list(self.bullets))

    async def web_search(self, request: WebSearchRequest) -> WebSearchResponse:
        self.search_calls.append(request)
        await self._wait()
        if self.search_error is not None:
            raise self.search_error
        return WebSearchResponse(web_results=list(self.results))


class FakeLLMClient:
    """Stands in for ``LLMClient``: replays queued responses, records calls."""

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.responses: List[Any] = list(responses or [])
        self.calls: List[dict] = []

    async def complete_async(self, prompt: str, system_prompt: Optional[str] = None, **kwargs):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, **kwargs})
        if not self.responses:
            raise RuntimeError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response, TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15)


@pytest.fixture(autouse=True)
def test_config():
    """Install an offline configuration for every test and drop it afterwards."""
    cfg = AppConfig(
        composer=ComposerConfig(ai_backend="canned"),
        storage=StorageConfig(backend="memory"),
    )
    set_config(cfg)
    yield cfg
    reset_config()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return NoteStore(storage)


@pytest.fixture
def document(storage):
    return DocumentContextProvider(storage)


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def composer(store, fake_ai, document):
    return ComposerController(store, fake_ai, document)
