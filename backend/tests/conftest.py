"""
Shared pytest fixtures for the agent tests.

The completion service, page extractor and product search API are replaced
with scripted fakes; nothing here touches the network.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi import FastAPI

from config import RuntimeConfig
from errors import LLMError, install_exception_handlers
from middleware.single_flight import SingleFlightMiddleware
from routers import agent
from routers.agent_orchestration import build_runtime
from services.product_search import ProductSearchClient

SEARCH_URL = "https://search.test/products/search"


class FakeCompletionClient:
    """Scripted stand-in for CompletionClient.

    Replies are consumed in order; an Exception instance in the queue is
    raised instead of returned. Every call's messages are recorded.
    """

    def __init__(self, replies: Optional[List[Any]] = None):
        self.replies = list(replies or [])
        self.calls: List[List[Any]] = []
        self.closed = False

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def complete(self, messages, model=None, temperature=None) -> str:
        self.calls.append(list(messages))
        if not self.replies:
            raise LLMError("No scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def ask(self, prompt: str, model=None) -> str:
        return await self.complete([{"role": "user", "content": prompt}], model=model)

    async def close(self) -> None:
        self.closed = True

    @property
    def prompts(self) -> List[str]:
        """Content of the last message of every call."""
        return [_content(call[-1]) for call in self.calls]


def _content(message: Any) -> str:
    if isinstance(message, dict):
        return message["content"]
    return message.content


class FakeExtractor:
    """Returns canned text per URL (None for unknown URLs)."""

    def __init__(self, pages: Optional[Dict[str, Optional[str]]] = None):
        self.pages = dict(pages or {})
        self.calls: List[tuple] = []

    async def extract(self, url: str, strategy: Optional[str] = None) -> Optional[str]:
        self.calls.append((url, strategy))
        return self.pages.get(url)


def products_transport(products=None, status_code: int = 200, body: Optional[str] = None, seen=None):
    """httpx.MockTransport answering every request with a products payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if body is not None:
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, text=json.dumps({"products": products or []}))

    return httpx.MockTransport(handler)


def make_config(**overrides) -> RuntimeConfig:
    values = {
        "openai_api_key": "test-key",
        "search_api_url": SEARCH_URL,
        "search_reply_mode": "recommend",
        "order_status_mode": "fixed",
        "reference_sources": [],
        "extract_strategy": "static",
        "extract_concurrency": 1,
        "max_turns_per_user": 0,
    }
    values.update(overrides)
    return RuntimeConfig(**values)


def make_app(runtime) -> FastAPI:
    """Lightweight app: agent router + gate + error handlers, no lifespan."""
    app = FastAPI()
    app.state.runtime = runtime
    app.add_middleware(SingleFlightMiddleware)
    install_exception_handlers(app)
    app.include_router(agent.router)
    return app


@pytest.fixture
def fake_llm():
    return FakeCompletionClient()


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def runtime(config, fake_llm, fake_extractor):
    search_client = ProductSearchClient(SEARCH_URL, transport=products_transport([]))
    return build_runtime(config, llm=fake_llm, extractor=fake_extractor, search_client=search_client)
