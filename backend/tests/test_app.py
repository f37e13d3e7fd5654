"""
Application lifecycle tests: startup validation, reference population, health.

build_runtime is patched so the lifespan wires fakes instead of the
OpenAI client, the real extractor and the search API.
"""

import asyncio
from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

import main
from errors import ConfigError
from routers.agent_orchestration import build_runtime

from conftest import FakeCompletionClient, FakeExtractor, make_config

SOURCES = [
    {"name": "FAQ", "url": "https://site.test/faq"},
    {"name": "About", "url": "https://site.test/about"},
]


class HangingExtractor(FakeExtractor):
    """Never finishes a page; records when its task is cancelled."""

    def __init__(self):
        super().__init__()
        self.cancelled = False

    async def extract(self, url, strategy=None):
        self.calls.append((url, strategy))
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.cancelled = True
            raise


@pytest.fixture
def app_parts(monkeypatch):
    monkeypatch.setattr(main.runtime_config, "openai_api_key", "test-key")
    llm = FakeCompletionClient()
    extractor = FakeExtractor({"https://site.test/faq": "We ship worldwide within a week."})
    runtime = build_runtime(make_config(reference_sources=SOURCES), llm=llm, extractor=extractor)
    with patch("main.build_runtime", return_value=runtime):
        yield runtime, llm


class TestLifespan:

    def test_missing_key_fails_fast(self, monkeypatch):
        monkeypatch.setattr(main.runtime_config, "openai_api_key", "")
        with pytest.raises(ConfigError):
            with TestClient(main.app):
                pass

    def test_startup_populates_reference_cache(self, app_parts):
        runtime, llm = app_parts
        with TestClient(main.app) as client:
            # Give the background population task a chance to finish
            for _ in range(50):
                if runtime.reference_cache.populated:
                    break
                client.get("/health")
            resp = client.get("/health")

        body = resp.json()
        assert body["reference_cache"] == "complete"
        assert body["reference_names"] == ["FAQ"]
        assert body["users"] == 0
        assert llm.closed is True

    def test_security_headers(self, app_parts):
        with TestClient(main.app) as client:
            resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_shutdown_waits_for_cancelled_population(self, monkeypatch):
        monkeypatch.setattr(main.runtime_config, "openai_api_key", "test-key")
        llm = FakeCompletionClient()
        extractor = HangingExtractor()
        runtime = build_runtime(make_config(reference_sources=SOURCES), llm=llm, extractor=extractor)
        with patch("main.build_runtime", return_value=runtime):
            with TestClient(main.app) as client:
                for _ in range(50):
                    if extractor.calls:
                        break
                    client.get("/health")

        assert extractor.cancelled is True
        assert runtime.startup_phase == "ready"
        assert runtime.reference_cache.populated is False
        assert llm.closed is True


class TestAppRoutes:

    def test_ai_agent_through_full_stack(self, app_parts):
        runtime, llm = app_parts
        llm.queue("chat", "Hello there.")
        with TestClient(main.app) as client:
            resp = client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})
            health = client.get("/health").json()
        assert resp.json() == {"reply": "Hello there."}
        assert health["users"] == 1

    def test_validation_through_full_stack(self, app_parts):
        with TestClient(main.app) as client:
            resp = client.post("/ai-agent", json={"input": "hi"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Input and User ID are required"
