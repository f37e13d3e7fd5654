"""
Tests for the single-flight gate and its middleware.
"""

import asyncio

import httpx
import pytest

from errors import BusyError
from middleware.single_flight import SingleFlightGate

from conftest import make_app

LONG_TEXT = "This page describes our return policy in detail."


class BlockingExtractor:
    """Holds every extraction until released."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = []

    async def extract(self, url, strategy=None):
        self.calls.append(url)
        self.started.set()
        await self.release.wait()
        return LONG_TEXT


class TestSingleFlightGate:

    def test_capacity_one(self):
        gate = SingleFlightGate("extract-text")
        assert gate.try_acquire() is True
        assert gate.busy is True
        assert gate.try_acquire() is False
        gate.release()
        assert gate.in_flight == 0
        assert gate.try_acquire() is True

    def test_hold_rejects_when_full(self):
        gate = SingleFlightGate("extract-text")

        async def scenario():
            async with gate.hold():
                with pytest.raises(BusyError):
                    async with gate.hold():
                        pass
            return gate.in_flight

        assert asyncio.run(scenario()) == 0

    def test_released_on_exception(self):
        gate = SingleFlightGate("extract-text")

        async def scenario():
            with pytest.raises(RuntimeError):
                async with gate.hold():
                    raise RuntimeError("extraction crashed")

        asyncio.run(scenario())
        assert gate.busy is False

    def test_larger_capacity(self):
        gate = SingleFlightGate("extract-text", capacity=2)
        assert gate.try_acquire() and gate.try_acquire()
        assert gate.try_acquire() is False

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            SingleFlightGate("x", capacity=0)


class TestSingleFlightMiddleware:

    def test_concurrent_extract_gets_429(self, runtime, fake_llm):
        extractor = BlockingExtractor()
        runtime.extractor = extractor
        fake_llm.queue("Ask about returns.")
        app = make_app(runtime)

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://agent.test") as client:
                first = asyncio.create_task(client.post("/extract-text", json={"url": "https://site.test/a"}))
                await extractor.started.wait()
                second = await client.post("/extract-text", json={"url": "https://site.test/b"})
                extractor.release.set()
                return await first, second

        first, second = asyncio.run(scenario())

        assert second.status_code == 429
        assert second.json()["error"] == "Server is busy processing another request. Please try again later."
        assert first.status_code == 200
        assert first.json() == {"extractedText": LONG_TEXT, "aiSuggestions": "Ask about returns."}
        # The rejected request never reached the extractor
        assert extractor.calls == ["https://site.test/a"]
        assert runtime.extract_gate.in_flight == 0

    def test_gate_released_after_failure(self, runtime):
        app = make_app(runtime)

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://agent.test") as client:
                # FakeExtractor knows no URLs: extraction fails with 500
                failed = await client.post("/extract-text", json={"url": "https://site.test/none"})
                again = await client.post("/extract-text", json={"url": "https://site.test/none"})
                return failed, again

        failed, again = asyncio.run(scenario())
        assert failed.status_code == 500
        assert again.status_code == 500
        assert runtime.extract_gate.in_flight == 0

    def test_other_paths_not_gated(self, runtime, fake_llm):
        runtime.extract_gate.try_acquire()
        fake_llm.queue("chat", "hello")
        app = make_app(runtime)

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://agent.test") as client:
                return await client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})

        resp = asyncio.run(scenario())
        assert resp.status_code == 200
        assert resp.json() == {"reply": "hello"}
