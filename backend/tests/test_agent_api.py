"""
HTTP surface tests for /ai-agent, /extract-text and /chat.

Uses Starlette TestClient on a lightweight app that mounts only the agent
router with an injected runtime (no lifespan, no network).
"""

import pytest
from starlette.testclient import TestClient

from errors import LLMError
from routers.agent_orchestration import ActionLabel
from services.product_search import ProductSearchClient

from conftest import SEARCH_URL, make_app, products_transport

PRODUCT = {"id": 1, "title": "Phone A", "price": 100, "rating": 4.5, "stock": 3, "description": "Fast"}


def use_search_transport(runtime, transport):
    handler = runtime.dispatcher.resolve(ActionLabel.SEARCH)
    handler.search_client = ProductSearchClient(SEARCH_URL, transport=transport)


@pytest.fixture
def client(runtime):
    return TestClient(make_app(runtime), raise_server_exceptions=False)


class TestAiAgentValidation:
    """Missing fields are rejected before any handler runs."""

    @pytest.mark.parametrize("body", [
        {},
        {"input": "hi"},
        {"userId": "u-1"},
        {"input": "", "userId": "u-1"},
        {"input": "hi", "userId": ""},
    ])
    def test_missing_fields(self, client, fake_llm, body):
        resp = client.post("/ai-agent", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Input and User ID are required"
        assert fake_llm.calls == []

    def test_malformed_body(self, client):
        resp = client.post("/ai-agent", content="not json", headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Malformed request body", "code": "VALIDATION_INVALID_FORMAT"}


class TestAiAgentRouting:

    def test_chat(self, client, fake_llm, runtime):
        fake_llm.queue("chat", "Hello! How can I help?")
        resp = client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})
        assert resp.status_code == 200
        assert resp.json() == {"reply": "Hello! How can I help?"}
        assert runtime.memory.user_count() == 1

    def test_unrecognized_label_goes_to_chat(self, client, fake_llm):
        fake_llm.queue("dance", "Sure.")
        resp = client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})
        assert resp.json() == {"reply": "Sure."}

    def test_search(self, client, fake_llm, runtime):
        use_search_transport(runtime, products_transport([PRODUCT]))
        fake_llm.queue("search", "phone")
        resp = client.post("/ai-agent", json={"input": "find a phone", "userId": "u-1"})
        body = resp.json()
        assert resp.status_code == 200
        assert "Phone A" in body["reply"]
        assert body["results"][0]["id"] == 1

    def test_search_upstream_failure(self, client, fake_llm, runtime):
        use_search_transport(runtime, products_transport(status_code=502))
        fake_llm.queue("search", "phone")
        resp = client.post("/ai-agent", json={"input": "find a phone", "userId": "u-1"})
        assert resp.status_code == 200
        assert resp.json() == {"error": "Failed to retrieve search results"}

    def test_check_order(self, client, fake_llm):
        fake_llm.queue("check-order", "12345")
        resp = client.post("/ai-agent", json={"input": "status of 12345", "userId": "u-1"})
        assert resp.json() == {"orderId": "12345", "reply": "The status of your order 12345 is: In progress"}

    def test_extract_text_action(self, client, fake_llm):
        fake_llm.queue("extract-text")
        resp = client.post("/ai-agent", json={"input": "read this page", "userId": "u-1"})
        assert resp.json() == {"error": "Text extraction is handled in the backend."}

    def test_classifier_down_still_answers(self, client, fake_llm):
        fake_llm.queue(LLMError("down"), "Still here.")
        resp = client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})
        assert resp.json() == {"reply": "Still here."}

    def test_unhandled_fault_is_500(self, client, runtime):
        async def explode(user_input):
            raise RuntimeError("bug")

        runtime.classifier.classify = explode
        resp = client.post("/ai-agent", json={"input": "hi", "userId": "u-1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}


class TestExtractText:

    def test_success(self, client, fake_llm, fake_extractor):
        fake_extractor.pages["https://site.test/faq"] = "Shipping takes three days."
        fake_llm.queue("Ask how long shipping takes.")

        resp = client.post("/extract-text", json={"url": "https://site.test/faq"})

        assert resp.status_code == 200
        assert resp.json() == {
            "extractedText": "Shipping takes three days.",
            "aiSuggestions": "Ask how long shipping takes.",
        }
        assert "Shipping takes three days." in fake_llm.prompts[0]
        assert fake_extractor.calls == [("https://site.test/faq", "static")]

    def test_missing_url(self, client):
        resp = client.post("/extract-text", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "URL is required"

    def test_extraction_failure(self, client):
        resp = client.post("/extract-text", json={"url": "https://site.test/none"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to extract text from the URL"}

    def test_suggestions_fallback(self, client, fake_llm, fake_extractor):
        fake_extractor.pages["https://site.test/faq"] = "Shipping takes three days."
        fake_llm.queue(LLMError("down"))
        resp = client.post("/extract-text", json={"url": "https://site.test/faq"})
        assert resp.status_code == 200
        assert resp.json()["aiSuggestions"] == "Suggestions are not available right now."


class TestPageChat:

    def test_reply(self, client, fake_llm, runtime):
        fake_llm.queue("It costs *ten* dollars.")
        resp = client.post("/chat", json={"message": "price?", "pageContent": "Widget: $10"})
        assert resp.status_code == 200
        assert resp.json() == {"reply": "It costs ten dollars."}
        system, user = fake_llm.calls[0]
        assert "Widget: $10" in system["content"]
        assert user == {"role": "user", "content": "price?"}
        # One-shot: nothing written to memory
        assert runtime.memory.user_count() == 0

    @pytest.mark.parametrize("body", [{}, {"message": "hi"}, {"pageContent": "text"}])
    def test_missing_fields(self, client, body):
        resp = client.post("/chat", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Message and page content are required"

    def test_completion_failure(self, client, fake_llm):
        fake_llm.queue(LLMError("down"))
        resp = client.post("/chat", json={"message": "price?", "pageContent": "Widget"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to generate a reply"}
