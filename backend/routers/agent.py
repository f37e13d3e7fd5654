"""
Sai Ren Agent Router
Conversational front-end endpoints

- POST /ai-agent: classify the input, run exactly one action handler
- POST /extract-text: extract a page's text and suggest follow-up questions
- POST /chat: one-shot chat grounded in caller-supplied page content

The process-wide collaborators live on ``app.state.runtime`` (see
``routers.agent_orchestration.runtime``).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from errors import LLMError, ValidationError, success_response
from logging_config import log_message_in, log_message_out
from routers.agent_orchestration import AgentRuntime
from routers.agent_orchestration.prompts import PAGE_CHAT_PROMPT, SUGGESTIONS_PROMPT, clean_reply

logger = logging.getLogger(__name__)

router = APIRouter()

EXTRACT_FAILED = "Failed to extract text from the URL"
SUGGESTIONS_FALLBACK = "Suggestions are not available right now."
PAGE_CHAT_FAILED = "Failed to generate a reply"


class AgentRequest(BaseModel):
    input: Optional[str] = None
    userId: Optional[str] = None


class ExtractRequest(BaseModel):
    url: Optional[str] = None


class PageChatRequest(BaseModel):
    message: Optional[str] = None
    pageContent: Optional[str] = None


def get_runtime(request: Request) -> AgentRuntime:
    return request.app.state.runtime


@router.post("/ai-agent")
async def ai_agent(body: AgentRequest, request: Request):
    """Route one user message to one action handler."""
    if not body.input or not body.userId:
        raise ValidationError("Input and User ID are required", parameter="input/userId")

    runtime = get_runtime(request)
    log_message_in(logger, body.input, user=body.userId, endpoint="/ai-agent")

    action = await runtime.classifier.classify(body.input)
    response = await runtime.dispatcher.dispatch(action, body.input, body.userId)

    log_message_out(logger, action.value, chars=len(response.get("reply") or ""), error="error" in response)
    return response


@router.post("/extract-text")
async def extract_text(body: ExtractRequest, request: Request):
    """
    Extract readable text from a URL and ask for suggestions about it.

    Guarded by the single-flight gate in middleware: a concurrent call gets 429.
    """
    if not body.url:
        raise ValidationError("URL is required", parameter="url")

    runtime = get_runtime(request)
    log_message_in(logger, body.url, endpoint="/extract-text")

    text = await runtime.extractor.extract(body.url, strategy=runtime.config.extract_strategy)
    if not text:
        log_message_out(logger, "extract-text", error=True)
        return JSONResponse(status_code=500, content={"error": EXTRACT_FAILED})

    try:
        suggestions = await runtime.llm.ask(SUGGESTIONS_PROMPT.format(text=text))
    except LLMError as e:
        logger.warning(f"Suggestions unavailable for {body.url}: {e}")
        suggestions = SUGGESTIONS_FALLBACK

    log_message_out(logger, "extract-text", chars=len(text))
    return success_response(extractedText=text, aiSuggestions=suggestions)


@router.post("/chat")
async def page_chat(body: PageChatRequest, request: Request):
    """Answer a question about page content the caller already has. No memory."""
    if not body.message or not body.pageContent:
        raise ValidationError("Message and page content are required", parameter="message/pageContent")

    runtime = get_runtime(request)
    log_message_in(logger, body.message, endpoint="/chat")

    messages = [
        {"role": "system", "content": PAGE_CHAT_PROMPT.format(page_content=body.pageContent)},
        {"role": "user", "content": body.message},
    ]
    try:
        reply = clean_reply(await runtime.llm.complete(messages))
    except LLMError as e:
        logger.error(f"Page chat failed: {e}")
        log_message_out(logger, "page-chat", error=True)
        return JSONResponse(status_code=500, content={"error": PAGE_CHAT_FAILED})

    log_message_out(logger, "page-chat", chars=len(reply))
    return success_response(reply=reply)
