"""
Chat Handler - General conversation grounded in reference content.

Prompt layout sent to the completion service:
    [system]    persona instruction
    [...]       the user's full transcript, including the new message
    [system]    flattened reference cache ("From <name>: <text>" blocks)

The exchange runs under the user's memory lock, so concurrent chats from the
same user land in the transcript as whole user/assistant pairs.
"""

import logging
from typing import Any, Dict

from errors import handle_async_handler_errors
from services.conversation_memory import ConversationMemory, Turn
from services.reference_cache import ReferenceCache

from ..actions import ActionLabel
from ..prompts import PERSONA_PROMPT, build_context_prompt, clean_reply
from .base import ActionHandler, HandlerContext

logger = logging.getLogger(__name__)


class ChatHandler(ActionHandler):
    """Conversational replies with per-user memory."""

    label = ActionLabel.CHAT
    name = "chat"

    def __init__(self, llm, memory: ConversationMemory, reference_cache: ReferenceCache):
        self.llm = llm
        self.memory = memory
        self.reference_cache = reference_cache

    @handle_async_handler_errors("chat", "Failed to generate a reply")
    async def handle(self, ctx: HandlerContext) -> Dict[str, Any]:
        async with self.memory.session(ctx.user_id) as transcript:
            transcript.append("user", ctx.message)

            messages = [
                Turn("system", PERSONA_PROMPT),
                *transcript.turns(),
                Turn("system", build_context_prompt(self.reference_cache.render_context())),
            ]
            raw = await self.llm.complete(messages)
            reply = clean_reply(raw)

            transcript.append("assistant", reply)
            logger.debug(f"Chat turn recorded for {ctx.user_id} ({len(transcript)} turns)")

        return {"reply": reply}
