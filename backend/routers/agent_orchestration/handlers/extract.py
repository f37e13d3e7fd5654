"""
Extract Handler - Stub for the extract-text action.

Page extraction runs in the startup pipeline and behind POST /extract-text,
not through the conversational router; this handler tells the caller so.
"""

from typing import Any, Dict

from ..actions import ActionLabel
from .base import ActionHandler, HandlerContext

EXTRACT_NOT_ROUTED = "Text extraction is handled in the backend."


class ExtractTextHandler(ActionHandler):
    """Fixed response for extract-text requests."""

    label = ActionLabel.EXTRACT_TEXT
    name = "extract-text"

    async def handle(self, ctx: HandlerContext) -> Dict[str, Any]:
        return {"error": EXTRACT_NOT_ROUTED}
