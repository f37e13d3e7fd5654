"""
Order Handler - Order status lookup.

The completion service extracts an order id from the message (or answers
NO_ORDER_ID_FOUND). No order system is consulted: the status is synthesized,
either a fixed placeholder or a random pick from a small vocabulary,
depending on ``status_mode``. This is the seam where a real order-status API
would plug in.
"""

import logging
import random
from typing import Any, Dict, Optional

from errors import LLMError

from ..actions import ActionLabel
from ..prompts import NO_ORDER_ID, ORDER_ID_PROMPT
from .base import ActionHandler, HandlerContext

logger = logging.getLogger(__name__)

STATUS_MODES = ("fixed", "random")
PLACEHOLDER_STATUS = "In progress"
STATUS_VOCABULARY = ("Processing", "In progress", "Shipped", "Delivered")

MISSING_ID_REPLY = (
    "I couldn't find an order ID in your message. "
    "Please provide a valid order ID to check its status."
)
FAILURE_REPLY = (
    "I'm sorry, but I encountered an error while processing your order status request. "
    "Please try again later or contact customer support."
)


class OrderHandler(ActionHandler):
    """Extracts an order id and reports a synthesized status."""

    label = ActionLabel.CHECK_ORDER
    name = "check-order"

    def __init__(self, llm, status_mode: str = "fixed", rng: Optional[random.Random] = None):
        if status_mode not in STATUS_MODES:
            raise ValueError(f"Unknown order status mode: {status_mode!r}")
        self.llm = llm
        self.status_mode = status_mode
        self.rng = rng or random.Random()

    def lookup_status(self, order_id: str) -> str:
        if self.status_mode == "random":
            return self.rng.choice(STATUS_VOCABULARY)
        return PLACEHOLDER_STATUS

    async def handle(self, ctx: HandlerContext) -> Dict[str, Any]:
        try:
            extracted = await self.llm.ask(ORDER_ID_PROMPT.format(input=ctx.message))
        except LLMError as e:
            logger.error(f"Order id extraction failed for {ctx.user_id}: {e}")
            return {"orderId": None, "reply": FAILURE_REPLY}

        order_id = extracted.strip().strip('"').strip()
        if not order_id or NO_ORDER_ID in order_id:
            return {"orderId": None, "reply": MISSING_ID_REPLY}

        status = self.lookup_status(order_id)
        logger.info(f"Order status for {order_id} set to: {status}")
        return {
            "orderId": order_id,
            "reply": f"The status of your order {order_id} is: {status}",
        }
