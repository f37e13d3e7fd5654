"""
Action Dispatcher - Maps a classified action to its handler.

One hop per request: label -> exactly one handler. Labels without a
registered handler fall through to the default (chat) handler.
"""

import logging
from typing import Any, Dict, List, Optional

from .actions import ActionLabel
from .handlers.base import ActionHandler, HandlerContext

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Routes requests to action handlers.

    Usage:
        dispatcher = ActionDispatcher()
        dispatcher.register(ChatHandler(llm, memory, cache))
        dispatcher.register(SearchHandler(llm, search_client))

        body = await dispatcher.dispatch(ActionLabel.SEARCH, "cheap phones", "u-1")
    """

    def __init__(self, default: ActionLabel = ActionLabel.CHAT):
        self._handlers: Dict[ActionLabel, ActionHandler] = {}
        self.default = default

    def register(self, handler: ActionHandler) -> None:
        """Register a handler for its label (replaces any previous one)."""
        self._handlers[handler.label] = handler
        logger.debug(f"Registered handler: {handler.name} ({handler.label.value})")

    def resolve(self, label: Optional[ActionLabel]) -> ActionHandler:
        """Handler for ``label``, or the default handler."""
        handler = self._handlers.get(label) if label is not None else None
        if handler is None:
            handler = self._handlers.get(self.default)
        if handler is None:
            raise LookupError(f"No handler registered for default action {self.default.value!r}")
        return handler

    async def dispatch(self, label: Optional[ActionLabel], message: str, user_id: str) -> Dict[str, Any]:
        handler = self.resolve(label)
        logger.info(f"Dispatching to {handler.name} handler")
        return await handler.handle(HandlerContext(message=message, user_id=user_id))

    def get_handlers(self) -> List[ActionHandler]:
        return list(self._handlers.values())
