"""
Base Handler - Abstract base class for action handlers.

Each handler serves exactly one ActionLabel:
1. Compose a task-specific prompt or query
2. Call one external service (completion service or search API)
3. Post-process the result into a JSON-ready dict
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

from ..actions import ActionLabel


@dataclass
class HandlerContext:
    """Input passed from the dispatcher to a handler."""

    message: str
    user_id: str


class ActionHandler(ABC):
    """
    Abstract base class for action handlers.

    Handlers never raise for upstream failures: they return an
    error-shaped body (``{"error": ...}``) or a fallback reply instead.
    """

    label: ActionLabel
    name: str = "base"

    @abstractmethod
    async def handle(self, ctx: HandlerContext) -> Dict[str, Any]:
        """
        Produce the response body for this action.

        Returns:
            Dict serialized as the HTTP response body
        """
        pass
