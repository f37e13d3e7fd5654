"""
Action Labels - The closed set of request categories.

The classifier's reply is free text from the model and is never trusted:
ActionLabel.decode() lower-cases and trims it, then accepts only an exact
label match, falling back to CHAT for anything else.
"""

from enum import Enum
from typing import Optional


class ActionLabel(str, Enum):
    """Request categories the dispatcher can route to."""

    CHAT = "chat"
    EXTRACT_TEXT = "extract-text"
    SEARCH = "search"
    CHECK_ORDER = "check-order"

    @classmethod
    def default(cls) -> "ActionLabel":
        return cls.CHAT

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ActionLabel"]:
        """Exact (case/space-insensitive) match, or None."""
        if not isinstance(raw, str):
            return None
        value = raw.strip().lower()
        for label in cls:
            if label.value == value:
                return label
        return None

    @classmethod
    def decode(cls, raw: Optional[str]) -> "ActionLabel":
        """Like parse(), but unrecognized output resolves to the default label."""
        return cls.parse(raw) or cls.default()

    @classmethod
    def prompt_list(cls) -> str:
        """Labels formatted for the classification prompt."""
        return ", ".join(f'"{label.value}"' for label in cls)
