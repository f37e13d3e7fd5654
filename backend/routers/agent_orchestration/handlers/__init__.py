"""
Action Handlers - One handler per ActionLabel.

    chat          - ChatHandler: conversation with memory + reference context
    extract-text  - ExtractTextHandler: fixed "handled in the backend" reply
    search        - SearchHandler: product search and recommendation
    check-order   - OrderHandler: order id extraction + synthesized status

The ActionDispatcher maps each label to its handler; chat is the default.
"""

from .base import ActionHandler, HandlerContext
from .chat import ChatHandler
from .extract import ExtractTextHandler
from .order import OrderHandler
from .search import SearchHandler, SearchResultItem, recommend

__all__ = [
    "ActionHandler",
    "HandlerContext",
    "ChatHandler",
    "ExtractTextHandler",
    "OrderHandler",
    "SearchHandler",
    "SearchResultItem",
    "recommend",
]
