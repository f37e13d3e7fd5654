"""
Sai Ren Agent Orchestration - Intent routing and context composition

Components:
- ActionLabel: Closed set of request categories with defensive decoding
- IntentClassifier: Completion-service classification, fails closed to chat
- ActionDispatcher: Label -> handler, chat as the default arm
- Handlers: chat, extract-text (stub), search, check-order
- AgentRuntime: Process-wide collaborators built once at startup

Request flow:
    input -> IntentClassifier -> ActionDispatcher -> one handler -> JSON body

    The chat handler reads the ReferenceCache and ConversationMemory; the
    search handler calls the product search API; every handler may call the
    completion service once more.
"""

from .actions import ActionLabel
from .classifier import IntentClassifier
from .dispatcher import ActionDispatcher
from .runtime import AgentRuntime, build_runtime

__all__ = [
    "ActionLabel",
    "IntentClassifier",
    "ActionDispatcher",
    "AgentRuntime",
    "build_runtime",
]
