"""
Agent Runtime - The process-wide collaborators, built once at startup.

State is constructed explicitly and injected into the handlers (no module
globals); the app keeps the instance on ``app.state.runtime``.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from config import RuntimeConfig
from middleware.single_flight import SingleFlightGate
from services.content_extractor import ContentExtractor
from services.conversation_memory import ConversationMemory
from services.llm_client import CompletionClient
from services.product_search import ProductSearchClient
from services.reference_cache import ReferenceCache

from .classifier import IntentClassifier
from .dispatcher import ActionDispatcher
from .handlers import ChatHandler, ExtractTextHandler, OrderHandler, SearchHandler

logger = logging.getLogger(__name__)


@dataclass
class AgentRuntime:
    """Everything a request needs, wired together."""

    config: RuntimeConfig
    llm: object
    memory: ConversationMemory
    extractor: ContentExtractor
    reference_cache: ReferenceCache
    search_client: ProductSearchClient
    classifier: IntentClassifier
    dispatcher: ActionDispatcher
    extract_gate: SingleFlightGate
    startup_phase: str = field(default="initializing")


def build_runtime(
    config: RuntimeConfig,
    llm=None,
    extractor: Optional[ContentExtractor] = None,
    search_client: Optional[ProductSearchClient] = None,
    rng: Optional[random.Random] = None,
) -> AgentRuntime:
    """
    Construct the runtime from config.

    Collaborators can be passed in to replace the network-backed defaults.
    """
    if llm is None:
        llm = CompletionClient(
            api_key=config.openai_api_key,
            model=config.model_chat,
            base_url=config.openai_base_url,
            timeout=config.llm_timeout_s,
            temperature=config.temperature,
        )
    if extractor is None:
        extractor = ContentExtractor(
            strategy=config.extract_strategy,
            filtered=config.extract_filtered,
            min_chars=config.extract_min_chars,
            fetch_timeout=config.fetch_timeout_s,
            render_timeout=config.render_timeout_s,
        )
    if search_client is None:
        search_client = ProductSearchClient(config.search_api_url, timeout=config.search_timeout_s)

    memory = ConversationMemory(max_turns=config.max_turns_per_user)
    reference_cache = ReferenceCache(extractor)

    dispatcher = ActionDispatcher()
    dispatcher.register(ChatHandler(llm, memory, reference_cache))
    dispatcher.register(ExtractTextHandler())
    dispatcher.register(SearchHandler(llm, search_client, reply_mode=config.search_reply_mode))
    dispatcher.register(OrderHandler(llm, status_mode=config.order_status_mode, rng=rng))

    logger.info(f"Agent runtime built with {len(dispatcher.get_handlers())} handlers")

    return AgentRuntime(
        config=config,
        llm=llm,
        memory=memory,
        extractor=extractor,
        reference_cache=reference_cache,
        search_client=search_client,
        classifier=IntentClassifier(llm),
        dispatcher=dispatcher,
        extract_gate=SingleFlightGate("extract-text", capacity=config.extract_concurrency),
    )
