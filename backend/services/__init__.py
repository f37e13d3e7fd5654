"""
Sai Ren Services - Shared infrastructure services.

- llm_client: OpenAI-compatible completion client
- content_extractor: static / rendered page text extraction
- reference_cache: startup-populated reference page text
- conversation_memory: per-user ordered transcripts
- product_search: product search API client
"""

from .llm_client import CompletionClient
from .content_extractor import ContentExtractor, clean_text
from .reference_cache import ReferenceCache
from .conversation_memory import ConversationMemory, Turn
from .product_search import ProductSearchClient

__all__ = [
    "CompletionClient",
    "ContentExtractor",
    "clean_text",
    "ReferenceCache",
    "ConversationMemory",
    "Turn",
    "ProductSearchClient",
]
