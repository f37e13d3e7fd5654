"""
Reference Cache - Startup-populated page content injected into chat prompts.

Maps a logical source name (e.g. "FAQ") to cleaned page text. Populated once
at process start from the configured source list; read-only afterwards.

A source whose extraction fails is skipped: the cache simply lacks that name
and chat prompts go out without it.

Usage:
    cache = ReferenceCache(extractor)
    await cache.populate([{"name": "FAQ", "url": "https://example.com/faq"}])
    context = cache.render_context()
"""

import asyncio
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping

from .content_extractor import ContentExtractor

logger = logging.getLogger(__name__)


class ReferenceCache:
    """Write-once-per-name, read-many store of reference page text."""

    def __init__(self, extractor: ContentExtractor):
        self.extractor = extractor
        self._entries: Dict[str, str] = {}
        self._populated = False

    @property
    def populated(self) -> bool:
        """True once a populate() run has finished (whatever its outcome)."""
        return self._populated

    async def populate(self, sources: List[Dict[str, str]]) -> Dict[str, bool]:
        """
        Extract every source concurrently and store the successes.

        Args:
            sources: List of {"name": ..., "url": ...}

        Returns:
            Mapping of source name -> whether it was stored
        """
        results = await asyncio.gather(*(self._load(src["name"], src["url"]) for src in sources))
        outcome = dict(zip((src["name"] for src in sources), results))
        self._populated = True
        loaded = sum(outcome.values())
        logger.info(f"Reference cache populated: {loaded}/{len(sources)} sources")
        return outcome

    async def _load(self, name: str, url: str) -> bool:
        text = await self.extractor.extract(url)
        if not text:
            logger.error(f"Failed to extract reference content for {name} from {url}")
            return False
        # Single assignment: readers see either no entry or the whole text
        self._entries[name] = text
        logger.info(f"Extracted reference content from {name} page ({len(text)} chars)")
        return True

    def snapshot(self) -> Mapping[str, str]:
        """Read-only copy of the current name -> text mapping."""
        return MappingProxyType(dict(self._entries))

    def names(self) -> List[str]:
        return list(self._entries)

    def render_context(self) -> str:
        """Flatten the snapshot into prompt text, one block per source."""
        return "\n\n".join(f"From {name}: {content}" for name, content in self.snapshot().items())
