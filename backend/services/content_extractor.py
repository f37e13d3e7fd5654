"""
Content Extractor - Page text extraction for reference content.

Turns a URL into cleaned plain text, or None when nothing usable comes back.

Fetch strategies:
    static   - plain HTTP GET of the raw markup (httpx)
    rendered - headless browser navigation for script-heavy pages (selenium),
               waits for the document to settle before reading it

Text selection:
    filtered   - paragraphs, headings and container elements, each cleaned,
                 keeping only candidates longer than ``min_chars``; a
                 container owns its inline descendants (strong, a, em, ...)
                 but not nested candidates. Repeated text is kept as it
                 appears in the document.
    unfiltered - whole-document body text, cleaned once

Failures (network, navigation timeout, parse) are logged and reported as
None. The browser is always shut down, including on failure paths.
"""

import asyncio
import logging
import re
import time
from typing import Callable, List, Optional

import httpx
from bs4 import BeautifulSoup, Comment, Tag

from errors import ExtractionError
from logging_config import log_extract

logger = logging.getLogger(__name__)

STRATEGIES = ("static", "rendered")

# Elements whose full text is a candidate
TEXT_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote"]
# Containers contribute their text minus nested candidates, which are visited separately
CONTAINER_TAGS = ["div", "section", "article", "main", "td"]
CANDIDATE_TAGS = TEXT_TAGS + CONTAINER_TAGS
NOISE_TAGS = ["script", "style", "noscript", "template", "svg"]

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ASCII_RE = re.compile(r"[^\x00-\x7F]")

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SaiRenAgent/1.0)"


def clean_text(text: str) -> str:
    """Collapse whitespace runs to one space, drop non-ASCII characters, trim.

    Idempotent: cleaning already-clean text returns it unchanged.
    """
    if not text:
        return ""
    collapsed = _WHITESPACE_RE.sub(" ", text)
    ascii_only = _NON_ASCII_RE.sub("", collapsed)
    return _WHITESPACE_RE.sub(" ", ascii_only).strip()


def _own_text(tag: Tag) -> str:
    """Text under ``tag`` whose nearest candidate ancestor is ``tag`` itself.

    Inline children (strong, a, em, span, ...) stay part of the container's
    sentence; nested paragraphs and containers are left to their own candidate.
    """
    parts = []
    for s in tag.find_all(string=True):
        if isinstance(s, Comment):
            continue
        if s.find_parent(CANDIDATE_TAGS) is tag:
            parts.append(str(s))
    return " ".join(parts)


def extract_candidates(html: str, min_chars: int = 20) -> List[str]:
    """Cleaned text candidates longer than ``min_chars``, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()

    root = soup.body or soup
    candidates = []
    for el in root.find_all(CANDIDATE_TAGS):
        # Text inside an already-selected text element was captured with it
        if el.find_parent(TEXT_TAGS) is not None:
            continue
        raw = el.get_text(" ") if el.name in TEXT_TAGS else _own_text(el)
        cleaned = clean_text(raw)
        if len(cleaned) > min_chars:
            candidates.append(cleaned)
    return candidates


def html_to_text(html: str, filtered: bool = True, min_chars: int = 20) -> str:
    """Reduce markup to one cleaned text blob (may be empty)."""
    if filtered:
        return " ".join(extract_candidates(html, min_chars=min_chars))

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()
    root = soup.body or soup
    return clean_text(root.get_text(" "))


def _default_driver_factory():
    """Headless Chrome via selenium."""
    from selenium import webdriver

    options = webdriver.ChromeOptions()
    options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    return webdriver.Chrome(options=options)


class ContentExtractor:
    """
    Fetches pages and reduces them to cleaned text.

    Usage:
        extractor = ContentExtractor(strategy="static")
        text = await extractor.extract("https://example.com/faq")
        if text is None:
            ...  # no content for this URL
    """

    # Network is considered idle once the resource count holds for this long
    IDLE_WINDOW_S = 0.5
    POLL_INTERVAL_S = 0.1

    def __init__(
        self,
        strategy: str = "static",
        filtered: bool = True,
        min_chars: int = 20,
        fetch_timeout: float = 15.0,
        render_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        driver_factory: Optional[Callable[[], object]] = None,
    ):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown extraction strategy: {strategy!r}")
        self.strategy = strategy
        self.filtered = filtered
        self.min_chars = min_chars
        self.fetch_timeout = fetch_timeout
        self.render_timeout = render_timeout
        self._transport = transport
        self._driver_factory = driver_factory or _default_driver_factory

    async def extract(self, url: str, strategy: Optional[str] = None) -> Optional[str]:
        """
        Extract cleaned text from ``url``.

        Args:
            url: Page to fetch
            strategy: Override the configured fetch strategy for this call

        Returns:
            Cleaned text, or None if the page could not be fetched, parsed,
            or yielded no text
        """
        strategy = strategy or self.strategy
        log_extract(logger, url, "start", strategy=strategy)
        try:
            if strategy == "rendered":
                html = await asyncio.to_thread(self._render, url)
            else:
                html = await self._fetch(url)
            text = html_to_text(html, filtered=self.filtered, min_chars=self.min_chars)
        except Exception as e:
            log_extract(logger, url, "failed", error=e)
            return None

        if not text:
            log_extract(logger, url, "failed", reason="no text")
            return None

        log_extract(logger, url, "end", chars=len(text))
        return text

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.fetch_timeout,
            follow_redirects=True,
            headers={"User-Agent": DEFAULT_USER_AGENT},
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(url)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ExtractionError(
                    "Page fetch failed", status_code=e.response.status_code, url=url
                ) from e
            except httpx.HTTPError as e:
                raise ExtractionError("Page fetch failed", details=str(e), url=url) from e
            return resp.text

    def _render(self, url: str) -> str:
        """Blocking headless navigation; runs in a worker thread."""
        driver = self._driver_factory()
        try:
            driver.set_page_load_timeout(self.render_timeout)
            driver.get(url)
            self._wait_for_idle(driver)
            return driver.page_source
        except Exception as e:
            raise ExtractionError("Page render failed", details=str(e), service="render", url=url) from e
        finally:
            try:
                driver.quit()
            except Exception as e:
                logger.warning(f"Browser shutdown failed for {url}: {e}")

    def _wait_for_idle(self, driver) -> None:
        """Wait for document load, then until no new resources arrive for IDLE_WINDOW_S."""
        deadline = time.monotonic() + self.render_timeout
        last_count = -1
        stable_since = time.monotonic()
        while time.monotonic() < deadline:
            ready = driver.execute_script("return document.readyState")
            count = driver.execute_script("return performance.getEntriesByType('resource').length")
            now = time.monotonic()
            if count != last_count:
                last_count = count
                stable_since = now
            elif ready == "complete" and now - stable_since >= self.IDLE_WINDOW_S:
                return
            time.sleep(self.POLL_INTERVAL_S)
        raise TimeoutError(f"Page did not settle within {self.render_timeout}s")
