"""
Product Search Client - GET against the external product search API.

    GET {search_api_url}?q=<term>  ->  {"products": [ {...}, ... ]}

Returns the raw product records; normalization lives in the search handler.
Any transport failure, non-200 status or malformed body raises
ExternalServiceError(service="search").
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from errors import ExternalServiceError

logger = logging.getLogger(__name__)


class ProductSearchClient:
    """Thin async client for the product search endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def search(self, term: str) -> List[Dict[str, Any]]:
        """Search products for ``term`` (URL-encoded as the ``q`` parameter)."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                resp = await client.get(self.base_url, params={"q": term})
            except httpx.HTTPError as e:
                raise ExternalServiceError("Product search request failed", details=str(e), service="search") from e

        logger.info(f"Product search {resp.request.url} -> {resp.status_code}")
        if resp.status_code != 200:
            raise ExternalServiceError(
                f"Product search returned HTTP {resp.status_code}",
                service="search",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError("Product search returned invalid JSON", service="search") from e

        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise ExternalServiceError("Product search response has no products list", service="search")
        return [p for p in products if isinstance(p, dict)]
