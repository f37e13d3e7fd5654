"""
Search Handler - Product search with a natural-language reply.

Flow:
1. Ask the completion service to reduce the query to a focused search term
   (falls back to the raw query if that call fails)
2. GET the product search API with the term
3. Normalize every product, defaulting absent optional fields
4. Reply with either the top result or a score-based recommendation

Scoring (recommend mode):
    score = 2 * rating + 10 / price + (1 if stock > 0 else 0)
The price term is dropped when price <= 0 or missing. The first item wins ties.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from errors import LLMError, handle_async_handler_errors
from services.product_search import ProductSearchClient

from ..actions import ActionLabel
from ..prompts import SEARCH_TERM_PROMPT
from .base import ActionHandler, HandlerContext

logger = logging.getLogger(__name__)

REPLY_MODES = ("recommend", "top_result")

NO_PRODUCTS_REPLY = "No relevant products found."
DEFAULT_DESCRIPTION = "No description available"
DEFAULT_AVAILABILITY = "Unknown"
DEFAULT_RETURN_POLICY = "Standard return policy applies"
DEFAULT_WARRANTY = "Standard warranty applies"
DEFAULT_SHIPPING = "Standard shipping applies"


def _num(value: Any) -> float:
    """Coerce a loosely-typed upstream number; anything unusable counts as 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Review:
    rating: Any = None
    comment: Optional[str] = None
    date: Optional[str] = None
    reviewerName: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Review":
        return cls(
            rating=raw.get("rating"),
            comment=raw.get("comment"),
            date=raw.get("date"),
            reviewerName=raw.get("reviewerName"),
        )


@dataclass
class SearchResultItem:
    """Normalized projection of an upstream product record (camelCase on the wire)."""

    id: Any
    title: Optional[str]
    description: str = DEFAULT_DESCRIPTION
    price: Any = None
    rating: Any = None
    stock: Any = None
    brand: Optional[str] = None
    images: List[str] = field(default_factory=list)
    category: Optional[str] = None
    discountPercentage: Any = None
    availabilityStatus: str = DEFAULT_AVAILABILITY
    returnPolicy: str = DEFAULT_RETURN_POLICY
    reviews: List[Review] = field(default_factory=list)
    warrantyInformation: str = DEFAULT_WARRANTY
    shippingInformation: str = DEFAULT_SHIPPING

    @classmethod
    def from_product(cls, product: Dict[str, Any]) -> "SearchResultItem":
        reviews = product.get("reviews") or []
        return cls(
            id=product.get("id"),
            title=product.get("title"),
            description=product.get("description") or DEFAULT_DESCRIPTION,
            price=product.get("price"),
            rating=product.get("rating"),
            stock=product.get("stock"),
            brand=product.get("brand"),
            images=list(product.get("images") or []),
            category=product.get("category"),
            discountPercentage=product.get("discountPercentage"),
            availabilityStatus=product.get("availabilityStatus") or DEFAULT_AVAILABILITY,
            returnPolicy=product.get("returnPolicy") or DEFAULT_RETURN_POLICY,
            reviews=[Review.from_raw(r) for r in reviews if isinstance(r, dict)],
            warrantyInformation=product.get("warrantyInformation") or DEFAULT_WARRANTY,
            shippingInformation=product.get("shippingInformation") or DEFAULT_SHIPPING,
        )

    def score(self) -> float:
        price = _num(self.price)
        value = 2 * _num(self.rating)
        if price > 0:
            value += 10 / price
        if _num(self.stock) > 0:
            value += 1
        return value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def recommend(items: List[SearchResultItem]) -> Optional[SearchResultItem]:
    """Highest-scoring item; the earliest one wins ties."""
    best = None
    best_score = float("-inf")
    for item in items:
        item_score = item.score()
        if item_score > best_score:
            best, best_score = item, item_score
    return best


def _price_suffix(item: SearchResultItem) -> str:
    return f" (${item.price})" if item.price is not None else ""


def summarize_top_result(item: SearchResultItem) -> str:
    return f"Top result: {item.title}{_price_suffix(item)} - {item.description}"


def summarize_recommendation(item: SearchResultItem) -> str:
    stock = "in stock" if _num(item.stock) > 0 else "currently out of stock"
    # Missing price or rating is omitted
    rated = f"It is rated {item.rating} and is {stock}." if item.rating is not None else f"It is {stock}."
    return f"I recommend {item.title}{_price_suffix(item)}. {rated} {item.description}"


class SearchHandler(ActionHandler):
    """Product search via the external search API."""

    label = ActionLabel.SEARCH
    name = "search"

    def __init__(self, llm, search_client: ProductSearchClient, reply_mode: str = "recommend"):
        if reply_mode not in REPLY_MODES:
            raise ValueError(f"Unknown search reply mode: {reply_mode!r}")
        self.llm = llm
        self.search_client = search_client
        self.reply_mode = reply_mode

    async def extract_term(self, query: str) -> str:
        """Reduce free-form input to a search term."""
        try:
            term = await self.llm.ask(SEARCH_TERM_PROMPT.format(input=query))
        except LLMError as e:
            logger.warning(f"Search term extraction failed, using raw query: {e}")
            return query.strip()
        return term.strip().strip('"').strip("'").strip() or query.strip()

    def build_reply(self, items: List[SearchResultItem]) -> str:
        if not items:
            return NO_PRODUCTS_REPLY
        if self.reply_mode == "top_result":
            return summarize_top_result(items[0])
        return summarize_recommendation(recommend(items))

    @handle_async_handler_errors("search", "Failed to retrieve search results")
    async def handle(self, ctx: HandlerContext) -> Dict[str, Any]:
        term = await self.extract_term(ctx.message)
        logger.info(f"Extracted search term: {term!r}")

        products = await self.search_client.search(term)
        items = [SearchResultItem.from_product(p) for p in products]

        return {
            "reply": self.build_reply(items),
            "results": [item.to_dict() for item in items],
        }
