"""Product pricing — admin base-price updates and AI price suggestions."""

import json
import logging
import math
import re

from pydantic import ValidationError

from .. import db
from ..config import DEFAULT_MARKUP, MAX_BASE_PRICE
from ..errors import NotFoundError, UpstreamError
from ..models.schemas import PriceUpdateResult, PricingSuggestion, PricingSuggestionRequest
from ..prompts.pricing import pricing_prompt
from ..tools.llm import call_llm

logger = logging.getLogger(__name__)


def markup_of(base_price: float, designer_price: float) -> float:
    """Markup of designer price over base price; DEFAULT_MARKUP when base is 0."""
    if not base_price or base_price <= 0:
        return DEFAULT_MARKUP
    return (designer_price - base_price) / base_price


def reprice(new_base_price: float, markup: float) -> int:
    return math.floor(new_base_price * (1 + markup) + 0.5)


def update_base_price(product_id: str, base_price: float) -> PriceUpdateResult:
    """Set a new manufacturing base price, keeping the product's markup percentage."""
    if not 0 < base_price <= MAX_BASE_PRICE:
        raise ValueError(f"base_price must be in (0, {MAX_BASE_PRICE}]")

    product = db.get_product(product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")

    markup = markup_of(float(product.get("base_price") or 0), float(product.get("designer_price") or 0))
    designer_price = reprice(base_price, markup)

    logger.info(
        "Price update %s: base %s -> %s, markup %.1f%%, designer %s -> %s",
        product_id, product.get("base_price"), base_price, markup * 100,
        product.get("designer_price"), designer_price,
    )

    db.update_product(product_id, {
        "base_price": base_price,
        "designer_price": designer_price,
        "original_designer_price": designer_price,
    })

    return PriceUpdateResult(
        product_id=product_id,
        base_price=base_price,
        designer_price=designer_price,
        markup_percentage=math.floor(markup * 100 + 0.5),
    )


def _extract_json(text: str) -> str:
    """Strip markdown fences or surrounding prose to isolate JSON."""
    m = re.search(r"```(?:json)?\s*(\{[\s\S]*\})\s*```", text)
    if m:
        return m.group(1)
    m = re.search(r"(\{[\s\S]*\})", text)
    if m:
        return m.group(1)
    return text


async def suggest_pricing(req: PricingSuggestionRequest) -> PricingSuggestion:
    """Ask the LLM for a base price and designer price for a new product."""
    text = await call_llm([{"role": "user", "content": pricing_prompt(req)}])
    try:
        suggestion = PricingSuggestion.model_validate(json.loads(_extract_json(text)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error("Invalid pricing response: %.200s", text)
        raise UpstreamError("Invalid AI response format") from e

    logger.info("Pricing for %s: %s", req.product_name, suggestion.model_dump())
    return suggestion
