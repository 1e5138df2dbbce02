"""Exchange rates from the base currency (INR), cached in Supabase for 24 hours."""

import logging
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

import httpx

from .. import db
from ..config import BASE_CURRENCY, EXCHANGE_RATE_API_URL, EXCHANGE_RATE_TTL_HOURS
from ..errors import NotFoundError, UpstreamError
from ..models.schemas import ExchangeRate

logger = logging.getLogger(__name__)


def is_fresh(cached: dict, now: datetime | None = None) -> bool:
    """True when a cached rate row is younger than the TTL."""
    last_updated = cached.get("last_updated")
    if not last_updated:
        return False
    updated_at = datetime.fromisoformat(last_updated)
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return now - updated_at < timedelta(hours=EXCHANGE_RATE_TTL_HOURS)


async def fetch_rates(base_currency: str = BASE_CURRENCY) -> dict[str, float]:
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(15.0)) as client:
            resp = await client.get(f"{EXCHANGE_RATE_API_URL}/{base_currency}")
            resp.raise_for_status()
    except httpx.HTTPError as e:
        raise UpstreamError(f"Failed to fetch exchange rates: {e}") from e
    return resp.json().get("rates", {})


async def get_exchange_rate(target_currency: str) -> ExchangeRate:
    target_currency = target_currency.upper()
    if target_currency == BASE_CURRENCY:
        return ExchangeRate(base_currency=BASE_CURRENCY, target_currency=target_currency, rate=1.0, from_cache=True)

    cached = db.get_currency_rate(BASE_CURRENCY, target_currency)
    if cached and is_fresh(cached):
        logger.info("Using cached %s->%s rate: %s", BASE_CURRENCY, target_currency, cached["rate"])
        return ExchangeRate(
            base_currency=BASE_CURRENCY,
            target_currency=target_currency,
            rate=float(cached["rate"]),
            from_cache=True,
        )

    logger.info("Fetching fresh %s rates", BASE_CURRENCY)
    rates = await fetch_rates(BASE_CURRENCY)
    rate = rates.get(target_currency)
    if not rate:
        raise NotFoundError(f"Rate not found for {target_currency}")

    try:
        db.upsert_currency_rate(BASE_CURRENCY, target_currency, float(rate))
    except Exception:
        logger.exception("Failed to cache %s->%s rate", BASE_CURRENCY, target_currency)

    return ExchangeRate(
        base_currency=BASE_CURRENCY,
        target_currency=target_currency,
        rate=float(rate),
        from_cache=False,
    )


def convert_amount(amount, rate) -> Decimal:
    """Convert a base-currency amount, rounded to 2 decimal places."""
    converted = Decimal(str(amount)) * Decimal(str(rate))
    return converted.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
