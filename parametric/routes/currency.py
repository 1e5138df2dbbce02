"""Exchange rate endpoints."""

from fastapi import APIRouter, HTTPException, Query

from ..errors import NotFoundError, UpstreamError
from ..workflow.currency import convert_amount, get_exchange_rate

router = APIRouter(prefix="/api/exchange-rates", tags=["currency"])


@router.get("/{currency}")
async def exchange_rate(currency: str, amount: float | None = Query(default=None, ge=0)):
    try:
        rate = await get_exchange_rate(currency)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    body = rate.model_dump()
    if amount is not None:
        body["amount"] = amount
        body["converted"] = float(convert_amount(amount, rate.rate))
    return body
