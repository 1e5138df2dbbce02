"""Order endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..errors import EmptyCartError, NotFoundError, PersistenceStepError
from ..models.schemas import CreateOrderRequest, OrderResult
from ..workflow.notifications import notify_designer_order
from ..workflow.orders import create_order
from .auth import current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResult)
async def place_order(req: CreateOrderRequest, user_id: str = Depends(current_user_id)):
    try:
        return await create_order(user_id, req)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PersistenceStepError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post("/{order_id}/notify")
async def notify(order_id: str):
    """Re-send designer notifications for an order."""
    try:
        notified = await notify_designer_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"order_id": order_id, "notified": notified}
