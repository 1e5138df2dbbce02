"""Checkout workflow — turns a user's cart into an order, order items and designer earnings.

Writes happen one after another, not in a transaction:
  1. order header           (fatal on failure)
  2. order items            (fatal on failure; the header stays behind)
  3. designer earnings      (logged, order still succeeds)
  4. product sales counters (logged, order still succeeds)
  5. cart clearing          (logged, order still succeeds)
Then the designer notification is scheduled without waiting for it.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Awaitable, Callable

from .. import db
from ..config import ENABLE_DESIGNER_NOTIFICATIONS
from ..errors import PersistenceStepError
from ..models.schemas import CreateOrderRequest, OrderResult, PricedOrder
from .notifications import dispatch_order_notification
from .pricing import cart_lines_from_rows, price_cart

logger = logging.getLogger(__name__)

Dispatcher = Callable[[str], Awaitable[None]]

# Scheduled notifications, held until they finish
_background_tasks: set[asyncio.Task] = set()


def _order_row(user_id: str, priced: PricedOrder, request: CreateOrderRequest) -> dict:
    return {
        "user_id": user_id,
        "total_amount": float(priced.total_amount),
        "subtotal": float(priced.total_amount),
        "customer_state": request.customer_state,
        "customer_gstin": request.customer_gstin,
        "shipping_address": request.shipping_address.model_dump(),
        "payment_details": {
            "method": request.payment_method,
            "payment_id": request.payment_id,
            "paid_at": datetime.now(UTC).isoformat(),
        },
        "status": "pending",
    }


def _order_item_rows(order_id: str, priced: PricedOrder) -> list[dict]:
    return [
        {
            "order_id": order_id,
            "product_id": line.product_id,
            "designer_id": line.designer_id,
            "quantity": line.quantity,
            "price": float(line.designer_price),
            "designer_price": float(line.designer_price),
            "commission_rate": float(line.commission_rate),
            "commission_amount": float(line.commission_amount),
            "designer_earnings": float(line.designer_earnings),
            "customizations": line.customizations,
        }
        for line in priced.lines
    ]


def _earnings_rows(order_id: str, priced: PricedOrder) -> list[dict]:
    return [
        {
            "order_id": order_id,
            "designer_id": line.designer_id,
            "product_id": line.product_id,
            "sale_amount": float(line.line_total),
            "commission_percentage": float(line.commission_rate * 100),
            "commission_amount": float(line.commission_amount),
            "designer_earnings": float(line.designer_earnings),
            "status": "pending",
        }
        for line in priced.lines
    ]


def _schedule(dispatch: Dispatcher, order_id: str) -> None:
    task = asyncio.create_task(dispatch(order_id))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def create_order(
    user_id: str,
    request: CreateOrderRequest,
    *,
    dispatch: Dispatcher | None = None,
) -> OrderResult:
    """Create an order from the user's cart.

    Raises:
        EmptyCartError: the cart has no lines; nothing is written.
        PersistenceStepError: the order header or its items could not be written.

    Returns:
        OrderResult with status "partial" and the names of the failed steps when
        any best-effort write after the order items failed.
    """
    logger.info("Processing order for user=%s", user_id)

    lines = cart_lines_from_rows(db.list_cart(user_id))
    priced = price_cart(lines)

    try:
        order = db.create_order(_order_row(user_id, priced, request))
    except Exception as e:
        logger.exception("Failed to create order for user=%s", user_id)
        raise PersistenceStepError("order") from e

    order_id = order["id"]
    logger.info("Order created: %s total=%s lines=%d", order_id, priced.total_amount, len(priced.lines))

    try:
        db.create_order_items(_order_item_rows(order_id, priced))
    except Exception as e:
        logger.exception("Failed to create order items for order=%s", order_id)
        raise PersistenceStepError("order_items") from e

    failed_steps: list[str] = []

    try:
        db.create_earnings(_earnings_rows(order_id, priced))
    except Exception:
        logger.exception("Error recording designer earnings for order=%s", order_id)
        failed_steps.append("designer_earnings")

    for line in priced.lines:
        try:
            if not db.increment_product_sales(line.product_id, line.quantity):
                logger.warning("Product %s vanished before its sales count was updated", line.product_id)
        except Exception:
            logger.exception("Error updating sales count for product=%s", line.product_id)
            if "sales_counter" not in failed_steps:
                failed_steps.append("sales_counter")

    try:
        db.clear_cart(user_id)
    except Exception:
        logger.exception("Error clearing cart for user=%s", user_id)
        failed_steps.append("cart_clear")

    result = OrderResult(
        order_id=order_id,
        total_amount=priced.total_amount,
        status="partial" if failed_steps else "complete",
        failed_steps=failed_steps,
    )
    if failed_steps:
        logger.warning("Order %s committed with failed steps: %s", order_id, failed_steps)

    if ENABLE_DESIGNER_NOTIFICATIONS:
        _schedule(dispatch or dispatch_order_notification, order_id)

    return result
