"""Designer order notifications — email every designer whose products were in an order."""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from .. import db
from ..config import PUBLIC_SITE_URL
from ..errors import NotFoundError, NotificationError
from ..tools.email import send_email

logger = logging.getLogger(__name__)


def group_items_by_designer(items: list[dict]) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = defaultdict(list)
    for item in items:
        if item.get("designer_id"):
            grouped[item["designer_id"]].append(item)
    return dict(grouped)


def _money(amount) -> str:
    return f"₹{Decimal(str(amount)):,.2f}"


def _order_date(order: dict) -> str:
    created = order.get("created_at")
    if not created:
        return ""
    try:
        return datetime.fromisoformat(created).strftime("%d %B %Y")
    except ValueError:
        return created


def render_designer_email(
    designer_name: str,
    order: dict,
    items: list[dict],
    product_names: dict[str, str],
) -> str:
    order_ref = str(order["id"])[:8]
    total = sum((Decimal(str(item["designer_earnings"])) for item in items), Decimal(0))
    count = "one of your products" if len(items) == 1 else f"{len(items)} of your products"

    rows = "".join(
        f"""
        <tr>
          <td style="padding: 12px; border-bottom: 1px solid #e5e7eb;">{product_names.get(item["product_id"], "Unknown Product")}</td>
          <td style="padding: 12px; border-bottom: 1px solid #e5e7eb; text-align: center;">{item["quantity"]}</td>
          <td style="padding: 12px; border-bottom: 1px solid #e5e7eb; text-align: right;">{_money(item["designer_earnings"])}</td>
        </tr>"""
        for item in items
    )

    return f"""<!DOCTYPE html>
<html>
  <body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h1>New Order Received!</h1>
      <p>Hi {designer_name},</p>
      <p>Great news! A customer has purchased {count}.</p>
      <p><strong>Order ID:</strong> #{order_ref}<br><strong>Order Date:</strong> {_order_date(order)}</p>
      <table style="width: 100%; border-collapse: collapse;">
        <thead>
          <tr><th>Product</th><th style="text-align: center;">Quantity</th><th style="text-align: right;">Your Earnings</th></tr>
        </thead>
        <tbody>{rows}
        </tbody>
      </table>
      <p style="text-align: right;">Total Earnings from this Order: <strong>{_money(total)}</strong></p>
      <p>Your earnings will be paid out according to your payment schedule.</p>
      <p><a href="{PUBLIC_SITE_URL}/creator-earnings">View Earnings Dashboard</a></p>
    </div>
  </body>
</html>"""


async def notify_designer_order(order_id: str) -> int:
    """Email each designer in the order. Returns how many designers were emailed.

    A failure for one designer is logged and the others are still notified.
    """
    order = db.get_order(order_id)
    if not order:
        raise NotFoundError(f"Order {order_id} not found")

    by_designer = group_items_by_designer(order.get("order_items") or [])
    logger.info("Notifying %d designers for order=%s", len(by_designer), order_id)

    notified = 0
    for designer_id, items in by_designer.items():
        designer = db.get_designer(designer_id)
        if not designer or not designer.get("email"):
            logger.error("Designer %s not found or has no email", designer_id)
            continue

        product_names = db.list_product_names([item["product_id"] for item in items])
        html = render_designer_email(designer.get("name") or "there", order, items, product_names)
        try:
            await send_email(
                [designer["email"]],
                f"New Order Received - Order #{str(order_id)[:8]}",
                html,
            )
        except Exception:
            logger.exception("Error sending email to designer=%s", designer_id)
            continue
        notified += 1

    return notified


async def dispatch_order_notification(order_id: str) -> None:
    """Fire-and-forget entry point: never raises, only logs."""
    try:
        await notify_designer_order(order_id)
    except Exception as e:
        err = NotificationError(f"Designer notification failed for order {order_id}: {e}")
        logger.error("%s", err, exc_info=e)
