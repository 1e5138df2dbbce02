"""Commission split for a cart: line totals, platform commission, designer earnings."""

from decimal import Decimal

from ..config import COMMISSION_RATE
from ..errors import EmptyCartError, NotFoundError
from ..models.schemas import CartLine, PricedLine, PricedOrder


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.07 from turning into 0.07000000000000000666
    return Decimal(str(value))


def price_line(line: CartLine, commission_rate=COMMISSION_RATE) -> PricedLine:
    """Split one cart line into commission and designer earnings.

    Amounts are exact Decimals, unrounded, so commission and earnings always
    add up to the line total.
    """
    rate = to_decimal(commission_rate)
    line_total = line.designer_price * line.quantity
    return PricedLine(
        **line.model_dump(),
        line_total=line_total,
        commission_rate=rate,
        commission_amount=line_total * rate,
        designer_earnings=line_total * (1 - rate),
    )


def price_cart(lines: list[CartLine], commission_rate=COMMISSION_RATE) -> PricedOrder:
    if not lines:
        raise EmptyCartError()
    priced = [price_line(line, commission_rate) for line in lines]
    return PricedOrder(lines=priced, total_amount=sum((p.line_total for p in priced), Decimal(0)))


def cart_lines_from_rows(rows: list[dict]) -> list[CartLine]:
    """Build CartLines from ``cart`` rows joined with ``designer_products``.

    Raises NotFoundError when a cart row points at a product that no longer
    exists or has no price.
    """
    lines = []
    for row in rows:
        product = row.get("designer_products")
        if not product:
            raise NotFoundError(f"Product {row.get('product_id')} in cart no longer exists")
        if product.get("designer_price") is None:
            raise NotFoundError(f"Product {product.get('id') or row.get('product_id')} has no price")
        lines.append(CartLine(
            product_id=product.get("id") or row["product_id"],
            designer_id=product.get("designer_id"),
            product_name=product.get("name") or "",
            quantity=row["quantity"],
            designer_price=to_decimal(product["designer_price"]),
            customizations=row.get("customizations") or {},
        ))
    return lines
