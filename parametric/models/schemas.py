"""Pydantic models for the marketplace backend."""

from decimal import Decimal

from pydantic import BaseModel, Field

# --- Cart / Orders ---


class CartLine(BaseModel):
    product_id: str
    designer_id: str | None = None
    product_name: str = ""
    quantity: int = Field(ge=1)
    designer_price: Decimal = Field(ge=0)
    customizations: dict = {}


class PricedLine(CartLine):
    line_total: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    designer_earnings: Decimal


class PricedOrder(BaseModel):
    lines: list[PricedLine]
    total_amount: Decimal


class ShippingAddress(BaseModel):
    name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str


class CreateOrderRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_method: str
    payment_id: str | None = None
    customer_state: str = ""
    customer_gstin: str | None = None


class OrderResult(BaseModel):
    """Outcome of order creation.

    ``status`` is "complete" when every write succeeded and "partial" when the
    order is committed but earnings, sales counters or cart clearing failed.
    """

    order_id: str
    total_amount: Decimal
    status: str = "complete"
    failed_steps: list[str] = []
    message: str = "Order created successfully"


# --- Currency ---


class ExchangeRate(BaseModel):
    base_currency: str
    target_currency: str
    rate: float
    from_cache: bool


# --- Product pricing ---


class PriceUpdateRequest(BaseModel):
    base_price: float = Field(gt=0, le=1_000_000)


class PriceUpdateResult(BaseModel):
    product_id: str
    base_price: float
    designer_price: int
    markup_percentage: int


class ProductDimensions(BaseModel):
    width: float  # cm
    depth: float
    height: float


class PricingSuggestionRequest(BaseModel):
    product_name: str
    category: str
    description: str = ""
    dimensions: ProductDimensions


class PricingSuggestion(BaseModel):
    designer_price: float
    base_price: float
    reasoning: str = ""


# --- 3D models ---


class ModelGenerationResult(BaseModel):
    product_id: str
    model_url: str
