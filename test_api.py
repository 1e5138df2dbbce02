"""Endpoint tests for the marketplace API.

Database, auth and third-party calls are mocked; images are generated in memory.
"""

import io
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from parametric.errors import ClassifierError, EmptyCartError, NotFoundError, PersistenceStepError
from parametric.main import app
from parametric.models.schemas import ExchangeRate, OrderResult

ORDER_BODY = {
    "shipping_address": {
        "name": "Asha Rao",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zip_code": "560001",
        "phone": "+91 90000 00000",
    },
    "payment_method": "razorpay",
    "payment_id": "pay_123",
    "customer_state": "Karnataka",
}

AUTH = {"Authorization": "Bearer test-token"}


def _png(height=4, width=5) -> bytes:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = (120, 80, 40)
    pixels[..., 3] = 255
    pixels[0, 0, :3] = 255
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def _read(content: bytes) -> np.ndarray:
    return np.asarray(Image.open(io.BytesIO(content)).convert("RGBA"))


@pytest.fixture
def client():
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# --- Images ---


@pytest.mark.asyncio
async def test_color_transform(client):
    resp = await client.post(
        "/api/images/color-transform",
        files={"file": ("chair.png", _png(), "image/png")},
        data={"color": "black", "finish": "matte"},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    out = _read(resp.content)
    assert out.shape == (4, 5, 4)
    assert out[1, 1, :3].tolist() == [18, 12, 6]
    assert out[0, 0, :3].tolist() == [255, 255, 255]


@pytest.mark.asyncio
async def test_color_transform_bad_image(client):
    resp = await client.post(
        "/api/images/color-transform",
        files={"file": ("chair.png", b"definitely not a png", "image/png")},
        data={"color": "black"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_remove_background_threshold(client):
    resp = await client.post(
        "/api/images/remove-background",
        files={"file": ("chair.png", _png(), "image/png")},
        data={"mode": "threshold"},
    )
    assert resp.status_code == 200
    alpha = _read(resp.content)[..., 3]
    assert alpha[0, 0] == 0
    assert alpha[1, 1] == 255


@pytest.mark.asyncio
@patch("parametric.routes.images.remove_background", new_callable=AsyncMock)
async def test_remove_background_segment(mock_remove, client):
    mock_remove.return_value = _png()
    resp = await client.post(
        "/api/images/remove-background",
        files={"file": ("chair.png", _png(), "image/png")},
    )
    assert resp.status_code == 200
    mock_remove.assert_awaited_once()


@pytest.mark.asyncio
@patch("parametric.routes.images.remove_background", new_callable=AsyncMock)
async def test_remove_background_classifier_down(mock_remove, client):
    mock_remove.side_effect = ClassifierError("model offline")
    resp = await client.post(
        "/api/images/remove-background",
        files={"file": ("chair.png", _png(), "image/png")},
    )
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_remove_background_unknown_mode(client):
    resp = await client.post(
        "/api/images/remove-background",
        files={"file": ("chair.png", _png(), "image/png")},
        data={"mode": "magic"},
    )
    assert resp.status_code == 422


# --- Orders ---


@pytest.mark.asyncio
async def test_order_requires_auth(client):
    resp = await client.post("/api/orders", json=ORDER_BODY)
    assert resp.status_code == 401


@pytest.mark.asyncio
@patch("parametric.db.get_user_id", return_value=None)
async def test_order_invalid_token(_mock_user, client):
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 401


@pytest.mark.asyncio
@patch("parametric.routes.orders.create_order", new_callable=AsyncMock)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order(_mock_user, mock_create, client):
    mock_create.return_value = OrderResult(order_id="order-1", total_amount=Decimal("2000"))
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 200
    data = resp.json()
    assert data["order_id"] == "order-1"
    assert Decimal(str(data["total_amount"])) == Decimal("2000")
    assert data["status"] == "complete"
    assert mock_create.await_args.args[0] == "user-1"


@pytest.mark.asyncio
@patch("parametric.routes.orders.create_order", new_callable=AsyncMock)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order_partial(_mock_user, mock_create, client):
    mock_create.return_value = OrderResult(
        order_id="order-1", total_amount=Decimal("2000"), status="partial", failed_steps=["cart_clear"],
    )
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["failed_steps"] == ["cart_clear"]


@pytest.mark.asyncio
@patch("parametric.routes.orders.create_order", new_callable=AsyncMock)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order_empty_cart(_mock_user, mock_create, client):
    mock_create.side_effect = EmptyCartError()
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"


@pytest.mark.asyncio
@patch("parametric.routes.orders.create_order", new_callable=AsyncMock)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order_product_gone(_mock_user, mock_create, client):
    mock_create.side_effect = NotFoundError("Product gone in cart no longer exists")
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 404


@pytest.mark.asyncio
@patch("parametric.routes.orders.create_order", new_callable=AsyncMock)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order_write_failure(_mock_user, mock_create, client):
    mock_create.side_effect = PersistenceStepError("order")
    resp = await client.post("/api/orders", json=ORDER_BODY, headers=AUTH)
    assert resp.status_code == 500


@pytest.mark.asyncio
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_place_order_validation(_mock_user, client):
    resp = await client.post("/api/orders", json={"payment_method": "razorpay"}, headers=AUTH)
    assert resp.status_code == 422


@pytest.mark.asyncio
@patch("parametric.routes.orders.notify_designer_order", new_callable=AsyncMock)
async def test_notify_order(mock_notify, client):
    mock_notify.return_value = 2
    resp = await client.post("/api/orders/order-1/notify")
    assert resp.status_code == 200
    assert resp.json() == {"order_id": "order-1", "notified": 2}


@pytest.mark.asyncio
@patch("parametric.routes.orders.notify_designer_order", new_callable=AsyncMock)
async def test_notify_missing_order(mock_notify, client):
    mock_notify.side_effect = NotFoundError("Order nope not found")
    resp = await client.post("/api/orders/nope/notify")
    assert resp.status_code == 404


# --- Currency ---


@pytest.mark.asyncio
@patch("parametric.routes.currency.get_exchange_rate", new_callable=AsyncMock)
async def test_exchange_rate_with_conversion(mock_rate, client):
    mock_rate.return_value = ExchangeRate(base_currency="INR", target_currency="USD", rate=0.012, from_cache=True)
    resp = await client.get("/api/exchange-rates/USD", params={"amount": 2000})
    assert resp.status_code == 200
    data = resp.json()
    assert data["rate"] == 0.012
    assert data["from_cache"] is True
    assert data["converted"] == 24.0


@pytest.mark.asyncio
@patch("parametric.routes.currency.get_exchange_rate", new_callable=AsyncMock)
async def test_exchange_rate_unknown(mock_rate, client):
    mock_rate.side_effect = NotFoundError("Rate not found for XYZ")
    resp = await client.get("/api/exchange-rates/XYZ")
    assert resp.status_code == 404


# --- Products ---


@pytest.mark.asyncio
@patch("parametric.db.is_admin", return_value=False)
@patch("parametric.db.get_user_id", return_value="user-1")
async def test_price_update_requires_admin(_mock_user, _mock_admin, client):
    resp = await client.post("/api/admin/products/prod-1/price", json={"base_price": 1000}, headers=AUTH)
    assert resp.status_code == 403


@pytest.mark.asyncio
@patch("parametric.workflow.product_pricing.db")
@patch("parametric.db.is_admin", return_value=True)
@patch("parametric.db.get_user_id", return_value="admin-1")
async def test_price_update(_mock_user, _mock_admin, mock_db, client):
    mock_db.get_product.return_value = {"id": "prod-1", "base_price": 1000, "designer_price": 1500}
    resp = await client.post("/api/admin/products/prod-1/price", json={"base_price": 2000}, headers=AUTH)
    assert resp.status_code == 200
    data = resp.json()
    assert data["designer_price"] == 3000
    assert data["markup_percentage"] == 50


@pytest.mark.asyncio
@patch("parametric.db.is_admin", return_value=True)
@patch("parametric.db.get_user_id", return_value="admin-1")
async def test_price_update_validation(_mock_user, _mock_admin, client):
    resp = await client.post("/api/admin/products/prod-1/price", json={"base_price": 0}, headers=AUTH)
    assert resp.status_code == 422


@pytest.mark.asyncio
@patch("parametric.routes.products.generate_product_model", new_callable=AsyncMock)
async def test_generate_model_missing_product(mock_generate, client):
    mock_generate.side_effect = NotFoundError("Product prod-x not found")
    resp = await client.post("/api/products/prod-x/model")
    assert resp.status_code == 404
