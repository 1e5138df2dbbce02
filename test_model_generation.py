"""Tests for product 3D model generation."""

import io
from unittest.mock import AsyncMock, patch

import numpy as np
import pytest
from PIL import Image

from parametric.errors import NotFoundError, UpstreamError
from parametric.workflow.model_generation import generate_product_model

MODULE = "parametric.workflow.model_generation"


def _product_png() -> bytes:
    pixels = np.full((4, 4, 4), 255, dtype=np.uint8)
    pixels[1:3, 1:3, :3] = (90, 60, 30)
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def fake_db():
    with patch(f"{MODULE}.db") as mock_db:
        mock_db.get_product.return_value = {"id": "prod-1", "image_url": "https://cdn.example.com/chair.jpg"}
        yield mock_db


@pytest.fixture
def fake_services():
    with patch(f"{MODULE}._download", new_callable=AsyncMock, return_value=_product_png()) as download, \
            patch(f"{MODULE}.upload_to_fal", new_callable=AsyncMock, return_value="https://fal.media/cutout.png") as upload, \
            patch(f"{MODULE}.generate_3d_model", new_callable=AsyncMock, return_value="https://fal.media/chair.glb") as generate:
        yield download, upload, generate


@pytest.mark.asyncio
async def test_generates_and_saves_model(fake_db, fake_services):
    download, upload, generate = fake_services

    result = await generate_product_model("prod-1")

    assert result.product_id == "prod-1"
    assert result.model_url == "https://fal.media/chair.glb"
    download.assert_awaited_once_with("https://cdn.example.com/chair.jpg")
    generate.assert_awaited_once_with("https://fal.media/cutout.png")
    fake_db.update_product.assert_called_once_with("prod-1", {"model_url": "https://fal.media/chair.glb"})

    # the uploaded image has the white studio background cut away
    uploaded, content_type = upload.await_args.args
    assert content_type == "image/png"
    alpha = np.asarray(Image.open(io.BytesIO(uploaded)).convert("RGBA"))[..., 3]
    assert alpha[0, 0] == 0
    assert alpha[1, 1] == 255


@pytest.mark.asyncio
async def test_falls_back_to_first_gallery_image(fake_db, fake_services):
    download, _, _ = fake_services
    fake_db.get_product.return_value = {"id": "prod-1", "image_url": None, "images": ["https://cdn.example.com/a.jpg"]}
    await generate_product_model("prod-1")
    download.assert_awaited_once_with("https://cdn.example.com/a.jpg")


@pytest.mark.asyncio
async def test_missing_product(fake_db, fake_services):
    fake_db.get_product.return_value = None
    with pytest.raises(NotFoundError):
        await generate_product_model("prod-x")


@pytest.mark.asyncio
async def test_product_without_image(fake_db, fake_services):
    fake_db.get_product.return_value = {"id": "prod-1", "images": []}
    with pytest.raises(ValueError):
        await generate_product_model("prod-1")


@pytest.mark.asyncio
async def test_generation_failure(fake_db, fake_services):
    _, _, generate = fake_services
    generate.side_effect = RuntimeError("queue timeout")
    with pytest.raises(UpstreamError):
        await generate_product_model("prod-1")
    fake_db.update_product.assert_not_called()
