"""3D model generation — product photo → cut-out → TRELLIS GLB → stored on the product."""

import logging

import httpx

from .. import db
from ..errors import MarketplaceError, NotFoundError, UpstreamError
from ..imaging.segmentation import remove_white_background
from ..models.schemas import ModelGenerationResult
from ..tools.fal_client import generate_3d_model, upload_to_fal

logger = logging.getLogger(__name__)


async def _download(url: str) -> bytes:
    async with httpx.AsyncClient(timeout=httpx.Timeout(15.0)) as http:
        resp = await http.get(url, follow_redirects=True)
        resp.raise_for_status()
        return resp.content


async def generate_product_model(product_id: str) -> ModelGenerationResult:
    """Generate a GLB model for a product from its main image.

    The white studio background is cut away first so TRELLIS only sees the piece.
    """
    product = db.get_product(product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")

    image_url = product.get("image_url") or next(iter(product.get("images") or []), None)
    if not image_url:
        raise ValueError(f"Product {product_id} has no image")

    try:
        image_bytes = await _download(image_url)
        fal_url = await upload_to_fal(remove_white_background(image_bytes), "image/png")
        model_url = await generate_3d_model(fal_url)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("3D generation failed for product=%s", product_id)
        raise UpstreamError(f"3D generation failed: {e}") from e

    db.update_product(product_id, {"model_url": model_url})
    logger.info("3D model for product=%s: %s", product_id, model_url)
    return ModelGenerationResult(product_id=product_id, model_url=model_url)
