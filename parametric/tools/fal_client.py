"""fal.ai wrapper — upload product photos and generate 3D GLB models from them."""

import logging
import os

import fal_client

from ..config import FAL_KEY, TRELLIS_MODEL

logger = logging.getLogger(__name__)

# fal_client reads FAL_KEY from the environment automatically
os.environ.setdefault("FAL_KEY", FAL_KEY)


async def upload_to_fal(image_bytes: bytes, content_type: str = "image/png") -> str:
    """Upload image bytes to fal.ai storage and return a public URL.

    TRELLIS only accepts publicly-accessible image URLs.
    """
    url = await fal_client.upload_async(image_bytes, content_type)
    logger.info("fal.ai: uploaded to storage → %s", url)
    return url


async def generate_3d_model(image_url: str) -> str:
    """Generate a 3D GLB model of a furniture piece from a single image URL.

    Returns:
        Public URL of the generated GLB file.
    """
    arguments = {
        "image_url": image_url,
        "resolution": 1024,
        "texture_size": 2048,
    }

    logger.info("fal.ai: generating 3D model with %s for %s", TRELLIS_MODEL, image_url)

    result = await fal_client.subscribe_async(
        TRELLIS_MODEL,
        arguments=arguments,
    )

    if "model_glb" not in result:
        raise ValueError(f"Unexpected fal.ai response keys: {list(result.keys())}")

    glb_url = result["model_glb"]["url"]
    logger.info("fal.ai: GLB ready at %s", glb_url)
    return glb_url
