"""Image-segmentation classifier client (Hugging Face inference API).

The classifier contract is an async callable taking encoded image bytes and
returning ``[{"label": str, "score": float, "mask": <base64 PNG>}, ...]``.
Anything with that shape can be passed to ``remove_background`` in its place.
"""

import logging
from typing import Awaitable, Callable

import httpx

from ..config import HF_API_TOKEN, SEGMENTATION_API_URL, SEGMENTATION_MODEL
from ..errors import ClassifierError

logger = logging.getLogger(__name__)

Classifier = Callable[[bytes], Awaitable[list[dict]]]


class HuggingFaceSegmenter:
    """Call a hosted image-segmentation model."""

    def __init__(self, model: str = SEGMENTATION_MODEL, timeout: float = 60.0):
        self.model = model
        self.url = f"{SEGMENTATION_API_URL}/{model}"
        self.timeout = timeout

    async def __call__(self, image_bytes: bytes) -> list[dict]:
        headers = {"Content-Type": "image/png"}
        if HF_API_TOKEN:
            headers["Authorization"] = f"Bearer {HF_API_TOKEN}"

        logger.info("Segmenting %d bytes with %s", len(image_bytes), self.model)
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                resp = await client.post(self.url, content=image_bytes, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ClassifierError(f"Segmentation request failed: {e}") from e

        try:
            results = resp.json()
        except ValueError as e:
            raise ClassifierError("Segmentation response is not JSON") from e

        if isinstance(results, list):
            logger.info("Segmentation labels: %s", [r.get("label") for r in results if isinstance(r, dict)])
        return results
