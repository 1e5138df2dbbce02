"""Cut furniture out of product photos.

Pipeline: downscale to at most 1024px on the long side, run the external
segmentation classifier, union every segment whose label names a piece of
furniture, and use the union as the output alpha channel. When no furniture
label is present the first segment that is not sky/wall/floor/ceiling is
used instead; when nothing qualifies the result is fully transparent.
"""

import base64
import io
import logging
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image

from ..config import BACKGROUND_THRESHOLD, MAX_IMAGE_DIMENSION
from ..errors import ClassifierError, MarketplaceError
from ..tools.segmenter import Classifier, HuggingFaceSegmenter
from .color_transform import is_background
from .io import decode_image, encode_png, to_array

logger = logging.getLogger(__name__)

FURNITURE_LABELS = (
    "table",
    "chair",
    "desk",
    "sofa",
    "bed",
    "cabinet",
    "shelf",
    "bench",
    "stool",
    "ottoman",
    "armchair",
)

NON_OBJECT_LABELS = frozenset({"sky", "wall", "floor", "ceiling"})


@dataclass
class Segment:
    label: str
    mask: np.ndarray  # (height, width) uint8


# ---------------------------------------------------------------------------
# Resize
# ---------------------------------------------------------------------------


def target_size(width: int, height: int, max_dim: int = MAX_IMAGE_DIMENSION) -> tuple[int, int]:
    """Size after downscaling so the longer side is at most ``max_dim``."""
    if width <= max_dim and height <= max_dim:
        return width, height
    if width > height:
        return max_dim, max(1, math.floor(height * max_dim / width + 0.5))
    return max(1, math.floor(width * max_dim / height + 0.5)), max_dim


def resize_if_needed(img: Image.Image, max_dim: int = MAX_IMAGE_DIMENSION) -> tuple[Image.Image, bool]:
    size = target_size(img.width, img.height, max_dim)
    if size == (img.width, img.height):
        return img, False
    logger.info("Downscaling %dx%d -> %dx%d for segmentation", img.width, img.height, *size)
    return img.resize(size, Image.Resampling.LANCZOS), True


# ---------------------------------------------------------------------------
# Classifier output parsing
# ---------------------------------------------------------------------------


def _decode_mask(raw, width: int, height: int) -> np.ndarray:
    """Normalise a classifier mask to a (height, width) uint8 array.

    Accepts base64 PNG strings, nested lists / 2-D arrays, or flat sequences of
    length width*height. Float masks with values in [0, 1] are scaled to 0-255.
    """
    if isinstance(raw, str):
        if raw.startswith("data:"):
            raw = raw.split(",", 1)[1]
        try:
            mask_img = Image.open(io.BytesIO(base64.b64decode(raw))).convert("L")
        except Exception as e:
            raise ClassifierError(f"Unreadable mask image: {e}") from e
        if mask_img.size != (width, height):
            mask_img = mask_img.resize((width, height), Image.Resampling.NEAREST)
        return np.asarray(mask_img, dtype=np.uint8)

    try:
        arr = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ClassifierError(f"Mask is not a numeric grid: {e}") from e
    if arr.size != width * height:
        raise ClassifierError(
            f"Mask has {arr.size} values, expected {width * height} ({width}x{height})"
        )
    arr = arr.reshape(height, width)
    if arr.size and arr.max() <= 1.0:
        arr = arr * 255
    return np.clip(np.rint(arr), 0, 255).astype(np.uint8)


def parse_segments(results, width: int, height: int) -> list[Segment]:
    if not isinstance(results, list):
        raise ClassifierError(f"Classifier returned {type(results).__name__}, expected a list")
    if not results:
        raise ClassifierError("Classifier returned no segments")

    segments = []
    for item in results:
        if not isinstance(item, dict) or "mask" not in item:
            raise ClassifierError(f"Malformed segment: {item!r:.80}")
        segments.append(Segment(label=str(item.get("label") or ""), mask=_decode_mask(item["mask"], width, height)))
    return segments


# ---------------------------------------------------------------------------
# Mask selection
# ---------------------------------------------------------------------------


def is_furniture_label(label: str) -> bool:
    label = label.lower()
    return any(word in label for word in FURNITURE_LABELS)


def select_furniture_segments(segments: list[Segment]) -> list[Segment]:
    return [seg for seg in segments if is_furniture_label(seg.label)]


def fallback_segment(segments: list[Segment]) -> Segment | None:
    for seg in segments:
        if seg.label.lower() not in NON_OBJECT_LABELS:
            return seg
    return None


def union_masks(masks: list[np.ndarray]) -> np.ndarray:
    return np.maximum.reduce([np.asarray(m, dtype=np.uint8) for m in masks])


def build_furniture_mask(segments: list[Segment], width: int, height: int) -> np.ndarray:
    chosen = select_furniture_segments(segments)
    if chosen:
        logger.info("Furniture segments: %s", [seg.label for seg in chosen])
        return union_masks([seg.mask for seg in chosen])

    fallback = fallback_segment(segments)
    if fallback is not None:
        logger.info("No furniture label found, falling back to segment %r", fallback.label)
        return fallback.mask.copy()

    logger.warning("No usable segment, output will be fully transparent")
    return np.zeros((height, width), dtype=np.uint8)


def apply_alpha_mask(rgba: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Multiply ``mask`` into the alpha channel; RGB stays as is."""
    out = np.array(rgba, dtype=np.uint8, copy=True)
    alpha = out[..., 3].astype(np.float64) * (mask.astype(np.float64) / 255)
    out[..., 3] = np.floor(alpha + 0.5).astype(np.uint8)
    return out


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


async def remove_background(image_bytes: bytes, classifier: Classifier | None = None) -> bytes:
    """Isolate the furniture in an image and return it as a PNG with alpha.

    Raises DecodeError for unreadable input and ClassifierError when the
    classifier fails or returns something unusable. There is no retry.
    """
    img, _ = resize_if_needed(decode_image(image_bytes))
    pixels = to_array(img)
    width, height = img.width, img.height

    classifier = classifier or HuggingFaceSegmenter()
    try:
        results = await classifier(encode_png(pixels))
    except MarketplaceError:
        raise
    except Exception as e:
        raise ClassifierError(f"Segmentation failed: {e}") from e

    segments = parse_segments(results, width, height)
    mask = build_furniture_mask(segments, width, height)
    return encode_png(apply_alpha_mask(pixels, mask))


def remove_white_background(image_bytes: bytes, threshold: int = BACKGROUND_THRESHOLD) -> bytes:
    """Local cut-out: make every near-white pixel fully transparent."""
    pixels = to_array(decode_image(image_bytes))
    pixels[is_background(pixels, threshold), 3] = 0
    return encode_png(pixels)
