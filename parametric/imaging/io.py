"""Decode/encode helpers shared by the imaging modules."""

import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError


def decode_image(data: bytes) -> Image.Image:
    """Decode any Pillow-readable image into RGBA."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return img.convert("RGBA")


def to_array(img: Image.Image) -> np.ndarray:
    """RGBA image -> (height, width, 4) uint8 array."""
    return np.asarray(img.convert("RGBA"), dtype=np.uint8).copy()


def encode_png(pixels: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels.astype(np.uint8)).save(buf, format="PNG")
    return buf.getvalue()
