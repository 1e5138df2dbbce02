"""Recolor furniture product photos by color and finish name.

Only the product is recolored: near-white pixels are treated as background and
left alone, and the alpha channel is never touched. Every step works on
float arrays of shape (N, 3) holding 0-255 channel values and rounds its
output half-up, so chained steps see integer pixels just like a canvas would.
"""

import logging

import numpy as np

from ..config import BACKGROUND_THRESHOLD
from .io import decode_image, encode_png, to_array

logger = logging.getLogger(__name__)


def round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


# ---------------------------------------------------------------------------
# HSL conversion (hue in degrees, saturation/lightness in percent)
# ---------------------------------------------------------------------------


def rgb_to_hsl(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    l = (mx + mn) / 2
    d = mx - mn
    chromatic = d != 0
    safe_d = np.where(chromatic, d, 1.0)

    denom = np.where(l > 0.5, 2 - mx - mn, mx + mn)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    h = np.select(
        [mx == r, mx == g],
        [((g - b) / safe_d + np.where(g < b, 6, 0)) / 6, ((b - r) / safe_d + 2) / 6],
        default=((r - g) / safe_d + 4) / 6,
    )
    h = np.where(chromatic, h, 0.0)

    return h * 360, s * 100, l * 100


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def hsl_to_rgb(h, s, l) -> np.ndarray:
    """HSL -> RGB, rounded half-up. Values are not clamped."""
    h, s, l = np.broadcast_arrays(
        np.asarray(h, dtype=np.float64) / 360,
        np.asarray(s, dtype=np.float64) / 100,
        np.asarray(l, dtype=np.float64) / 100,
    )
    q = np.where(l < 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q

    r = _hue_to_channel(p, q, h + 1 / 3)
    g = _hue_to_channel(p, q, h)
    b = _hue_to_channel(p, q, h - 1 / 3)

    gray = s == 0
    rgb = np.stack([np.where(gray, l, r), np.where(gray, l, g), np.where(gray, l, b)], axis=-1)
    return round_half_up(rgb * 255)


# ---------------------------------------------------------------------------
# Color + finish tables
# ---------------------------------------------------------------------------


def is_background(rgb: np.ndarray, threshold: int = BACKGROUND_THRESHOLD) -> np.ndarray:
    """True where all three channels are brighter than ``threshold``."""
    return np.all(np.asarray(rgb)[..., :3] > threshold, axis=-1)


def transform_color(rgb: np.ndarray, color: str) -> np.ndarray:
    rgb = np.asarray(rgb, dtype=np.float64)
    name = (color or "").lower()

    if name == "black":
        return round_half_up(rgb * 0.15)

    if name == "white":
        return np.minimum(255, round_half_up(rgb * 1.5 + 50))

    if name == "gray":
        gray = round_half_up(rgb.mean(axis=-1) * 0.7 + 40)
        return np.repeat(gray[..., np.newaxis], 3, axis=-1)

    if name in ("brown", "wood finish"):
        _, s, l = rgb_to_hsl(rgb)
        return hsl_to_rgb(30, np.minimum(70, s), l * 0.8)

    if name == "blue":
        _, s, l = rgb_to_hsl(rgb)
        return hsl_to_rgb(220, np.minimum(80, s + 20), l)

    if name == "beige":
        _, _, l = rgb_to_hsl(rgb)
        return hsl_to_rgb(40, 30, np.maximum(l, 70))

    return rgb


def apply_finish(rgb: np.ndarray, finish: str, rng: np.random.Generator | None = None) -> np.ndarray:
    """Apply a surface finish after recoloring.

    "textured" draws one jitter in [-5, 5) per pixel from ``rng``. Without an
    injected generator a fresh unseeded one is used, so repeated calls differ.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    name = (finish or "").lower()

    if name == "glossy":
        return np.minimum(255, round_half_up(rgb * 1.15 + 10))

    if name == "textured":
        rng = rng or np.random.default_rng()
        variation = (rng.random(rgb.shape[:-1]) - 0.5) * 10
        return round_half_up(np.clip(rgb + variation[..., np.newaxis], 0, 255))

    if name == "polished":
        return np.minimum(255, round_half_up(rgb * 1.08))

    if name == "metallic":
        h, s, l = rgb_to_hsl(rgb)
        return hsl_to_rgb(h, s * 0.7, l * 1.1)

    # matte, natural, anything else
    return rgb


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def recolor_pixels(
    rgba: np.ndarray,
    color: str,
    finish: str,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Return a recolored copy of an (H, W, 4) uint8 image."""
    out = np.array(rgba, dtype=np.uint8, copy=True)
    rgb = out[..., :3]
    foreground = ~is_background(rgb)

    pixels = rgb[foreground].astype(np.float64)
    if pixels.size:
        pixels = transform_color(pixels, color)
        pixels = apply_finish(pixels, finish, rng)
        rgb[foreground] = np.clip(pixels, 0, 255).astype(np.uint8)

    return out


def apply_color_transform(
    image_bytes: bytes,
    color: str,
    finish: str,
    rng: np.random.Generator | None = None,
) -> bytes:
    """Decode an image, recolor its non-background pixels, and return PNG bytes."""
    img = decode_image(image_bytes)
    pixels = to_array(img)
    logger.info("Recoloring %dx%d image: color=%s finish=%s", img.width, img.height, color, finish)
    return encode_png(recolor_pixels(pixels, color, finish, rng))
