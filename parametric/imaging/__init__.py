from .color_transform import apply_color_transform, recolor_pixels
from .segmentation import remove_background, remove_white_background

__all__ = [
    "apply_color_transform",
    "recolor_pixels",
    "remove_background",
    "remove_white_background",
]
