# pattern_generator/compositor.py

"""
================================================================================
COMPOSITING UTILITIES
================================================================================
Layers a generated pattern over a background image, and provides the flat
overlay blends the pattern generators finish with.

Data Contract:
---------------
- Inputs:
    - PixelBuffers: uint8 arrays of shape (height, width, 4).
    - Background images: Pillow images or RGB/RGBA arrays of any size.
- Outputs:
    - Opaque PixelBuffers of the requested size.
- Side Effects: `apply_flat_overlay` mutates the buffer it is given. Nothing
  else writes to its inputs.
================================================================================
"""
import logging

import numpy as np
from PIL import Image, ImageOps

from .color_utils import clamp, finite_or, round_half_up
from . import config as DEFAULTS

logger = logging.getLogger(__name__)


# --- Blending Modes (NumPy, channels in [0, 1]) ---
def blend_normal(base, layer): return layer
def blend_overlay(base, layer): return np.where(base < 0.5, 2.0 * base * layer, 1.0 - 2.0 * (1.0 - base) * (1.0 - layer))

BLEND_MODE_FUNCS = {
    "normal": blend_normal,
    "overlay": blend_overlay,
}


def new_buffer(width: int, height: int, rgb=(0, 0, 0)) -> np.ndarray:
    """An opaque PixelBuffer filled with a single color."""
    buffer = np.empty((height, width, 4), dtype=np.uint8)
    buffer[..., :3] = rgb
    buffer[..., 3] = 255
    return buffer


def apply_flat_overlay(buffer: np.ndarray, rgb, opacity: float, blend: str = "normal", mask: np.ndarray = None) -> np.ndarray:
    """
    Blends a flat color over `buffer` in place at the given opacity, using
    source-over for "normal" or the overlay formula for "overlay". If `mask`
    (bool, height x width) is given, only those pixels are touched.
    """
    if opacity <= 0:
        return buffer
    blend_func = BLEND_MODE_FUNCS.get(blend, blend_normal)

    if mask is None:
        base = buffer[..., :3].astype(np.float64) / 255.0
    else:
        base = buffer[mask, :3].astype(np.float64) / 255.0
    layer = np.broadcast_to(np.asarray(rgb, dtype=np.float64) / 255.0, base.shape)

    blended = blend_func(base, layer)
    out = base * (1.0 - opacity) + blended * opacity
    out = np.clip(round_half_up(out * 255.0), 0, 255).astype(np.uint8)

    if mask is None:
        buffer[..., :3] = out
    else:
        buffer[mask, :3] = out
    return buffer


def apply_brightness_overlay(buffer: np.ndarray, brightness: float) -> np.ndarray:
    """
    Lightens (white) or darkens (black) the whole buffer with a flat
    source-over fill at 0.3 * |brightness| opacity. Zero brightness is a no-op,
    which keeps palette-exact output intact.
    """
    if brightness == 0:
        return buffer
    opacity = abs(brightness) * DEFAULTS.BRIGHTNESS_OVERLAY_MAX_OPACITY
    rgb = (255, 255, 255) if brightness > 0 else (0, 0, 0)
    return apply_flat_overlay(buffer, rgb, opacity)


# --- Background Handling ---
def _to_pil(image) -> Image.Image:
    if isinstance(image, Image.Image):
        return image
    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.ndim == 2 or arr.shape[2] == 3:
        return Image.fromarray(arr)
    return Image.fromarray(np.ascontiguousarray(arr[..., :4]))


def cover_fit(image, width: int, height: int) -> np.ndarray:
    """
    Scales and center-crops `image` so it fills width x height while keeping
    its aspect ratio ("cover"). Returns a new opaque PixelBuffer; the input is
    never modified.
    """
    pil_image = _to_pil(image).convert('RGB')
    fitted = ImageOps.fit(pil_image, (width, height), method=Image.Resampling.BILINEAR, centering=(0.5, 0.5))
    buffer = new_buffer(width, height)
    buffer[..., :3] = np.asarray(fitted, dtype=np.uint8)
    return buffer


def composite(background, pattern: np.ndarray, alpha: float, show_overlay: bool) -> np.ndarray:
    """
    Combines an optional background with a pattern buffer.

    - No background: the pattern itself is returned.
    - Background with show_overlay False: the cover-fitted background.
    - Otherwise: the pattern blended over the background at global `alpha`
      times each pattern pixel's own alpha.

    Non-numeric or non-finite `alpha` is treated as 0.
    """
    if background is None:
        return pattern

    height, width = pattern.shape[:2]
    base = cover_fit(background, width, height)
    if not show_overlay:
        return base

    lo, hi = DEFAULTS.OVERLAY_ALPHA_RANGE
    alpha = clamp(finite_or(alpha, lo), lo, hi)

    weight = alpha * pattern[..., 3:4].astype(np.float64) / 255.0
    bg_rgb = base[..., :3].astype(np.float64)
    fg_rgb = pattern[..., :3].astype(np.float64)
    mixed = bg_rgb * (1.0 - weight) + fg_rgb * weight
    base[..., :3] = np.clip(round_half_up(mixed), 0, 255).astype(np.uint8)
    return base
