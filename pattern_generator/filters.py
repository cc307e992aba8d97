# pattern_generator/filters.py

"""
================================================================================
INSPECTION POST-FILTERS
================================================================================
Per-pixel filters applied to composited output for visual analysis:
color-vision-deficiency simulation and Sobel edge detection.

Data Contract:
---------------
- Inputs: a PixelBuffer (uint8, height x width x 4).
- Outputs: the same buffer, modified in place and returned.
- Side Effects: Mutates the buffer. No reference is kept.
- Invariants: The vision filter never touches alpha. The edge filter is
  destructive and must run after the vision filter when both are wanted.
================================================================================
"""
import logging

import numpy as np
from scipy.ndimage import correlate

from .color_utils import luminance_array, round_half_up

logger = logging.getLogger(__name__)

# --- Color Vision Matrices ---
# Rows are output channels (R', G', B') in terms of input (R, G, B).
COLOR_VISION_MATRICES = {
    'protanopia': np.array([
        [0.567, 0.433, 0.0],
        [0.558, 0.442, 0.0],
        [0.0, 0.242, 0.758],
    ]),
    'deuteranopia': np.array([
        [0.625, 0.375, 0.0],
        [0.7, 0.3, 0.0],
        [0.0, 0.3, 0.7],
    ]),
    'tritanopia': np.array([
        [0.95, 0.05, 0.0],
        [0.0, 0.433, 0.567],
        [0.0, 0.475, 0.525],
    ]),
}

COLOR_VISION_MODES = ('normal', 'protanopia', 'deuteranopia', 'tritanopia', 'monochrome')

# --- Sobel Kernels ---
SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.float64)
SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.float64)


def apply_color_vision_filter(buffer: np.ndarray, mode: str) -> np.ndarray:
    """
    Simulates a color vision deficiency by transforming every pixel's RGB.
    'normal' and unrecognized modes leave the buffer unchanged.
    """
    if mode == 'normal':
        return buffer

    if mode == 'monochrome':
        gray = luminance_array(buffer)
        transformed = np.repeat(gray[..., np.newaxis], 3, axis=-1)
    elif mode in COLOR_VISION_MATRICES:
        rgb = buffer[..., :3].astype(np.float64)
        transformed = rgb @ COLOR_VISION_MATRICES[mode].T
    else:
        logger.warning(f"Unknown color vision mode '{mode}', leaving image unchanged.")
        return buffer

    buffer[..., :3] = np.clip(round_half_up(transformed), 0, 255).astype(np.uint8)
    return buffer


def apply_edge_detection(buffer: np.ndarray) -> np.ndarray:
    """
    Replaces the image with its Sobel gradient magnitude, written to R, G and B.
    Only interior pixels get a value; the 1-pixel border is zeroed because the
    kernel needs a full 3x3 neighborhood. Alpha is set to 255 everywhere.
    """
    height, width = buffer.shape[:2]
    gray = luminance_array(buffer)

    magnitude = np.zeros((height, width), dtype=np.float64)
    if height >= 3 and width >= 3:
        gx = correlate(gray, SOBEL_X, mode='nearest')
        gy = correlate(gray, SOBEL_Y, mode='nearest')
        interior = np.sqrt(gx[1:-1, 1:-1] ** 2 + gy[1:-1, 1:-1] ** 2)
        magnitude[1:-1, 1:-1] = np.minimum(255.0, interior)

    # Clamped byte conversion rounds half to even.
    intensity = np.rint(magnitude).astype(np.uint8)
    buffer[..., 0] = intensity
    buffer[..., 1] = intensity
    buffer[..., 2] = intensity
    buffer[..., 3] = 255
    return buffer


def apply_filters(buffer: np.ndarray, vision_mode: str = 'normal', edge_detection: bool = False) -> np.ndarray:
    """Runs the vision filter, then the edge filter, in that fixed order."""
    apply_color_vision_filter(buffer, vision_mode)
    if edge_detection:
        apply_edge_detection(buffer)
    return buffer
