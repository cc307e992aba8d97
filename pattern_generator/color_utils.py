# pattern_generator/color_utils.py

"""
================================================================================
SHARED COLOR UTILITIES
================================================================================
This module contains the color helpers shared by the pattern generators and
the post-filters: hex <-> RGB conversion, channel clamping, percentage
shading, luminance, and palette sanitization.

It is designed to be a pure, stateless utility with no dependencies on Pygame
or Pillow, allowing it to be used by the core, the CLI and the preview alike.
================================================================================
"""
import logging
import math
import re

import numpy as np

from . import config as DEFAULTS

logger = logging.getLogger(__name__)

# --- Luminance Weights (ITU-R BT.601) ---
LUMINANCE_WEIGHTS = (0.299, 0.587, 0.114)

FALLBACK_COLOR = '#000000'
_HEX_PATTERN = re.compile(r'^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$')


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def finite_or(value, default: float) -> float:
    """`value` as a float, or `default` when it is non-numeric or non-finite."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def hex_to_rgb(hex_color: str) -> tuple:
    """
    Parses '#RGB' or '#RRGGBB' into three 0-255 integers.
    Input is assumed to be sanitized already; no validation happens here.
    """
    hex_color = hex_color.lstrip('#')
    if len(hex_color) == 3:
        hex_color = ''.join(c * 2 for c in hex_color)
    return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Always lowercase, so round-trips through hex_to_rgb compare case-insensitively."""
    return '#' + ''.join(f"{int(c):02x}" for c in (r, g, b))


def shade(color, percent: float) -> tuple:
    """
    Scales each channel by (1 + percent/100), rounded and clamped to [0, 255].
    Negative percentages darken, positive ones lighten. Accepts a hex string
    or an RGB tuple.
    """
    rgb = hex_to_rgb(color) if isinstance(color, str) else color
    factor = 1 + percent / 100
    return tuple(clamp(_round_half_up(c * factor), 0, 255) for c in rgb)


def perceived_luminance(rgb) -> float:
    """Weighted channel sum in 0..255."""
    r, g, b = rgb
    return LUMINANCE_WEIGHTS[0] * r + LUMINANCE_WEIGHTS[1] * g + LUMINANCE_WEIGHTS[2] * b


def luminance_array(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel perceived luminance of an (..., 3+) array, as float64."""
    channels = rgb[..., :3].astype(np.float64)
    return (LUMINANCE_WEIGHTS[0] * channels[..., 0]
            + LUMINANCE_WEIGHTS[1] * channels[..., 1]
            + LUMINANCE_WEIGHTS[2] * channels[..., 2])


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Vectorized round-half-up, matching how the scalar helpers round."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def adjust_palette_contrast(colors: list, contrast: float) -> list:
    """
    Pushes palette colors apart (contrast > 1) or together (contrast < 1) in
    brightness while keeping each color's hue: every channel is rescaled by
    (0.5 + (lum - 0.5) * contrast) / lum, lum being normalized luminance.
    """
    if contrast == 1.0:
        return list(colors)
    adjusted = []
    for rgb in colors:
        lum = perceived_luminance(rgb) / 255
        target = 0.5 + (lum - 0.5) * contrast
        factor = target / (lum or 0.001)
        adjusted.append(tuple(clamp(_round_half_up(c * factor), 0, 255) for c in rgb))
    return adjusted


# --- Palette Sanitization ---
def is_valid_hex(color) -> bool:
    return isinstance(color, str) and _HEX_PATTERN.match(color) is not None


def sanitize_color(color) -> str:
    """Returns the color unchanged if it is '#RGB' or '#RRGGBB', else black."""
    if is_valid_hex(color):
        return color
    logger.warning(f"Invalid color input: {color!r}, using {FALLBACK_COLOR}")
    return FALLBACK_COLOR


def parse_palette(palette) -> list:
    """
    Normalizes a palette given either as comma-separated text or as an
    iterable of strings. Blank entries are dropped; the rest are sanitized.
    Order is preserved, since it indexes quantization and cycling.
    """
    if palette is None:
        return []
    entries = palette.split(',') if isinstance(palette, str) else palette
    cleaned = []
    for entry in entries:
        text = entry.strip() if isinstance(entry, str) else entry
        if text == '' or text is None:
            continue
        cleaned.append(sanitize_color(text))
    return cleaned


def palette_to_rgb(palette, default=None) -> list:
    """Sanitized palette as RGB tuples; an empty palette yields `default`."""
    colors = parse_palette(palette)
    if not colors:
        colors = list(default or [FALLBACK_COLOR])
        logger.debug(f"Empty palette, substituting default: {colors}")
    return [hex_to_rgb(c) for c in colors]


# --- Random Colors ---
def random_hex_color(rng: np.random.Generator) -> str:
    return f"#{int(rng.integers(0, 0xFFFFFF, endpoint=True)):06x}"


def random_palette(rng: np.random.Generator, count: int = None) -> list:
    """A palette of `count` random colors; 3-6 colors when count is None."""
    if count is None:
        lo, hi = DEFAULTS.RANDOM_PALETTE_SIZE_RANGE
        count = int(rng.integers(lo, hi, endpoint=True))
    return [random_hex_color(rng) for _ in range(count)]
