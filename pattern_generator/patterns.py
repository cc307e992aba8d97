# pattern_generator/patterns.py

"""
================================================================================
PATTERN GENERATORS
================================================================================
The drawing functions for every pattern family. Each one turns a noise field,
scale/contrast/brightness parameters and a palette into a full-canvas image.

Data Contract:
---------------
- Inputs:
    - engine: a NoiseEngine (owns the permutation table).
    - width, height: canvas size in pixels.
    - scale, contrast, brightness: clamped into their domains before use.
    - palette: hex strings (or comma-separated text); empty -> default palette.
    - seed: scalar offset applied to noise coordinates.
- Outputs:
    - A new PixelBuffer (uint8, height x width x 4), alpha 255 everywhere.
- Side Effects: None. The caller owns the returned buffer.
- Invariants: Identical arguments (and the same engine table) produce
  byte-identical output, unless deterministic grain is explicitly disabled.
================================================================================
"""
import math

import numpy as np
from numba import njit
from PIL import Image, ImageDraw

from . import config as DEFAULTS
from .color_utils import adjust_palette_contrast, clamp, finite_or, palette_to_rgb, round_half_up, shade
from .compositor import apply_brightness_overlay, apply_flat_overlay, new_buffer
from .noise import NoiseEngine

# Salts that keep the grain streams of different generators apart.
_MATTE_GRAIN_SALT = 1
_PANEL_SCRATCH_SALT = 2


# --- Parameter Normalization (Rule 1) ---
def normalize_parameters(width, height, scale, contrast, brightness, seed) -> tuple:
    """Clamps every numeric parameter into its documented domain."""
    lo_dim, hi_dim = DEFAULTS.MIN_CANVAS_DIMENSION, DEFAULTS.MAX_CANVAS_DIMENSION
    width = int(clamp(round(finite_or(width, DEFAULTS.DEFAULT_CANVAS_WIDTH)), lo_dim, hi_dim))
    height = int(clamp(round(finite_or(height, DEFAULTS.DEFAULT_CANVAS_HEIGHT)), lo_dim, hi_dim))
    scale = clamp(finite_or(scale, DEFAULTS.DEFAULT_SCALE), *DEFAULTS.SCALE_RANGE)
    contrast = clamp(finite_or(contrast, DEFAULTS.DEFAULT_CONTRAST), *DEFAULTS.CONTRAST_RANGE)
    brightness = clamp(finite_or(brightness, DEFAULTS.DEFAULT_BRIGHTNESS), *DEFAULTS.BRIGHTNESS_RANGE)
    seed = finite_or(seed, DEFAULTS.DEFAULT_SEED)
    return width, height, scale, contrast, brightness, seed


def _half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _seeded_coordinates(width: int, height: int, scale: float, seed: float):
    xs = (np.arange(width) + seed) / scale
    ys = (np.arange(height) + seed + DEFAULTS.SEED_Y_OFFSET) / scale
    return np.meshgrid(xs, ys)


# --- Grain & Scratches ---
def _grain_rng(seed: float, salt: int, deterministic: bool) -> np.random.Generator:
    if not deterministic:
        return np.random.default_rng()
    seed_bits = int(np.float64(seed).view(np.uint64))
    return np.random.default_rng([seed_bits, salt])


def _scatter_streaks(buffer: np.ndarray, rng: np.random.Generator, count: int, opacity: float) -> np.ndarray:
    """
    Overlay-blends `count` faint white streaks, 1-2 px wide and 1 px tall, at
    random positions. At 1% opacity they are near-invisible texture grain.
    """
    if count <= 0:
        return buffer
    height, width = buffer.shape[:2]
    xs = np.floor(rng.random(count) * width).astype(np.int64)
    ys = np.floor(rng.random(count) * height).astype(np.int64)
    lengths = rng.integers(1, 2, size=count, endpoint=True)

    mask = np.zeros((height, width), dtype=bool)
    mask[ys, xs] = True
    wide = (lengths == 2) & (xs + 1 < width)
    mask[ys[wide], xs[wide] + 1] = True

    return apply_flat_overlay(buffer, (255, 255, 255), opacity, blend="overlay", mask=mask)


# --- 1. Textured Matte ---
def textured_matte(engine: NoiseEngine, width, height, scale, contrast, brightness, palette, seed,
                   deterministic_grain: bool = True) -> np.ndarray:
    """
    Tinted monochrome turbulence under a radial vignette, finished with a
    sparse layer of grain streaks.

    The grain is seeded from `seed` by default so the whole image is
    reproducible; pass deterministic_grain=False to scatter it from fresh
    entropy on every call.
    """
    width, height, scale, contrast, brightness, seed = normalize_parameters(
        width, height, scale, contrast, brightness, seed)
    base_rgb = np.array(palette_to_rgb(palette, DEFAULTS.DEFAULT_PALETTES['textured_matte'])[0], dtype=np.float64)

    x_grid, y_grid = _seeded_coordinates(width, height, scale, seed)
    n = engine.turbulence(x_grid, y_grid, octaves=DEFAULTS.MATTE_OCTAVES)
    n = np.power(n, DEFAULTS.MATTE_DARKNESS_POWER)

    cx, cy = width / 2, height / 2
    dx = (np.arange(width) - cx) / cx
    dy = (np.arange(height) - cy) / cy
    vignette = 1 - np.sqrt(dx[np.newaxis, :] ** 2 + dy[:, np.newaxis] ** 2) * DEFAULTS.MATTE_VIGNETTE_STRENGTH

    brightness_factor = 1.0 + brightness * 0.2
    factor = np.clip((n * 0.4 + 0.8) * vignette * contrast * brightness_factor, 0, 2)

    buffer = new_buffer(width, height)
    buffer[..., :3] = np.clip(round_half_up(factor[..., np.newaxis] * base_rgb), 0, 255).astype(np.uint8)

    rng = _grain_rng(seed, _MATTE_GRAIN_SALT, deterministic_grain)
    return _scatter_streaks(buffer, rng, DEFAULTS.MATTE_GRAIN_COUNT, DEFAULTS.MATTE_GRAIN_OPACITY)


# --- 2. Banded Stripe ---
def _gradient_colors(t: np.ndarray, stops) -> np.ndarray:
    """Three evenly spaced color stops sampled at positions t in [0, 1]."""
    c0, c1, c2 = (np.asarray(s, dtype=np.float64) for s in stops)
    s = t[..., np.newaxis] * 2.0
    first = c0 + (c1 - c0) * s
    second = c1 + (c2 - c1) * (s - 1.0)
    return np.where(s <= 1.0, first, second)


def _paint_band(buffer: np.ndarray, base_x: float, band_width: float, angle: float, stops) -> None:
    """
    Fills one band: a rectangle rotated by `angle` about (base_x, 0), shaded
    across its width by a linear gradient. Later bands paint over earlier ones.
    """
    height, width = buffer.shape[:2]
    bleed_x, bleed_y = DEFAULTS.STRIPE_BLEED_PX
    sin_a, cos_a = math.sin(angle), math.cos(angle)

    reach = abs(sin_a) * (height + bleed_y) + bleed_x
    x0 = max(0, int(math.floor(base_x - reach)) - 1)
    x1 = min(width, int(math.ceil(base_x + band_width + reach)) + 1)
    if x0 >= x1:
        return

    dx = (np.arange(x0, x1) + 0.5 - base_x)[np.newaxis, :]
    dy = (np.arange(height) + 0.5)[:, np.newaxis]
    local_x = dx * cos_a + dy * sin_a
    local_y = -dx * sin_a + dy * cos_a

    inside = ((local_x >= -bleed_x) & (local_x < band_width + bleed_x)
              & (local_y >= -bleed_y) & (local_y < height + bleed_y))
    if not inside.any():
        return

    t = np.clip(local_x / band_width, 0.0, 1.0)
    colors = np.clip(round_half_up(_gradient_colors(t, stops)), 0, 255).astype(np.uint8)
    region = buffer[:, x0:x1, :3]
    region[inside] = colors[inside]


def banded_stripe(engine: NoiseEngine, width, height, scale, contrast, brightness, palette, seed) -> np.ndarray:
    """Vertical cable-like bands, each noise-perturbed, shaded and slightly tilted."""
    width, height, scale, contrast, brightness, seed = normalize_parameters(
        width, height, scale, contrast, brightness, seed)
    colors = palette_to_rgb(palette, DEFAULTS.DEFAULT_PALETTES['banded_stripe'])

    gray = clamp(11 + _half_up(brightness * 15), 0, 40)
    buffer = new_buffer(width, height, (gray, gray, gray))

    stripes = clamp(int(math.floor(scale / DEFAULTS.STRIPE_COUNT_DIVISOR)), *DEFAULTS.STRIPE_COUNT_RANGE)
    dark_step, darker_step = DEFAULTS.STRIPE_SHADE_STEPS
    for i in range(stripes):
        t = i + seed
        base_x = (i / stripes) * width + engine.noise2(t * 0.3, t * 0.1) * DEFAULTS.STRIPE_OFFSET_JITTER_PX
        band_width = max(DEFAULTS.STRIPE_MIN_WIDTH_PX,
                         width / stripes * 0.95 + engine.noise2(t, 10 + seed) * DEFAULTS.STRIPE_WIDTH_JITTER_PX)
        angle = engine.noise2(t, t * 0.5) * DEFAULTS.STRIPE_MAX_ANGLE_RAD

        color = colors[i % len(colors)]
        stops = (color, shade(color, dark_step * contrast), shade(color, darker_step * contrast))
        _paint_band(buffer, base_x, band_width, angle, stops)

    # Fine dark overlay, lighter as brightness rises.
    overlay_opacity = clamp(0.12 - brightness * 0.05, 0.02, 0.25)
    return apply_flat_overlay(buffer, (0, 0, 0), overlay_opacity, blend="overlay")


# --- 3. Grid Panel ---
def _panel_grid_size(scale: float) -> tuple:
    cols = clamp(int(math.floor(20 - scale / 20)), *DEFAULTS.PANEL_COLS_RANGE)
    rows = clamp(int(math.floor(12 - scale / 40)), *DEFAULTS.PANEL_ROWS_RANGE)
    return cols, rows


def grid_panel(engine: NoiseEngine, width, height, scale, contrast, brightness, palette, seed,
               deterministic_grain: bool = True) -> np.ndarray:
    """
    Equipment-panel look: a grid of rounded panels with vent slits and two
    screws each, over a dark background, finished with faint scratches.
    """
    width, height, scale, contrast, brightness, seed = normalize_parameters(
        width, height, scale, contrast, brightness, seed)
    default_palette = DEFAULTS.DEFAULT_PALETTES['grid_panel']
    colors = palette_to_rgb(palette, default_palette)
    panel_color = colors[0]
    screw_color = colors[1] if len(colors) > 1 else palette_to_rgb(default_palette)[1]

    gray = clamp(15 + _half_up(brightness * 20), 0, 50)
    image = Image.new('RGB', (width, height), (gray, gray, gray))
    draw = ImageDraw.Draw(image, 'RGBA')

    cols, rows = _panel_grid_size(scale)
    # Padding is tuned for the working canvas and shrinks with smaller ones.
    ratio = min(1.0, width / DEFAULTS.DEFAULT_CANVAS_WIDTH, height / DEFAULTS.DEFAULT_CANVAS_HEIGHT)
    pad = DEFAULTS.PANEL_PADDING_PX * ratio
    cell_w = (width - pad * 2) / cols
    cell_h = (height - pad * 2) / rows

    inset = DEFAULTS.PANEL_INSET_PX
    vent_count = DEFAULTS.PANEL_VENT_COUNT
    vent_h = DEFAULTS.PANEL_VENT_HEIGHT_PX
    vent_alpha = _half_up(255 * clamp(DEFAULTS.PANEL_VENT_BASE_OPACITY + 0.1 * contrast, 0.0, 1.0))
    screw_r = DEFAULTS.PANEL_SCREW_RADIUS_PX
    offset_x, offset_y = seed, seed + DEFAULTS.SEED_Y_OFFSET

    for r in range(rows):
        for c in range(cols):
            x = pad + c * cell_w
            y = pad + r * cell_h
            jitter = engine.noise2((c + offset_x) * 0.8, (r + offset_y) * 0.8) * DEFAULTS.PANEL_JITTER_PX
            cw = cell_w - 10 + jitter
            ch = cell_h - 10 + jitter
            if cw < 1 or ch < 1:
                continue

            _rounded_rect(draw, x + inset, y + inset, cw, ch, DEFAULTS.PANEL_CORNER_RADIUS_PX, panel_color)

            vent_w = cw / vent_count - 6
            if vent_w >= 1:
                for v in range(vent_count):
                    vx = x + 8 + v * (cw / vent_count) + engine.noise2(v + offset_x, c + offset_y) * 4
                    _rect(draw, vx, y + ch / 2 - vent_h / 2, vent_w, vent_h, (0, 0, 0, vent_alpha))

            _circle(draw, x + 12, y + 12, screw_r, screw_color)
            _circle(draw, x + cw - 8, y + ch - 8, screw_r, screw_color)

    buffer = new_buffer(width, height)
    buffer[..., :3] = np.asarray(image, dtype=np.uint8)

    rng = _grain_rng(seed, _PANEL_SCRATCH_SALT, deterministic_grain)
    scratch_count = _half_up(DEFAULTS.PANEL_SCRATCH_COUNT * contrast)
    return _scatter_streaks(buffer, rng, scratch_count, DEFAULTS.MATTE_GRAIN_OPACITY)


def _opaque(rgb) -> tuple:
    return tuple(int(c) for c in rgb[:3]) + (255,)


def _rect(draw: ImageDraw.ImageDraw, x: float, y: float, w: float, h: float, fill) -> None:
    x0, y0 = _half_up(x), _half_up(y)
    x1, y1 = _half_up(x + w) - 1, _half_up(y + h) - 1
    if x1 >= x0 and y1 >= y0:
        draw.rectangle([x0, y0, x1, y1], fill=tuple(fill))


def _rounded_rect(draw: ImageDraw.ImageDraw, x: float, y: float, w: float, h: float, radius: int, fill) -> None:
    x0, y0 = _half_up(x), _half_up(y)
    x1, y1 = _half_up(x + w) - 1, _half_up(y + h) - 1
    if x1 < x0 or y1 < y0:
        return
    radius = max(0, min(radius, (x1 - x0) // 2, (y1 - y0) // 2))
    draw.rounded_rectangle([x0, y0, x1, y1], radius=radius, fill=_opaque(fill))


def _circle(draw: ImageDraw.ImageDraw, cx: float, cy: float, radius: int, fill) -> None:
    cx, cy = _half_up(cx), _half_up(cy)
    draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=_opaque(fill))


# --- 4. Blocky Mosaic ---
@njit
def _fill_rects(buffer, xs, ys, ws, hs, colors):
    """Paints axis-aligned opaque rectangles in order, clipped to the buffer."""
    height, width = buffer.shape[0], buffer.shape[1]
    for k in range(xs.shape[0]):
        x0 = max(xs[k], 0)
        y0 = max(ys[k], 0)
        x1 = min(xs[k] + ws[k], width)
        y1 = min(ys[k] + hs[k], height)
        for yy in range(y0, y1):
            for xx in range(x0, x1):
                buffer[yy, xx, 0] = colors[k, 0]
                buffer[yy, xx, 1] = colors[k, 1]
                buffer[yy, xx, 2] = colors[k, 2]


def mosaic_pixel_size(scale: float) -> int:
    return clamp(int(math.floor(scale / 3)), *DEFAULTS.MOSAIC_PIXEL_SIZE_RANGE)


def blocky_mosaic(engine: NoiseEngine, width, height, scale, contrast, brightness, palette, seed) -> np.ndarray:
    """
    Digital camouflage: three layers of rectangular "pixels" (large, medium,
    small) whose occupancy, offset, size and color all come from noise.

    Every decision samples the noise field at its own coordinate offset so
    position, size and color stay decorrelated. With brightness 0 every pixel
    holds exactly one of the contrast-adjusted palette colors.
    """
    width, height, scale, contrast, brightness, seed = normalize_parameters(
        width, height, scale, contrast, brightness, seed)
    colors = palette_to_rgb(palette, DEFAULTS.DEFAULT_PALETTES['blocky_mosaic'])
    adjusted = np.array(adjust_palette_contrast(colors, contrast), dtype=np.uint8)
    n_colors = len(adjusted)

    # Pre-fill with the first color so no background shows between pixels.
    buffer = new_buffer(width, height, adjusted[0])
    base_size = mosaic_pixel_size(scale)

    for size_multiplier, density in DEFAULTS.MOSAIC_LAYERS:
        pixel_size = max(DEFAULTS.MOSAIC_MIN_PIXEL_SIZE, int(math.floor(base_size * size_multiplier)))
        cols = math.ceil(width / pixel_size) + 1
        rows = math.ceil(height / pixel_size) + 1

        col_idx, row_idx = np.meshgrid(np.arange(cols), np.arange(rows))
        c = col_idx + seed
        r = row_idx + seed

        occupancy = (engine.noise_grid(c * 0.1, r * 0.1) + 1) / 2
        occupied = occupancy > (1 - density)
        if not occupied.any():
            continue

        offset_x = engine.noise_grid(c * 0.3, r * 0.3)
        offset_y = engine.noise_grid(c * 0.3 + 100, r * 0.3 + 100)
        size_w = (engine.noise_grid(c * 0.5, r * 0.5 + 200) + 1) / 2
        size_h = (engine.noise_grid(c * 0.5 + 300, r * 0.5 + 300) + 1) / 2
        color_noise = (engine.noise_grid(c * 0.7 + 500, r * 0.7 + 500) + 1) / 2

        xs = np.floor(col_idx * pixel_size + offset_x * pixel_size * 0.3).astype(np.int64)
        ys = np.floor(row_idx * pixel_size + offset_y * pixel_size * 0.3).astype(np.int64)
        ws = np.ceil(pixel_size * (0.8 + size_w * 0.4)).astype(np.int64)
        hs = np.ceil(pixel_size * (0.8 + size_h * 0.4)).astype(np.int64)
        color_idx = np.floor(color_noise * n_colors).astype(np.int64) % n_colors

        _fill_rects(buffer, xs[occupied], ys[occupied], ws[occupied], hs[occupied],
                    np.ascontiguousarray(adjusted[color_idx[occupied]]))

    return apply_brightness_overlay(buffer, brightness)


# --- 5. Quantized Noise ---
def quantized_noise(engine: NoiseEngine, width, height, scale, contrast, brightness, palette, seed) -> np.ndarray:
    """Multi-octave noise quantized onto the palette, darkest index first."""
    width, height, scale, contrast, brightness, seed = normalize_parameters(
        width, height, scale, contrast, brightness, seed)
    colors = np.array(palette_to_rgb(palette, DEFAULTS.DEFAULT_PALETTES['quantized_noise']), dtype=np.uint8)

    x_grid, y_grid = _seeded_coordinates(width, height, scale, seed)
    n = engine.turbulence(x_grid, y_grid, octaves=DEFAULTS.QUANTIZED_OCTAVES)
    n = np.clip((n - 0.5) * contrast + 0.5, 0, 1)

    indices = np.floor(n * (len(colors) - 1)).astype(np.int64)
    buffer = new_buffer(width, height)
    buffer[..., :3] = colors[indices]

    return apply_brightness_overlay(buffer, brightness)


# --- Registry ---
PATTERNS = {
    'textured_matte': textured_matte,
    'banded_stripe': banded_stripe,
    'grid_panel': grid_panel,
    'blocky_mosaic': blocky_mosaic,
    'quantized_noise': quantized_noise,
}
