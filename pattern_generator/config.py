# pattern_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the pattern
generator. These values are used if they are not explicitly provided by the
caller's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RENDER.
Instead, pass a configuration dictionary to the PatternGenerator instance.
================================================================================
"""

# --- Working Canvas ---
# The fixed working resolution (16:9) the pattern constants are tuned for.
DEFAULT_CANVAS_WIDTH = 1280
DEFAULT_CANVAS_HEIGHT = 720
MIN_CANVAS_DIMENSION = 1
MAX_CANVAS_DIMENSION = 4096

# --- Parameter Domains (Rule 1) ---
# Every numeric parameter is clamped into its domain before use, never rejected.
SCALE_RANGE = (8.0, 300.0)
CONTRAST_RANGE = (0.2, 2.5)
BRIGHTNESS_RANGE = (-1.0, 1.0)
OVERLAY_ALPHA_RANGE = (0.0, 1.0)

DEFAULT_SCALE = 60.0
DEFAULT_CONTRAST = 1.0
DEFAULT_BRIGHTNESS = 0.0
DEFAULT_SEED = 0.0
DEFAULT_OVERLAY_ALPHA = 0.6
DEFAULT_PATTERN_TYPE = 'quantized_noise'

# --- Noise Generation ---
PERMUTATION_SIZE = 256
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0
# Offset added to the seed for the y axis so the two axes sample different rows.
SEED_Y_OFFSET = 100.0

# --- Textured Matte ---
MATTE_OCTAVES = 5
# Values > 1.0 keep the dark regions dark.
MATTE_DARKNESS_POWER = 1.3
MATTE_VIGNETTE_STRENGTH = 0.6
MATTE_GRAIN_COUNT = 500
MATTE_GRAIN_OPACITY = 0.01

# --- Banded Stripe ---
STRIPE_COUNT_DIVISOR = 12.0
STRIPE_COUNT_RANGE = (8, 25)
STRIPE_OFFSET_JITTER_PX = 12.0
STRIPE_WIDTH_JITTER_PX = 20.0
STRIPE_MIN_WIDTH_PX = 6.0
STRIPE_MAX_ANGLE_RAD = 0.08
# How far each band overdraws past its gradient, in band space (x, y).
STRIPE_BLEED_PX = (10.0, 30.0)
STRIPE_SHADE_STEPS = (-8.0, -16.0)

# --- Grid Panel ---
PANEL_COLS_RANGE = (4, 15)
PANEL_ROWS_RANGE = (2, 9)
PANEL_PADDING_PX = 60.0
PANEL_INSET_PX = 5.0
PANEL_CORNER_RADIUS_PX = 6
PANEL_JITTER_PX = 8.0
PANEL_VENT_COUNT = 6
PANEL_VENT_HEIGHT_PX = 6.0
PANEL_VENT_BASE_OPACITY = 0.45
PANEL_SCREW_RADIUS_PX = 4
PANEL_SCRATCH_COUNT = 600

# --- Blocky Mosaic ---
MOSAIC_PIXEL_SIZE_RANGE = (5, 100)
# (size multiplier, density) for the large, medium and small pixel layers.
MOSAIC_LAYERS = ((2.0, 0.6), (1.0, 0.8), (0.5, 1.0))
MOSAIC_MIN_PIXEL_SIZE = 2

# --- Quantized Noise ---
QUANTIZED_OCTAVES = 4

# --- Brightness Overlay ---
# Maximum opacity of the flat white/black overlay at |brightness| == 1.
BRIGHTNESS_OVERLAY_MAX_OPACITY = 0.3

# --- Default Palettes ---
# Substituted whenever the caller's palette is empty after sanitization.
DEFAULT_PALETTES = {
    'textured_matte': ['#000000'],
    'banded_stripe': ['#222222', '#111111'],
    'grid_panel': ['#101010', '#0b0b0b'],
    'blocky_mosaic': ['#2d3d1f', '#4a5a3c', '#5a6c3a', '#3d4a2c'],
    'quantized_noise': ['#111111'],
}

# --- Pattern Type Resolution ---
# Host-facing pattern names mapped onto the drawing function that renders them.
PATTERN_TYPE_MAP = {
    'military': 'quantized_noise',
    'cable': 'banded_stripe',
    'black-matte': 'textured_matte',
    'digital': 'blocky_mosaic',
    'hardware': 'grid_panel',
    'custom': 'quantized_noise',
}

# Preset catalog categories recommended for each host-facing pattern name.
PATTERN_PRESETS = {
    'military': ['military_camouflage'],
    'cable': ['cable_bundles'],
    'black-matte': ['black_matte'],
    'digital': ['digital_camouflage'],
    'hardware': ['hardware_panels'],
    'custom': ['military_camouflage', 'cable_bundles', 'hardware_panels', 'office_backgrounds'],
}

# --- Parameter Randomization ---
RANDOM_SEED_MAX = 10000.0
RANDOM_SCALE_RANGE = (20, 250)
RANDOM_CONTRAST_RANGE = (0.3, 2.2)
RANDOM_BRIGHTNESS_RANGE = (-0.8, 0.8)
RANDOM_PALETTE_SIZE_RANGE = (3, 6)
# Probability of drawing a catalog preset instead of a fully random palette.
RANDOM_PRESET_PROBABILITY = 0.7
