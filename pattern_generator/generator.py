# pattern_generator/generator.py

"""
================================================================================
CORE PATTERN GENERATOR
================================================================================
This module contains the main PatternGenerator class, which ties the noise
engine, the pattern drawing functions, the compositor and the post-filters
into a single render pipeline.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Parameters which can override the internal defaults.
      Expected keys include 'pattern_type', 'scale', 'palette', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - PixelBuffers (uint8, height x width x 4).
- Side Effects: Logs messages using the provided logger.
- Invariants: The generator never holds a seed of its own. Given the same
  permutation table, arguments and seed, the output is byte-identical.
================================================================================
"""

import logging
import time
from typing import NamedTuple

import numpy as np

from . import config as DEFAULTS
from .compositor import composite, new_buffer
from .filters import apply_filters
from .noise import NoiseEngine
from .patterns import PATTERNS, normalize_parameters

# Generators that scatter seeded grain and accept the deterministic_grain flag.
_GRAIN_PATTERNS = ('textured_matte', 'grid_panel')


class RenderResult(NamedTuple):
    """The three buffers one render produces."""
    pattern: np.ndarray
    composite: np.ndarray
    reference: np.ndarray


def resolve_pattern_type(pattern_type: str) -> str:
    """
    Maps a canonical pattern name or a host alias ('military', 'cable', ...)
    onto a registered generator name, or None when nothing matches.
    """
    if pattern_type in PATTERNS:
        return pattern_type
    return DEFAULTS.PATTERN_TYPE_MAP.get(pattern_type)


class PatternGenerator:
    """
    Renders procedural surface patterns and composites them over backgrounds.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger, permutation_table: np.ndarray = None):
        """
        Initializes the pattern generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            permutation_table (np.ndarray, optional): A pre-computed noise
                permutation table. If None, one is shuffled from
                config['noise_seed'] (or system entropy when that is unset).
        """
        self.logger = logger
        self.user_config = config or {}
        self.logger.info("PatternGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'pattern_type': self.user_config.get('pattern_type', DEFAULTS.DEFAULT_PATTERN_TYPE),
            'width': self.user_config.get('width', DEFAULTS.DEFAULT_CANVAS_WIDTH),
            'height': self.user_config.get('height', DEFAULTS.DEFAULT_CANVAS_HEIGHT),
            'scale': self.user_config.get('scale', DEFAULTS.DEFAULT_SCALE),
            'contrast': self.user_config.get('contrast', DEFAULTS.DEFAULT_CONTRAST),
            'brightness': self.user_config.get('brightness', DEFAULTS.DEFAULT_BRIGHTNESS),
            'palette': self.user_config.get('palette', []),
            'overlay_alpha': self.user_config.get('overlay_alpha', DEFAULTS.DEFAULT_OVERLAY_ALPHA),
            'show_overlay': self.user_config.get('show_overlay', True),
            'vision_mode': self.user_config.get('vision_mode', 'normal'),
            'edge_detection': self.user_config.get('edge_detection', False),
            'deterministic_grain': self.user_config.get('deterministic_grain', True),
            'noise_seed': self.user_config.get('noise_seed', None),
        }

        # --- Initialize Noise ---
        self.engine = NoiseEngine(seed=self.settings['noise_seed'], permutation_table=permutation_table)
        self.logger.info("PatternGenerator initialized.")

    def _setting(self, value, key):
        return self.settings[key] if value is None else value

    def generate(self, pattern_type: str = None, width: int = None, height: int = None,
                 scale: float = None, contrast: float = None, brightness: float = None,
                 palette=None, seed: float = 0.0) -> np.ndarray:
        """
        Draws a single pattern buffer. Arguments left as None fall back to the
        consolidated settings; the seed is always taken from the caller.
        """
        requested = self._setting(pattern_type, 'pattern_type')
        resolved = resolve_pattern_type(requested)
        if resolved is None:
            self.logger.warning(f"Unknown pattern type '{requested}', falling back to '{DEFAULTS.DEFAULT_PATTERN_TYPE}'.")
            resolved = DEFAULTS.DEFAULT_PATTERN_TYPE

        raw = (self._setting(width, 'width'), self._setting(height, 'height'),
               self._setting(scale, 'scale'), self._setting(contrast, 'contrast'),
               self._setting(brightness, 'brightness'), seed)
        params = normalize_parameters(*raw)
        if tuple(params[:5]) != tuple(raw[:5]):
            self.logger.debug(f"Parameters normalized from {raw[:5]} to {params[:5]}")
        width, height, scale, contrast, brightness, seed = params

        options = {}
        if resolved in _GRAIN_PATTERNS:
            options['deterministic_grain'] = self.settings['deterministic_grain']

        start_time = time.perf_counter()
        buffer = PATTERNS[resolved](self.engine, width, height, scale, contrast, brightness,
                                    self._setting(palette, 'palette'), seed, **options)
        elapsed = time.perf_counter() - start_time
        self.logger.debug(f"Generated '{resolved}' {width}x{height} (seed {seed}) in {elapsed:.3f}s")
        return buffer

    def render(self, pattern_type: str = None, width: int = None, height: int = None,
               scale: float = None, contrast: float = None, brightness: float = None,
               palette=None, seed: float = 0.0, background=None, overlay_alpha: float = None,
               show_overlay: bool = None, vision_mode: str = None, edge_detection: bool = None) -> RenderResult:
        """
        Runs the full pipeline: generate, composite over the optional
        background, then apply the vision and edge filters.

        Returns:
            RenderResult: the raw pattern, the filtered composite, and the
            filtered background-only reference view (black when there is no
            background) used for side-by-side comparison.
        """
        pattern = self.generate(pattern_type, width, height, scale, contrast, brightness, palette, seed)
        height, width = pattern.shape[:2]

        vision_mode = self._setting(vision_mode, 'vision_mode')
        edge_detection = self._setting(edge_detection, 'edge_detection')

        output = composite(background, pattern,
                           self._setting(overlay_alpha, 'overlay_alpha'),
                           self._setting(show_overlay, 'show_overlay'))
        if output is pattern:
            output = pattern.copy()
        apply_filters(output, vision_mode, edge_detection)

        reference = composite(background, new_buffer(width, height), 0.0, False)
        apply_filters(reference, vision_mode, edge_detection)

        return RenderResult(pattern=pattern, composite=output, reference=reference)
