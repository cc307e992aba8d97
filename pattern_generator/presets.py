# pattern_generator/presets.py

"""
================================================================================
PRESET PALETTES & PARAMETER RANDOMIZATION
================================================================================
Loads the named palette catalog and draws random parameter sets from it.

Data Contract:
---------------
- Inputs:
    - A JSON catalog: {"categories": {key: [{"id", "label", "colors"}]}}.
    - A NumPy Generator for every random draw.
- Outputs:
    - PresetCatalog objects and plain parameter dicts.
- Side Effects: Reads the catalog file once, at load time.
================================================================================
"""
import json
import logging
import os
from typing import NamedTuple

import numpy as np

from . import config as DEFAULTS
from .color_utils import parse_palette, random_palette

logger = logging.getLogger(__name__)

# The catalog bundled inside the package.
DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'presets.json')


class PresetLoadError(Exception):
    """Raised when a preset catalog is missing or cannot be parsed."""


class Preset(NamedTuple):
    id: str
    label: str
    colors: list
    category: str


class PresetCatalog:
    """An ordered, read-only collection of palette presets grouped by category."""
    def __init__(self, categories: dict):
        self._categories = {}
        for key, entries in categories.items():
            presets = []
            for index, entry in enumerate(entries):
                preset_id = entry.get('id') or f"{key}-{index}"
                presets.append(Preset(
                    id=preset_id,
                    label=entry.get('label') or preset_id,
                    colors=parse_palette(entry.get('colors') or []),
                    category=key,
                ))
            self._categories[key] = presets

    @property
    def categories(self) -> dict:
        return {key: list(presets) for key, presets in self._categories.items()}

    def __len__(self):
        return sum(len(presets) for presets in self._categories.values())

    def palettes_for(self, pattern_type: str) -> list:
        """
        All presets recommended for a pattern type, in catalog order. Accepts
        host names ('military') as well as generator names ('blocky_mosaic').
        """
        keys = DEFAULTS.PATTERN_PRESETS.get(pattern_type)
        if keys is None:
            keys = []
            for alias, target in DEFAULTS.PATTERN_TYPE_MAP.items():
                if target == pattern_type:
                    keys.extend(k for k in DEFAULTS.PATTERN_PRESETS.get(alias, []) if k not in keys)
        presets = []
        for key in keys:
            presets.extend(self._categories.get(key, []))
        return presets

    def find(self, preset_id: str) -> Preset:
        for presets in self._categories.values():
            for preset in presets:
                if preset.id == preset_id:
                    return preset
        return None


def load_preset_catalog(path) -> PresetCatalog:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise PresetLoadError(f"Preset catalog not found: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PresetLoadError(f"Could not parse preset catalog '{path}': {e}") from e

    categories = data.get('categories') if isinstance(data, dict) else None
    if not isinstance(categories, dict):
        raise PresetLoadError(f"Preset catalog '{path}' has no 'categories' object")

    catalog = PresetCatalog(categories)
    logger.info(f"Loaded {len(catalog)} presets in {len(categories)} categories from '{path}'")
    return catalog


def _random_float(rng: np.random.Generator, bounds: tuple, decimals: int = 2) -> float:
    return round(float(rng.uniform(*bounds)), decimals)


def randomize_parameters(rng: np.random.Generator, pattern_type: str, catalog: PresetCatalog = None) -> dict:
    """
    Draws a fresh seed, palette, scale, contrast and brightness. The pattern
    type is kept as given.

    The palette comes from one of the pattern type's catalog presets with
    probability RANDOM_PRESET_PROBABILITY, otherwise it is 3-6 random colors.
    """
    seed = float(rng.uniform(0, DEFAULTS.RANDOM_SEED_MAX))

    candidates = catalog.palettes_for(pattern_type) if catalog is not None else []
    preset_id = None
    if candidates and rng.random() < DEFAULTS.RANDOM_PRESET_PROBABILITY:
        preset = candidates[int(rng.integers(0, len(candidates)))]
        palette = list(preset.colors)
        preset_id = preset.id
    else:
        palette = random_palette(rng)

    lo, hi = DEFAULTS.RANDOM_SCALE_RANGE
    return {
        'pattern_type': pattern_type,
        'seed': seed,
        'palette': palette,
        'preset_id': preset_id,
        'scale': int(rng.integers(lo, hi, endpoint=True)),
        'contrast': _random_float(rng, DEFAULTS.RANDOM_CONTRAST_RANGE),
        'brightness': _random_float(rng, DEFAULTS.RANDOM_BRIGHTNESS_RANGE),
    }
