# pattern_generator/__init__.py

# This file makes the 'pattern_generator' directory a Python package.
# We can also use it to define the public API of the package.

from .noise import NoiseEngine
from .generator import PatternGenerator, RenderResult, resolve_pattern_type
from .patterns import PATTERNS
from .presets import PresetCatalog, PresetLoadError, load_preset_catalog, randomize_parameters

__all__ = [
    "NoiseEngine",
    "PatternGenerator",
    "RenderResult",
    "resolve_pattern_type",
    "PATTERNS",
    "PresetCatalog",
    "PresetLoadError",
    "load_preset_catalog",
    "randomize_parameters",
]
