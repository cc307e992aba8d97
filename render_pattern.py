# render_pattern.py

"""
================================================================================
OFFLINE PATTERN RENDER SCRIPT
================================================================================
Command-line tool for rendering procedural surface patterns to PNG files,
optionally composited over a background photo and passed through the
inspection filters.

Usage:
    python render_pattern.py --pattern digital --seed 42 --output out.png
    python render_pattern.py --config configs/example_render.json --count 8 --output renders/
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time

import numpy as np
from PIL import Image, UnidentifiedImageError
from tqdm import tqdm

# Add project root to Python path to allow importing from pattern_generator
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from pattern_generator.generator import PatternGenerator
from pattern_generator.filters import COLOR_VISION_MODES
from pattern_generator.patterns import PATTERNS
from pattern_generator.presets import DEFAULT_CATALOG_PATH, PresetLoadError, load_preset_catalog, randomize_parameters
from pattern_generator import config as DEFAULTS

PATTERN_CHOICES = sorted(set(PATTERNS) | set(DEFAULTS.PATTERN_TYPE_MAP))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline renderer for procedural camouflage and surface patterns.")
    parser.add_argument("--config", type=str, help="JSON file with a 'pattern_parameters' section.")
    parser.add_argument("--pattern", choices=PATTERN_CHOICES, help="Pattern type or alias to render.")
    parser.add_argument("--width", type=int, help="Output width in pixels.")
    parser.add_argument("--height", type=int, help="Output height in pixels.")
    parser.add_argument("--scale", type=float, help=f"Feature size, clamped to {DEFAULTS.SCALE_RANGE}.")
    parser.add_argument("--contrast", type=float, help=f"Contrast factor, clamped to {DEFAULTS.CONTRAST_RANGE}.")
    parser.add_argument("--brightness", type=float, help=f"Brightness shift, clamped to {DEFAULTS.BRIGHTNESS_RANGE}.")
    parser.add_argument("--palette", type=str, help="Comma-separated hex colors, e.g. '#2d3d1f,#4a5a3c'.")
    parser.add_argument("--preset", type=str, help="Preset id from the catalog to use as the palette.")
    parser.add_argument("--presets", type=str, default=DEFAULT_CATALOG_PATH, help="Path to the preset catalog JSON.")
    parser.add_argument("--seed", type=float, help="Pattern seed (coordinate offset).")
    parser.add_argument("--randomize", action="store_true", help="Draw random seed, palette, scale, contrast and brightness.")
    parser.add_argument("--background", type=str, help="Background image to composite the pattern over.")
    parser.add_argument("--alpha", type=float, help="Pattern opacity over the background, 0..1.")
    parser.add_argument("--no-overlay", action="store_true", help="Show the background only, without the pattern.")
    parser.add_argument("--vision-mode", choices=COLOR_VISION_MODES, help="Color vision simulation.")
    parser.add_argument("--edges", action="store_true", help="Apply Sobel edge detection.")
    parser.add_argument("--count", type=int, default=1, help="Render this many consecutive seeds.")
    parser.add_argument("--output", type=str, default="pattern.png", help="PNG file, or a directory when --count > 1.")
    parser.add_argument("--noise-seed", type=int, help="Seed for the noise permutation table.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def load_config(config_path: str, logger: logging.Logger) -> dict:
    """Reads the 'pattern_parameters' section of a JSON config, or None on failure."""
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None
    return dict(config.get('pattern_parameters', {}))


def load_background(image_path: str, logger: logging.Logger):
    try:
        with Image.open(image_path) as img:
            img.load()
            return img.copy()
    except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
        logger.critical(f"Failed to load background image: {e}")
        return None


def apply_cli_overrides(params: dict, args: argparse.Namespace) -> dict:
    """Explicit command-line values win over the config file."""
    overrides = {
        'pattern_type': args.pattern,
        'width': args.width,
        'height': args.height,
        'scale': args.scale,
        'contrast': args.contrast,
        'brightness': args.brightness,
        'palette': args.palette,
        'overlay_alpha': args.alpha,
        'vision_mode': args.vision_mode,
        'noise_seed': args.noise_seed,
    }
    for key, value in overrides.items():
        if value is not None:
            params[key] = value
    if args.no_overlay:
        params['show_overlay'] = False
    if args.edges:
        params['edge_detection'] = True
    return params


def output_paths(output: str, pattern_type: str, seeds: list) -> list:
    """One PNG path per seed. Multiple seeds, or an existing directory, write into a directory."""
    if len(seeds) == 1 and not os.path.isdir(output):
        return [output]
    return [os.path.join(output, f"{pattern_type}_{seed:g}.png") for seed in seeds]


def render_patterns(args: argparse.Namespace) -> int:
    """
    Renders one or more patterns according to the parsed arguments.
    Returns a process exit code.
    """
    # 1. --- Setup Logging (Rule 2) ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Renderer")

    # 2. --- Load Configuration (Rule 1) ---
    params = {}
    if args.config:
        params = load_config(args.config, logger)
        if params is None:
            return 1

    catalog = None
    if args.preset or args.randomize:
        try:
            catalog = load_preset_catalog(args.presets)
        except PresetLoadError as e:
            if args.preset:
                logger.critical(f"Failed to load preset catalog: {e}")
                return 1
            logger.warning(f"{e}; randomizing without presets.")

    seed = params.pop('seed', DEFAULTS.DEFAULT_SEED)
    if args.randomize:
        rng = np.random.default_rng()
        drawn = randomize_parameters(rng, args.pattern or params.get('pattern_type', DEFAULTS.DEFAULT_PATTERN_TYPE), catalog)
        logger.info(f"Randomized parameters: {drawn}")
        seed = drawn.pop('seed')
        drawn.pop('preset_id')
        params.update(drawn)

    params = apply_cli_overrides(params, args)
    if args.seed is not None:
        seed = args.seed

    if args.preset:
        preset = catalog.find(args.preset)
        if preset is None:
            logger.critical(f"Unknown preset id: '{args.preset}'")
            return 1
        params['palette'] = list(preset.colors)
        logger.info(f"Using preset '{preset.label}' ({preset.category}): {preset.colors}")

    background = None
    if args.background:
        background = load_background(args.background, logger)
        if background is None:
            return 1

    # 3. --- Initialize the Pattern Generator ---
    generator = PatternGenerator(config=params, logger=logger)
    pattern_type = generator.settings['pattern_type']

    count = max(1, args.count)
    seeds = [seed + i for i in range(count)]
    paths = output_paths(args.output, pattern_type, seeds)
    for directory in {os.path.dirname(p) for p in paths if os.path.dirname(p)}:
        os.makedirs(directory, exist_ok=True)

    # 4. --- Render Loop ---
    logger.info(f"Rendering {count} '{pattern_type}' pattern(s) starting at seed {seed}...")
    start_time = time.perf_counter()
    for pattern_seed, path in tqdm(zip(seeds, paths), total=count, desc="Rendering Patterns", disable=count == 1):
        result = generator.render(seed=pattern_seed, background=background)
        try:
            Image.fromarray(result.composite).save(path, 'PNG')
        except OSError as e:
            logger.critical(f"Failed to save '{path}': {e}")
            return 1
        logger.debug(f"Saved {path}")

    end_time = time.perf_counter()
    logger.info(f"Rendering complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(f"Output saved to: {paths[0] if count == 1 else os.path.dirname(paths[0])}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return render_patterns(args)


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
