# preview.py

"""
================================================================================
INTERACTIVE PATTERN PREVIEW
================================================================================
A Pygame window that renders patterns with the PatternGenerator and lets the
user flip through seeds, pattern types, palettes and inspection filters.

Usage:
    python preview.py [--background photo.jpg] [--presets my_presets.json]

Keys:
    R      new seed            Z      randomize everything
    TAB    next pattern type   V      next color vision mode
    E      toggle edges        O      toggle pattern overlay
    C      toggle comparison   S      save PNG
    ESC    quit
================================================================================
"""
import sys
import logging
import argparse

import numpy as np
import pygame
from PIL import Image, UnidentifiedImageError

from pattern_generator.generator import PatternGenerator
from pattern_generator.filters import COLOR_VISION_MODES
from pattern_generator.presets import DEFAULT_CATALOG_PATH, PresetLoadError, load_preset_catalog, randomize_parameters
from pattern_generator import config as DEFAULTS

# --- Application Constants (Rule 1) ---
SCREEN_WIDTH = 1280
SCREEN_HEIGHT = 720
BACKGROUND_FILL = (10, 10, 20)
PATTERN_TYPES = tuple(DEFAULTS.PATTERN_TYPE_MAP)


def cycle(options, current):
    """The entry after `current` in `options`, wrapping around."""
    options = list(options)
    if current not in options:
        return options[0]
    return options[(options.index(current) + 1) % len(options)]


def buffer_to_surface(buffer: np.ndarray) -> pygame.Surface:
    height, width = buffer.shape[:2]
    return pygame.image.frombuffer(np.ascontiguousarray(buffer).tobytes(), (width, height), 'RGBA')


class PreviewApp:
    """The main application class for the pattern preview."""
    def __init__(self, background_path: str = None, presets_path: str = DEFAULT_CATALOG_PATH):
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
        self.logger = logging.getLogger(__name__)

        self.logger.info("Initializing Pygame...")
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Pattern Preview")
        self.clock = pygame.time.Clock()
        self.is_running = True

        self.generator = PatternGenerator(config={'pattern_type': 'military'}, logger=self.logger)
        self.rng = np.random.default_rng()

        try:
            self.catalog = load_preset_catalog(presets_path)
        except PresetLoadError as e:
            self.logger.error(f"{e}; randomizing without presets.")
            self.catalog = None

        self.background = None
        if background_path:
            try:
                with Image.open(background_path) as img:
                    img.load()
                    self.background = img.copy()
            except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
                self.logger.error(f"Failed to load background image: {e}")

        # --- View State ---
        self.params = {
            'pattern_type': 'military',
            'scale': DEFAULTS.DEFAULT_SCALE,
            'contrast': DEFAULTS.DEFAULT_CONTRAST,
            'brightness': DEFAULTS.DEFAULT_BRIGHTNESS,
            'palette': list(DEFAULTS.DEFAULT_PALETTES['blocky_mosaic']),
        }
        self.seed = 0.0
        self.vision_mode = 'normal'
        self.edge_detection = False
        self.show_overlay = True
        self.compare = False

        self.result = None
        self.needs_render = True

    def run(self):
        """The main application loop."""
        while self.is_running:
            self.handle_events()
            self.update()
            self.draw()
            self.clock.tick(30)

        self.logger.info("Exiting preview.")
        pygame.quit()

    def handle_events(self):
        """Processes user input and other events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.is_running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key):
        if key == pygame.K_ESCAPE:
            self.is_running = False
            return
        if key == pygame.K_r:
            self.seed = float(self.rng.uniform(0, DEFAULTS.RANDOM_SEED_MAX))
        elif key == pygame.K_z:
            drawn = randomize_parameters(self.rng, self.params['pattern_type'], self.catalog)
            self.seed = drawn.pop('seed')
            self.logger.info(f"Randomized: {drawn}")
            drawn.pop('preset_id')
            self.params.update(drawn)
        elif key == pygame.K_TAB:
            self.params['pattern_type'] = cycle(PATTERN_TYPES, self.params['pattern_type'])
        elif key == pygame.K_v:
            self.vision_mode = cycle(COLOR_VISION_MODES, self.vision_mode)
        elif key == pygame.K_e:
            self.edge_detection = not self.edge_detection
        elif key == pygame.K_o:
            self.show_overlay = not self.show_overlay
        elif key == pygame.K_c:
            self.compare = not self.compare
            return
        elif key == pygame.K_s:
            self.save()
            return
        else:
            return
        self.needs_render = True

    def update(self):
        if not self.needs_render:
            return
        self.result = self.generator.render(
            width=SCREEN_WIDTH, height=SCREEN_HEIGHT, seed=self.seed,
            background=self.background, show_overlay=self.show_overlay,
            vision_mode=self.vision_mode, edge_detection=self.edge_detection,
            **self.params,
        )
        self.needs_render = False

    def save(self):
        if self.result is None:
            return
        path = f"pattern_{self.params['pattern_type']}_{self.seed:.0f}.png"
        try:
            Image.fromarray(self.result.composite).save(path, 'PNG')
            self.logger.info(f"Saved {path}")
        except OSError as e:
            self.logger.error(f"Failed to save '{path}': {e}")

    def draw(self):
        """Handles all rendering for the application."""
        self.screen.fill(BACKGROUND_FILL)
        if self.result is not None:
            surface = buffer_to_surface(self.result.composite)
            if self.compare:
                half = (SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2)
                reference = buffer_to_surface(self.result.reference)
                top = (SCREEN_HEIGHT - half[1]) // 2
                self.screen.blit(pygame.transform.smoothscale(reference, half), (0, top))
                self.screen.blit(pygame.transform.smoothscale(surface, half), (half[0], top))
            else:
                self.screen.blit(surface, (0, 0))

        pygame.display.set_caption(
            f"Pattern Preview | {self.params['pattern_type']} | seed {self.seed:.0f} | "
            f"vision: {self.vision_mode} | edges: {'on' if self.edge_detection else 'off'}"
        )
        pygame.display.flip()


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Interactive preview for procedural surface patterns.")
    parser.add_argument("--background", type=str, help="Background image to composite the pattern over.")
    parser.add_argument("--presets", type=str, default=DEFAULT_CATALOG_PATH, help="Path to the preset catalog JSON.")
    args = parser.parse_args()

    app = PreviewApp(background_path=args.background, presets_path=args.presets)
    app.run()
    sys.exit()
