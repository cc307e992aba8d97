"""
Tests for the five pattern generators.

All renders use small canvases and a fixed permutation table.
"""
import numpy as np
import pytest

from pattern_generator import config as DEFAULTS
from pattern_generator.color_utils import adjust_palette_contrast, hex_to_rgb, palette_to_rgb
from pattern_generator.patterns import (
    PATTERNS,
    blocky_mosaic,
    grid_panel,
    normalize_parameters,
    quantized_noise,
    textured_matte,
)

W, H = 64, 48
PALETTE = ['#2d3d1f', '#4a5a3c', '#5a6c3a', '#3d4a2c']


def _render(engine, name, **overrides):
    params = dict(width=W, height=H, scale=40, contrast=1.0, brightness=0.0, palette=PALETTE, seed=12.5)
    params.update(overrides)
    return PATTERNS[name](engine, **params)


def _colors(buffer):
    return {tuple(int(c) for c in px) for px in buffer[..., :3].reshape(-1, 3)}


class TestCommonContract:
    """Properties every generator shares."""

    @pytest.mark.parametrize("name", sorted(PATTERNS))
    def test_shape_dtype_and_opacity(self, engine, name):
        buffer = _render(engine, name)
        assert buffer.shape == (H, W, 4)
        assert buffer.dtype == np.uint8
        assert (buffer[..., 3] == 255).all()

    @pytest.mark.parametrize("name", sorted(PATTERNS))
    def test_deterministic(self, engine, name):
        """Identical inputs produce byte-identical output."""
        assert np.array_equal(_render(engine, name), _render(engine, name))

    @pytest.mark.parametrize("name", sorted(PATTERNS))
    def test_empty_palette_uses_default(self, engine, name):
        buffer = _render(engine, name, palette=[])
        assert buffer.shape == (H, W, 4)

    @pytest.mark.parametrize("name", sorted(PATTERNS))
    def test_single_pixel_canvas(self, engine, name):
        assert _render(engine, name, width=1, height=1).shape == (1, 1, 4)

    @pytest.mark.parametrize("name", sorted(PATTERNS))
    def test_out_of_range_parameters_are_clamped(self, engine, name):
        """Values past a domain edge render exactly like the edge itself."""
        clamped = _render(engine, name, scale=300, contrast=2.5, brightness=-1.0)
        extreme = _render(engine, name, scale=5000, contrast=99, brightness=-7)
        assert np.array_equal(clamped, extreme)


class TestNormalizeParameters:

    def test_clamps_every_domain(self):
        assert normalize_parameters(0, 10000, 1e9, -1, 5, 3.5) == (1, 4096, 300.0, 0.2, 1.0, 3.5)

    def test_non_finite_falls_back_to_defaults(self):
        width, height, scale, contrast, brightness, seed = normalize_parameters(
            64, 48, float('nan'), float('inf'), None, float('nan'))
        assert (scale, contrast, brightness, seed) == (60.0, 1.0, 0.0, 0.0)


class TestQuantizedNoise:

    def test_pixels_come_from_palette(self, engine):
        """At brightness 0 every pixel is exactly one palette color."""
        buffer = _render(engine, 'quantized_noise', palette=['#112233', '#445566', '#778899'])
        allowed = {hex_to_rgb(c) for c in ('#112233', '#445566', '#778899')}
        assert _colors(buffer) <= allowed

    def test_single_color_fills_canvas(self, engine):
        buffer = _render(engine, 'quantized_noise', palette=['#336699'])
        assert _colors(buffer) == {(0x33, 0x66, 0x99)}

    def test_invalid_entry_becomes_black(self, engine):
        buffer = quantized_noise(engine, W, H, 40, 1.0, 0.0, ['not-a-color'], 0)
        assert _colors(buffer) == {(0, 0, 0)}

    def test_brightness_lightens(self, engine):
        dark = _render(engine, 'quantized_noise')
        light = _render(engine, 'quantized_noise', brightness=0.6)
        assert light[..., :3].mean() > dark[..., :3].mean()

    def test_seed_changes_output(self, engine):
        a = _render(engine, 'quantized_noise', palette=['#000000', '#808080', '#ffffff'], seed=0)
        b = _render(engine, 'quantized_noise', palette=['#000000', '#808080', '#ffffff'], seed=57.3)
        assert not np.array_equal(a, b)


class TestBlockyMosaic:

    def test_pixels_come_from_palette(self, engine):
        """With neutral contrast and brightness the mosaic is palette-exact."""
        buffer = blocky_mosaic(engine, W, H, 30, 1.0, 0.0, PALETTE, 4)
        assert _colors(buffer) <= {hex_to_rgb(c) for c in PALETTE}

    def test_uses_several_colors(self, engine):
        buffer = blocky_mosaic(engine, 160, 120, 30, 1.0, 0.0, PALETTE, 4)
        assert len(_colors(buffer)) > 1

    def test_negative_brightness_darkens(self, engine):
        base = blocky_mosaic(engine, W, H, 30, 1.0, 0.0, PALETTE, 4)
        dark = blocky_mosaic(engine, W, H, 30, 1.0, -0.5, PALETTE, 4)
        assert dark[..., :3].mean() < base[..., :3].mean()

    def test_contrast_quantizes_to_adjusted_palette(self, engine):
        """Off-neutral contrast draws only from the luminance-rescaled palette."""
        adjusted = adjust_palette_contrast(palette_to_rgb(PALETTE), 2.0)
        assert adjusted != palette_to_rgb(PALETTE)
        buffer = blocky_mosaic(engine, W, H, 30, 2.0, 0.0, PALETTE, 4)
        assert _colors(buffer) <= set(adjusted)

    def test_square_canvas_reproducible_per_seed(self, engine):
        first = blocky_mosaic(engine, 64, 64, 30, 1.0, 0.0, PALETTE, 0)
        again = blocky_mosaic(engine, 64, 64, 30, 1.0, 0.0, PALETTE, 0)
        other = blocky_mosaic(engine, 64, 64, 30, 1.0, 0.0, PALETTE, 1234.5)
        assert first.shape == (64, 64, 4)
        assert first.tobytes() == again.tobytes()
        assert (first != other).any()


class TestTexturedMatte:

    def test_black_base_stays_black(self, engine):
        """Black tint times any factor is black, and grain overlay keeps it there."""
        buffer = textured_matte(engine, W, H, 60, 1.0, 0.0, [], 3)
        assert _colors(buffer) == {(0, 0, 0)}

    def test_vignette_darkens_corners(self, engine):
        buffer = textured_matte(engine, 96, 96, 60, 1.0, 0.0, ['#808080'], 3)
        center = buffer[40:56, 40:56, 0].astype(float).mean()
        corner = buffer[:8, :8, 0].astype(float).mean()
        assert corner < center

    def test_random_grain_still_renders(self, engine):
        buffer = textured_matte(engine, W, H, 60, 1.0, 0.0, ['#404040'], 3, deterministic_grain=False)
        assert buffer.shape == (H, W, 4)


class TestBandedStripe:

    def test_dark_palette_stays_dark(self, engine):
        """Shading and the finishing overlay only ever darken the band colors."""
        buffer = _render(engine, 'banded_stripe', palette=['#111111', '#222222'])
        assert buffer[..., :3].max() <= 0x22

    def test_palette_colors_appear(self, engine):
        buffer = _render(engine, 'banded_stripe', width=200, height=40, palette=['#c00000', '#00c000'])
        reds = (buffer[..., 0] > 100) & (buffer[..., 1] < 50)
        greens = (buffer[..., 1] > 100) & (buffer[..., 0] < 50)
        assert reds.any() and greens.any()

    def test_default_palette_lighter_band_first(self, engine):
        assert DEFAULTS.DEFAULT_PALETTES['banded_stripe'] == ['#222222', '#111111']
        fallback = _render(engine, 'banded_stripe', palette=[])
        explicit = _render(engine, 'banded_stripe', palette=['#222222', '#111111'])
        assert np.array_equal(fallback, explicit)


class TestGridPanel:

    def test_corner_shows_background(self, engine):
        """Outside the padded grid only the background gray (with faint scratches) remains."""
        buffer = grid_panel(engine, W, H, 60, 1.0, 0.0, [], 2)
        assert tuple(buffer[0, 0, :3]) == (15, 15, 15)

    def test_brightness_shifts_background(self, engine):
        buffer = grid_panel(engine, W, H, 60, 1.0, 0.5, [], 2)
        assert tuple(buffer[0, 0, :3]) == (25, 25, 25)

    def test_panel_color_appears(self, engine):
        buffer = grid_panel(engine, 640, 360, 300, 1.0, 0.0, ["#5080b0", "#202020"], 2)
        blue = (buffer[..., 2] > 150) & (buffer[..., 0] < 100)
        assert blue.any()

    def test_tiny_canvas(self, engine):
        assert grid_panel(engine, 8, 8, 300, 2.5, 1.0, [], 0).shape == (8, 8, 4)
