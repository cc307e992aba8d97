"""
Tests for the color vision and edge detection filters.
"""
import numpy as np
import pytest

from pattern_generator.compositor import new_buffer
from pattern_generator.filters import (
    COLOR_VISION_MATRICES,
    apply_color_vision_filter,
    apply_edge_detection,
    apply_filters,
)


def _gradient_buffer():
    rng = np.random.default_rng(3)
    buffer = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    buffer[..., 3] = 100
    return buffer


class TestColorVision:
    """Per-pixel color transforms."""

    def test_normal_is_identity(self):
        buffer = _gradient_buffer()
        original = buffer.copy()
        assert np.array_equal(apply_color_vision_filter(buffer, 'normal'), original)

    def test_unknown_mode_is_identity(self):
        buffer = _gradient_buffer()
        original = buffer.copy()
        assert np.array_equal(apply_color_vision_filter(buffer, 'infrared'), original)

    def test_monochrome_uses_luminance(self):
        buffer = new_buffer(2, 2, (255, 0, 0))
        apply_color_vision_filter(buffer, 'monochrome')
        assert (buffer[..., :3] == 76).all()

    def test_protanopia_matrix(self):
        buffer = new_buffer(1, 1, (100, 200, 50))
        apply_color_vision_filter(buffer, 'protanopia')
        assert tuple(buffer[0, 0, :3]) == (143, 144, 86)

    @pytest.mark.parametrize("mode", sorted(COLOR_VISION_MATRICES))
    def test_white_stays_white(self, mode):
        """Every matrix row sums to one."""
        buffer = new_buffer(2, 2, (255, 255, 255))
        apply_color_vision_filter(buffer, mode)
        assert (buffer[..., :3] == 255).all()

    @pytest.mark.parametrize("mode", sorted(COLOR_VISION_MATRICES) + ['monochrome'])
    def test_alpha_preserved(self, mode):
        buffer = _gradient_buffer()
        apply_color_vision_filter(buffer, mode)
        assert (buffer[..., 3] == 100).all()


class TestEdgeDetection:
    """Sobel gradient magnitude."""

    def test_flat_field_has_no_edges(self):
        buffer = new_buffer(10, 8, (120, 60, 200))
        apply_edge_detection(buffer)
        assert (buffer[..., :3] == 0).all()
        assert (buffer[..., 3] == 255).all()

    def test_vertical_step(self):
        """Columns either side of a hard step saturate; the border stays zero."""
        buffer = new_buffer(6, 5, (0, 0, 0))
        buffer[:, 3:, :3] = 255
        apply_edge_detection(buffer)
        interior = buffer[1:-1, :, 0]
        assert (interior[:, 2] == 255).all()
        assert (interior[:, 3] == 255).all()
        assert (interior[:, 1] == 0).all()
        assert (interior[:, 4] == 0).all()
        assert (buffer[0, :, :3] == 0).all()
        assert (buffer[:, 0, :3] == 0).all()

    def test_channels_are_equal(self):
        buffer = _gradient_buffer()
        apply_edge_detection(buffer)
        assert np.array_equal(buffer[..., 0], buffer[..., 1])
        assert np.array_equal(buffer[..., 1], buffer[..., 2])

    def test_tiny_image_is_all_border(self):
        buffer = new_buffer(2, 2, (255, 255, 255))
        apply_edge_detection(buffer)
        assert (buffer[..., :3] == 0).all()


class TestFilterPipeline:

    def test_defaults_change_nothing(self):
        buffer = _gradient_buffer()
        original = buffer.copy()
        assert np.array_equal(apply_filters(buffer), original)

    def test_vision_then_edges(self):
        """Edges run on the vision-filtered image."""
        a = _gradient_buffer()
        apply_filters(a, 'tritanopia', True)
        b = _gradient_buffer()
        apply_edge_detection(apply_color_vision_filter(b, 'tritanopia'))
        assert np.array_equal(a, b)
