"""
Tests for the gradient noise engine.

Covers value bounds, lattice zeros, determinism, continuity, turbulence
range and permutation table validation.
"""
import numpy as np
import pytest

from pattern_generator.noise import NoiseEngine, create_permutation_table, validate_permutation_table


class TestNoise2:
    """Single-sample noise."""

    def test_values_stay_bounded(self, engine):
        """noise2 stays within its documented range."""
        rng = np.random.default_rng(7)
        for x, y in rng.uniform(-300, 300, size=(500, 2)):
            assert -1.2 <= engine.noise2(x, y) <= 1.2

    def test_zero_on_integer_lattice(self, engine):
        """Gradient noise vanishes at every lattice point."""
        for x, y in [(0, 0), (3, 7), (-4, 12), (255, 256)]:
            assert engine.noise2(x, y) == 0.0

    def test_deterministic_for_same_table(self, permutation_table):
        """Two engines sharing a table agree exactly."""
        a = NoiseEngine(permutation_table=permutation_table)
        b = NoiseEngine(permutation_table=permutation_table)
        assert a.noise2(1.37, 4.21) == b.noise2(1.37, 4.21)

    def test_same_seed_gives_same_table(self):
        """A fixed seed reproduces the shuffle."""
        assert np.array_equal(NoiseEngine(seed=5).permutation_table, NoiseEngine(seed=5).permutation_table)

    def test_continuity(self, engine):
        """Small coordinate steps give small value changes."""
        base = engine.noise2(2.3, 5.7)
        assert abs(engine.noise2(2.3001, 5.7) - base) < 1e-2
        assert abs(engine.noise2(2.3, 5.7001) - base) < 1e-2

    def test_not_constant(self, engine):
        values = {round(engine.noise2(x * 0.37, x * 0.11), 6) for x in range(1, 50)}
        assert len(values) > 10


class TestGridEvaluation:
    """Vectorized noise and turbulence."""

    def test_grid_matches_pointwise(self, engine):
        """noise_grid agrees with noise2 at every sample."""
        xs, ys = np.meshgrid(np.linspace(0, 5, 7), np.linspace(-3, 2, 5))
        grid = engine.noise_grid(xs, ys)
        assert grid.shape == (5, 7)
        for i in range(5):
            for j in range(7):
                assert grid[i, j] == pytest.approx(engine.noise2(xs[i, j], ys[i, j]))

    def test_grid_broadcasts_scalars(self, engine):
        out = engine.noise_grid(np.linspace(0, 1, 4), 0.5)
        assert out.shape == (4,)

    def test_turbulence_range(self, engine):
        """Four octaves of [0, 1] samples sum into [0, 1.875]."""
        xs, ys = np.meshgrid(np.linspace(0, 20, 40), np.linspace(0, 20, 30))
        turb = engine.turbulence(xs, ys, octaves=4)
        assert turb.shape == (30, 40)
        assert turb.min() >= 0.0
        assert turb.max() <= 1.875 + 1e-9

    def test_single_octave_is_remapped_noise(self, engine):
        xs, ys = np.meshgrid(np.linspace(0.1, 3, 6), np.linspace(0.2, 4, 6))
        turb = engine.turbulence(xs, ys, octaves=1)
        assert np.allclose(turb, (engine.noise_grid(xs, ys) + 1) / 2)


class TestPermutationTable:
    """Table construction and validation."""

    def test_table_is_duplicated_permutation(self):
        p = create_permutation_table(seed=3)
        assert p.shape == (512,)
        assert np.array_equal(np.sort(p[:256]), np.arange(256))
        assert np.array_equal(p[:256], p[256:])

    def test_engine_table_is_read_only(self, engine):
        with pytest.raises(ValueError):
            engine.permutation_table[0] = 1

    def test_accepts_half_table(self):
        """256 entries are duplicated automatically."""
        half = create_permutation_table(seed=9)[:256]
        assert validate_permutation_table(half).shape == (512,)

    def test_rejects_wrong_size(self):
        with pytest.raises(ValueError):
            validate_permutation_table(np.arange(100))

    def test_rejects_non_permutation(self):
        with pytest.raises(ValueError):
            validate_permutation_table(np.zeros(256, dtype=int))
