# pattern_generator/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides 2D gradient noise, the foundation of every pattern
generator. The JIT-compiled kernels are pure and stateless; the NoiseEngine
class owns the permutation table they read.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (512 ints, 0..255 twice).
    - x, y: Scalars or 2D NumPy arrays of coordinates.
    - octaves, persistence, lacunarity: Standard fractal parameters.
- Outputs:
    - noise2: a float in approximately [-1, 1].
    - turbulence: a NumPy array of summed octaves, each remapped to [0, 1].
- Side Effects: None.
- Invariants: The permutation table is never modified after construction, so
  a NoiseEngine can be shared by any number of callers without locking.
================================================================================
"""

import logging

import numpy as np
from numba import njit

from . import config as DEFAULTS

logger = logging.getLogger(__name__)

# Gradients selected by the low two bits of a corner hash.
# h=0: x+y, h=1: -x+y, h=2: -x+y, h=3: -x-y
_GRADIENT_VECTORS = np.array([[1, 1], [-1, 1], [-1, 1], [-1, -1]])

@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h & 3]
    return g[0] * x + g[1] * y

@njit
def noise2(p, x, y):
    """Single-sample 2D gradient noise against the permutation table `p`."""
    fx = np.floor(x)
    fy = np.floor(y)
    xi = int(fx) & 255
    yi = int(fy) & 255
    xf = x - fx
    yf = y - fy

    aa = p[p[xi] + yi]
    ab = p[p[xi] + yi + 1]
    ba = p[p[xi + 1] + yi]
    bb = p[p[xi + 1] + yi + 1]

    u = _fade(xf)
    v = _fade(yf)

    x1 = _lerp(_gradient(aa, xf, yf), _gradient(ba, xf - 1, yf), u)
    x2 = _lerp(_gradient(ab, xf, yf - 1), _gradient(bb, xf - 1, yf - 1), u)
    return _lerp(x1, x2, v)

@njit
def noise_grid(p, x, y):
    """Evaluates noise2 at every point of the 2D coordinate arrays x and y."""
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = noise2(p, x[i, j], y[i, j])
    return out

@njit
def turbulence(p, x, y, octaves=4, persistence=0.5, lacunarity=2.0):
    """
    Fractal sum of octaves, each remapped from [-1, 1] to [0, 1] before being
    weighted. With the default persistence the result lies in [0, 2).
    """
    rows, cols = x.shape
    total = np.zeros((rows, cols))

    for i in range(rows):
        for j in range(cols):
            value = 0.0
            amplitude = 1.0
            frequency = 1.0
            for _ in range(octaves):
                n = noise2(p, x[i, j] * frequency, y[i, j] * frequency)
                value += (n + 1.0) / 2.0 * amplitude
                amplitude *= persistence
                frequency *= lacunarity
            total[i, j] = value

    return total


def create_permutation_table(seed=None) -> np.ndarray:
    """
    Builds the 512-entry permutation table: 0..255 shuffled once, then
    duplicated so corner lookups never need to wrap. A seed of None draws
    from system entropy.
    """
    p = np.arange(DEFAULTS.PERMUTATION_SIZE, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.concatenate([p, p])


def validate_permutation_table(table) -> np.ndarray:
    """Returns the table as a contiguous int64 array or raises ValueError."""
    p = np.ascontiguousarray(table, dtype=np.int64)
    size = DEFAULTS.PERMUTATION_SIZE
    if p.ndim != 1 or p.shape[0] not in (size, 2 * size):
        raise ValueError(f"Permutation table must hold {size} or {2 * size} entries, got shape {p.shape}")
    if p.shape[0] == size:
        p = np.concatenate([p, p])
    if not np.array_equal(np.sort(p[:size]), np.arange(size)) or not np.array_equal(p[:size], p[size:]):
        raise ValueError("Permutation table must be a permutation of 0..255, duplicated once")
    return p


class NoiseEngine:
    """
    Owns one permutation table and evaluates gradient noise against it.
    Construct it once per process and inject it wherever noise is needed.
    """
    def __init__(self, seed: int = None, permutation_table: np.ndarray = None):
        """
        Args:
            seed (int, optional): Seed for shuffling the table. None uses
                system entropy, so noise differs between runs.
            permutation_table (np.ndarray, optional): A pre-computed table of
                256 or 512 entries. Takes precedence over `seed`.
        """
        if permutation_table is not None:
            self._p = validate_permutation_table(permutation_table)
            logger.debug("NoiseEngine initialized with injected permutation table.")
        else:
            self._p = create_permutation_table(seed)
            logger.debug(f"NoiseEngine initialized with permutation seed: {seed}")
        self._p.setflags(write=False)

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def noise2(self, x: float, y: float) -> float:
        return float(noise2(self._p, float(x), float(y)))

    def noise_grid(self, x, y) -> np.ndarray:
        shape = np.broadcast(np.asarray(x), np.asarray(y)).shape
        gx, gy = _as_grid(x, y)
        return noise_grid(self._p, gx, gy).reshape(shape)

    def turbulence(self, x, y, octaves: int = 4,
                   persistence: float = DEFAULTS.NOISE_PERSISTENCE,
                   lacunarity: float = DEFAULTS.NOISE_LACUNARITY) -> np.ndarray:
        shape = np.broadcast(np.asarray(x), np.asarray(y)).shape
        gx, gy = _as_grid(x, y)
        return turbulence(self._p, gx, gy, int(octaves), float(persistence), float(lacunarity)).reshape(shape)


def _as_grid(x, y):
    """Broadcasts coordinates to matching contiguous 2D float64 arrays."""
    x, y = np.broadcast_arrays(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
    if x.ndim == 1:
        x, y = x[np.newaxis, :], y[np.newaxis, :]
    elif x.ndim == 0:
        x, y = x.reshape(1, 1), y.reshape(1, 1)
    return np.ascontiguousarray(x), np.ascontiguousarray(y)
