"""
Gradient noise for terrain and climate synthesis.

This module implements 2D simplex noise (after Stefan Gustavson) with a
seed-shuffled permutation table, vectorized with NumPy so whole grids are
sampled in one call, plus fractal compositions built on top of it.
"""

import math
from typing import Union

import numpy as np

from .prng import Mulberry32PRNG

ArrayLike = Union[float, np.ndarray]

F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0

GRAD2 = np.array(
    [[1, 1], [-1, 1], [1, -1], [-1, -1], [1, 0], [-1, 0], [0, 1], [0, -1]],
    dtype=np.float64,
)


class SimplexNoise:
    """2D simplex noise whose character depends on the generator that built it."""

    def __init__(self, prng: Mulberry32PRNG):
        p = list(range(256))
        for i in range(255, 0, -1):
            j = int(prng.random() * (i + 1))
            p[i], p[j] = p[j], p[i]

        self.perm = np.array([p[i & 255] for i in range(512)], dtype=np.int64)
        self.perm_mod8 = self.perm % 8

    def _corner(self, gi: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        t = 0.5 - x * x - y * y
        t2 = t * t
        contribution = t2 * t2 * (GRAD2[gi, 0] * x + GRAD2[gi, 1] * y)
        return np.where(t >= 0, contribution, 0.0)

    def noise2d(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Simplex noise in [-1, 1] for scalar or array coordinates."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        scalar = x.ndim == 0 and y.ndim == 0

        # Skew input space to find the simplex cell
        s = (x + y) * F2
        i = np.floor(x + s)
        j = np.floor(y + s)

        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255

        perm = self.perm
        gi0 = self.perm_mod8[ii + perm[jj]]
        gi1 = self.perm_mod8[ii + i1 + perm[jj + j1]]
        gi2 = self.perm_mod8[ii + 1 + perm[jj + 1]]

        value = 70.0 * (
            self._corner(gi0, x0, y0)
            + self._corner(gi1, x1, y1)
            + self._corner(gi2, x2, y2)
        )
        if scalar:
            return float(value)
        return value

    def noise2d_normalized(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Simplex noise mapped to [0, 1]."""
        return (self.noise2d(x, y) + 1.0) * 0.5


def fbm(
    noise: SimplexNoise,
    x: ArrayLike,
    y: ArrayLike,
    octaves: int,
    frequency: float,
    persistence: float,
) -> ArrayLike:
    """Fractal Brownian motion: octave sum normalized by total amplitude, in [0, 1]."""
    value = 0.0
    amplitude = 1.0
    max_value = 0.0
    freq = frequency

    for _ in range(octaves):
        value = value + amplitude * noise.noise2d_normalized(x * freq, y * freq)
        max_value += amplitude
        amplitude *= persistence
        freq *= 2

    return value / max_value


def ridged_fbm(
    noise: SimplexNoise,
    x: ArrayLike,
    y: ArrayLike,
    octaves: int,
    frequency: float,
    persistence: float,
) -> ArrayLike:
    """
    Ridged multifractal noise.

    Each octave is folded with ``1 - |2n - 1|``, squared and weighted by the
    previous octave, which sharpens ridges and suppresses valleys.
    """
    value = 0.0
    amplitude = 1.0
    max_value = 0.0
    freq = frequency
    weight = 1.0

    for _ in range(octaves):
        n = noise.noise2d_normalized(x * freq, y * freq)
        n = 1.0 - np.abs(n * 2.0 - 1.0)
        n = n * n * weight
        weight = np.clip(n * 2.0, 0.0, 1.0)

        value = value + amplitude * n
        max_value += amplitude
        amplitude *= persistence
        freq *= 2

    return value / max_value
