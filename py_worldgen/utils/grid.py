"""Raster helpers shared by the generation stages."""

import math
from typing import Tuple

import numpy as np

SQRT2 = math.sqrt(2.0)

# Direction codes 0..7: N, NE, E, SE, S, SW, W, NW
DX = (0, 1, 1, 1, 0, -1, -1, -1)
DY = (-1, -1, 0, 1, 1, 1, 0, -1)
STEP_DISTANCE = tuple(1.0 if d % 2 == 0 else SQRT2 for d in range(8))

NO_FLOW = -1


def normalized_coordinates(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(nx, ny)`` grids of ``x / width`` and ``y / height``."""
    xs = np.arange(width, dtype=np.float64) / width
    ys = np.arange(height, dtype=np.float64) / height
    nx, ny = np.meshgrid(xs, ys)
    return nx, ny


def cell_coordinates(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return integer-valued ``(x, y)`` grids as float64."""
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(height, dtype=np.float64)
    x, y = np.meshgrid(xs, ys)
    return x, y


def box_any(mask: np.ndarray, radius: int) -> np.ndarray:
    """
    For every cell, whether ``mask`` is set anywhere within a Chebyshev radius.

    Uses a summed-area table so the cost does not depend on the radius.
    """
    height, width = mask.shape
    table = np.zeros((height + 1, width + 1), dtype=np.int64)
    table[1:, 1:] = np.cumsum(np.cumsum(mask.astype(np.int64), axis=0), axis=1)

    ys = np.arange(height)
    xs = np.arange(width)
    y0 = np.clip(ys - radius, 0, height)[:, None]
    y1 = np.clip(ys + radius + 1, 0, height)[:, None]
    x0 = np.clip(xs - radius, 0, width)[None, :]
    x1 = np.clip(xs + radius + 1, 0, width)[None, :]

    total = table[y1, x1] - table[y0, x1] - table[y1, x0] + table[y0, x0]
    return total > 0


def neighbour_view(array: np.ndarray, dx: int, dy: int, fill) -> np.ndarray:
    """
    Return an array where each cell holds its ``(dx, dy)`` neighbour's value.

    Cells whose neighbour lies outside the grid receive ``fill``.
    """
    height, width = array.shape
    result = np.full_like(array, fill)
    src_y = slice(max(dy, 0), height + min(dy, 0))
    src_x = slice(max(dx, 0), width + min(dx, 0))
    dst_y = slice(max(-dy, 0), height + min(-dy, 0))
    dst_x = slice(max(-dx, 0), width + min(-dx, 0))
    result[dst_y, dst_x] = array[src_y, src_x]
    return result


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer with halves rounded toward +infinity."""
    return np.floor(values + 0.5)
