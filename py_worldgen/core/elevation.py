"""
Elevation and mountain generation.

This module implements:
- Mountain range spines as random walks over land
- Base terrain from fractal noise with mountain and ridge injection
- Thermal erosion (slope relaxation)
- Optional droplet hydraulic erosion
"""

import math
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
import structlog

from ..config import WorldSettings
from ..utils.grid import DX, DY, STEP_DISTANCE, neighbour_view, normalized_coordinates
from .noise import SimplexNoise, fbm, ridged_fbm
from .prng import Mulberry32PRNG

logger = structlog.get_logger()

START_ATTEMPTS = 100
MIN_SPINE_POINTS = 5
MOUNTAIN_INFLUENCE_MIN = 0.1
THERMAL_TALUS = 0.1
THERMAL_BLEND = 0.2

DROPLET_MAX_STEPS = 30
DROPLET_EROSION_RATE = 0.1
DROPLET_DEPOSIT_FRACTION = 0.5


@dataclass(frozen=True)
class MountainRange:
    """Spine polyline of a mountain range with its width and peak boost."""

    points: List[Tuple[float, float]] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0


def generate_mountain_ranges(
    settings: WorldSettings, land_mask: np.ndarray, prng: Mulberry32PRNG
) -> List[MountainRange]:
    """Random-walk mountain spines starting on land."""
    width, height = settings.map.width, settings.map.height
    options = settings.elevation

    ranges: List[MountainRange] = []
    count = prng.randint(options.mountain_range_count_min, options.mountain_range_count_max)

    for _ in range(count):
        start = None
        for _attempt in range(START_ATTEMPTS):
            sx = prng.randint(0, width - 1)
            sy = prng.randint(0, height - 1)
            if land_mask[sy, sx] == 1:
                start = (sx, sy)
                break

        if start is None:
            continue

        points = [(float(start[0]), float(start[1]))]
        steps = prng.randint(20, 80)
        angle = prng.uniform(0, math.pi * 2)
        cx, cy = points[0]

        for _step in range(steps):
            angle += prng.uniform(-options.mountain_range_curviness, options.mountain_range_curviness)
            step = prng.uniform(3, 8)
            cx += math.cos(angle) * step
            cy += math.sin(angle) * step

            ix = int(math.floor(cx + 0.5))
            iy = int(math.floor(cy + 0.5))
            if not (0 <= ix < width and 0 <= iy < height):
                break

            if land_mask[iy, ix] == 1:
                points.append((cx, cy))
            else:
                # Steer back toward land
                angle += math.pi / 4

        if len(points) > MIN_SPINE_POINTS:
            ranges.append(
                MountainRange(
                    points=points,
                    width=options.mountain_range_width * min(width, height) * prng.uniform(0.8, 1.2),
                    height=options.mountain_range_height * prng.uniform(0.7, 1.3),
                )
            )

    logger.info("Mountain ranges generated", requested=count, kept=len(ranges))
    return ranges


def distance_to_polyline(
    x: np.ndarray, y: np.ndarray, points: List[Tuple[float, float]]
) -> np.ndarray:
    """Minimum distance from each coordinate to the polyline's segments."""
    min_dist = np.full(np.shape(x), np.inf)

    for (x1, y1), (x2, y2) in zip(points[:-1], points[1:]):
        dx = x2 - x1
        dy = y2 - y1
        len2 = dx * dx + dy * dy

        if len2 == 0:
            dist = np.hypot(x - x1, y - y1)
        else:
            t = np.clip(((x - x1) * dx + (y - y1) * dy) / len2, 0.0, 1.0)
            dist = np.hypot(x - (x1 + t * dx), y - (y1 + t * dy))
        min_dist = np.minimum(min_dist, dist)

    return min_dist


def _mountain_influence(
    width: int, height: int, ranges: List[MountainRange]
) -> np.ndarray:
    influence = np.zeros((height, width), dtype=np.float64)

    for mountain in ranges:
        xs = [p[0] for p in mountain.points]
        ys = [p[1] for p in mountain.points]
        # Only cells inside the range's padded bounding box can be reached
        x0 = max(0, int(math.floor(min(xs) - mountain.width)))
        x1 = min(width, int(math.ceil(max(xs) + mountain.width)) + 1)
        y0 = max(0, int(math.floor(min(ys) - mountain.width)))
        y1 = min(height, int(math.ceil(max(ys) + mountain.width)) + 1)
        if x0 >= x1 or y0 >= y1:
            continue

        bx, by = np.meshgrid(
            np.arange(x0, x1, dtype=np.float64), np.arange(y0, y1, dtype=np.float64)
        )
        normalized = distance_to_polyline(bx, by, mountain.points) / mountain.width
        local = np.where(normalized < 1, (1 - normalized) ** 2 * mountain.height, 0.0)
        influence[y0:y1, x0:x1] = np.maximum(influence[y0:y1, x0:x1], local)

    return influence


def generate_height_map(
    settings: WorldSettings,
    land_mask: np.ndarray,
    mountain_ranges: List[MountainRange],
    noise: SimplexNoise,
    prng: Mulberry32PRNG,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate the height map and mountain mask.

    Args:
        settings: World settings
        land_mask: Land/water mask from the continent stage
        mountain_ranges: Spines from generate_mountain_ranges()
        noise: Base terrain noise
        prng: Stream for ridge noise and optional hydraulic erosion

    Returns:
        Tuple of (height_map float32 in [0, 1], mountain_mask uint8)
    """
    width, height = settings.map.width, settings.map.height
    sea_level = settings.map.sea_level
    options = settings.elevation

    ridge_noise = SimplexNoise(prng.fork())
    nx, ny = normalized_coordinates(width, height)
    land = land_mask == 1

    ocean_depth = fbm(noise, nx, ny, 3, options.base_noise_freq, 0.5) * sea_level * 0.8
    base = fbm(
        noise, nx, ny, options.base_noise_octaves, options.base_noise_freq, options.base_noise_persistence
    )
    elevation = sea_level + base * (1 - sea_level) * 0.5

    influence = np.where(land, _mountain_influence(width, height, mountain_ranges), 0.0)
    mountainous = influence > MOUNTAIN_INFLUENCE_MIN

    mountain_mask = np.zeros((height, width), dtype=np.uint8)
    mountain_mask[mountainous] = np.minimum(255, np.floor(influence[mountainous] * 255)).astype(np.uint8)

    ridge = ridged_fbm(
        ridge_noise,
        nx[mountainous],
        ny[mountainous],
        options.ridge_noise_octaves,
        options.ridge_noise_freq,
        0.5,
    )
    elevation[mountainous] += influence[mountainous] * (0.7 + ridge * options.ridge_strength)

    height_map = np.where(land, np.minimum(1.0, elevation), ocean_depth)
    height_map = apply_thermal_erosion(height_map, land_mask, options.erosion_thermal_iterations)

    hydrology = settings.hydrology
    if hydrology.hydraulic_erosion_enabled and hydrology.hydraulic_erosion_drops > 0:
        height_map = apply_hydraulic_erosion(
            height_map, land_mask, hydrology.hydraulic_erosion_drops, prng.fork()
        )

    logger.info(
        "Height map generated",
        mountain_cells=int(mountainous.sum()),
        max_height=round(float(height_map.max()), 4),
    )
    return height_map.astype(np.float32), mountain_mask


def apply_thermal_erosion(
    height_map: np.ndarray, land_mask: np.ndarray, iterations: int
) -> np.ndarray:
    """
    Relax steep land slopes.

    Each interior land cell moves 20% of the way toward the average of itself
    and its land neighbours that differ from it by more than the talus
    threshold. All cells in a pass read pre-pass heights.
    """
    h = np.asarray(height_map, dtype=np.float64).copy()
    land = land_mask == 1

    update = np.zeros_like(land)
    update[1:-1, 1:-1] = land[1:-1, 1:-1]

    for _ in range(iterations):
        total = h.copy()
        count = np.ones_like(h)

        for d in range(8):
            neighbour = neighbour_view(h, DX[d], DY[d], 0.0)
            neighbour_land = neighbour_view(land, DX[d], DY[d], False)
            steep = neighbour_land & (np.abs(h - neighbour) > THERMAL_TALUS)
            total += np.where(steep, neighbour, 0.0)
            count += steep

        relaxed = h * (1 - THERMAL_BLEND) + (total / count) * THERMAL_BLEND
        h = np.where(update, relaxed, h)

    return h


def apply_hydraulic_erosion(
    height_map: np.ndarray, land_mask: np.ndarray, drops: int, prng: Mulberry32PRNG
) -> np.ndarray:
    """
    Carve drainage channels with simulated rain droplets.

    Each droplet starts on a random land cell and follows the steepest land
    descent, removing a fraction of every drop it takes and depositing part
    of the load where it stops.
    """
    height, width = height_map.shape
    land_cells = np.flatnonzero(land_mask.ravel() == 1)
    if drops <= 0 or land_cells.size == 0:
        return np.asarray(height_map, dtype=np.float64).copy()

    h = np.asarray(height_map, dtype=np.float64).ravel().tolist()
    land = land_mask.ravel().tolist()

    for _ in range(drops):
        cell = int(land_cells[int(prng.random() * land_cells.size)])
        carried = 0.0

        for _step in range(DROPLET_MAX_STEPS):
            x = cell % width
            y = cell // width
            best = -1
            best_slope = 0.0

            for d in range(8):
                nx = x + DX[d]
                ny = y + DY[d]
                if nx < 0 or nx >= width or ny < 0 or ny >= height:
                    continue
                slope = (h[cell] - h[ny * width + nx]) / STEP_DISTANCE[d]
                if slope > best_slope:
                    best_slope = slope
                    best = ny * width + nx

            if best < 0 or land[best] != 1:
                break

            removed = (h[cell] - h[best]) * DROPLET_EROSION_RATE
            h[cell] -= removed
            carried += removed
            cell = best

        h[cell] = min(1.0, h[cell] + carried * DROPLET_DEPOSIT_FRACTION)

    logger.debug("Hydraulic erosion applied", drops=drops)
    return np.asarray(h, dtype=np.float64).reshape(height, width)
