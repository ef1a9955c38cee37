"""
Continent generation.

This module implements:
- Continent seed scattering with rejection sampling
- Distance-falloff influence mask with coastline noise
- Archipelago islands near existing land
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import structlog

from ..config import WorldSettings
from ..utils.grid import box_any, cell_coordinates, normalized_coordinates
from .noise import SimplexNoise, fbm
from .prng import Mulberry32PRNG

logger = structlog.get_logger()

MAX_SEED_ATTEMPTS = 1000
ISLAND_SEARCH_RADIUS = 20


@dataclass(frozen=True)
class ContinentSeed:
    """Centre and influence radius of one continent."""

    x: float
    y: float
    radius: float
    id: int


def generate_continent_seeds(
    settings: WorldSettings, prng: Mulberry32PRNG
) -> List[ContinentSeed]:
    """
    Scatter continent seeds with a minimum pairwise spacing.

    Seeds that cannot be placed within the attempt budget are placed without
    the spacing constraint.
    """
    width, height = settings.map.width, settings.map.height
    options = settings.continents

    count = prng.randint(options.continent_count_min, options.continent_count_max)
    min_size = min(width, height)
    min_dist = min_size * options.seed_spacing
    seeds: List[ContinentSeed] = []

    attempts = 0
    while len(seeds) < count and attempts < MAX_SEED_ATTEMPTS:
        attempts += 1

        # Keep away from the map edges
        margin = 0.1
        x = prng.uniform(width * margin, width * (1 - margin))
        y = prng.uniform(height * margin, height * (1 - margin))

        if any(math.hypot(x - seed.x, y - seed.y) < min_dist for seed in seeds):
            continue

        radius = min_size * prng.uniform(0.15, 0.35)
        seeds.append(ContinentSeed(x=x, y=y, radius=radius, id=len(seeds) + 1))

    if len(seeds) < count:
        logger.debug(
            "Spacing budget exhausted, placing remaining seeds freely",
            placed=len(seeds),
            requested=count,
        )

    while len(seeds) < count:
        margin = 0.15
        x = prng.uniform(width * margin, width * (1 - margin))
        y = prng.uniform(height * margin, height * (1 - margin))
        radius = min_size * prng.uniform(0.1, 0.25)
        seeds.append(ContinentSeed(x=x, y=y, radius=radius, id=len(seeds) + 1))

    logger.info("Continent seeds placed", count=len(seeds))
    return seeds


def generate_continent_mask(
    settings: WorldSettings,
    seeds: List[ContinentSeed],
    noise: SimplexNoise,
    prng: Mulberry32PRNG,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the land mask and continent id layer.

    Returns:
        Tuple of (land_mask uint8, continent_id uint16), both shaped (height, width)
    """
    width, height = settings.map.width, settings.map.height
    sea_level = settings.map.sea_level
    options = settings.continents

    x, y = cell_coordinates(width, height)
    influence = np.zeros((height, width), dtype=np.float64)
    continent_id = np.zeros((height, width), dtype=np.uint16)

    for seed in seeds:
        dist = np.hypot(x - seed.x, y - seed.y)
        seed_influence = np.maximum(0.0, 1.0 - np.power(dist / seed.radius, options.mask_falloff))
        stronger = seed_influence > influence
        influence = np.where(stronger, seed_influence, influence)
        continent_id[stronger] = seed.id

    nx, ny = normalized_coordinates(width, height)
    coast_noise = fbm(noise, nx, ny, 4, options.coastline_noise_freq, 0.5) * options.coastline_noise_amp
    land_mask = ((influence + coast_noise) > sea_level).astype(np.uint8)

    if options.archipelago_chance > 0:
        _add_archipelago(settings, land_mask, continent_id, nx, ny, prng)

    logger.info(
        "Continent mask generated",
        land_cells=int(land_mask.sum()),
        land_fraction=round(float(land_mask.mean()), 4),
    )
    return land_mask, continent_id


def _add_archipelago(
    settings: WorldSettings,
    land_mask: np.ndarray,
    continent_id: np.ndarray,
    nx: np.ndarray,
    ny: np.ndarray,
    prng: Mulberry32PRNG,
) -> None:
    """Add island cells in place, only within reach of existing land."""
    chance = settings.continents.archipelago_chance
    width = settings.map.width
    island_noise = SimplexNoise(prng.fork())

    island_value = fbm(island_noise, nx, ny, 3, 20, 0.5)
    candidates = (land_mask == 0) & (island_value > (1 - chance * 0.5))
    if not candidates.any():
        return

    near_original_land = box_any(land_mask == 1, ISLAND_SEARCH_RADIUS)
    islands: List[Tuple[int, int]] = []

    # Row-major scan: islands added earlier count as land for later cells
    for cy, cx in zip(*np.nonzero(candidates)):
        near_land = bool(near_original_land[cy, cx]) or any(
            abs(cx - ix) <= ISLAND_SEARCH_RADIUS and abs(cy - iy) <= ISLAND_SEARCH_RADIUS
            for ix, iy in islands
        )
        if near_land and prng.chance(chance):
            land_mask[cy, cx] = 1
            flat = cy * width + cx
            left = continent_id.ravel()[max(0, flat - 1)]
            continent_id[cy, cx] = left or 1
            islands.append((int(cx), int(cy)))

    logger.debug("Archipelago islands added", count=len(islands))
