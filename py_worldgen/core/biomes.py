"""
Biome classification based on elevation, temperature and moisture.

Rules are checked in a fixed order and the first match wins:
water, lake, beach, high mountains, then temperature bands (cold, cool,
temperate, warm, hot) each split by moisture.
"""

from enum import IntEnum

import numpy as np
import structlog

from ..config import BiomeSettings, WorldSettings
from ..utils.grid import box_any

logger = structlog.get_logger()

BEACH_OCEAN_RADIUS = 3


class Biome(IntEnum):
    """Biome ids stored in the biome layer."""

    OCEAN = 0
    BEACH = 1
    LAKE = 2
    SNOW = 3
    TUNDRA = 4
    TAIGA = 5
    GRASSLAND = 6
    TEMPERATE_FOREST = 7
    RAINFOREST = 8
    DESERT = 9
    SAVANNA = 10
    MOUNTAIN_ROCK = 11


# Biome names for display
BIOME_NAMES = {
    Biome.OCEAN: "Ocean",
    Biome.BEACH: "Beach",
    Biome.LAKE: "Lake",
    Biome.SNOW: "Snow",
    Biome.TUNDRA: "Tundra",
    Biome.TAIGA: "Taiga",
    Biome.GRASSLAND: "Grassland",
    Biome.TEMPERATE_FOREST: "Temperate Forest",
    Biome.RAINFOREST: "Rainforest",
    Biome.DESERT: "Desert",
    Biome.SAVANNA: "Savanna",
    Biome.MOUNTAIN_ROCK: "Mountain",
}


def classify_biome(
    is_land: bool,
    is_lake: bool,
    land_elevation: float,
    temperature: float,
    moisture: float,
    near_ocean: bool,
    options: BiomeSettings,
) -> Biome:
    """
    Classify a single cell.

    Args:
        is_land: Cell is on the land mask
        is_lake: Cell is part of a lake
        land_elevation: Height above sea level normalized to the land band
        temperature: Temperature in [0, 1]
        moisture: Moisture in [0, 1]
        near_ocean: Ocean lies within the beach search radius
        options: Classification thresholds
    """
    snow = options.snow_temp_max
    desert = options.desert_moisture_max

    if not is_land:
        return Biome.OCEAN
    if is_lake:
        return Biome.LAKE
    if land_elevation < options.beach_elevation_range and near_ocean:
        return Biome.BEACH
    if land_elevation >= options.mountain_elevation_min:
        return Biome.SNOW if temperature < snow * 1.5 else Biome.MOUNTAIN_ROCK

    if temperature < snow:
        return Biome.SNOW
    if temperature < snow * 2:
        return Biome.TUNDRA if moisture < 0.3 else Biome.TAIGA
    if temperature < 0.5:
        # Dry temperate land is grassland too
        return Biome.GRASSLAND if moisture < 0.5 else Biome.TEMPERATE_FOREST
    if temperature < 0.75:
        if moisture < desert:
            return Biome.DESERT
        if moisture < 0.4:
            return Biome.SAVANNA
        if moisture < 0.7:
            return Biome.GRASSLAND
        return Biome.TEMPERATE_FOREST
    if moisture < desert:
        return Biome.DESERT
    if moisture < 0.35:
        return Biome.SAVANNA
    if moisture < 0.6:
        return Biome.GRASSLAND
    return Biome.RAINFOREST


def classify_biomes(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    lake_mask: np.ndarray,
    temperature: np.ndarray,
    moisture: np.ndarray,
    settings: WorldSettings,
) -> np.ndarray:
    """Vectorized form of classify_biome() over the whole grid."""
    options = settings.biomes
    sea_level = settings.map.sea_level
    snow = options.snow_temp_max
    desert = options.desert_moisture_max

    land = land_mask == 1
    lake = lake_mask == 1
    land_elevation = (np.asarray(height_map, dtype=np.float64) - sea_level) / (1 - sea_level)
    t = np.asarray(temperature, dtype=np.float64)
    m = np.asarray(moisture, dtype=np.float64)
    near_ocean = box_any(~land, BEACH_OCEAN_RADIUS)

    mountain = land_elevation >= options.mountain_elevation_min
    cold = t < snow
    cool = t < snow * 2
    temperate = t < 0.5
    warm = t < 0.75

    # np.select picks the first true condition, matching the rule order
    rules = [
        (~land, Biome.OCEAN),
        (lake, Biome.LAKE),
        ((land_elevation < options.beach_elevation_range) & near_ocean, Biome.BEACH),
        (mountain & (t < snow * 1.5), Biome.SNOW),
        (mountain, Biome.MOUNTAIN_ROCK),
        (cold, Biome.SNOW),
        (cool & (m < 0.3), Biome.TUNDRA),
        (cool, Biome.TAIGA),
        (temperate & (m < 0.5), Biome.GRASSLAND),
        (temperate, Biome.TEMPERATE_FOREST),
        (warm & (m < desert), Biome.DESERT),
        (warm & (m < 0.4), Biome.SAVANNA),
        (warm & (m < 0.7), Biome.GRASSLAND),
        (warm, Biome.TEMPERATE_FOREST),
        (m < desert, Biome.DESERT),
        (m < 0.35, Biome.SAVANNA),
        (m < 0.6, Biome.GRASSLAND),
    ]
    biome = np.select(
        [condition for condition, _ in rules],
        [int(value) for _, value in rules],
        default=int(Biome.RAINFOREST),
    ).astype(np.uint8)

    values, counts = np.unique(biome, return_counts=True)
    logger.info(
        "Biomes classified",
        distribution={BIOME_NAMES[Biome(int(v))]: int(c) for v, c in zip(values, counts)},
    )
    return biome
