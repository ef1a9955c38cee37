"""Forest density from biome, moisture, water proximity and noise."""

import numpy as np
import structlog

from ..config import WorldSettings
from ..utils.grid import normalized_coordinates
from .biomes import Biome
from .noise import SimplexNoise, fbm

logger = structlog.get_logger()

MAX_FOREST_INTENSITY = 255

# Biomes that can carry forest, with their density bias
FOREST_BIOME_BIAS = {
    Biome.TAIGA: 0.1,
    Biome.TEMPERATE_FOREST: 0.2,
    Biome.RAINFOREST: 0.3,
    Biome.GRASSLAND: -0.1,
    Biome.SAVANNA: -0.2,
}


def generate_forests(
    biome: np.ndarray,
    moisture: np.ndarray,
    water_distance: np.ndarray,
    settings: WorldSettings,
    noise: SimplexNoise,
) -> np.ndarray:
    """
    Forest intensity layer, 0 for no forest and 1..255 otherwise.

    Args:
        biome: Biome layer
        moisture: Moisture layer
        water_distance: Normalized distance to water
        settings: World settings
        noise: Density noise
    """
    options = settings.forests
    forest = np.zeros(biome.shape, dtype=np.uint8)

    if not options.enabled:
        return forest

    bias = np.zeros(biome.shape, dtype=np.float64)
    eligible = np.zeros(biome.shape, dtype=bool)
    for forest_biome, biome_bias in FOREST_BIOME_BIAS.items():
        cells = biome == forest_biome
        eligible |= cells
        bias[cells] = biome_bias

    nx, ny = normalized_coordinates(settings.map.width, settings.map.height)
    density = fbm(noise, nx, ny, 4, options.density_noise_freq, 0.6)
    density = density + np.asarray(moisture, dtype=np.float64) * options.moisture_influence
    density = density + (1 - np.asarray(water_distance, dtype=np.float64)) * options.river_proximity_boost
    density = density + bias

    threshold = options.density_threshold
    forested = eligible & (density > threshold)
    intensity = np.floor((density - threshold) / (1 - threshold) * MAX_FOREST_INTENSITY)
    intensity = np.clip(intensity, 1, MAX_FOREST_INTENSITY)
    forest[forested] = intensity[forested].astype(np.uint8)

    logger.info("Forests generated", forest_cells=int(forested.sum()))
    return forest
