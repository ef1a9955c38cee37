"""
World generation pipeline.

Runs every stage in a fixed order:
Landmass -> Elevation -> Hydrology -> Climate -> Biomes -> Forests ->
Settlements -> Roads.

Each stage that needs randomness gets its own stream forked from the root
generator in a fixed order, so disabling or retuning a later stage never
changes the output of an earlier one.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple, Union

import numpy as np
import structlog

from ..config import WorldSettings
from .biomes import classify_biomes
from .climate import generate_moisture, generate_temperature
from .continents import generate_continent_mask, generate_continent_seeds
from .elevation import generate_height_map, generate_mountain_ranges
from .forests import generate_forests
from .hydrology import (
    calculate_flow_accumulation,
    calculate_flow_direction,
    calculate_water_distance,
    detect_lakes,
    generate_rivers,
)
from .noise import SimplexNoise
from .prng import Mulberry32PRNG
from .roads import Road, generate_roads
from .settlements import City, place_cities

logger = structlog.get_logger()

ProgressCallback = Callable[[str, int], None]


@dataclass(frozen=True)
class WorldDebug:
    """Intermediate layers kept for inspection."""

    continent_id: np.ndarray
    mountain_mask: np.ndarray
    lake_mask: np.ndarray


@dataclass(frozen=True)
class WorldSnapshot:
    """
    Complete output of one generation.

    Every layer is shaped (height, width) and read-only.
    """

    width: int
    height: int
    height_map: np.ndarray
    land_mask: np.ndarray
    temperature: np.ndarray
    moisture: np.ndarray
    biome: np.ndarray
    flow_direction: np.ndarray
    flow_accumulation: np.ndarray
    rivers: np.ndarray
    water_distance: np.ndarray
    forest: np.ndarray
    cities: Tuple[City, ...]
    roads: Tuple[Road, ...]
    debug: WorldDebug


def _freeze(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _validate(settings: Union[WorldSettings, Mapping[str, Any], None]) -> WorldSettings:
    if settings is None:
        return WorldSettings()
    if isinstance(settings, WorldSettings):
        # Re-validate so trees built with model_construct() are checked too
        return WorldSettings.model_validate(settings.model_dump())
    return WorldSettings.model_validate(settings)


def generate_world(
    settings: Union[WorldSettings, Mapping[str, Any], None] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> WorldSnapshot:
    """
    Generate a complete world.

    Args:
        settings: Settings tree, or a mapping validated into one. Defaults apply
            when omitted.
        on_progress: Called with a stage name and a percentage before each stage

    Returns:
        Frozen WorldSnapshot

    Raises:
        pydantic.ValidationError: If the settings are invalid
    """
    settings = _validate(settings)
    width, height = settings.map.width, settings.map.height

    def report(stage: str, percent: int) -> None:
        if on_progress is not None:
            on_progress(stage, percent)

    start_time = time.time()
    logger.info("Starting world generation", seed=settings.map.seed, width=width, height=height)

    prng = Mulberry32PRNG(settings.map.seed)
    report("Initializing...", 0)

    # Every fork happens unconditionally and in this order
    seed_prng = prng.fork()
    coast_noise = SimplexNoise(prng.fork())
    archipelago_prng = prng.fork()
    mountain_prng = prng.fork()
    terrain_noise = SimplexNoise(prng.fork())
    height_prng = prng.fork()
    temperature_noise = SimplexNoise(prng.fork())
    moisture_noise = SimplexNoise(prng.fork())
    forest_noise = SimplexNoise(prng.fork())
    settlement_prng = prng.fork()

    report("Generating continents...", 5)
    seeds = generate_continent_seeds(settings, seed_prng)
    land_mask, continent_id = generate_continent_mask(settings, seeds, coast_noise, archipelago_prng)

    report("Building mountains...", 15)
    ranges = generate_mountain_ranges(settings, land_mask, mountain_prng)
    height_map, mountain_mask = generate_height_map(settings, land_mask, ranges, terrain_noise, height_prng)

    report("Simulating water flow...", 30)
    flow_direction = calculate_flow_direction(height_map, land_mask)
    flow_accumulation = calculate_flow_accumulation(flow_direction, land_mask)
    rivers = generate_rivers(flow_accumulation, land_mask, settings.hydrology)

    report("Detecting lakes...", 40)
    lake_mask = detect_lakes(height_map, land_mask, flow_direction, settings.hydrology)
    water_distance = calculate_water_distance(land_mask, rivers, lake_mask)

    report("Calculating climate...", 50)
    temperature = generate_temperature(height_map, land_mask, settings, temperature_noise)
    moisture = generate_moisture(height_map, land_mask, water_distance, settings, moisture_noise)

    report("Assigning biomes...", 60)
    biome = classify_biomes(height_map, land_mask, lake_mask, temperature, moisture, settings)

    report("Growing forests...", 70)
    forest = generate_forests(biome, moisture, water_distance, settings, forest_noise)

    report("Founding cities...", 80)
    cities = place_cities(height_map, land_mask, biome, rivers, settings, settlement_prng)

    report("Building roads...", 90)
    roads = generate_roads(cities, height_map, land_mask, forest, settings)

    world = WorldSnapshot(
        width=width,
        height=height,
        height_map=_freeze(height_map),
        land_mask=_freeze(land_mask),
        temperature=_freeze(temperature),
        moisture=_freeze(moisture),
        biome=_freeze(biome),
        flow_direction=_freeze(flow_direction),
        flow_accumulation=_freeze(flow_accumulation),
        rivers=_freeze(rivers),
        water_distance=_freeze(water_distance),
        forest=_freeze(forest),
        cities=tuple(cities),
        roads=roads,
        debug=WorldDebug(
            continent_id=_freeze(continent_id),
            mountain_mask=_freeze(mountain_mask),
            lake_mask=_freeze(lake_mask),
        ),
    )

    report("Complete!", 100)
    logger.info(
        "World generation completed",
        seed=settings.map.seed,
        cities=len(cities),
        roads=len(roads),
        duration_seconds=round(time.time() - start_time, 2),
    )
    return world
