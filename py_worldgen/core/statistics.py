"""Summary statistics for a generated world."""

from typing import Dict, List, Tuple

import numpy as np
from pydantic import BaseModel

from .biomes import BIOME_NAMES, Biome
from .pipeline import WorldSnapshot
from .roads import path_length
from .settlements import CityType


class BiomeStatistics(BaseModel):
    """Biome distribution statistics for a world."""

    biome_name: str
    cell_count: int
    percentage: float
    avg_temperature: float
    avg_moisture: float


class WorldStatistics(BaseModel):
    """Statistics about a generated world."""

    width: int
    height: int
    total_cells: int
    land_cells: int
    water_cells: int
    land_fraction: float
    river_cells: int
    lake_cells: int
    biome_distribution: List[BiomeStatistics]
    temperature_range: Tuple[float, float]
    moisture_range: Tuple[float, float]
    city_counts: Dict[str, int]
    road_count: int
    total_road_length: float


def summarize_world(world: WorldSnapshot) -> WorldStatistics:
    """Compute statistics for a world snapshot. Only non-empty biomes are listed."""
    total_cells = world.width * world.height
    land_cells = int((world.land_mask == 1).sum())

    biome_stats = []
    for biome in Biome:
        cells = world.biome == int(biome)
        count = int(cells.sum())
        if count == 0:
            continue
        biome_stats.append(
            BiomeStatistics(
                biome_name=BIOME_NAMES[biome],
                cell_count=count,
                percentage=round(count / total_cells * 100, 2),
                avg_temperature=round(float(world.temperature[cells].mean()), 4),
                avg_moisture=round(float(world.moisture[cells].mean()), 4),
            )
        )

    city_counts = {city_type.value: 0 for city_type in CityType}
    for city in world.cities:
        city_counts[city.type.value] += 1

    return WorldStatistics(
        width=world.width,
        height=world.height,
        total_cells=total_cells,
        land_cells=land_cells,
        water_cells=total_cells - land_cells,
        land_fraction=land_cells / total_cells,
        river_cells=int((world.rivers > 0).sum()),
        lake_cells=int((world.debug.lake_mask == 1).sum()),
        biome_distribution=biome_stats,
        temperature_range=(float(np.min(world.temperature)), float(np.max(world.temperature))),
        moisture_range=(float(np.min(world.moisture)), float(np.max(world.moisture))),
        city_counts=city_counts,
        road_count=len(world.roads),
        total_road_length=float(sum(path_length(road.path) for road in world.roads)),
    )
