"""
Settlement placement.

Process:
1. calculate_suitability() - Score every cell for settlement
2. place_cities() - Greedy sampled placement with spacing constraints
3. Type assignment (capital, port, city, town) and naming
"""

from enum import Enum
from typing import List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field
from sklearn.neighbors import KDTree

from ..config import WorldSettings
from ..utils.grid import DX, DY, box_any, neighbour_view
from .biomes import Biome
from .name_generator import NameGenerator
from .prng import Mulberry32PRNG

logger = structlog.get_logger()

# Biomes suitable for cities
CITY_BIOMES = (
    Biome.BEACH,
    Biome.GRASSLAND,
    Biome.TEMPERATE_FOREST,
    Biome.SAVANNA,
    Biome.TAIGA,
)

COAST_SEARCH_RADIUS = 5
RIVER_SEARCH_RADIUS = 3
MAX_SAMPLES = 1000
CITY_SCORE_THRESHOLD = 3.0


class CityType(str, Enum):
    """Closed set of settlement types."""

    CAPITAL = "capital"
    CITY = "city"
    TOWN = "town"
    PORT = "port"


class City(BaseModel):
    """A placed settlement."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Placement order, starting at 0")
    x: int = Field(description="Grid column")
    y: int = Field(description="Grid row")
    size: float = Field(gt=0.0, le=1.0, description="Relative settlement size")
    type: CityType = Field(description="Settlement type")
    name: str = Field(description="Settlement name")


def calculate_slope(height_map: np.ndarray) -> np.ndarray:
    """Largest absolute height difference to the 8 neighbours; 1 on the map border."""
    h = np.asarray(height_map, dtype=np.float64)
    slope = np.zeros_like(h)
    for d in range(8):
        neighbour = neighbour_view(h, DX[d], DY[d], 0.0)
        slope = np.maximum(slope, np.abs(neighbour - h))

    slope[0, :] = 1.0
    slope[-1, :] = 1.0
    slope[:, 0] = 1.0
    slope[:, -1] = 1.0
    return slope


def calculate_suitability(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    biome: np.ndarray,
    rivers: np.ndarray,
    settings: WorldSettings,
    prng: Mulberry32PRNG,
) -> np.ndarray:
    """
    Score every cell for settlement.

    Cells off land or outside CITY_BIOMES score 0. Others score
    ``1 + flatness + coastal bonus + river bonus + jitter``, floored at 0.
    Jitter draws are taken per eligible cell in row-major order.
    """
    options = settings.cities
    land = land_mask == 1
    eligible = land & np.isin(biome, [int(b) for b in CITY_BIOMES])

    slope = calculate_slope(height_map)
    coastal = box_any(~land, COAST_SEARCH_RADIUS)
    on_river = rivers > 0
    near_river = box_any(on_river, RIVER_SEARCH_RADIUS)

    score = 1.0 + (1.0 - slope * 10.0) * options.flat_preference
    score += np.where(coastal, options.coast_preference, 0.0)
    score += np.where(
        on_river,
        options.river_preference,
        np.where(near_river, options.river_preference * 0.5, 0.0),
    )

    jitter = np.zeros_like(score)
    jitter[eligible] = prng.random_array(int(eligible.sum())) * 0.5
    score = np.maximum(0.0, score + jitter)

    return np.where(eligible, score, 0.0)


def place_cities(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    biome: np.ndarray,
    rivers: np.ndarray,
    settings: WorldSettings,
    prng: Mulberry32PRNG,
) -> List[City]:
    """
    Place settlements greedily by sampled suitability.

    Each iteration samples up to MAX_SAMPLES random cells and keeps the best
    one that is at least ``min_spacing`` from every placed city. An iteration
    whose samples find no candidate places nothing, so fewer than ``count``
    cities come back when suitable land runs out.

    Returns:
        Cities in placement order; the first is the capital
    """
    options = settings.cities
    if not options.enabled or options.count == 0:
        return []

    logger.info("Placing cities", requested=options.count)

    height, width = land_mask.shape
    size = width * height
    min_spacing = options.min_spacing

    scores = calculate_suitability(height_map, land_mask, biome, rivers, settings, prng)
    flat_scores = scores.ravel()
    coastal = box_any(land_mask != 1, COAST_SEARCH_RADIUS)
    names = NameGenerator(prng)

    cities: List[City] = []
    tree: Optional[KDTree] = None
    sample_count = min(MAX_SAMPLES, size)

    for _ in range(options.count):
        best_idx = -1
        best_score = 0.0

        for _ in range(sample_count):
            idx = int(prng.random() * size)
            score = float(flat_scores[idx])
            if score <= best_score:
                continue

            x = idx % width
            y = idx // width
            if tree is not None:
                distances, _ = tree.query([[x, y]], k=1)
                if distances[0][0] < min_spacing:
                    continue

            best_idx = idx
            best_score = score

        if best_idx < 0:
            logger.debug("No candidate sampled", placed=len(cities))
            continue

        x = best_idx % width
        y = best_idx // width
        city_type = _city_type(
            first=not cities,
            is_coastal=bool(coastal[y, x]),
            has_river=bool(rivers[y, x] > 0),
            score=best_score,
            prng=prng,
        )

        cities.append(
            City(
                id=len(cities),
                x=x,
                y=y,
                size=1.0 if not cities else prng.uniform(0.3, 0.9),
                type=city_type,
                name=names.generate_city_name(),
            )
        )
        tree = KDTree(np.array([[c.x, c.y] for c in cities], dtype=np.float64))
        _suppress_scores(scores, x, y, min_spacing)

    if len(cities) < options.count:
        logger.info("Fewer cities than requested", placed=len(cities), requested=options.count)

    logger.info(
        "Cities placed",
        placed=len(cities),
        ports=sum(1 for c in cities if c.type == CityType.PORT),
    )
    return cities


def _city_type(
    first: bool, is_coastal: bool, has_river: bool, score: float, prng: Mulberry32PRNG
) -> CityType:
    if first:
        return CityType.CAPITAL
    if is_coastal and has_river:
        return CityType.PORT if prng.chance(0.7) else CityType.CITY
    if is_coastal:
        return CityType.PORT if prng.chance(0.5) else CityType.CITY
    if score > CITY_SCORE_THRESHOLD:
        return CityType.CITY
    return CityType.TOWN


def _suppress_scores(scores: np.ndarray, x: int, y: int, min_spacing: int) -> None:
    """Zero every score closer than ``min_spacing`` to (x, y), in place."""
    height, width = scores.shape
    x0 = max(0, x - min_spacing)
    x1 = min(width, x + min_spacing + 1)
    y0 = max(0, y - min_spacing)
    y1 = min(height, y + min_spacing + 1)

    bx, by = np.meshgrid(np.arange(x0, x1) - x, np.arange(y0, y1) - y)
    window = scores[y0:y1, x0:x1]
    window[np.sqrt(bx * bx + by * by) < min_spacing] = 0.0
