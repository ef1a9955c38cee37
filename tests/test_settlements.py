"""
Unit tests for settlement placement.

Tests cover:
- Slope and suitability scoring
- Greedy placement with spacing
- Capital, type and size assignment
"""

import itertools
import math

import numpy as np
import pytest
from pydantic import ValidationError

from py_worldgen.config import WorldSettings
from py_worldgen.core.biomes import Biome
from py_worldgen.core.prng import Mulberry32PRNG
from py_worldgen.core.settlements import (
    City,
    CityType,
    calculate_slope,
    calculate_suitability,
    place_cities,
)

SIZE = 60


@pytest.fixture
def settings():
    return WorldSettings().with_overrides(
        map={"width": SIZE, "height": SIZE}, cities={"count": 6, "min_spacing": 12}
    )


@pytest.fixture
def plains():
    """Flat inland grassland with no water."""
    height_map = np.full((SIZE, SIZE), 0.5, dtype=np.float32)
    land_mask = np.ones((SIZE, SIZE), dtype=np.uint8)
    biome = np.full((SIZE, SIZE), int(Biome.GRASSLAND), dtype=np.uint8)
    rivers = np.zeros((SIZE, SIZE), dtype=np.uint8)
    return height_map, land_mask, biome, rivers


class TestCityModel:
    """Test the City record."""

    def test_frozen(self):
        city = City(id=0, x=1, y=2, size=1.0, type=CityType.CAPITAL, name="Haven")

        with pytest.raises(ValidationError):
            city.x = 5

    def test_size_bounds(self):
        with pytest.raises(ValueError):
            City(id=0, x=1, y=2, size=0.0, type=CityType.TOWN, name="Nowhere")


class TestSuitability:
    """Test cell scoring."""

    def test_slope(self):
        height_map = np.full((5, 5), 0.5)
        height_map[2, 3] = 0.7
        slope = calculate_slope(height_map)

        assert slope[0, 0] == 1.0
        assert slope[4, 2] == 1.0
        assert slope[2, 1] == 0.0
        assert slope[2, 2] == pytest.approx(0.2)

    def test_ineligible_cells_score_zero(self, settings, plains):
        height_map, land_mask, biome, rivers = plains
        land_mask = land_mask.copy()
        biome = biome.copy()
        land_mask[:, :10] = 0
        biome[:, 50:] = int(Biome.DESERT)

        scores = calculate_suitability(height_map, land_mask, biome, rivers, settings, Mulberry32PRNG("s"))

        assert np.all(scores[:, :10] == 0)
        assert np.all(scores[:, 50:] == 0)
        assert np.all(scores[5:-5, 15:45] >= 2.0)

    def test_one_draw_per_eligible_cell(self, settings, plains):
        height_map, land_mask, biome, rivers = plains
        prng = Mulberry32PRNG("draws")
        calculate_suitability(height_map, land_mask, biome, rivers, settings, prng)

        assert prng.call_count == SIZE * SIZE

    def test_river_bonus(self, settings, plains):
        """River cells outscore cells far from any river."""
        height_map, land_mask, biome, _ = plains
        rivers = np.zeros((SIZE, SIZE), dtype=np.uint8)
        rivers[:, 30] = 40

        scores = calculate_suitability(height_map, land_mask, biome, rivers, settings, Mulberry32PRNG("r"))

        # On river: 2 + 2.0; far away: 2 + at most 0.5 jitter
        assert scores[5:-5, 30].min() > scores[5:-5, 5:20].max()


class TestPlacement:
    """Test city placement."""

    def test_placement(self, settings, plains):
        cities = place_cities(*plains, settings, Mulberry32PRNG("place"))

        assert 1 <= len(cities) <= 6
        assert [city.id for city in cities] == list(range(len(cities)))
        assert cities[0].type == CityType.CAPITAL
        assert cities[0].size == 1.0
        assert sum(1 for city in cities if city.type == CityType.CAPITAL) == 1

    def test_spacing(self, settings, plains):
        cities = place_cities(*plains, settings, Mulberry32PRNG("spacing"))

        for a, b in itertools.combinations(cities, 2):
            assert math.hypot(a.x - b.x, a.y - b.y) >= settings.cities.min_spacing

    def test_inland_types_and_sizes(self, settings, plains):
        """Away from water, flat cells score below 3 so later cities are towns."""
        cities = place_cities(*plains, settings, Mulberry32PRNG("types"))

        for city in cities[1:]:
            assert city.type == CityType.TOWN
            assert 0.3 <= city.size < 0.9

    def test_coastal_cities(self, settings, plains):
        """Cities near the sea become ports or cities, never towns."""
        height_map, land_mask, biome, rivers = plains
        land_mask = land_mask.copy()
        land_mask[:, :5] = 0
        biome = biome.copy()
        biome[:, :5] = int(Biome.OCEAN)

        cities = place_cities(height_map, land_mask, biome, rivers, settings, Mulberry32PRNG("coast"))

        for city in cities[1:]:
            if city.x <= 9:
                assert city.type in (CityType.PORT, CityType.CITY)

    @pytest.mark.parametrize("seed", range(10))
    def test_isolated_patches_all_settled(self, seed):
        """Rounds whose samples miss every patch do not end placement."""
        size = 160
        patch_corners = [(20, 20), (134, 20), (20, 134), (134, 134)]
        height_map = np.full((size, size), 0.5, dtype=np.float32)
        land_mask = np.ones((size, size), dtype=np.uint8)
        biome = np.full((size, size), int(Biome.DESERT), dtype=np.uint8)
        for px, py in patch_corners:
            biome[py:py + 6, px:px + 6] = int(Biome.GRASSLAND)
        rivers = np.zeros((size, size), dtype=np.uint8)
        sparse = WorldSettings().with_overrides(
            map={"width": size, "height": size}, cities={"count": 20, "min_spacing": 20}
        )

        cities = place_cities(height_map, land_mask, biome, rivers, sparse, Mulberry32PRNG(seed))

        assert len(cities) == len(patch_corners)
        assert cities[0].type == CityType.CAPITAL
        assert [city.id for city in cities] == list(range(len(cities)))
        for px, py in patch_corners:
            assert sum(1 for c in cities if px <= c.x < px + 6 and py <= c.y < py + 6) == 1

    def test_cities_on_land(self, small_world):
        for city in small_world.cities:
            assert small_world.land_mask[city.y, city.x] == 1

    def test_disabled(self, settings, plains):
        disabled = settings.with_overrides(cities={"enabled": False})
        prng = Mulberry32PRNG("off")

        assert place_cities(*plains, disabled, prng) == []
        assert prng.call_count == 0

    def test_no_land(self, settings, plains):
        height_map, _, biome, rivers = plains
        ocean = np.zeros((SIZE, SIZE), dtype=np.uint8)

        assert place_cities(height_map, ocean, biome, rivers, settings, Mulberry32PRNG("sea")) == []

    def test_deterministic(self, settings, plains):
        cities1 = place_cities(*plains, settings, Mulberry32PRNG("same"))
        cities2 = place_cities(*plains, settings, Mulberry32PRNG("same"))

        assert cities1 == cities2
