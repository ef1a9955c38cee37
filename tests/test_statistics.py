"""Tests for world statistics."""

import pytest

from py_worldgen.core.statistics import WorldStatistics, summarize_world


class TestSummarizeWorld:
    """Test statistics computed from a snapshot."""

    @pytest.fixture
    def stats(self, small_world):
        return summarize_world(small_world)

    def test_cell_counts(self, stats, small_world):
        assert isinstance(stats, WorldStatistics)
        assert stats.total_cells == small_world.width * small_world.height
        assert stats.land_cells + stats.water_cells == stats.total_cells
        assert stats.land_fraction == pytest.approx(float(small_world.land_mask.mean()))

    def test_biome_distribution(self, stats):
        assert stats.biome_distribution
        assert all(biome.cell_count > 0 for biome in stats.biome_distribution)
        assert sum(biome.cell_count for biome in stats.biome_distribution) == stats.total_cells
        assert sum(biome.percentage for biome in stats.biome_distribution) == pytest.approx(100, abs=0.1)

    def test_water_features(self, stats, small_world):
        assert stats.river_cells == int((small_world.rivers > 0).sum())
        assert stats.lake_cells == int(small_world.debug.lake_mask.sum())

    def test_cities_and_roads(self, stats, small_world):
        assert sum(stats.city_counts.values()) == len(small_world.cities)
        assert set(stats.city_counts) == {"capital", "city", "town", "port"}
        assert stats.road_count == len(small_world.roads)
        assert stats.total_road_length >= 0

    def test_ranges(self, stats):
        low, high = stats.temperature_range
        assert 0.0 <= low <= high <= 1.0
        low, high = stats.moisture_range
        assert 0.0 <= low <= high <= 1.0
