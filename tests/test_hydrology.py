"""Tests for flow, rivers, lakes and water distance."""

import math

import numpy as np
import pytest

from py_worldgen.config import HydrologySettings
from py_worldgen.core.hydrology import (
    LAKE_MAX_CELLS,
    calculate_flow_accumulation,
    calculate_flow_direction,
    calculate_water_distance,
    detect_lakes,
    downstream_cells,
    generate_rivers,
)
from py_worldgen.utils.grid import NO_FLOW


@pytest.fixture
def ramp():
    """All-land ramp falling towards the east."""
    ys, xs = np.indices((6, 10))
    height_map = (1.0 - xs * 0.05).astype(np.float32)
    land_mask = np.ones((6, 10), dtype=np.uint8)
    return height_map, land_mask


def bowl(size, centre_height, step, rim=0.5):
    """All-land bowl whose only interior sink is the centre cell."""
    ys, xs = np.indices((size, size))
    c = size // 2
    distance = np.maximum(np.abs(xs - c), np.abs(ys - c))
    height_map = np.where(distance == 0, centre_height, rim + step * distance)
    return height_map.astype(np.float32), np.ones((size, size), dtype=np.uint8)


class TestFlowDirection:
    """Test steepest-descent flow directions."""

    def test_ramp_flows_east(self, ramp):
        height_map, land_mask = ramp
        flow_dir = calculate_flow_direction(height_map, land_mask)

        assert flow_dir.dtype == np.int8
        assert np.all(flow_dir[:, :-1] == 2)
        # The eastern edge has no lower neighbour
        assert np.all(flow_dir[:, -1] == NO_FLOW)

    def test_water_has_no_flow(self, ramp):
        height_map, land_mask = ramp
        land_mask = land_mask.copy()
        land_mask[:, 5:] = 0
        flow_dir = calculate_flow_direction(height_map, land_mask)

        assert np.all(flow_dir[:, 5:] == NO_FLOW)
        assert np.all(flow_dir[:, :5] == 2)

    def test_downstream_cells(self, ramp):
        height_map, land_mask = ramp
        target = downstream_cells(calculate_flow_direction(height_map, land_mask))

        assert target[0] == 1
        assert target[9] == -1
        assert target[10 + 3] == 10 + 4


class TestFlowAccumulation:
    """Test flow accumulation."""

    def test_ramp_accumulates_along_rows(self, ramp):
        height_map, land_mask = ramp
        accumulation = calculate_flow_accumulation(
            calculate_flow_direction(height_map, land_mask), land_mask
        )

        assert accumulation.dtype == np.float32
        for x in range(10):
            assert np.all(accumulation[:, x] == x + 1)

    def test_bowl_drains_to_centre(self):
        height_map, land_mask = bowl(7, 0.3, 0.05)
        accumulation = calculate_flow_accumulation(
            calculate_flow_direction(height_map, land_mask), land_mask
        )

        assert accumulation[3, 3] == 49

    def test_conservation(self, small_world):
        """Every cell holds one unit plus everything draining into it."""
        flow_dir = np.asarray(small_world.flow_direction)
        land = np.asarray(small_world.land_mask).ravel() == 1
        accumulation = np.asarray(small_world.flow_accumulation, dtype=np.float64).ravel()
        target = downstream_cells(flow_dir)

        inflow = np.zeros_like(accumulation)
        sources = land & (target >= 0)
        np.add.at(inflow, target[sources], accumulation[sources])

        assert np.all(accumulation[land] >= 1)
        np.testing.assert_allclose(accumulation, 1 + inflow)


class TestRivers:
    """Test river extraction."""

    def test_threshold_and_intensity(self, ramp):
        _, land_mask = ramp
        accumulation = np.tile(np.arange(1, 11, dtype=np.float32), (6, 1))
        rivers = generate_rivers(accumulation, land_mask, HydrologySettings(river_min_accum=5))

        assert rivers.dtype == np.uint8
        assert np.all(rivers[:, :4] == 0)
        assert np.all(rivers[:, 4:] > 0)
        assert rivers[0, 4] == math.floor(math.log(2) * 50)

    def test_no_rivers_in_water(self, ramp):
        _, land_mask = ramp
        accumulation = np.full((6, 10), 1000, dtype=np.float32)
        water = np.zeros_like(land_mask)
        rivers = generate_rivers(accumulation, water, HydrologySettings())

        assert rivers.sum() == 0


class TestLakes:
    """Test lake filling."""

    def test_single_cell_lake(self):
        height_map, land_mask = bowl(7, 0.3, 0.05)
        flow_dir = calculate_flow_direction(height_map, land_mask)
        lake_mask = detect_lakes(height_map, land_mask, flow_dir, HydrologySettings())

        assert lake_mask.dtype == np.uint8
        assert lake_mask[3, 3] == 1
        assert lake_mask.sum() == 1

    def test_lake_size_limit(self):
        height_map, land_mask = bowl(15, 0.3, 0.001, rim=0.3)
        flow_dir = calculate_flow_direction(height_map, land_mask)
        lake_mask = detect_lakes(height_map, land_mask, flow_dir, HydrologySettings())

        assert lake_mask.sum() == LAKE_MAX_CELLS

    def test_disabled(self):
        height_map, land_mask = bowl(7, 0.3, 0.05)
        flow_dir = calculate_flow_direction(height_map, land_mask)
        lake_mask = detect_lakes(
            height_map, land_mask, flow_dir, HydrologySettings(lake_fill_enabled=False)
        )

        assert lake_mask.sum() == 0


class TestWaterDistance:
    """Test the distance-to-water field."""

    def test_no_water_is_far(self):
        land_mask = np.ones((5, 5), dtype=np.uint8)
        nothing = np.zeros((5, 5), dtype=np.uint8)
        distance = calculate_water_distance(land_mask, nothing, nothing)

        assert distance.dtype == np.float32
        assert np.all(distance == 1.0)

    def test_octile_distance(self):
        """Orthogonal steps cost 1 and diagonal steps sqrt(2)."""
        land_mask = np.ones((5, 5), dtype=np.uint8)
        rivers = np.zeros((5, 5), dtype=np.uint8)
        lake_mask = np.zeros((5, 5), dtype=np.uint8)
        lake_mask[0, 0] = 1
        distance = calculate_water_distance(land_mask, rivers, lake_mask)

        max_distance = 4 * math.sqrt(2)
        assert distance[0, 0] == 0
        assert distance[4, 4] == pytest.approx(1.0)
        assert distance[0, 4] == pytest.approx(4 / max_distance, abs=1e-6)
        assert distance[1, 2] == pytest.approx((1 + math.sqrt(2)) / max_distance, abs=1e-6)

    def test_all_water_sources(self):
        """Ocean, rivers and lakes all count as water."""
        land_mask = np.ones((3, 9), dtype=np.uint8)
        land_mask[:, 0] = 0
        rivers = np.zeros((3, 9), dtype=np.uint8)
        rivers[:, 4] = 10
        lake_mask = np.zeros((3, 9), dtype=np.uint8)
        lake_mask[:, 8] = 1
        distance = calculate_water_distance(land_mask, rivers, lake_mask)

        assert np.all(distance[:, [0, 4, 8]] == 0)
        np.testing.assert_allclose(distance[:, [2, 6]], 1.0)
        np.testing.assert_allclose(distance[:, [1, 3, 5, 7]], 0.5)
