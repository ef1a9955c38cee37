"""Shared fixtures for world generation tests."""

import pytest

from py_worldgen.config import WorldSettings
from py_worldgen.core.pipeline import generate_world


@pytest.fixture(scope="session")
def small_settings():
    """A small map that generates quickly but exercises every stage."""
    return WorldSettings().with_overrides(
        map={"width": 96, "height": 72, "seed": "test-world"},
        continents={"continent_count_min": 2, "continent_count_max": 3},
        cities={"count": 6, "min_spacing": 10},
    )


@pytest.fixture(scope="session")
def small_world(small_settings):
    """World generated once from small_settings."""
    return generate_world(small_settings)
