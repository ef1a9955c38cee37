"""
Climate calculation for temperature and moisture.

This module implements:
- Latitude temperature bands peaking at the vertical centre of the map
- Altitude temperature drop
- Moisture from rainfall bias and water proximity
- Rain shadows behind high terrain relative to the prevailing wind
"""

import math

import numpy as np
import structlog

from ..config import WorldSettings
from ..utils.grid import cell_coordinates, normalized_coordinates, round_half_up
from .noise import SimplexNoise, fbm

logger = structlog.get_logger()

RAIN_SHADOW_DISTANCE = 50
RAIN_SHADOW_MIN_RISE = 0.1


def generate_temperature(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    settings: WorldSettings,
    noise: SimplexNoise,
) -> np.ndarray:
    """Temperature in [0, 1] from latitude, elevation and noise jitter."""
    options = settings.climate
    sea_level = settings.map.sea_level
    nx, ny = normalized_coordinates(settings.map.width, settings.map.height)

    latitude_factor = 1 - np.abs(ny - 0.5) * 2
    temperature = latitude_factor * options.latitude_temp_strength + (1 - options.latitude_temp_strength)

    h = np.asarray(height_map, dtype=np.float64)
    land_elevation = (h - sea_level) / (1 - sea_level)
    temperature = np.where(
        land_mask == 1, temperature - land_elevation * options.elevation_temp_strength, temperature
    )

    temperature = temperature + fbm(noise, nx + 10, ny + 10, 2, 4, 0.5) * 0.1 - 0.05
    temperature = np.clip(temperature, 0.0, 1.0).astype(np.float32)

    logger.info("Temperature calculated", mean=round(float(temperature.mean()), 4))
    return temperature


def calculate_rain_shadow(
    height_map: np.ndarray, wind_direction_degrees: float
) -> np.ndarray:
    """
    Largest distance-attenuated elevation excess found upwind of each cell.

    Samples RAIN_SHADOW_DISTANCE cells back along the wind; only samples more
    than RAIN_SHADOW_MIN_RISE above the cell count.
    """
    h = np.asarray(height_map, dtype=np.float64)
    height, width = h.shape
    wind_rad = math.radians(wind_direction_degrees)
    wind_x = math.cos(wind_rad)
    wind_y = math.sin(wind_rad)

    x, y = cell_coordinates(width, height)
    block = np.zeros_like(h)

    for d in range(1, RAIN_SHADOW_DISTANCE + 1):
        check_x = round_half_up(x - wind_x * d).astype(np.int64)
        check_y = round_half_up(y - wind_y * d).astype(np.int64)
        inside = (check_x >= 0) & (check_x < width) & (check_y >= 0) & (check_y < height)

        # Off-map samples rise nothing
        upwind = h.copy()
        upwind[inside] = h[check_y[inside], check_x[inside]]

        rise = upwind - h
        shadow = np.where(rise > RAIN_SHADOW_MIN_RISE, rise * (1 - d / RAIN_SHADOW_DISTANCE), 0.0)
        block = np.maximum(block, shadow)

    return block


def generate_moisture(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    water_distance: np.ndarray,
    settings: WorldSettings,
    noise: SimplexNoise,
) -> np.ndarray:
    """Moisture in [0, 1] from rainfall bias, water proximity and rain shadow."""
    options = settings.climate
    nx, ny = normalized_coordinates(settings.map.width, settings.map.height)

    moisture = settings.hydrology.rainfall_bias + (
        1 - np.asarray(water_distance, dtype=np.float64)
    ) * options.moisture_from_water_strength

    if options.rain_shadow_strength > 0:
        block = calculate_rain_shadow(height_map, options.wind_direction_degrees)
        moisture = np.where(land_mask == 1, moisture - block * options.rain_shadow_strength, moisture)

    moisture = moisture + fbm(noise, nx + 20, ny + 20, 3, 6, 0.5) * 0.3 - 0.15
    moisture = np.clip(moisture, 0.0, 1.0).astype(np.float32)

    logger.info("Moisture calculated", mean=round(float(moisture.mean()), 4))
    return moisture
