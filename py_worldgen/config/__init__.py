"""
Configuration for world generation.
"""

from .config import RuntimeSettings, settings
from .presets import PRESETS, Preset, apply_preset, list_presets
from .world_settings import (
    DEFAULT_SETTINGS,
    BiomeSettings,
    CitySettings,
    ClimateSettings,
    ContinentSettings,
    ElevationSettings,
    ForestSettings,
    HydrologySettings,
    MapSettings,
    RoadSettings,
    WorldSettings,
)

__all__ = ['DEFAULT_SETTINGS', 'WorldSettings', 'MapSettings', 'ContinentSettings',
           'ElevationSettings', 'HydrologySettings', 'ClimateSettings', 'BiomeSettings',
           'ForestSettings', 'CitySettings', 'RoadSettings', 'PRESETS', 'Preset',
           'apply_preset', 'list_presets', 'RuntimeSettings', 'settings']
