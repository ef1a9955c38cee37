"""
Named world presets.

A preset is a partial settings overlay applied on top of a base tree.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .world_settings import DEFAULT_SETTINGS, WorldSettings


class Preset(BaseModel):
    """A named, described settings overlay."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Preset name")
    description: str = Field(description="Short description")
    overrides: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Section name to field overrides"
    )


PRESETS: Dict[str, Preset] = {
    preset.name: preset
    for preset in [
        Preset(name="Earth-like", description="Balanced world with varied biomes"),
        Preset(
            name="Archipelago",
            description="Many small islands",
            overrides={
                "map": {"sea_level": 0.55},
                "continents": {
                    "continent_count_min": 8,
                    "continent_count_max": 15,
                    "mask_falloff": 3.0,
                    "archipelago_chance": 0.4,
                },
            },
        ),
        Preset(
            name="Pangea",
            description="One massive supercontinent",
            overrides={
                "map": {"sea_level": 0.35},
                "continents": {
                    "continent_count_min": 1,
                    "continent_count_max": 1,
                    "mask_falloff": 1.2,
                },
            },
        ),
        Preset(
            name="High Mountains",
            description="Dramatic peaks and valleys",
            overrides={
                "elevation": {
                    "mountain_range_count_min": 8,
                    "mountain_range_count_max": 15,
                    "mountain_range_height": 0.6,
                    "ridge_strength": 0.5,
                },
            },
        ),
        Preset(
            name="Dry World",
            description="Arid climate with deserts",
            overrides={
                "hydrology": {"rainfall_bias": 0.2},
                "climate": {"moisture_from_water_strength": 0.2},
            },
        ),
    ]
}


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS)


def apply_preset(name: str, base: Optional[WorldSettings] = None) -> WorldSettings:
    """
    Overlay a preset onto ``base`` (defaults when omitted).

    Raises:
        KeyError: if the preset does not exist
    """
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: {name}")
    base = base or DEFAULT_SETTINGS
    return base.with_overrides(**PRESETS[name].overrides)
