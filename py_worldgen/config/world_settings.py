"""
Generation settings for the world pipeline.

Every stage reads one fully-populated, immutable record. Bounds are enforced
by pydantic when the tree is built so invalid configuration fails before any
stage runs.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _SettingsRecord(BaseModel):
    """Base for frozen settings records."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class MapSettings(_SettingsRecord):
    """Map dimensions, seed and sea level."""

    width: int = Field(default=512, gt=0, le=4096, description="Map width in cells")
    height: int = Field(default=384, gt=0, le=4096, description="Map height in cells")
    seed: str = Field(default="fantasy-world", description="Generation seed")
    sea_level: float = Field(
        default=0.4, gt=0.0, lt=1.0, description="Land threshold for the continent mask"
    )


class ContinentSettings(_SettingsRecord):
    """Continent seed placement and land mask parameters."""

    continent_count_min: int = Field(default=2, ge=0, le=50, description="Minimum continents")
    continent_count_max: int = Field(default=5, ge=0, le=50, description="Maximum continents")
    seed_spacing: float = Field(
        default=0.25, ge=0.0, le=1.0, description="Minimum seed distance as a fraction of map size"
    )
    mask_falloff: float = Field(
        default=2.0, gt=0.0, le=10.0, description="Exponent of the influence falloff"
    )
    coastline_noise_freq: float = Field(
        default=4.0, ge=0.0, le=64.0, description="Coastline noise frequency"
    )
    coastline_noise_amp: float = Field(
        default=0.15, ge=0.0, le=1.0, description="Coastline noise amplitude"
    )
    archipelago_chance: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Chance of island cells near land"
    )

    @model_validator(mode="after")
    def _check_count_range(self) -> "ContinentSettings":
        if self.continent_count_min > self.continent_count_max:
            raise ValueError(
                "continent_count_min must not exceed continent_count_max "
                f"({self.continent_count_min} > {self.continent_count_max})"
            )
        return self


class ElevationSettings(_SettingsRecord):
    """Base terrain, mountain range and thermal erosion parameters."""

    base_noise_freq: float = Field(default=2.0, ge=0.0, le=64.0, description="Base terrain frequency")
    base_noise_octaves: int = Field(default=6, ge=1, le=12, description="Base terrain octaves")
    base_noise_persistence: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Base terrain persistence"
    )
    ridge_noise_freq: float = Field(default=3.0, ge=0.0, le=64.0, description="Ridge noise frequency")
    ridge_noise_octaves: int = Field(default=4, ge=1, le=12, description="Ridge noise octaves")
    ridge_strength: float = Field(default=0.3, ge=0.0, le=2.0, description="Ridge detail strength")
    mountain_range_count_min: int = Field(default=3, ge=0, le=50, description="Minimum mountain ranges")
    mountain_range_count_max: int = Field(default=8, ge=0, le=50, description="Maximum mountain ranges")
    mountain_range_width: float = Field(
        default=0.08, gt=0.0, le=1.0, description="Range width as a fraction of map size"
    )
    mountain_range_height: float = Field(
        default=0.4, ge=0.0, le=2.0, description="Peak elevation boost of a range"
    )
    mountain_range_curviness: float = Field(
        default=0.5, ge=0.0, le=3.2, description="Maximum heading change per walk step (radians)"
    )
    erosion_thermal_iterations: int = Field(
        default=5, ge=0, le=100, description="Thermal erosion passes"
    )

    @model_validator(mode="after")
    def _check_count_range(self) -> "ElevationSettings":
        if self.mountain_range_count_min > self.mountain_range_count_max:
            raise ValueError(
                "mountain_range_count_min must not exceed mountain_range_count_max "
                f"({self.mountain_range_count_min} > {self.mountain_range_count_max})"
            )
        return self


class HydrologySettings(_SettingsRecord):
    """River, lake and rainfall parameters."""

    rainfall_bias: float = Field(default=0.5, ge=0.0, le=1.0, description="Baseline moisture")
    river_min_accum: float = Field(
        default=100.0, gt=0.0, le=100000.0, description="Flow accumulation needed for a river"
    )
    lake_fill_enabled: bool = Field(default=True, description="Fill undrained basins with lakes")
    hydraulic_erosion_enabled: bool = Field(
        default=False, description="Run droplet hydraulic erosion after thermal erosion"
    )
    hydraulic_erosion_drops: int = Field(
        default=0, ge=0, le=1000000, description="Number of erosion droplets"
    )


class ClimateSettings(_SettingsRecord):
    """Temperature and moisture parameters."""

    latitude_temp_strength: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Weight of latitude on temperature"
    )
    elevation_temp_strength: float = Field(
        default=0.5, ge=0.0, le=2.0, description="Temperature drop at the highest land"
    )
    wind_direction_degrees: float = Field(
        default=270.0, ge=0.0, le=360.0, description="Prevailing wind direction"
    )
    rain_shadow_strength: float = Field(
        default=0.3, ge=0.0, le=2.0, description="Moisture removed behind high terrain"
    )
    moisture_from_water_strength: float = Field(
        default=0.5, ge=0.0, le=2.0, description="Moisture gained near water"
    )


class BiomeSettings(_SettingsRecord):
    """Biome classification thresholds."""

    desert_moisture_max: float = Field(default=0.2, ge=0.0, le=1.0, description="Desert moisture ceiling")
    snow_temp_max: float = Field(default=0.15, ge=0.0, le=1.0, description="Snow temperature ceiling")
    mountain_elevation_min: float = Field(
        default=0.75, ge=0.0, le=1.0, description="Normalized land elevation of mountain biomes"
    )
    beach_elevation_range: float = Field(
        default=0.05, ge=0.0, le=1.0, description="Normalized land elevation of beaches"
    )


class ForestSettings(_SettingsRecord):
    """Forest density parameters."""

    enabled: bool = Field(default=True, description="Generate forests")
    density_noise_freq: float = Field(default=8.0, ge=0.0, le=64.0, description="Density noise frequency")
    density_threshold: float = Field(
        default=0.4, ge=0.0, lt=1.0, description="Density needed for forest to appear"
    )
    moisture_influence: float = Field(default=0.6, ge=0.0, le=2.0, description="Weight of moisture")
    river_proximity_boost: float = Field(
        default=0.2, ge=0.0, le=2.0, description="Weight of water proximity"
    )


class CitySettings(_SettingsRecord):
    """Settlement placement parameters."""

    enabled: bool = Field(default=True, description="Place cities")
    count: int = Field(default=20, ge=0, le=500, description="Requested number of cities")
    min_spacing: int = Field(default=30, ge=0, le=1000, description="Minimum distance between cities")
    coast_preference: float = Field(default=1.5, ge=0.0, le=10.0, description="Coastal score bonus")
    river_preference: float = Field(default=2.0, ge=0.0, le=10.0, description="River score bonus")
    flat_preference: float = Field(default=1.0, ge=0.0, le=10.0, description="Flat terrain weight")


class RoadSettings(_SettingsRecord):
    """Road network parameters."""

    enabled: bool = Field(default=True, description="Build roads")
    max_connections_per_city: int = Field(
        default=3, ge=0, le=50, description="Maximum roads per city"
    )
    cost_elevation: float = Field(default=2.0, ge=0.0, le=100.0, description="Slope cost weight")
    cost_water: float = Field(default=100.0, ge=0.0, le=10000.0, description="Water crossing cost")
    cost_forest: float = Field(default=1.5, ge=0.0, le=100.0, description="Forest cost weight")
    cost_mountain: float = Field(default=5.0, ge=0.0, le=1000.0, description="Mountain cell cost")
    simplify_tolerance: float = Field(
        default=2.0, ge=0.0, le=100.0, description="Path simplification tolerance in cells"
    )


class WorldSettings(_SettingsRecord):
    """Complete settings tree consumed by the generation pipeline."""

    map: MapSettings = Field(default_factory=MapSettings)
    continents: ContinentSettings = Field(default_factory=ContinentSettings)
    elevation: ElevationSettings = Field(default_factory=ElevationSettings)
    hydrology: HydrologySettings = Field(default_factory=HydrologySettings)
    climate: ClimateSettings = Field(default_factory=ClimateSettings)
    biomes: BiomeSettings = Field(default_factory=BiomeSettings)
    forests: ForestSettings = Field(default_factory=ForestSettings)
    cities: CitySettings = Field(default_factory=CitySettings)
    roads: RoadSettings = Field(default_factory=RoadSettings)

    def with_overrides(self, **sections: dict) -> "WorldSettings":
        """
        Return a validated copy with some fields of some sections replaced.

        Example:
            settings.with_overrides(map={"seed": "other"}, roads={"enabled": False})
        """
        data = self.model_dump()
        for section, values in sections.items():
            if section not in data:
                raise KeyError(f"Unknown settings section: {section}")
            data[section].update(values)
        return WorldSettings.model_validate(data)


DEFAULT_SETTINGS = WorldSettings()
