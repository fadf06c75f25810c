"""Terrain generation configuration models."""

from pydantic import BaseModel, Field


class NoiseConfig(BaseModel):
    """Noise generation parameters for a single field."""

    wavelength: float = Field(default=32.0, description="Base wavelength in tiles")
    octaves: int = Field(default=5, ge=1, description="Number of octaves for fBm")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    gain: float = Field(default=0.5, description="Amplitude multiplier per octave")


class ElevationConfig(BaseModel):
    """Elevation field generation parameters."""

    noise: NoiseConfig = Field(default_factory=NoiseConfig)


class MoistureConfig(BaseModel):
    """Moisture field generation parameters."""

    noise: NoiseConfig = Field(
        default_factory=lambda: NoiseConfig(wavelength=40.0, octaves=4, gain=0.55)
    )
    contrast: float = Field(
        default=0.8, description="Scale applied to noise around the 0.5 midpoint"
    )


class TemperatureConfig(BaseModel):
    """Temperature field generation parameters."""

    noise: NoiseConfig = Field(
        default_factory=lambda: NoiseConfig(wavelength=64.0, octaves=3)
    )
    noise_weight: float = Field(default=0.55, description="Weight of the noise term")
    latitude_weight: float = Field(
        default=0.45, description="Weight of the warm-equator latitude term"
    )
    lapse_rate: float = Field(
        default=0.3, description="Cooling per unit of positive elevation"
    )


class HydrologyConfig(BaseModel):
    """River simulation parameters."""

    river_count_min: int = Field(default=2, description="Rivers at density 0")
    river_count_max: int = Field(default=40, description="Rivers at density 1")
    highland_quantile: float = Field(
        default=0.7, description="Land elevation quantile above which sources may start"
    )


class SettlementConfig(BaseModel):
    """Settlement placement parameters."""

    max_settlements: int = Field(default=40, description="Settlements at density 1")
    city_fraction: float = Field(default=0.1, description="Share of cities")
    town_fraction: float = Field(default=0.3, description="Share of towns")
    city_spacing: float = Field(default=6.0, description="Min distance around cities")
    town_spacing: float = Field(default=4.0, description="Min distance around towns")
    village_spacing: float = Field(default=3.0, description="Min distance around villages")


class RoadConfig(BaseModel):
    """Road network parameters."""

    major_settlements: int = Field(
        default=8, ge=0, description="Largest settlements joined by highways"
    )
    max_highway_length: float = Field(
        default=80.0, description="Longest straight-line distance a highway may span"
    )
    junction_distance: float = Field(
        default=30.0, description="Farthest road cell a branch may join"
    )
    climb_penalty: float = Field(
        default=10.0, description="Extra cost per unit of elevation change"
    )
    jitter: float = Field(
        default=0.5, ge=0.0, description="Max random extra cost per cell"
    )
    spur_chance: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Chance a settlement gets a dead-end trail"
    )
    spur_min_length: float = Field(default=15.0, description="Shortest spur target distance")
    spur_max_length: float = Field(default=30.0, description="Longest spur target distance")
    spur_search_limit: int = Field(
        default=50, ge=1, description="Cells a spur search may expand"
    )
    spur_min_cells: int = Field(default=6, description="Shortest spur kept")


class LabelConfig(BaseModel):
    """Geographic feature labelling parameters."""

    min_spacing: float = Field(default=8.0, description="Min distance between labels")
    ocean_min_cells: int = Field(default=200, description="Smallest labelled ocean")
    mountain_min_cells: int = Field(default=40, description="Smallest labelled range")
    forest_min_cells: int = Field(default=100, description="Smallest labelled forest")
    swamp_min_cells: int = Field(default=60, description="Smallest labelled swamp")
    river_min_cells: int = Field(default=30, description="Shortest labelled river")


class TerrainConfig(BaseModel):
    """Complete terrain generation tuning configuration."""

    elevation: ElevationConfig = Field(default_factory=ElevationConfig)
    moisture: MoistureConfig = Field(default_factory=MoistureConfig)
    temperature: TemperatureConfig = Field(default_factory=TemperatureConfig)
    hydrology: HydrologyConfig = Field(default_factory=HydrologyConfig)
    settlements: SettlementConfig = Field(default_factory=SettlementConfig)
    roads: RoadConfig = Field(default_factory=RoadConfig)
    labels: LabelConfig = Field(default_factory=LabelConfig)
