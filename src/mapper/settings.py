"""Generation settings shared by every front end."""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationSettings(BaseModel):
    """Density parameters for map generation.

    Every value is clamped into [0, 1] instead of being rejected, so any
    input produces a map. NaN clamps to 0.
    """

    model_config = ConfigDict(frozen=True)

    river_density: float = Field(default=0.5, description="0 = few rivers, 1 = many")
    city_density: float = Field(default=0.5, description="0 = no settlements, 1 = many")
    land_percentage: float = Field(
        default=0.4, description="Target fraction of the map that is land"
    )

    @field_validator("river_density", "city_density", "land_percentage")
    @classmethod
    def _clamp_unit_interval(cls, value: float) -> float:
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    def describe(self) -> str:
        """Human readable summary, e.g. for CLI banners."""
        return (
            f"Rivers={self.river_density:.0%}, "
            f"Cities={self.city_density:.0%}, "
            f"Land={self.land_percentage:.0%}"
        )
