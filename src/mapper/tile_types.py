"""Terrain tile kinds and their properties."""

from enum import Enum


class TileKind(str, Enum):
    """Tile kinds produced by biome classification and water overlays."""

    DEEP_WATER = "deep_water"
    SHALLOW_WATER = "shallow_water"
    LAKE = "lake"
    RIVER = "river"
    SAND = "sand"
    GRASS = "grass"
    FOREST = "forest"
    DIRT = "dirt"
    SWAMP = "swamp"
    HILLS = "hills"
    STONE = "stone"
    SNOW_PEAK = "snow_peak"

    @property
    def code(self) -> int:
        """Compact uint8 code used in tile arrays."""
        return _CODES[self]

    @property
    def is_water(self) -> bool:
        """Whether this tile is any kind of water, rivers included."""
        return self in _WATER_KINDS

    @property
    def is_land(self) -> bool:
        """Whether this tile is dry land."""
        return self not in _WATER_KINDS

    @classmethod
    def from_code(cls, code: int) -> "TileKind":
        """Convert a uint8 code back to its TileKind.

        Raises:
            ValueError: If the code is not assigned.
        """
        try:
            return _KINDS_BY_CODE[int(code)]
        except KeyError:
            raise ValueError(f"Unknown tile code: {code}") from None


# Codes are stable: renderers and tests index by them
_CODES: dict[TileKind, int] = {kind: index for index, kind in enumerate(TileKind)}
_KINDS_BY_CODE: dict[int, TileKind] = {code: kind for kind, code in _CODES.items()}

_WATER_KINDS = frozenset({
    TileKind.DEEP_WATER,
    TileKind.SHALLOW_WATER,
    TileKind.LAKE,
    TileKind.RIVER,
})

# Standing water a river can drain into
STANDING_WATER_KINDS = frozenset({
    TileKind.DEEP_WATER,
    TileKind.SHALLOW_WATER,
    TileKind.LAKE,
})

OCEAN_KINDS = frozenset({
    TileKind.DEEP_WATER,
    TileKind.SHALLOW_WATER,
})
