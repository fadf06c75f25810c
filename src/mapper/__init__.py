"""Seeded fantasy terrain map generation.

Generates a bounded tile map from a seed and three density settings:
coherent noise fields, biomes, rivers, named settlements joined by roads,
and labelled geographic features. Renderers turn the finished grid into
text or PNG.
"""

from .exceptions import (
    ConfigNotFoundError,
    InvalidDimensionsError,
    MapperError,
    StageOrderError,
)
from .log import quiet_by_default
from .settings import GenerationSettings
from .terrain import MapGenerator, TerrainGrid, generate
from .tile_types import TileKind
from .types import (
    Bridge,
    FeatureLabel,
    Position,
    RiverPath,
    RiverTerminus,
    Road,
    RoadKind,
    Settlement,
    SizeClass,
)

quiet_by_default()

__all__ = [
    "Bridge",
    "ConfigNotFoundError",
    "FeatureLabel",
    "GenerationSettings",
    "InvalidDimensionsError",
    "MapGenerator",
    "MapperError",
    "Position",
    "RiverPath",
    "RiverTerminus",
    "Road",
    "RoadKind",
    "Settlement",
    "SizeClass",
    "StageOrderError",
    "TerrainGrid",
    "TileKind",
    "generate",
]
