"""Procedural terrain generation package.

This package implements the seeded generation pipeline: coherent noise
fields, biome classification, rivers, settlements, roads and feature labels.
"""

from .config import TerrainConfig
from .generator import MapGenerator, generate
from .grid import (
    CLI_DEFAULT_SIZE,
    GUI_DEFAULT_SIZE,
    Cell,
    GenerationStage,
    TerrainGrid,
)
from .names import NameGenerator
from .noise import NoiseField
from .roads import build_roads, find_path
from .validation import ValidationResult, validate_grid

__all__ = [
    "CLI_DEFAULT_SIZE",
    "GUI_DEFAULT_SIZE",
    "Cell",
    "GenerationStage",
    "MapGenerator",
    "NameGenerator",
    "NoiseField",
    "TerrainConfig",
    "TerrainGrid",
    "ValidationResult",
    "build_roads",
    "find_path",
    "generate",
    "validate_grid",
]
