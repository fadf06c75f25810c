"""Biome classification: water depth, relief bands and a climate table.

All thresholds are literal constants. Band lower bounds are inclusive: a
value equal to a bound belongs to the band above it.
"""

from bisect import bisect_right

import numpy as np
from numpy.typing import NDArray

from ..tile_types import TileKind
from .grid import GenerationStage, TerrainGrid

# Threshold used when land_percentage is 0: above any elevation in [-1, 1]
NO_LAND_THRESHOLD = float(np.nextafter(1.0, 2.0))
ALL_LAND_THRESHOLD = -1.0

# Water deeper than this below the land threshold is deep water
SHALLOW_WATER_DEPTH = 0.12

# Relative height above the land threshold, in [0, 1]
BEACH_MAX_HEIGHT = 0.04
HILLS_MIN_HEIGHT = 0.45
STONE_MIN_HEIGHT = 0.62
SNOW_PEAK_MIN_HEIGHT = 0.80

# Climate bands: cold / mild / hot and dry / moderate / wet / soaked
TEMPERATURE_BOUNDS = (0.35, 0.65)
MOISTURE_BOUNDS = (0.25, 0.50, 0.75)

CLIMATE_TABLE: tuple[tuple[TileKind, ...], ...] = (
    # dry            moderate        wet             soaked
    (TileKind.DIRT, TileKind.GRASS, TileKind.FOREST, TileKind.FOREST),  # cold
    (TileKind.DIRT, TileKind.GRASS, TileKind.GRASS, TileKind.FOREST),  # mild
    (TileKind.SAND, TileKind.DIRT, TileKind.GRASS, TileKind.SWAMP),  # hot
)

_CLIMATE_CODES = np.array(
    [[kind.code for kind in row] for row in CLIMATE_TABLE], dtype=np.uint8
)


def land_threshold(
    elevation: NDArray[np.float64],
    land_percentage: float,
) -> float:
    """Compute the elevation at or above which a cell is land.

    The threshold is the (1 - land_percentage) quantile of the elevation
    field, so higher land percentages give lower thresholds.

    Args:
        elevation: Elevation field in [-1, 1].
        land_percentage: Target land fraction in [0, 1].

    Returns:
        Land threshold.
    """
    if land_percentage <= 0.0:
        return NO_LAND_THRESHOLD
    if land_percentage >= 1.0:
        return ALL_LAND_THRESHOLD
    return float(np.quantile(elevation, 1.0 - land_percentage))


def relative_height(elevation: float, threshold: float) -> float:
    """Height above the land threshold, normalised to [0, 1]."""
    threshold = min(max(threshold, -1.0), 1.0)
    if threshold >= 1.0:
        return 0.0
    return min(max((elevation - threshold) / (1.0 - threshold), 0.0), 1.0)


def classify(
    elevation: float,
    moisture: float,
    temperature: float,
    land_threshold: float,
) -> TileKind:
    """Classify one cell into a tile kind.

    Args:
        elevation: Elevation in [-1, 1].
        moisture: Moisture in [0, 1].
        temperature: Temperature in [0, 1].
        land_threshold: Elevation at or above which the cell is land.

    Returns:
        The cell's TileKind.
    """
    if elevation < land_threshold:
        if land_threshold - elevation < SHALLOW_WATER_DEPTH:
            return TileKind.SHALLOW_WATER
        return TileKind.DEEP_WATER

    height = relative_height(elevation, land_threshold)
    if height >= SNOW_PEAK_MIN_HEIGHT:
        return TileKind.SNOW_PEAK
    if height >= STONE_MIN_HEIGHT:
        return TileKind.STONE
    if height >= HILLS_MIN_HEIGHT:
        return TileKind.HILLS
    if height < BEACH_MAX_HEIGHT:
        return TileKind.SAND

    temperature_band = bisect_right(TEMPERATURE_BOUNDS, temperature)
    moisture_band = bisect_right(MOISTURE_BOUNDS, moisture)
    return CLIMATE_TABLE[temperature_band][moisture_band]


def classify_fields(
    elevation: NDArray[np.float64],
    moisture: NDArray[np.float64],
    temperature: NDArray[np.float64],
    land_threshold: float,
) -> NDArray[np.uint8]:
    """Vectorised `classify` over whole fields.

    Returns:
        Tile codes as uint8, same shape as the inputs.
    """
    threshold = min(max(land_threshold, -1.0), 1.0)
    if threshold >= 1.0:
        height = np.zeros_like(elevation)
    else:
        height = np.clip((elevation - threshold) / (1.0 - threshold), 0.0, 1.0)

    temperature_band = np.digitize(temperature, TEMPERATURE_BOUNDS)
    moisture_band = np.digitize(moisture, MOISTURE_BOUNDS)
    tiles = _CLIMATE_CODES[temperature_band, moisture_band]

    tiles = np.where(height < BEACH_MAX_HEIGHT, TileKind.SAND.code, tiles)
    tiles = np.where(height >= HILLS_MIN_HEIGHT, TileKind.HILLS.code, tiles)
    tiles = np.where(height >= STONE_MIN_HEIGHT, TileKind.STONE.code, tiles)
    tiles = np.where(height >= SNOW_PEAK_MIN_HEIGHT, TileKind.SNOW_PEAK.code, tiles)

    water = elevation < land_threshold
    shallow = water & (land_threshold - elevation < SHALLOW_WATER_DEPTH)
    tiles = np.where(water, TileKind.DEEP_WATER.code, tiles)
    tiles = np.where(shallow, TileKind.SHALLOW_WATER.code, tiles)

    return tiles.astype(np.uint8)


def classify_grid(grid: TerrainGrid) -> TerrainGrid:
    """Classification stage: derive the land threshold and every tile.

    Args:
        grid: Grid in the FIELDS_GENERATED stage.

    Returns:
        New grid in the CLASSIFIED stage.
    """
    grid.require_stage(GenerationStage.FIELDS_GENERATED)
    threshold = land_threshold(grid.elevation, grid.settings.land_percentage)
    tiles = classify_fields(grid.elevation, grid.moisture, grid.temperature, threshold)
    return grid.advance(
        GenerationStage.CLASSIFIED,
        tiles=tiles,
        land_threshold=threshold,
    )
