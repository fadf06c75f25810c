"""Tests for biome classification."""

import numpy as np
import pytest

from mapper.exceptions import StageOrderError
from mapper.settings import GenerationSettings
from mapper.terrain.classification import (
    ALL_LAND_THRESHOLD,
    NO_LAND_THRESHOLD,
    classify,
    classify_fields,
    classify_grid,
    land_threshold,
    relative_height,
)
from mapper.terrain.config import TerrainConfig
from mapper.terrain.generator import generate_fields
from mapper.terrain.grid import GenerationStage, TerrainGrid
from mapper.tile_types import OCEAN_KINDS, TileKind

MILD = 0.5
MODERATE = 0.3


class TestLandThreshold:
    """Tests for land_threshold."""

    def test_no_land(self) -> None:
        """Zero land percentage puts the threshold above every elevation."""
        elevation = np.linspace(-1.0, 1.0, 101)
        threshold = land_threshold(elevation, 0.0)
        assert threshold == NO_LAND_THRESHOLD
        assert threshold > 1.0
        assert not np.any(elevation >= threshold)

    def test_all_land(self) -> None:
        elevation = np.linspace(-1.0, 1.0, 101)
        assert land_threshold(elevation, 1.0) == ALL_LAND_THRESHOLD
        assert np.all(elevation >= ALL_LAND_THRESHOLD)

    def test_monotonic(self) -> None:
        """More land means a lower threshold."""
        rng = np.random.default_rng(3)
        elevation = rng.uniform(-1.0, 1.0, (50, 50))
        thresholds = [land_threshold(elevation, p) for p in np.linspace(0.0, 1.0, 21)]
        assert all(a >= b for a, b in zip(thresholds, thresholds[1:]))

    def test_quantile_fraction(self) -> None:
        """The share of cells at or above the threshold matches the target."""
        rng = np.random.default_rng(4)
        elevation = rng.uniform(-1.0, 1.0, (100, 100))
        for target in (0.1, 0.4, 0.75):
            threshold = land_threshold(elevation, target)
            assert np.mean(elevation >= threshold) == pytest.approx(target, abs=0.001)


class TestClassify:
    """Tests for the scalar classifier's literal thresholds."""

    def test_shallow_and_deep_water(self) -> None:
        """Water within 0.12 of the threshold is shallow."""
        assert classify(-0.05, MODERATE, MILD, 0.0) == TileKind.SHALLOW_WATER
        assert classify(-0.119, MODERATE, MILD, 0.0) == TileKind.SHALLOW_WATER
        assert classify(-0.12, MODERATE, MILD, 0.0) == TileKind.DEEP_WATER
        assert classify(-0.9, MODERATE, MILD, 0.0) == TileKind.DEEP_WATER

    def test_threshold_is_land(self) -> None:
        """A cell exactly at the threshold is land (beach)."""
        assert classify(0.0, MODERATE, MILD, 0.0) == TileKind.SAND

    def test_relief_bands(self) -> None:
        """Relative height bands have inclusive lower bounds."""
        assert classify(0.039, MODERATE, MILD, 0.0) == TileKind.SAND
        assert classify(0.04, MODERATE, MILD, 0.0) == TileKind.GRASS
        assert classify(0.449, MODERATE, MILD, 0.0) == TileKind.GRASS
        assert classify(0.45, MODERATE, MILD, 0.0) == TileKind.HILLS
        assert classify(0.62, MODERATE, MILD, 0.0) == TileKind.STONE
        assert classify(0.80, MODERATE, MILD, 0.0) == TileKind.SNOW_PEAK
        assert classify(1.0, MODERATE, MILD, 0.0) == TileKind.SNOW_PEAK

    def test_relief_is_relative_to_threshold(self) -> None:
        """Bands scale with the land above the threshold."""
        # t = 0.5: h = (e - 0.5) / 0.5
        assert classify(0.75, MODERATE, MILD, 0.5) == TileKind.HILLS  # h = 0.5
        assert classify(0.7, MODERATE, MILD, 0.5) == TileKind.GRASS  # h = 0.4
        assert classify(0.51, MODERATE, MILD, 0.5) == TileKind.SAND  # h = 0.02

    @pytest.mark.parametrize(
        "temperature,moisture,expected",
        [
            (0.1, 0.1, TileKind.DIRT),
            (0.1, 0.3, TileKind.GRASS),
            (0.1, 0.6, TileKind.FOREST),
            (0.1, 0.9, TileKind.FOREST),
            (0.5, 0.1, TileKind.DIRT),
            (0.5, 0.3, TileKind.GRASS),
            (0.5, 0.6, TileKind.GRASS),
            (0.5, 0.9, TileKind.FOREST),
            (0.9, 0.1, TileKind.SAND),
            (0.9, 0.3, TileKind.DIRT),
            (0.9, 0.6, TileKind.GRASS),
            (0.9, 0.9, TileKind.SWAMP),
        ],
    )
    def test_climate_table(self, temperature, moisture, expected) -> None:
        """Mid-height land follows the temperature/moisture table."""
        assert classify(0.2, moisture, temperature, 0.0) == expected

    def test_climate_bounds_inclusive(self) -> None:
        """A value equal to a band bound belongs to the upper band."""
        assert classify(0.2, 0.1, 0.35, 0.0) == TileKind.DIRT  # mild, dry
        assert classify(0.2, 0.1, 0.65, 0.0) == TileKind.SAND  # hot, dry
        assert classify(0.2, 0.25, 0.1, 0.0) == TileKind.GRASS  # cold, moderate
        assert classify(0.2, 0.50, 0.1, 0.0) == TileKind.FOREST  # cold, wet
        assert classify(0.2, 0.75, 0.9, 0.0) == TileKind.SWAMP  # hot, soaked

    def test_all_land_threshold(self) -> None:
        """With threshold -1 the lowest cell is beach, not water."""
        assert classify(-1.0, MODERATE, MILD, ALL_LAND_THRESHOLD) == TileKind.SAND

    def test_no_land_threshold(self) -> None:
        """With no land even the highest cell is water."""
        assert classify(1.0, MODERATE, MILD, NO_LAND_THRESHOLD) == TileKind.SHALLOW_WATER

    def test_relative_height(self) -> None:
        assert relative_height(0.5, 0.0) == 0.5
        assert relative_height(-0.5, 0.0) == 0.0
        assert relative_height(0.0, NO_LAND_THRESHOLD) == 0.0


class TestClassifyFields:
    """Tests for the vectorised classifier."""

    @pytest.mark.parametrize("threshold", [-1.0, -0.3, 0.0, 0.42, NO_LAND_THRESHOLD])
    def test_matches_scalar(self, threshold: float) -> None:
        """Vectorised and scalar classification agree cell by cell."""
        rng = np.random.default_rng(11)
        elevation = rng.uniform(-1.0, 1.0, (30, 30))
        moisture = rng.uniform(0.0, 1.0, (30, 30))
        temperature = rng.uniform(0.0, 1.0, (30, 30))
        # Include exact band bounds
        moisture[0, :4] = [0.25, 0.5, 0.75, 0.0]
        temperature[1, :3] = [0.35, 0.65, 1.0]

        tiles = classify_fields(elevation, moisture, temperature, threshold)
        assert tiles.dtype == np.uint8
        for y in range(30):
            for x in range(30):
                expected = classify(elevation[y, x], moisture[y, x], temperature[y, x], threshold)
                assert tiles[y, x] == expected.code, (x, y)


class TestClassifyGrid:
    """Tests for the classification stage."""

    def _fields_grid(self, land: float) -> TerrainGrid:
        grid = TerrainGrid.seeded(21, GenerationSettings(land_percentage=land), 80, 60)
        return generate_fields(grid, TerrainConfig())

    def test_advances_stage(self) -> None:
        grid = classify_grid(self._fields_grid(0.4))
        assert grid.stage == GenerationStage.CLASSIFIED
        assert grid.land_threshold is not None

    def test_land_fraction(self) -> None:
        """Non-ocean share matches the requested land percentage."""
        for land in (0.2, 0.4, 0.7):
            grid = classify_grid(self._fields_grid(land))
            assert grid.land_fraction() == pytest.approx(land, abs=0.01)

    def test_no_ocean_at_full_land(self) -> None:
        grid = classify_grid(self._fields_grid(1.0))
        assert not grid.mask(*OCEAN_KINDS).any()

    def test_requires_fields(self) -> None:
        """Classifying a grid without fields is a stage error."""
        grid = TerrainGrid.seeded(21, GenerationSettings(), 10, 10)
        with pytest.raises(StageOrderError):
            classify_grid(grid)
