"""Tests for hydrology functions."""

import numpy as np
import pytest

from mapper.exceptions import StageOrderError
from mapper.settings import GenerationSettings
from mapper.terrain.config import HydrologyConfig
from mapper.terrain.grid import GenerationStage
from mapper.terrain.hydrology import (
    D8_DX,
    D8_DY,
    carve_rivers,
    overlay_rivers,
    river_count,
    select_river_sources,
    trace_river,
    weighted_order,
)
from mapper.tile_types import TileKind
from mapper.types import RiverPath, RiverTerminus


def east_slope(width: int, height: int) -> np.ndarray:
    """Elevation falling toward the east edge."""
    return -np.tile(np.arange(width, dtype=np.float64), (height, 1))


class TestRiverCount:
    """Tests for the density to count mapping."""

    def test_endpoints(self) -> None:
        assert river_count(0.0) == 2
        assert river_count(1.0) == 40

    def test_midpoint(self) -> None:
        assert river_count(0.5) == 21

    def test_monotonic(self) -> None:
        """More density never means fewer rivers."""
        counts = [river_count(d) for d in np.linspace(0.0, 1.0, 101)]
        assert all(a <= b for a, b in zip(counts, counts[1:]))

    def test_clamps(self) -> None:
        assert river_count(-1.0) == 2
        assert river_count(3.0) == 40


class TestWeightedOrder:
    """Tests for weighted_order."""

    def test_permutation(self) -> None:
        order = weighted_order(np.ones(20), np.random.default_rng(0))
        assert sorted(order.tolist()) == list(range(20))

    def test_heavier_first(self) -> None:
        """Heavily weighted indices tend to come first."""
        rng = np.random.default_rng(1)
        weights = np.array([1.0, 100.0])
        heavy_first = sum(weighted_order(weights, rng)[0] == 1 for _ in range(200))
        assert heavy_first > 170

    def test_reproducible(self) -> None:
        weights = np.linspace(1.0, 5.0, 30)
        a = weighted_order(weights, np.random.default_rng(9))
        b = weighted_order(weights, np.random.default_rng(9))
        np.testing.assert_array_equal(a, b)


class TestTraceRiver:
    """Tests for steepest-descent tracing."""

    def test_d8_order(self) -> None:
        """Directions run clockwise from north."""
        assert list(zip(D8_DX, D8_DY)) == [
            (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1)
        ]

    def test_reaches_boundary(self) -> None:
        """On a uniform slope the first lowest neighbour (NE) wins ties."""
        elevation = east_slope(7, 5)
        river = trace_river((1, 2), elevation, np.zeros((5, 7), dtype=bool))
        assert river.cells == ((1, 2), (2, 1), (3, 0))
        assert river.terminus == RiverTerminus.BOUNDARY

    def test_reaches_ocean(self) -> None:
        """Tracing stops on the first standing water cell."""
        elevation = east_slope(7, 9)
        water = np.zeros((9, 7), dtype=bool)
        water[:, 4:] = True
        river = trace_river((1, 4), elevation, water)
        assert river.cells == ((1, 4), (2, 3), (3, 2), (4, 1))
        assert river.terminus == RiverTerminus.OCEAN

    def test_pit_becomes_lake(self) -> None:
        """A cell with no lower neighbour ends the river as a lake."""
        elevation = np.ones((5, 5))
        elevation[2, 2] = 0.0
        river = trace_river((1, 1), elevation, np.zeros((5, 5), dtype=bool))
        assert river.cells == ((1, 1), (2, 2))
        assert river.terminus == RiverTerminus.LAKE

    def test_source_on_boundary(self) -> None:
        river = trace_river((0, 3), east_slope(5, 5), np.zeros((5, 5), dtype=bool))
        assert river.cells == ((0, 3),)
        assert river.terminus == RiverTerminus.BOUNDARY

    def test_strictly_descending_and_connected(self) -> None:
        """Paths on random terrain descend and move one cell per step."""
        rng = np.random.default_rng(5)
        elevation = rng.uniform(0.0, 1.0, (40, 40))
        water = np.zeros((40, 40), dtype=bool)
        for source in [(20, 20), (5, 30), (33, 8)]:
            river = trace_river(source, elevation, water)
            for (x0, y0), (x1, y1) in zip(river.cells, river.cells[1:]):
                assert max(abs(x1 - x0), abs(y1 - y0)) == 1
                assert elevation[y1, x1] < elevation[y0, x0]
            assert len(set(river.cells)) == len(river.cells)


class TestOverlayRivers:
    """Tests for the single-pass overlay."""

    def test_overlay(self) -> None:
        tiles = np.full((3, 4), TileKind.GRASS.code, dtype=np.uint8)
        tiles[:, 3] = TileKind.DEEP_WATER.code
        ocean_river = RiverPath(cells=((0, 1), (1, 1), (2, 1), (3, 1)), terminus=RiverTerminus.OCEAN)
        lake_river = RiverPath(cells=((1, 0), (1, 1)), terminus=RiverTerminus.LAKE)

        result = overlay_rivers(tiles, [lake_river, ocean_river])

        assert result[1, 0] == TileKind.RIVER.code
        assert result[1, 2] == TileKind.RIVER.code
        assert result[1, 3] == TileKind.DEEP_WATER.code  # water keeps its tile
        assert result[0, 1] == TileKind.RIVER.code
        assert result[1, 1] == TileKind.LAKE.code  # lakes written last
        assert result[2, 0] == TileKind.GRASS.code

    def test_input_unchanged(self) -> None:
        tiles = np.full((2, 2), TileKind.GRASS.code, dtype=np.uint8)
        river = RiverPath(cells=((0, 0),), terminus=RiverTerminus.BOUNDARY)
        overlay_rivers(tiles, [river])
        assert (tiles == TileKind.GRASS.code).all()


class TestSelectRiverSources:
    """Tests for source selection."""

    def test_sources_are_highland(self, make_grid) -> None:
        """Sources are distinct land cells in the top elevation band."""
        rng = np.random.default_rng(2)
        elevation = rng.uniform(0.0, 1.0, (20, 20))
        grid = make_grid(20, 20, elevation=elevation)
        sources = select_river_sources(grid, 10, HydrologyConfig())

        assert len(sources) == 10
        assert len(set(sources)) == 10
        cutoff = np.quantile(elevation, 0.7)
        assert all(elevation[y, x] >= cutoff for x, y in sources)

    def test_prefix_property(self, make_grid) -> None:
        """Asking for more sources only appends to the list."""
        rng = np.random.default_rng(3)
        grid = make_grid(20, 20, elevation=rng.uniform(0.0, 1.0, (20, 20)))
        few = select_river_sources(grid, 4, HydrologyConfig())
        many = select_river_sources(grid, 9, HydrologyConfig())
        assert many[:4] == few

    def test_ignores_water(self, make_grid) -> None:
        tiles = np.full((4, 4), TileKind.DEEP_WATER.code, dtype=np.uint8)
        tiles[1, 1] = TileKind.GRASS.code
        grid = make_grid(4, 4, tiles=tiles, elevation=np.full((4, 4), 0.5))
        assert select_river_sources(grid, 5, HydrologyConfig()) == [(1, 1)]

    def test_no_land(self, make_grid) -> None:
        tiles = np.full((4, 4), TileKind.DEEP_WATER.code, dtype=np.uint8)
        grid = make_grid(4, 4, tiles=tiles)
        assert select_river_sources(grid, 5, HydrologyConfig()) == []


class TestCarveRivers:
    """Tests for the river stage."""

    def test_partial_fulfilment(self, make_grid) -> None:
        """Fewer highland cells than requested yields every available source."""
        rng = np.random.default_rng(4)
        grid = make_grid(
            3, 3,
            elevation=rng.uniform(0.0, 1.0, (3, 3)),
            settings=GenerationSettings(river_density=1.0),
        )
        carved = carve_rivers(grid, HydrologyConfig())
        assert 0 < len(carved.rivers) < 40
        assert len({river.source for river in carved.rivers}) == len(carved.rivers)

    def test_more_density_never_fewer_rivers(self, make_grid) -> None:
        rng = np.random.default_rng(6)
        elevation = rng.uniform(0.0, 1.0, (30, 30))
        counts = []
        for density in (0.0, 0.25, 0.5, 0.75, 1.0):
            grid = make_grid(
                30, 30,
                elevation=elevation,
                settings=GenerationSettings(river_density=density),
            )
            counts.append(len(carve_rivers(grid, HydrologyConfig()).rivers))
        assert counts == sorted(counts)
        assert counts[0] == 2

    def test_tiles_overlaid(self, make_grid) -> None:
        grid = make_grid(9, 9, elevation=np.random.default_rng(8).uniform(0, 1, (9, 9)))
        carved = carve_rivers(grid, HydrologyConfig())
        assert carved.stage == GenerationStage.RIVERS_CARVED
        for river in carved.rivers:
            for x, y in river.cells[:-1]:
                assert carved.tiles[y, x] == TileKind.RIVER.code

    def test_requires_classified(self, make_grid) -> None:
        grid = make_grid(5, 5, stage=GenerationStage.FIELDS_GENERATED)
        with pytest.raises(StageOrderError):
            carve_rivers(grid, HydrologyConfig())
