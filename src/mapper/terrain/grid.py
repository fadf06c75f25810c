"""Terrain grid: per-cell fields, tiles and overlays for one generated map."""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

from ..exceptions import InvalidDimensionsError, StageOrderError
from ..settings import GenerationSettings
from ..tile_types import OCEAN_KINDS, TileKind
from ..types import Bridge, FeatureLabel, RiverPath, Road, RoadKind, Settlement

# Grid sizes used by the text and windowed front ends
CLI_DEFAULT_SIZE = (60, 20)
GUI_DEFAULT_SIZE = (40, 30)


class GenerationStage(IntEnum):
    """Pipeline stages, in the only order they may occur."""

    SEEDED = 0
    FIELDS_GENERATED = 1
    CLASSIFIED = 2
    RIVERS_CARVED = 3
    SETTLEMENTS_PLACED = 4
    ROADS_BUILT = 5
    FINISHED = 6


@dataclass(frozen=True)
class Cell:
    """Read-only view of one grid cell."""

    x: int
    y: int
    elevation: float
    moisture: float
    temperature: float
    tile: TileKind
    settlement: Settlement | None = None
    road: RoadKind | None = None


def validate_dimensions(width: int, height: int) -> None:
    """Reject grid dimensions that are not positive integers.

    Raises:
        InvalidDimensionsError: If width or height is not a positive int.
    """
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidDimensionsError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise InvalidDimensionsError(f"{name} must be positive, got {value}")


class TerrainGrid:
    """Dense row-major terrain grid.

    Arrays are shaped (height, width) and indexed [y, x]. Dimensions are fixed
    at construction. Pipeline stages never edit a grid in place: each returns
    a new grid via `advance`, and the previous grid is discarded.
    """

    def __init__(
        self,
        width: int,
        height: int,
        seed: int,
        settings: GenerationSettings,
        stage: GenerationStage = GenerationStage.SEEDED,
        elevation: NDArray[np.float64] | None = None,
        moisture: NDArray[np.float64] | None = None,
        temperature: NDArray[np.float64] | None = None,
        tiles: NDArray[np.uint8] | None = None,
        land_threshold: float | None = None,
        rivers: tuple[RiverPath, ...] = (),
        settlements: tuple[Settlement, ...] = (),
        roads: tuple[Road, ...] = (),
        bridges: tuple[Bridge, ...] = (),
        labels: tuple[FeatureLabel, ...] = (),
    ) -> None:
        validate_dimensions(width, height)
        self._width = int(width)
        self._height = int(height)
        self.seed = seed
        self.settings = settings
        self.stage = stage

        shape = (self._height, self._width)
        self.elevation = _field_or_zeros(elevation, shape, np.float64, "elevation")
        self.moisture = _field_or_zeros(moisture, shape, np.float64, "moisture")
        self.temperature = _field_or_zeros(temperature, shape, np.float64, "temperature")
        self.tiles = _field_or_zeros(tiles, shape, np.uint8, "tiles")

        self.land_threshold = land_threshold
        self.rivers = tuple(rivers)
        self.settlements = tuple(settlements)
        self.roads = tuple(roads)
        self.bridges = tuple(bridges)
        self.labels = tuple(labels)
        self._settlements_by_cell = {s.position.as_tuple(): s for s in self.settlements}
        self._bridges_by_cell = {(b.x, b.y): b for b in self.bridges}
        self._roads_by_cell: dict[tuple[int, int], RoadKind] = {}
        for road in self.roads:
            for xy in road.cells:
                best = self._roads_by_cell.get(xy)
                if best is None or road.kind.rank < best.rank:
                    self._roads_by_cell[xy] = road.kind

    @classmethod
    def seeded(
        cls,
        seed: int,
        settings: GenerationSettings,
        width: int,
        height: int,
    ) -> "TerrainGrid":
        """Create an empty grid in the SEEDED stage."""
        return cls(width=width, height=height, seed=seed, settings=settings)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> tuple[int, int]:
        """Array shape (height, width)."""
        return (self._height, self._width)

    def require_stage(self, stage: GenerationStage) -> None:
        """Raise StageOrderError unless the grid is in the given stage."""
        if self.stage != stage:
            raise StageOrderError(
                f"Expected grid in stage {stage.name}, found {self.stage.name}"
            )

    def advance(self, stage: GenerationStage, **changes) -> "TerrainGrid":
        """Return a new grid in the next stage with the given fields replaced.

        Raises:
            StageOrderError: If `stage` is not the stage directly after this one.
        """
        if stage != self.stage + 1:
            raise StageOrderError(
                f"Cannot advance from {self.stage.name} to {stage.name}"
            )
        fields = {
            "elevation": self.elevation,
            "moisture": self.moisture,
            "temperature": self.temperature,
            "tiles": self.tiles,
            "land_threshold": self.land_threshold,
            "rivers": self.rivers,
            "settlements": self.settlements,
            "roads": self.roads,
            "bridges": self.bridges,
            "labels": self.labels,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown grid fields: {sorted(unknown)}")
        fields.update(changes)
        return TerrainGrid(
            width=self._width,
            height=self._height,
            seed=self.seed,
            settings=self.settings,
            stage=stage,
            **fields,
        )

    def freeze(self) -> None:
        """Make all arrays read-only for consumers."""
        for array in (self.elevation, self.moisture, self.temperature, self.tiles):
            array.flags.writeable = False

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def is_boundary(self, x: int, y: int) -> bool:
        """Whether (x, y) lies on the outermost ring of the grid."""
        return x == 0 or y == 0 or x == self._width - 1 or y == self._height - 1

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self._width}x{self._height} grid")

    def tile_at(self, x: int, y: int) -> TileKind:
        """Tile kind at (x, y)."""
        self._check_bounds(x, y)
        return TileKind.from_code(self.tiles[y, x])

    def settlement_at(self, x: int, y: int) -> Settlement | None:
        return self._settlements_by_cell.get((x, y))

    def road_at(self, x: int, y: int) -> RoadKind | None:
        """Most important kind of road crossing (x, y), if any."""
        return self._roads_by_cell.get((x, y))

    def bridge_at(self, x: int, y: int) -> Bridge | None:
        return self._bridges_by_cell.get((x, y))

    def cell(self, x: int, y: int) -> Cell:
        """Build a read-only Cell view for (x, y)."""
        self._check_bounds(x, y)
        return Cell(
            x=x,
            y=y,
            elevation=float(self.elevation[y, x]),
            moisture=float(self.moisture[y, x]),
            temperature=float(self.temperature[y, x]),
            tile=TileKind.from_code(self.tiles[y, x]),
            settlement=self.settlement_at(x, y),
            road=self.road_at(x, y),
        )

    def tile_kinds(self) -> list[list[TileKind]]:
        """Tile kinds as nested rows, top row first."""
        return [[TileKind.from_code(code) for code in row] for row in self.tiles]

    def mask(self, *kinds: TileKind) -> NDArray[np.bool_]:
        """Boolean mask of cells whose tile is any of `kinds`."""
        codes = [kind.code for kind in kinds]
        return np.isin(self.tiles, codes)

    def river_mask(self) -> NDArray[np.bool_]:
        """Cells lying on any river path."""
        mask = np.zeros(self.shape, dtype=bool)
        for river in self.rivers:
            for x, y in river.cells:
                mask[y, x] = True
        return mask

    def road_mask(self) -> NDArray[np.bool_]:
        """Cells lying on any road."""
        mask = np.zeros(self.shape, dtype=bool)
        for x, y in self._roads_by_cell:
            mask[y, x] = True
        return mask

    def land_fraction(self) -> float:
        """Fraction of cells that are not ocean water."""
        return float(np.mean(~self.mask(*OCEAN_KINDS)))

    def tile_counts(self) -> dict[TileKind, int]:
        """Number of cells of each tile kind."""
        codes, counts = np.unique(self.tiles, return_counts=True)
        return {TileKind.from_code(c): int(n) for c, n in zip(codes, counts)}

    def __repr__(self) -> str:
        return (
            f"TerrainGrid(width={self._width}, height={self._height}, "
            f"seed={self.seed}, stage={self.stage.name})"
        )


def _field_or_zeros(
    array: NDArray | None,
    shape: tuple[int, int],
    dtype: type,
    name: str,
) -> NDArray:
    if array is None:
        return np.zeros(shape, dtype=dtype)
    if array.shape != shape:
        raise ValueError(f"{name} has shape {array.shape}, expected {shape}")
    return array
