"""Core value types for generated maps."""

import math
from enum import Enum

from pydantic import BaseModel


class Position(BaseModel, frozen=True):
    """Immutable 2D tile coordinate.

    Coordinate system: +X is East, +Y is South, origin at the top-left tile.
    """

    x: int
    y: int

    def distance_to(self, other: "Position") -> float:
        """Euclidean distance to another position."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class RiverTerminus(str, Enum):
    """How a river path ended."""

    OCEAN = "ocean"  # Reached standing water
    LAKE = "lake"  # Pooled in a pit, which becomes a lake
    BOUNDARY = "boundary"  # Reached the map edge


class RiverPath(BaseModel, frozen=True):
    """A traced river from its source to its terminus.

    Cells are (x, y) tuples; consecutive cells are 8-adjacent.
    """

    cells: tuple[tuple[int, int], ...]
    terminus: RiverTerminus
    name: str | None = None

    @property
    def source(self) -> tuple[int, int]:
        return self.cells[0]

    @property
    def mouth(self) -> tuple[int, int]:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)


class SizeClass(str, Enum):
    """Settlement size classes, largest first."""

    CITY = "city"
    TOWN = "town"
    VILLAGE = "village"


class Settlement(BaseModel, frozen=True):
    """A named settlement occupying one tile."""

    position: Position
    name: str
    size_class: SizeClass
    population: int


class FeatureLabel(BaseModel, frozen=True):
    """A named geographic feature anchored at a tile."""

    x: int
    y: int
    name: str
    feature_type: str  # "ocean", "mountains", "forest", "swamp", "river"


class RoadKind(str, Enum):
    """Road classes, most important first."""

    HIGHWAY = "highway"  # Joins the largest settlements
    ROAD = "road"
    TRAIL = "trail"

    @property
    def rank(self) -> int:
        """0 for highways; larger numbers are lesser roads."""
        return list(RoadKind).index(self)


class Bridge(BaseModel, frozen=True):
    """A named crossing where a road meets a river."""

    x: int
    y: int
    name: str


class Road(BaseModel, frozen=True):
    """A named road between two places.

    Cells are (x, y) tuples; consecutive cells are 8-adjacent.
    """

    cells: tuple[tuple[int, int], ...]
    name: str
    kind: RoadKind
    bridges: tuple[Bridge, ...] = ()

    @property
    def start(self) -> tuple[int, int]:
        return self.cells[0]

    @property
    def end(self) -> tuple[int, int]:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)
