"""Post-generation validation of a terrain grid."""

import math

import numpy as np
import structlog

from ..tile_types import STANDING_WATER_KINDS, TileKind
from ..types import RiverTerminus
from .grid import TerrainGrid
from .roads import TRAVEL_COSTS
from .settlements import ELIGIBLE_KINDS

logger = structlog.get_logger()

LAND_FRACTION_TOLERANCE = 0.08


class ValidationResult:
    """Result of terrain validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_grid(grid: TerrainGrid) -> ValidationResult:
    """Check a generated grid against the generator's guarantees.

    Errors mark broken guarantees (disconnected rivers, settlements on
    water, duplicate names). Warnings mark results that are legal but far
    from what the settings asked for.

    Args:
        grid: Generated grid.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    _check_land_fraction(grid, result)
    _check_rivers(grid, result)
    _check_settlements(grid, result)
    _check_roads(grid, result)
    _check_labels(grid, result)

    if result.passed:
        logger.debug("terrain_validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("terrain_validation_failed", errors=result.errors)

    for warning in result.warnings:
        logger.warning("terrain_validation_warning", message=warning)

    return result


def _check_land_fraction(grid: TerrainGrid, result: ValidationResult) -> None:
    """Check the land fraction is near the requested one."""
    target = grid.settings.land_percentage
    actual = grid.land_fraction()
    if abs(actual - target) > LAND_FRACTION_TOLERANCE:
        result.add_warning(
            f"Land fraction {actual:.1%} differs from target {target:.1%}"
        )


def _check_rivers(grid: TerrainGrid, result: ValidationResult) -> None:
    """Check every river is connected, descends and ends where it claims."""
    standing = {kind.code for kind in STANDING_WATER_KINDS}

    for index, river in enumerate(grid.rivers):
        if len(river) == 0:
            result.add_error(f"River {index} has no cells")
            continue

        for (x0, y0), (x1, y1) in zip(river.cells, river.cells[1:]):
            if max(abs(x1 - x0), abs(y1 - y0)) != 1:
                result.add_error(f"River {index} jumps from ({x0}, {y0}) to ({x1}, {y1})")
                break
            if grid.elevation[y1, x1] >= grid.elevation[y0, x0]:
                result.add_error(f"River {index} flows uphill at ({x1}, {y1})")
                break

        x, y = river.mouth
        tile = int(grid.tiles[y, x])
        if river.terminus == RiverTerminus.OCEAN and tile not in standing:
            result.add_error(f"River {index} claims to reach water at ({x}, {y})")
        elif river.terminus == RiverTerminus.BOUNDARY and not grid.is_boundary(x, y):
            result.add_error(f"River {index} claims to reach the edge at ({x}, {y})")
        elif river.terminus == RiverTerminus.LAKE and tile != TileKind.LAKE.code:
            result.add_error(f"River {index} has no lake at ({x}, {y})")


def _check_settlements(grid: TerrainGrid, result: ValidationResult) -> None:
    """Check settlements stand on buildable, distinct, well-spaced cells."""
    eligible = {kind.code for kind in ELIGIBLE_KINDS}
    positions = [s.position.as_tuple() for s in grid.settlements]
    names = [s.name for s in grid.settlements]

    invalid = sum(
        1
        for x, y in positions
        if not grid.in_bounds(x, y) or int(grid.tiles[y, x]) not in eligible
    )
    if invalid:
        result.add_error(f"{invalid} settlements on ineligible tiles")
    if len(set(positions)) != len(positions):
        result.add_error("Several settlements share a cell")
    if len(set(names)) != len(names):
        result.add_error("Duplicate settlement names")

    if len(positions) > 1:
        xy = np.array(positions, dtype=np.float64)
        gaps = np.hypot(xy[:, None, 0] - xy[None, :, 0], xy[:, None, 1] - xy[None, :, 1])
        np.fill_diagonal(gaps, math.inf)
        if float(gaps.min()) < 1.0:
            result.add_error("Settlements closer than one tile")


def _check_roads(grid: TerrainGrid, result: ValidationResult) -> None:
    """Check roads are connected, stay off open water and bridge every river."""
    passable = {kind.code for kind in TRAVEL_COSTS}
    river = TileKind.RIVER.code

    for index, road in enumerate(grid.roads):
        if len(road) == 0:
            result.add_error(f"Road {index} has no cells")
            continue
        for (x0, y0), (x1, y1) in zip(road.cells, road.cells[1:]):
            if max(abs(x1 - x0), abs(y1 - y0)) != 1:
                result.add_error(f"Road {index} jumps from ({x0}, {y0}) to ({x1}, {y1})")
                break
        if any(int(grid.tiles[y, x]) not in passable for x, y in road.cells):
            result.add_error(f"Road {index} crosses open water")

        crossings = {(x, y) for x, y in road.cells if int(grid.tiles[y, x]) == river}
        if crossings != {(b.x, b.y) for b in road.bridges}:
            result.add_error(f"Road {index} bridges do not match its river crossings")

    for bridge in grid.bridges:
        if int(grid.tiles[bridge.y, bridge.x]) != river:
            result.add_error(f"Bridge {bridge.name} is not over a river")
        if grid.road_at(bridge.x, bridge.y) is None:
            result.add_error(f"Bridge {bridge.name} carries no road")


def _check_labels(grid: TerrainGrid, result: ValidationResult) -> None:
    """Check names are unique across the map."""
    names = (
        [label.name for label in grid.labels]
        + [s.name for s in grid.settlements]
        + [road.name for road in grid.roads]
        + [bridge.name for bridge in grid.bridges]
    )
    if len(set(names)) != len(names):
        result.add_error("Duplicate names among features, settlements, roads and bridges")
