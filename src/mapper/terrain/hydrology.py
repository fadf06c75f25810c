"""Hydrology: river source selection, steepest-descent tracing, overlay.

Rivers are traced against the classified grid one path at a time and only
written to the tile array in a single overlay pass once every path is known.
"""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..tile_types import STANDING_WATER_KINDS, TileKind
from ..types import RiverPath, RiverTerminus
from .config import HydrologyConfig
from .grid import GenerationStage, TerrainGrid
from .seeding import stage_rng

logger = structlog.get_logger()

# D8 directions: N, NE, E, SE, S, SW, W, NW (clockwise from north).
# This order also breaks ties between equally low neighbours.
D8_DX = (0, 1, 1, 1, 0, -1, -1, -1)
D8_DY = (-1, -1, 0, 1, 1, 1, 0, -1)

_STANDING_WATER_CODES = np.array([k.code for k in STANDING_WATER_KINDS], dtype=np.uint8)


def river_count(
    river_density: float,
    count_min: int = 2,
    count_max: int = 40,
) -> int:
    """Map river density in [0, 1] linearly onto a river count.

    Monotonic non-decreasing in density; density 0 gives `count_min` and
    density 1 gives `count_max`.
    """
    density = min(max(river_density, 0.0), 1.0)
    return int(round(count_min + (count_max - count_min) * density))


def weighted_order(
    weights: NDArray[np.float64],
    rng: np.random.Generator,
) -> NDArray[np.intp]:
    """Random permutation of indices biased toward larger weights.

    Uses Efraimidis-Spirakis keys u ** (1 / w): taking the first k indices is
    a weighted sample without replacement, and the first k of a longer
    prefix always contains the first k of a shorter one.

    Args:
        weights: Strictly positive weights.
        rng: Random number generator.

    Returns:
        Indices ordered from first to last pick.
    """
    u = rng.random(len(weights))
    keys = np.log(u) / weights
    # Stable sort keeps ties in index order
    return np.argsort(-keys, kind="stable")


def select_river_sources(
    grid: TerrainGrid,
    count: int,
    config: HydrologyConfig,
) -> list[tuple[int, int]]:
    """Choose distinct highland cells as river sources.

    Candidates are land cells whose elevation reaches the configured quantile
    of land elevations. Higher cells are more likely to be chosen.

    Args:
        grid: Classified grid.
        count: Number of sources wanted.
        config: Hydrology configuration.

    Returns:
        Up to `count` distinct (x, y) sources; fewer if candidates run out.
    """
    land_mask = ~np.isin(grid.tiles, _STANDING_WATER_CODES)
    land_elevations = grid.elevation[land_mask]
    if count <= 0 or land_elevations.size == 0:
        return []

    cutoff = float(np.quantile(land_elevations, config.highland_quantile))
    candidate_mask = land_mask & (grid.elevation >= cutoff)
    ys, xs = np.nonzero(candidate_mask)

    # Weight grows with height above the cutoff; never zero
    weights = 1.0 + 4.0 * (grid.elevation[ys, xs] - cutoff)

    rng = stage_rng(grid.seed, "rivers:sources")
    order = weighted_order(weights, rng)[:count]
    return [(int(xs[i]), int(ys[i])) for i in order]


def trace_river(
    source: tuple[int, int],
    elevation: NDArray[np.float64],
    standing_water: NDArray[np.bool_],
) -> RiverPath:
    """Trace a river downhill from a source by steepest descent.

    Each step moves to the lowest strictly-lower unvisited 8-neighbour. The
    path stops on standing water, on the map boundary, or in a pit with no
    lower neighbour (where it pools into a lake).

    Args:
        source: (x, y) source cell.
        elevation: Elevation field.
        standing_water: Mask of ocean and lake cells.

    Returns:
        The traced RiverPath.
    """
    height, width = elevation.shape
    x, y = source
    cells = [(x, y)]
    visited = {(x, y)}

    # Each step strictly descends, so the loop ends within width * height steps
    while True:
        if standing_water[y, x]:
            terminus = RiverTerminus.OCEAN
            break
        if x == 0 or y == 0 or x == width - 1 or y == height - 1:
            terminus = RiverTerminus.BOUNDARY
            break

        lowest = elevation[y, x]
        next_cell = None
        for d in range(8):
            nx = x + D8_DX[d]
            ny = y + D8_DY[d]
            if (nx, ny) in visited:
                continue
            if elevation[ny, nx] < lowest:
                lowest = elevation[ny, nx]
                next_cell = (nx, ny)

        if next_cell is None:
            terminus = RiverTerminus.LAKE
            break

        x, y = next_cell
        cells.append(next_cell)
        visited.add(next_cell)

    return RiverPath(cells=tuple(cells), terminus=terminus)


def overlay_rivers(
    tiles: NDArray[np.uint8],
    rivers: list[RiverPath],
) -> NDArray[np.uint8]:
    """Write river and lake tiles for every path in one pass.

    Cells that were already standing water keep their tile. A path ending in
    a pit turns its final cell into a lake.

    Returns:
        New tile array; the input is not modified.
    """
    result = tiles.copy()
    standing = np.isin(tiles, _STANDING_WATER_CODES)

    for river in rivers:
        for x, y in river.cells:
            if not standing[y, x]:
                result[y, x] = TileKind.RIVER.code

    # Lakes last so a later river crossing a pit cell cannot erase it
    for river in rivers:
        if river.terminus == RiverTerminus.LAKE:
            x, y = river.mouth
            result[y, x] = TileKind.LAKE.code

    return result


def carve_rivers(
    grid: TerrainGrid,
    config: HydrologyConfig,
) -> TerrainGrid:
    """River stage: select sources, trace every river, then overlay.

    The number of rivers follows the grid's river density. When fewer
    highland cells exist than requested, every available one is used.

    Args:
        grid: Grid in the CLASSIFIED stage.
        config: Hydrology configuration.

    Returns:
        New grid in the RIVERS_CARVED stage.
    """
    grid.require_stage(GenerationStage.CLASSIFIED)

    requested = river_count(
        grid.settings.river_density,
        config.river_count_min,
        config.river_count_max,
    )
    sources = select_river_sources(grid, requested, config)
    if len(sources) < requested:
        logger.info(
            "river_sources_short",
            requested=requested,
            available=len(sources),
        )

    standing_water = np.isin(grid.tiles, _STANDING_WATER_CODES)
    rivers = [trace_river(source, grid.elevation, standing_water) for source in sources]
    tiles = overlay_rivers(grid.tiles, rivers)

    logger.debug(
        "rivers_traced",
        count=len(rivers),
        cells=sum(len(r) for r in rivers),
        lakes=sum(1 for r in rivers if r.terminus == RiverTerminus.LAKE),
    )

    return grid.advance(
        GenerationStage.RIVERS_CARVED,
        tiles=tiles,
        rivers=tuple(rivers),
    )
