"""Road network: highways between major settlements, branches, spurs, bridges.

Routes are found with A* over the classified tile grid. Roads may cross river
cells (each crossing becomes a bridge) but never open water or lakes.
"""

import heapq
import math

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..tile_types import TileKind
from ..types import Bridge, Road, RoadKind, Settlement, SizeClass
from .config import RoadConfig
from .grid import GenerationStage, TerrainGrid
from .hydrology import D8_DX, D8_DY
from .names import NameGenerator
from .seeding import stage_rng

logger = structlog.get_logger()

# Cost multiplier for entering a cell; kinds not listed are impassable
TRAVEL_COSTS: dict[TileKind, float] = {
    TileKind.GRASS: 1.0,
    TileKind.SAND: 1.0,
    TileKind.DIRT: 1.0,
    TileKind.FOREST: 1.5,
    TileKind.HILLS: 2.0,
    TileKind.SWAMP: 3.0,
    TileKind.RIVER: 5.0,
    TileKind.STONE: 8.0,
    TileKind.SNOW_PEAK: 10.0,
}

# Spurs peter out instead of climbing into the mountains
SPUR_MAX_COST = TRAVEL_COSTS[TileKind.STONE]

DIAGONAL = math.sqrt(2.0)

Point = tuple[int, int]


def travel_costs(
    tiles: NDArray[np.uint8],
    rng: np.random.Generator,
    jitter: float = 0.5,
) -> NDArray[np.float64]:
    """Per-cell entry cost; infinite where roads cannot go.

    A seeded jitter in [0, jitter) is added to every passable cell so that
    routes bend instead of running in ruler-straight lines.
    """
    costs = np.full(tiles.shape, np.inf, dtype=np.float64)
    for kind, cost in TRAVEL_COSTS.items():
        costs[tiles == kind.code] = cost
    noise = rng.random(tiles.shape) * jitter
    return costs + noise


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _reconstruct(came_from: dict[Point, Point], end: Point) -> list[Point]:
    path = [end]
    while path[-1] in came_from:
        path.append(came_from[path[-1]])
    path.reverse()
    return path


def _step_cost(
    costs: list[list[float]],
    elevation: list[list[float]],
    x: int,
    y: int,
    d: int,
    climb_penalty: float,
) -> float:
    nx, ny = x + D8_DX[d], y + D8_DY[d]
    base = DIAGONAL if D8_DX[d] and D8_DY[d] else 1.0
    climb = abs(elevation[ny][nx] - elevation[y][x])
    return base * costs[ny][nx] + climb_penalty * climb


def smooth_path(path: list[Point]) -> list[Point]:
    """Cut corners: drop any cell whose neighbours already touch.

    The result is a subsequence of `path` with the same endpoints in which
    consecutive cells are still 8-adjacent.
    """
    if len(path) < 3:
        return list(path)
    smoothed = [path[0]]
    for i in range(1, len(path) - 1):
        px, py = smoothed[-1]
        nx, ny = path[i + 1]
        if max(abs(nx - px), abs(ny - py)) <= 1:
            continue
        smoothed.append(path[i])
    smoothed.append(path[-1])
    return smoothed


def find_path(
    costs: NDArray[np.float64],
    elevation: NDArray[np.float64],
    start: Point,
    goal: Point,
    climb_penalty: float = 10.0,
) -> list[Point]:
    """Cheapest 8-connected route from `start` to `goal`.

    A* with a straight-line heuristic, which never overestimates because
    every step costs at least its length.

    Args:
        costs: Per-cell entry cost from `travel_costs`.
        elevation: Elevation field; climbing adds `climb_penalty` per unit.
        start: (x, y) to leave from.
        goal: (x, y) to reach.

    Returns:
        Smoothed list of (x, y) cells from start to goal, or an empty list
        if the goal cannot be reached.
    """
    height, width = costs.shape
    if not math.isfinite(costs[goal[1], goal[0]]):
        return []
    # Plain lists index much faster than arrays one cell at a time
    cost_rows = costs.tolist()
    elevation_rows = elevation.tolist()

    best: dict[Point, float] = {start: 0.0}
    came_from: dict[Point, Point] = {}
    closed: set[Point] = set()
    # Priority queue: (estimated total, cost so far, (x, y))
    pq: list[tuple[float, float, Point]] = [(_distance(start, goal), 0.0, start)]

    while pq:
        _, cost, current = heapq.heappop(pq)
        if current == goal:
            return smooth_path(_reconstruct(came_from, goal))
        if current in closed:
            continue
        closed.add(current)

        x, y = current
        for d in range(8):
            nx, ny = x + D8_DX[d], y + D8_DY[d]
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            if not math.isfinite(cost_rows[ny][nx]) or (nx, ny) in closed:
                continue
            new_cost = cost + _step_cost(cost_rows, elevation_rows, x, y, d, climb_penalty)
            if new_cost < best.get((nx, ny), math.inf):
                best[(nx, ny)] = new_cost
                came_from[(nx, ny)] = current
                heapq.heappush(
                    pq, (new_cost + _distance((nx, ny), goal), new_cost, (nx, ny))
                )

    return []


def find_partial_path(
    costs: NDArray[np.float64],
    elevation: NDArray[np.float64],
    start: Point,
    target: Point,
    max_expansions: int = 50,
    climb_penalty: float = 10.0,
) -> list[Point]:
    """Route toward `target`, giving up after `max_expansions` cells.

    Cells costlier than SPUR_MAX_COST (mountains) are never entered. The
    search stops early on reaching the target.

    Returns:
        Smoothed path from `start` to the explored cell nearest `target`;
        just [start] if nothing better was reached.
    """
    height, width = costs.shape
    cost_rows = costs.tolist()
    elevation_rows = elevation.tolist()
    best: dict[Point, float] = {start: 0.0}
    came_from: dict[Point, Point] = {}
    closed: set[Point] = set()
    pq: list[tuple[float, Point]] = [(0.0, start)]
    nearest, nearest_distance = start, _distance(start, target)

    while pq and len(closed) < max_expansions:
        cost, current = heapq.heappop(pq)
        if current in closed:
            continue
        closed.add(current)

        gap = _distance(current, target)
        if gap < nearest_distance:
            nearest, nearest_distance = current, gap
        if current == target:
            break

        x, y = current
        for d in range(8):
            nx, ny = x + D8_DX[d], y + D8_DY[d]
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            if not cost_rows[ny][nx] < SPUR_MAX_COST or (nx, ny) in closed:
                continue
            new_cost = cost + _step_cost(cost_rows, elevation_rows, x, y, d, climb_penalty)
            if new_cost < best.get((nx, ny), math.inf):
                best[(nx, ny)] = new_cost
                came_from[(nx, ny)] = current
                heapq.heappush(pq, (new_cost, (nx, ny)))

    return smooth_path(_reconstruct(came_from, nearest))


def spanning_edges(points: NDArray[np.float64], max_length: float) -> list[tuple[int, int]]:
    """Kruskal minimum spanning forest over points, skipping long edges.

    Args:
        points: Array of shape (n, 2) of (x, y) positions.
        max_length: Pairs farther apart than this are never joined.

    Returns:
        (i, j) index pairs with i < j, shortest first.
    """
    n = len(points)
    if n < 2:
        return []
    gaps = np.hypot(
        points[:, None, 0] - points[None, :, 0],
        points[:, None, 1] - points[None, :, 1],
    )
    ii, jj = np.triu_indices(n, k=1)
    lengths = gaps[ii, jj]
    order = np.argsort(lengths, kind="stable")

    parent = list(range(n))

    def find(a: int) -> int:
        while parent[a] != a:
            parent[a] = parent[parent[a]]
            a = parent[a]
        return a

    edges = []
    for k in order:
        if lengths[k] > max_length:
            break
        i, j = int(ii[k]), int(jj[k])
        root_i, root_j = find(i), find(j)
        if root_i != root_j:
            parent[root_i] = root_j
            edges.append((i, j))
    return edges


class _NetworkBuilder:
    """Accumulates roads and bridges for one grid."""

    def __init__(self, grid: TerrainGrid, config: RoadConfig) -> None:
        self.grid = grid
        self.config = config
        self.costs = travel_costs(
            grid.tiles, stage_rng(grid.seed, "roads:costs"), config.jitter
        )
        # Routes only exist within one 8-connected passable region
        self.regions, _ = ndimage.label(
            np.isfinite(self.costs), structure=ndimage.generate_binary_structure(2, 2)
        )
        self.river = grid.mask(TileKind.RIVER)
        self.names = NameGenerator(grid.seed)
        self.taken = {settlement.name for settlement in grid.settlements}
        self.roads: list[Road] = []
        self.bridges: dict[Point, Bridge] = {}
        self.road_cells: dict[Point, None] = {}  # insertion-ordered set

    def route(self, start: Point, goal: Point) -> list[Point]:
        if self.regions[start[1], start[0]] != self.regions[goal[1], goal[0]]:
            return []
        return find_path(
            self.costs, self.grid.elevation, start, goal, self.config.climb_penalty
        )

    def add(self, cells: list[Point], kind: RoadKind, style: str) -> Road:
        """Name a routed path, record its bridges and keep it."""
        crossings = []
        for x, y in cells:
            if not self.river[y, x]:
                continue
            bridge = self.bridges.get((x, y))
            if bridge is None:
                name = self.names.bridge_name(x, y, self.taken)
                self.taken.add(name)
                bridge = Bridge(x=x, y=y, name=name)
                self.bridges[(x, y)] = bridge
            crossings.append(bridge)

        name = self.names.road_name(style, cells[0][0], cells[0][1], self.taken)
        self.taken.add(name)
        road = Road(cells=tuple(cells), name=name, kind=kind, bridges=tuple(crossings))
        self.roads.append(road)
        for cell in cells:
            self.road_cells[cell] = None
        return road

    def nearest_road_cell(self, origin: Point) -> Point | None:
        """Closest existing road cell within the junction distance."""
        if not self.road_cells:
            return None
        cells = np.array(list(self.road_cells), dtype=np.float64)
        gaps = np.hypot(cells[:, 0] - origin[0], cells[:, 1] - origin[1])
        index = int(np.argmin(gaps))
        if gaps[index] >= self.config.junction_distance:
            return None
        return int(cells[index, 0]), int(cells[index, 1])


def _nearest_settlement(
    origin: Point,
    settlements: tuple[Settlement, ...],
    candidates: list[int],
) -> int | None:
    best, best_distance = None, math.inf
    for index in candidates:
        gap = _distance(origin, settlements[index].position.as_tuple())
        if 0 < gap < best_distance:
            best, best_distance = index, gap
    return best


def plan_roads(
    grid: TerrainGrid,
    config: RoadConfig,
) -> tuple[tuple[Road, ...], tuple[Bridge, ...]]:
    """Lay out the road network for a grid with settlements.

    1. Highways follow a minimum spanning tree over the most populous
       settlements.
    2. Every settlement still off the network is joined to the nearest road
       cell, or failing that to the nearest connected settlement, or failing
       that to the nearest settlement at all.
    3. Some settlements get a dead-end spur into the wilderness.

    Routes that cannot be found (e.g. between islands) are skipped.

    Returns:
        Tuple of (roads, bridges) in construction order.
    """
    settlements = grid.settlements
    if not settlements:
        return (), ()

    builder = _NetworkBuilder(grid, config)
    positions = [s.position.as_tuple() for s in settlements]
    connected = [False] * len(settlements)

    by_population = sorted(range(len(settlements)), key=lambda i: -settlements[i].population)
    major = by_population[: config.major_settlements]
    points = np.array([positions[i] for i in major], dtype=np.float64).reshape(-1, 2)
    for a, b in spanning_edges(points, config.max_highway_length):
        i, j = major[a], major[b]
        cells = builder.route(positions[i], positions[j])
        if cells:
            builder.add(cells, RoadKind.HIGHWAY, "highway")
            connected[i] = connected[j] = True

    for i, settlement in enumerate(settlements):
        if connected[i]:
            continue
        origin = positions[i]
        if origin in builder.road_cells:
            connected[i] = True
            continue

        junction = builder.nearest_road_cell(origin)
        target = junction
        if target is None:
            joined = [j for j in range(len(settlements)) if connected[j]]
            index = _nearest_settlement(origin, settlements, joined)
            if index is None:
                index = _nearest_settlement(origin, settlements, list(range(len(settlements))))
            if index is not None:
                target = positions[index]
        if target is None:
            continue

        cells = builder.route(origin, target)
        if not cells:
            continue
        major_class = settlement.size_class in (SizeClass.CITY, SizeClass.TOWN)
        kind = RoadKind.ROAD if major_class else RoadKind.TRAIL
        style = "branch" if junction is not None else kind.value
        builder.add(cells, kind, style)
        connected[i] = True

    spur_rng = stage_rng(grid.seed, "roads:spurs")
    for origin in positions:
        # Draw every value up front so one settlement's luck never shifts another's
        roll = spur_rng.random()
        angle = spur_rng.uniform(0.0, 2.0 * math.pi)
        length = spur_rng.uniform(config.spur_min_length, config.spur_max_length)
        if roll >= config.spur_chance:
            continue
        tx = int(origin[0] + math.cos(angle) * length)
        ty = int(origin[1] + math.sin(angle) * length)
        if not grid.in_bounds(tx, ty):
            continue
        cells = find_partial_path(
            builder.costs,
            grid.elevation,
            origin,
            (tx, ty),
            config.spur_search_limit,
            config.climb_penalty,
        )
        if len(cells) >= config.spur_min_cells:
            builder.add(cells, RoadKind.TRAIL, "spur")

    return tuple(builder.roads), tuple(builder.bridges.values())


def build_roads(grid: TerrainGrid, config: RoadConfig) -> TerrainGrid:
    """Road stage: connect settlements and bridge the rivers roads cross.

    Args:
        grid: Grid in the SETTLEMENTS_PLACED stage.
        config: Road configuration.

    Returns:
        New grid in the ROADS_BUILT stage.
    """
    grid.require_stage(GenerationStage.SETTLEMENTS_PLACED)
    roads, bridges = plan_roads(grid, config)
    logger.debug(
        "roads_built",
        roads=len(roads),
        highways=sum(1 for road in roads if road.kind == RoadKind.HIGHWAY),
        bridges=len(bridges),
    )
    return grid.advance(GenerationStage.ROADS_BUILT, roads=roads, bridges=bridges)
