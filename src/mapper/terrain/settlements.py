"""Settlement placement: counts, size classes, spacing and naming."""

import math

import numpy as np
import structlog
from numpy.typing import NDArray

from ..tile_types import OCEAN_KINDS, TileKind
from ..types import Position, Settlement, SizeClass
from .config import SettlementConfig
from .grid import GenerationStage, TerrainGrid
from .hydrology import weighted_order
from .names import NameGenerator
from .seeding import stage_rng

logger = structlog.get_logger()

# Relative appeal of each buildable tile kind
SITE_WEIGHTS: dict[TileKind, float] = {
    TileKind.GRASS: 1.0,
    TileKind.SAND: 0.7,
    TileKind.DIRT: 0.6,
    TileKind.HILLS: 0.5,
    TileKind.FOREST: 0.3,
}
ELIGIBLE_KINDS = frozenset(SITE_WEIGHTS)

# Cells next to rivers or the coast are more attractive
WATER_ACCESS_BONUS = 1.5

CITY_BASE_POPULATION = 500_000
TOWN_POPULATION_RANGE = (50_000, 150_000)
VILLAGE_POPULATION_RANGE = (5_000, 30_000)


def settlement_count(city_density: float, max_settlements: int = 40) -> int:
    """Map city density in [0, 1] linearly onto a settlement count."""
    density = min(max(city_density, 0.0), 1.0)
    return int(round(max_settlements * density))


def size_classes(count: int, config: SettlementConfig) -> list[SizeClass]:
    """Size class for each settlement to place, largest first.

    At least one city whenever any settlement is requested.
    """
    if count <= 0:
        return []
    cities = max(1, int(round(count * config.city_fraction)))
    towns = min(int(round(count * config.town_fraction)), count - cities)
    villages = count - cities - towns
    return (
        [SizeClass.CITY] * cities
        + [SizeClass.TOWN] * towns
        + [SizeClass.VILLAGE] * villages
    )


def min_spacing(size_class: SizeClass, config: SettlementConfig) -> float:
    """Minimum distance between a settlement of this class and any other."""
    return {
        SizeClass.CITY: config.city_spacing,
        SizeClass.TOWN: config.town_spacing,
        SizeClass.VILLAGE: config.village_spacing,
    }[size_class]


def site_weights(tiles: NDArray[np.uint8]) -> NDArray[np.float64]:
    """Suitability weight per cell; zero where no settlement may stand."""
    weights = np.zeros(tiles.shape, dtype=np.float64)
    for kind, weight in SITE_WEIGHTS.items():
        weights[tiles == kind.code] = weight

    water = np.isin(tiles, [k.code for k in OCEAN_KINDS | {TileKind.RIVER, TileKind.LAKE}])
    near_water = np.zeros_like(water)
    padded = np.pad(water, 1, mode="constant", constant_values=False)
    height, width = tiles.shape
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx or dy:
                near_water |= padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]

    weights[near_water & (weights > 0)] *= WATER_ACCESS_BONUS
    return weights


def _population(
    size_class: SizeClass,
    rank: int,
    rng: np.random.Generator,
) -> int:
    if size_class == SizeClass.CITY:
        # Zipf-like: the n-th city is 1/n the size of the largest
        return CITY_BASE_POPULATION // rank
    low, high = (
        TOWN_POPULATION_RANGE if size_class == SizeClass.TOWN else VILLAGE_POPULATION_RANGE
    )
    return int(rng.integers(low, high))


def place_settlements(
    grid: TerrainGrid,
    config: SettlementConfig,
) -> TerrainGrid:
    """Settlement stage: place and name settlements on eligible land.

    Candidate cells are visited in a seeded, suitability-weighted order;
    a cell is accepted when it keeps the required distance from every
    settlement already placed. Larger settlements are placed first.

    Args:
        grid: Grid in the RIVERS_CARVED stage.
        config: Settlement configuration.

    Returns:
        New grid in the SETTLEMENTS_PLACED stage.
    """
    grid.require_stage(GenerationStage.RIVERS_CARVED)

    requested = settlement_count(grid.settings.city_density, config.max_settlements)
    classes = size_classes(requested, config)

    weights = site_weights(grid.tiles)
    ys, xs = np.nonzero(weights > 0)
    rng = stage_rng(grid.seed, "settlements:sites")
    order = weighted_order(weights[ys, xs], rng) if len(xs) else np.array([], dtype=np.intp)
    population_rng = stage_rng(grid.seed, "settlements:population")

    names = NameGenerator(grid.seed)
    taken_names: set[str] = set()
    placed: list[tuple[int, int, float]] = []  # (x, y, spacing)
    settlements: list[Settlement] = []
    used = np.zeros(len(order), dtype=bool)
    city_rank = 0

    for size_class in classes:
        spacing = min_spacing(size_class, config)
        for slot, index in enumerate(order):
            if used[slot]:
                continue
            x, y = int(xs[index]), int(ys[index])
            if not _far_enough(x, y, spacing, placed):
                continue

            used[slot] = True
            if size_class == SizeClass.CITY:
                city_rank += 1
            name = names.unique_name(x, y, taken_names)
            taken_names.add(name)
            placed.append((x, y, spacing))
            settlements.append(
                Settlement(
                    position=Position(x=x, y=y),
                    name=name,
                    size_class=size_class,
                    population=_population(size_class, city_rank, population_rng),
                )
            )
            break

    if len(settlements) < requested:
        logger.info(
            "settlements_short",
            requested=requested,
            placed=len(settlements),
            eligible_cells=len(xs),
        )

    return grid.advance(
        GenerationStage.SETTLEMENTS_PLACED,
        settlements=tuple(settlements),
    )


def _far_enough(
    x: int,
    y: int,
    spacing: float,
    placed: list[tuple[int, int, float]],
) -> bool:
    """Whether (x, y) respects both its own spacing and each neighbour's."""
    for px, py, other_spacing in placed:
        if math.hypot(x - px, y - py) < max(spacing, other_spacing):
            return False
    return True
