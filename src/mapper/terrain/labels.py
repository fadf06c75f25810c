"""Geographic feature labelling: oceans, mountain ranges, forests, swamps, rivers."""

import math

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..tile_types import OCEAN_KINDS, TileKind
from ..types import FeatureLabel, RiverPath
from .config import LabelConfig
from .grid import TerrainGrid
from .names import NameGenerator

logger = structlog.get_logger()

# (feature type, tile kinds, max labels); minimum sizes come from LabelConfig
REGION_FEATURES: tuple[tuple[str, frozenset[TileKind], int], ...] = (
    ("ocean", OCEAN_KINDS, 3),
    ("mountains", frozenset({TileKind.STONE, TileKind.SNOW_PEAK}), 4),
    ("forest", frozenset({TileKind.FOREST}), 3),
    ("swamp", frozenset({TileKind.SWAMP}), 2),
)
MAX_RIVER_LABELS = 3


def _min_cells(feature_type: str, config: LabelConfig) -> int:
    return {
        "ocean": config.ocean_min_cells,
        "mountains": config.mountain_min_cells,
        "forest": config.forest_min_cells,
        "swamp": config.swamp_min_cells,
        "river": config.river_min_cells,
    }[feature_type]


def find_regions(
    mask: NDArray[np.bool_],
    min_cells: int,
    limit: int,
) -> list[NDArray[np.bool_]]:
    """Largest 8-connected regions of a mask.

    Args:
        mask: Boolean mask of candidate cells.
        min_cells: Smallest region size kept.
        limit: Maximum number of regions returned.

    Returns:
        Region masks, largest first. Equal sizes keep label order.
    """
    structure = ndimage.generate_binary_structure(2, 2)
    labeled, num_features = ndimage.label(mask, structure=structure)
    if num_features == 0:
        return []

    sizes = np.bincount(labeled.ravel(), minlength=num_features + 1)[1:]
    order = np.argsort(-sizes, kind="stable")
    regions = []
    for index in order[:limit]:
        if sizes[index] < min_cells:
            break
        regions.append(labeled == index + 1)
    return regions


def region_anchor(region: NDArray[np.bool_]) -> tuple[int, int]:
    """Cell of a region farthest from its edge, as (x, y).

    Ties resolve to the first such cell in row-major order.
    """
    distance = ndimage.distance_transform_edt(region)
    y, x = np.unravel_index(int(np.argmax(distance)), region.shape)
    return int(x), int(y)


def _spaced(x: int, y: int, labels: list[FeatureLabel], spacing: float) -> bool:
    return all(math.hypot(x - label.x, y - label.y) >= spacing for label in labels)


def label_features(
    grid: TerrainGrid,
    config: LabelConfig,
) -> tuple[tuple[FeatureLabel, ...], tuple[RiverPath, ...]]:
    """Name the most prominent features of a grid.

    Region features are labelled in a fixed order (oceans, mountains,
    forests, swamps) followed by the longest rivers. A candidate whose anchor
    is too close to an earlier label is skipped. Names are unique across the
    map, settlements, roads and bridges included.

    Args:
        grid: Grid with rivers and settlements in place.
        config: Labelling configuration.

    Returns:
        Tuple of (labels, rivers); named rivers carry their label's name.
    """
    names = NameGenerator(grid.seed)
    taken = {settlement.name for settlement in grid.settlements}
    taken.update(road.name for road in grid.roads)
    taken.update(bridge.name for bridge in grid.bridges)
    labels: list[FeatureLabel] = []

    for feature_type, kinds, limit in REGION_FEATURES:
        regions = find_regions(grid.mask(*kinds), _min_cells(feature_type, config), limit)
        for region in regions:
            x, y = region_anchor(region)
            if not _spaced(x, y, labels, config.min_spacing):
                continue
            name = names.feature_name(feature_type, x, y, taken)
            taken.add(name)
            labels.append(FeatureLabel(x=x, y=y, name=name, feature_type=feature_type))

    rivers = list(grid.rivers)
    by_length = sorted(range(len(rivers)), key=lambda i: -len(rivers[i]))
    named = 0
    for index in by_length:
        river = rivers[index]
        if named >= MAX_RIVER_LABELS or len(river) < config.river_min_cells:
            break
        x, y = river.cells[len(river) // 2]
        if not _spaced(x, y, labels, config.min_spacing):
            continue
        name = names.feature_name("river", x, y, taken)
        taken.add(name)
        labels.append(FeatureLabel(x=x, y=y, name=name, feature_type="river"))
        rivers[index] = river.model_copy(update={"name": name})
        named += 1

    logger.debug("features_labelled", count=len(labels))
    return tuple(labels), tuple(rivers)
