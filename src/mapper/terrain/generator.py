"""Main terrain generation orchestration.

The pipeline is linear: each stage takes the grid produced by the previous
one and returns a new grid one stage further along.
"""

import structlog

from ..settings import GenerationSettings
from .classification import classify_grid
from .config import LabelConfig, TerrainConfig
from .fields import make_elevation, make_moisture, make_temperature
from .grid import GenerationStage, TerrainGrid, validate_dimensions
from .hydrology import carve_rivers
from .labels import label_features
from .roads import build_roads
from .seeding import normalize_seed
from .settlements import place_settlements
from .validation import validate_grid

logger = structlog.get_logger()


def generate_fields(grid: TerrainGrid, config: TerrainConfig) -> TerrainGrid:
    """Field stage: synthesise elevation, moisture and temperature.

    Args:
        grid: Grid in the SEEDED stage.
        config: Terrain configuration.

    Returns:
        New grid in the FIELDS_GENERATED stage.
    """
    grid.require_stage(GenerationStage.SEEDED)
    width, height = grid.width, grid.height
    elevation = make_elevation(width, height, grid.seed, config.elevation)
    moisture = make_moisture(width, height, grid.seed, config.moisture)
    temperature = make_temperature(
        width, height, grid.seed, config.temperature, elevation
    )
    return grid.advance(
        GenerationStage.FIELDS_GENERATED,
        elevation=elevation,
        moisture=moisture,
        temperature=temperature,
    )


def finish_grid(grid: TerrainGrid, config: LabelConfig) -> TerrainGrid:
    """Final stage: label features and make the grid read-only.

    Args:
        grid: Grid in the ROADS_BUILT stage.
        config: Labelling configuration.

    Returns:
        New, frozen grid in the FINISHED stage.
    """
    grid.require_stage(GenerationStage.ROADS_BUILT)
    labels, rivers = label_features(grid, config)
    finished = grid.advance(GenerationStage.FINISHED, labels=labels, rivers=rivers)
    finished.freeze()
    return finished


class MapGenerator:
    """Generates terrain grids for one seed and set of settings."""

    def __init__(
        self,
        seed: int,
        settings: GenerationSettings | None = None,
        config: TerrainConfig | None = None,
    ) -> None:
        self.seed = normalize_seed(seed)
        self.settings = settings or GenerationSettings()
        self.config = config or TerrainConfig()

    def generate(self, width: int, height: int) -> TerrainGrid:
        """Run every stage and return the finished grid.

        Args:
            width: Map width in tiles.
            height: Map height in tiles.

        Returns:
            Finished, read-only TerrainGrid.

        Raises:
            InvalidDimensionsError: If width or height is not a positive int.
        """
        validate_dimensions(width, height)

        logger.info(
            "terrain_generation_started",
            seed=self.seed,
            width=width,
            height=height,
            settings=self.settings.describe(),
        )

        grid = TerrainGrid.seeded(self.seed, self.settings, width, height)
        grid = generate_fields(grid, self.config)
        grid = classify_grid(grid)
        logger.debug("terrain_classified", land_threshold=grid.land_threshold)

        grid = carve_rivers(grid, self.config.hydrology)
        logger.debug("rivers_carved", count=len(grid.rivers))

        grid = place_settlements(grid, self.config.settlements)
        logger.debug("settlements_placed", count=len(grid.settlements))

        grid = build_roads(grid, self.config.roads)

        grid = finish_grid(grid, self.config.labels)

        _log_terrain_stats(grid)
        validate_grid(grid)
        return grid


def generate(
    seed: int,
    settings: GenerationSettings,
    width: int,
    height: int,
    config: TerrainConfig | None = None,
) -> TerrainGrid:
    """Generate a finished terrain grid.

    Same arguments always give an identical grid.
    """
    return MapGenerator(seed, settings, config).generate(width, height)


def _log_terrain_stats(grid: TerrainGrid) -> None:
    """Log terrain generation statistics."""
    total = grid.width * grid.height
    counts = {kind.value: count for kind, count in grid.tile_counts().items()}
    logger.info(
        "terrain_generated",
        tiles=total,
        land_fraction=round(grid.land_fraction(), 3),
        rivers=len(grid.rivers),
        settlements=len(grid.settlements),
        roads=len(grid.roads),
        bridges=len(grid.bridges),
        labels=len(grid.labels),
    )
    logger.debug("terrain_tile_counts", **counts)
