"""Pytest configuration and fixtures for mapper tests."""

import tempfile
from pathlib import Path

import numpy as np
import pytest
import structlog

from mapper.log import quiet_by_default
from mapper.settings import GenerationSettings
from mapper.terrain.generator import generate
from mapper.terrain.grid import GenerationStage, TerrainGrid
from mapper.tile_types import TileKind


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test (e.g. the CLI) applied."""
    yield
    structlog.reset_defaults()
    quiet_by_default()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings():
    """Default generation settings."""
    return GenerationSettings()


@pytest.fixture
def small_grid(settings):
    """A finished 60x20 map."""
    return generate(1234, settings, 60, 20)


@pytest.fixture
def make_grid():
    """Factory for hand-built grids in a given stage.

    Tiles default to GRASS and elevation to zeros.
    """

    def _make(
        width: int,
        height: int,
        stage: GenerationStage = GenerationStage.CLASSIFIED,
        tiles=None,
        elevation=None,
        settings: GenerationSettings | None = None,
        seed: int = 7,
        **fields,
    ) -> TerrainGrid:
        if tiles is None:
            tiles = np.full((height, width), TileKind.GRASS.code, dtype=np.uint8)
        if elevation is None:
            elevation = np.zeros((height, width), dtype=np.float64)
        return TerrainGrid(
            width=width,
            height=height,
            seed=seed,
            settings=settings or GenerationSettings(),
            stage=stage,
            elevation=elevation,
            tiles=tiles,
            **fields,
        )

    return _make


@pytest.fixture
def sample_config_toml():
    """Sample map config as TOML string."""
    return """
seed = 99
width = 32
height = 16

[settings]
river_density = 0.25
city_density = 0.75
land_percentage = 0.5

[terrain.hydrology]
highland_quantile = 0.6

[render]
output = "out/map.png"
scale = 4
"""


@pytest.fixture
def config_file(temp_dir, sample_config_toml):
    """Create a temporary config file."""
    config_path = temp_dir / "test_config.toml"
    config_path.write_text(sample_config_toml)
    return config_path
