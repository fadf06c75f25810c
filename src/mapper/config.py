"""Map configuration from TOML files."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from .exceptions import ConfigNotFoundError
from .settings import GenerationSettings
from .terrain.config import TerrainConfig
from .terrain.grid import CLI_DEFAULT_SIZE

CONFIGS_DIR = Path(__file__).parent.parent.parent / "configs"


class RenderConfig(BaseModel):
    """Output settings."""

    output: str | None = None  # PNG path; no image when unset
    scale: int = Field(default=8, ge=1, description="Pixels per tile")
    labels: bool = True
    roads: bool = True
    ascii: bool = True
    color: bool = False


class MapConfig(BaseModel):
    """Complete map configuration."""

    seed: int = 42
    width: int = CLI_DEFAULT_SIZE[0]
    height: int = CLI_DEFAULT_SIZE[1]
    settings: GenerationSettings = Field(default_factory=GenerationSettings)
    terrain: TerrainConfig = Field(default_factory=TerrainConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


def load_config(config_path: Path) -> MapConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MapConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return MapConfig.model_validate(data)


def find_config(name: str, configs_dir: Path = CONFIGS_DIR) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. configs/{name}.toml
    3. configs/{name}

    Args:
        name: Config name or path.
        configs_dir: Directory holding named configs.

    Returns:
        Path to the config file.

    Raises:
        ConfigNotFoundError: If config file is not found.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise ConfigNotFoundError(f"Config file not found: {name}")

    config_path = configs_dir / f"{name}.toml"
    if config_path.exists():
        return config_path

    config_path = configs_dir / name
    if config_path.exists():
        return config_path

    raise ConfigNotFoundError(
        f"Config '{name}' not found in {configs_dir}. "
        f"Available configs: {list_configs(configs_dir)}"
    )


def list_configs(configs_dir: Path = CONFIGS_DIR) -> list[str]:
    """List available config names."""
    if not configs_dir.exists():
        return []
    return sorted(p.stem for p in configs_dir.glob("*.toml"))


__all__ = [
    "GenerationSettings",
    "MapConfig",
    "RenderConfig",
    "find_config",
    "list_configs",
    "load_config",
]
