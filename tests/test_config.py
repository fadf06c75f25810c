"""Tests for map configuration."""

import tomllib

import pytest

from mapper.config import (
    CONFIGS_DIR,
    MapConfig,
    RenderConfig,
    find_config,
    list_configs,
    load_config,
)
from mapper.exceptions import ConfigNotFoundError
from mapper.terrain.config import TerrainConfig


class TestRenderConfig:
    """Tests for RenderConfig."""

    def test_defaults(self):
        """Test default values."""
        config = RenderConfig()
        assert config.output is None
        assert config.scale == 8
        assert config.labels is True
        assert config.roads is True
        assert config.ascii is True
        assert config.color is False


class TestMapConfig:
    """Tests for MapConfig."""

    def test_defaults(self):
        """Defaults match the CLI grid and default settings."""
        config = MapConfig()
        assert config.seed == 42
        assert (config.width, config.height) == (60, 20)
        assert config.settings.land_percentage == 0.4
        assert config.terrain == TerrainConfig()

    def test_settings_clamped(self):
        config = MapConfig.model_validate({"settings": {"land_percentage": 3.0}})
        assert config.settings.land_percentage == 1.0


class TestLoadConfig:
    """Tests for load_config."""

    def test_load(self, config_file):
        config = load_config(config_file)
        assert config.seed == 99
        assert (config.width, config.height) == (32, 16)
        assert config.settings.river_density == 0.25
        assert config.settings.city_density == 0.75
        assert config.terrain.hydrology.highland_quantile == 0.6
        assert config.terrain.hydrology.river_count_max == 40
        assert config.render.output == "out/map.png"
        assert config.render.scale == 4

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "missing.toml")

    def test_malformed(self, temp_dir):
        path = temp_dir / "bad.toml"
        path.write_text("seed = = 3")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)


class TestFindConfig:
    """Tests for find_config and list_configs."""

    def test_by_path(self, config_file):
        assert find_config(str(config_file)) == config_file

    def test_missing_path(self, temp_dir):
        with pytest.raises(ConfigNotFoundError):
            find_config(str(temp_dir / "nope.toml"))

    def test_by_name(self, temp_dir, sample_config_toml):
        (temp_dir / "island.toml").write_text(sample_config_toml)
        assert find_config("island", temp_dir) == temp_dir / "island.toml"

    def test_unknown_name(self, temp_dir):
        """Missing configs are also FileNotFoundErrors."""
        with pytest.raises(FileNotFoundError, match="Available configs"):
            find_config("nope", temp_dir)

    def test_list_configs(self, temp_dir):
        (temp_dir / "b.toml").write_text("")
        (temp_dir / "a.toml").write_text("")
        (temp_dir / "notes.txt").write_text("")
        assert list_configs(temp_dir) == ["a", "b"]
        assert list_configs(temp_dir / "missing") == []

    def test_bundled_configs_load(self):
        """Every config shipped with the project parses."""
        names = list_configs()
        assert "default" in names
        for name in names:
            load_config(find_config(name))

    def test_default_matches_model_defaults(self):
        config = load_config(CONFIGS_DIR / "default.toml")
        assert config == MapConfig()
