"""Field generation for terrain: elevation, moisture, temperature."""

import numpy as np
from numpy.typing import NDArray

from .config import ElevationConfig, MoistureConfig, TemperatureConfig
from .noise import NoiseField


def make_elevation(
    width: int,
    height: int,
    seed: int,
    config: ElevationConfig,
) -> NDArray[np.float64]:
    """Generate elevation field.

    fBm noise stretched so the field spans exactly [-1, 1].

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        seed: Map seed.
        config: Elevation generation parameters.

    Returns:
        2D elevation array in [-1, 1].
    """
    elevation = NoiseField(seed, "elevation", config.noise).sample_grid(width, height)
    return stretch_to_range(elevation, -1.0, 1.0)


def make_moisture(
    width: int,
    height: int,
    seed: int,
    config: MoistureConfig,
) -> NDArray[np.float64]:
    """Generate moisture field.

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        seed: Map seed.
        config: Moisture generation parameters.

    Returns:
        2D moisture array in [0, 1].
    """
    noise = NoiseField(seed, "moisture", config.noise).sample_grid(width, height)
    return np.clip(0.5 + config.contrast * noise, 0.0, 1.0)


def make_temperature(
    width: int,
    height: int,
    seed: int,
    config: TemperatureConfig,
    elevation: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Generate temperature field.

    Combines noise with latitude (warmest at the vertical middle of the map)
    and cools with positive elevation.

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        seed: Map seed.
        config: Temperature generation parameters.
        elevation: Elevation field in [-1, 1].

    Returns:
        2D temperature array in [0, 1].
    """
    noise = NoiseField(seed, "temperature", config.noise).sample_grid(width, height)
    noise01 = (noise + 1.0) / 2.0

    if height > 1:
        rows = np.arange(height, dtype=np.float64) / (height - 1)
    else:
        rows = np.full(1, 0.5)
    # 0 at the middle row, 1 at top and bottom edges
    latitude = np.abs(rows - 0.5) * 2.0
    warmth = (1.0 - latitude)[:, np.newaxis]

    temperature = (
        config.noise_weight * noise01
        + config.latitude_weight * warmth
        - config.lapse_rate * np.clip(elevation, 0.0, 1.0)
    )
    return np.clip(temperature, 0.0, 1.0)


def stretch_to_range(
    field: NDArray[np.float64],
    low: float,
    high: float,
) -> NDArray[np.float64]:
    """Linearly rescale a field so its min and max hit low and high.

    A constant field maps to the midpoint.
    """
    field_min = float(np.min(field))
    field_max = float(np.max(field))
    if field_max <= field_min:
        return np.full_like(field, (low + high) / 2.0)
    scaled = (field - field_min) / (field_max - field_min)
    return np.clip(low + scaled * (high - low), low, high)
