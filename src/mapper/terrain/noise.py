"""Coherent noise for terrain generation.

Provides seeded 2D Perlin gradient noise and fractal Brownian motion (fBm)
built on top of it. Lattice corners are hashed with 64-bit integer
arithmetic, so results depend only on (seed, coordinates) and never on
shared random state.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import NoiseConfig
from .seeding import SEED_MODULUS, derive_seed

# splitmix64 constants
_GOLDEN_GAMMA = np.uint64(0x9E3779B97F4A7C15)
_MIX_1 = np.uint64(0xBF58476D1CE4E5B9)
_MIX_2 = np.uint64(0x94D049BB133111EB)

_TWO_PI_OVER_2_53 = 2.0 * np.pi / float(2**53)

# 2D Perlin output peaks at sqrt(0.5); rescale toward [-1, 1]
_PERLIN_SCALE = np.sqrt(2.0)

# Seed step between octaves
_OCTAVE_STRIDE = 0x632BE59BD9B4E019


def _mix64(h: NDArray[np.uint64]) -> NDArray[np.uint64]:
    """splitmix64 finaliser."""
    h = h ^ (h >> np.uint64(30))
    h = h * _MIX_1
    h = h ^ (h >> np.uint64(27))
    h = h * _MIX_2
    return h ^ (h >> np.uint64(31))


def hash_lattice(
    ix: NDArray[np.int64],
    iy: NDArray[np.int64],
    seed: int,
) -> NDArray[np.uint64]:
    """Hash integer lattice coordinates to 64-bit values.

    Args:
        ix: Lattice x indices.
        iy: Lattice y indices.
        seed: Unsigned 64-bit seed.

    Returns:
        Array of hashes with the broadcast shape of ix and iy.
    """
    h = np.full(np.broadcast(ix, iy).shape, seed % SEED_MODULUS, dtype=np.uint64)
    h = _mix64(h ^ (ix.astype(np.uint64) * _GOLDEN_GAMMA))
    h = _mix64(h ^ (iy.astype(np.uint64) * _GOLDEN_GAMMA + _MIX_1))
    return h


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def perlin_noise(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    seed: int,
) -> NDArray[np.float64]:
    """Evaluate single-octave 2D Perlin gradient noise.

    Args:
        xs: Sample x coordinates (lattice units).
        ys: Sample y coordinates (lattice units).
        seed: Unsigned 64-bit seed.

    Returns:
        Noise values, roughly in [-1, 1], zero at lattice points.
    """
    x0 = np.floor(xs)
    y0 = np.floor(ys)
    fx = xs - x0
    fy = ys - y0
    ix = x0.astype(np.int64)
    iy = y0.astype(np.int64)

    def corner(dx: int, dy: int) -> NDArray[np.float64]:
        h = hash_lattice(ix + dx, iy + dy, seed)
        angle = (h >> np.uint64(11)).astype(np.float64) * _TWO_PI_OVER_2_53
        return np.cos(angle) * (fx - dx) + np.sin(angle) * (fy - dy)

    n00 = corner(0, 0)
    n10 = corner(1, 0)
    n01 = corner(0, 1)
    n11 = corner(1, 1)

    u = _fade(fx)
    v = _fade(fy)
    nx0 = n00 + u * (n10 - n00)
    nx1 = n01 + u * (n11 - n01)
    return (nx0 + v * (nx1 - nx0)) * _PERLIN_SCALE


def fbm_noise(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    seed: int,
    wavelength: float,
    octaves: int = 5,
    lacunarity: float = 2.0,
    gain: float = 0.5,
) -> NDArray[np.float64]:
    """Fractal Brownian motion over Perlin noise.

    Sums octaves with decreasing amplitude and increasing frequency, then
    normalises by the total amplitude.

    Args:
        xs: Sample x coordinates in tiles.
        ys: Sample y coordinates in tiles.
        seed: Unsigned 64-bit seed.
        wavelength: Wavelength of the base octave in tiles.
        octaves: Number of octaves to sum.
        lacunarity: Frequency multiplier between octaves.
        gain: Amplitude multiplier between octaves.

    Returns:
        Noise values clipped to [-1, 1].
    """
    result = np.zeros(np.broadcast(xs, ys).shape, dtype=np.float64)
    frequency = 1.0 / wavelength
    amplitude = 1.0
    total_amplitude = 0.0

    for octave in range(octaves):
        octave_seed = (seed + octave * _OCTAVE_STRIDE) % SEED_MODULUS
        # Shift each octave off the integer lattice so tile centres never
        # land exactly on lattice points
        shift = (octave_seed >> 11) * float(2**-53) * 256.0
        result += amplitude * perlin_noise(
            xs * frequency + shift, ys * frequency + shift, octave_seed
        )
        total_amplitude += amplitude
        frequency *= lacunarity
        amplitude *= gain

    return np.clip(result / total_amplitude, -1.0, 1.0)


# Beyond this many tiles from the origin, samples lose fine detail
PRECISE_COORDINATE_LIMIT = 1e9


class NoiseField:
    """Deterministic coherent noise layer.

    Each layer derives its internal seed from the map seed and its layer tag,
    so differently tagged layers built from one seed are independent.

    Coordinates are float64 tile positions. Within PRECISE_COORDINATE_LIMIT
    tiles of the origin the field keeps full detail. Farther out the lattice
    fraction loses precision, and from about 2**52 lattice units on it is
    always zero, so the field flattens to 0.0 there rather than failing.
    """

    def __init__(
        self,
        seed: int,
        layer: str,
        config: NoiseConfig | None = None,
    ) -> None:
        self.layer = layer
        self.config = config or NoiseConfig()
        self.seed = derive_seed(seed, f"noise:{layer}")

    def sample_points(self, xs: ArrayLike, ys: ArrayLike) -> NDArray[np.float64]:
        """Sample the field at arbitrary coordinates."""
        xs = np.atleast_1d(np.asarray(xs, dtype=np.float64))
        ys = np.atleast_1d(np.asarray(ys, dtype=np.float64))
        return fbm_noise(
            xs,
            ys,
            self.seed,
            self.config.wavelength,
            octaves=self.config.octaves,
            lacunarity=self.config.lacunarity,
            gain=self.config.gain,
        )

    def sample(self, x: float, y: float) -> float:
        """Sample the field at a single coordinate, in [-1, 1]."""
        return float(self.sample_points([x], [y])[0])

    def sample_grid(self, width: int, height: int) -> NDArray[np.float64]:
        """Sample every tile of a width x height grid.

        Returns:
            Array of shape (height, width).
        """
        ys, xs = np.meshgrid(
            np.arange(height, dtype=np.float64),
            np.arange(width, dtype=np.float64),
            indexing="ij",
        )
        return self.sample_points(xs, ys)
