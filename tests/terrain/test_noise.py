"""Tests for noise generation functions."""

import numpy as np
import pytest

from mapper.terrain.config import NoiseConfig
from mapper.terrain.noise import (
    PRECISE_COORDINATE_LIMIT,
    NoiseField,
    fbm_noise,
    hash_lattice,
    perlin_noise,
)


class TestHashLattice:
    """Tests for lattice hashing."""

    def test_deterministic(self) -> None:
        """Same coordinates and seed hash identically."""
        ix = np.arange(-5, 5, dtype=np.int64)
        iy = np.zeros(10, dtype=np.int64)
        np.testing.assert_array_equal(hash_lattice(ix, iy, 3), hash_lattice(ix, iy, 3))

    def test_sensitive_to_inputs(self) -> None:
        """Sign of the index, axis and seed all matter."""
        one = np.array([1], dtype=np.int64)
        minus_one = np.array([-1], dtype=np.int64)
        zero = np.array([0], dtype=np.int64)
        assert hash_lattice(one, zero, 3)[0] != hash_lattice(minus_one, zero, 3)[0]
        assert hash_lattice(one, zero, 3)[0] != hash_lattice(zero, one, 3)[0]
        assert hash_lattice(one, zero, 3)[0] != hash_lattice(one, zero, 4)[0]


class TestPerlinNoise:
    """Tests for single-octave Perlin noise."""

    def test_zero_at_lattice_points(self) -> None:
        """Gradient noise vanishes on integer coordinates."""
        xs = np.array([0.0, 3.0, -7.0])
        ys = np.array([0.0, 5.0, 2.0])
        np.testing.assert_array_equal(perlin_noise(xs, ys, 11), np.zeros(3))

    def test_bounded(self) -> None:
        """Values stay within [-1, 1]."""
        rng = np.random.default_rng(0)
        xs = rng.uniform(-100, 100, 5000)
        ys = rng.uniform(-100, 100, 5000)
        values = perlin_noise(xs, ys, 99)
        assert values.min() >= -1.0
        assert values.max() <= 1.0


class TestFbmNoise:
    """Tests for fractal Brownian motion."""

    def test_range(self) -> None:
        """Output is clipped to [-1, 1]."""
        ys, xs = np.mgrid[0:64, 0:64].astype(np.float64)
        values = fbm_noise(xs, ys, 12345, wavelength=8.0, octaves=6)
        assert values.min() >= -1.0
        assert values.max() <= 1.0

    def test_not_constant(self) -> None:
        """A reasonably sized sample has variation."""
        ys, xs = np.mgrid[0:32, 0:32].astype(np.float64)
        values = fbm_noise(xs, ys, 1, wavelength=8.0)
        assert values.std() > 0.05


class TestNoiseField:
    """Tests for NoiseField."""

    def test_deterministic(self) -> None:
        """Same seed and layer produce identical grids."""
        a = NoiseField(42, "elevation").sample_grid(40, 25)
        b = NoiseField(42, "elevation").sample_grid(40, 25)
        np.testing.assert_array_equal(a, b)

    def test_shape(self) -> None:
        """Grids are shaped (height, width)."""
        assert NoiseField(1, "moisture").sample_grid(17, 9).shape == (9, 17)

    def test_layers_independent(self) -> None:
        """Different layer tags give different fields from one seed."""
        a = NoiseField(42, "elevation").sample_grid(30, 30)
        b = NoiseField(42, "moisture").sample_grid(30, 30)
        assert not np.allclose(a, b)
        assert abs(np.corrcoef(a.ravel(), b.ravel())[0, 1]) < 0.9

    def test_seeds_differ(self) -> None:
        """Different seeds give different fields."""
        a = NoiseField(1, "elevation").sample_grid(30, 30)
        b = NoiseField(2, "elevation").sample_grid(30, 30)
        assert not np.allclose(a, b)

    def test_continuity(self) -> None:
        """Neighbouring tiles have close values."""
        field = NoiseField(7, "elevation").sample_grid(80, 60)
        assert np.abs(np.diff(field, axis=0)).max() < 0.5
        assert np.abs(np.diff(field, axis=1)).max() < 0.5

    def test_detail_within_precise_limit(self) -> None:
        """Far from the origin but inside the limit, nearby samples still vary."""
        field = NoiseField(7, "elevation")
        x = PRECISE_COORDINATE_LIMIT - 100.3
        y = PRECISE_COORDINATE_LIMIT / 5 + 0.7
        values = {field.sample(x + step, y) for step in (0.0, 0.25, 0.5, 0.75)}
        assert len(values) == 4
        assert all(-1.0 <= v <= 1.0 for v in values)

    def test_flat_beyond_float_precision(self) -> None:
        """Past float64 lattice precision the field is a finite constant zero."""
        field = NoiseField(7, "elevation")
        assert field.sample(1e18, 1e18) == 0.0
        assert field.sample(1e18 + 0.01, 1e18) == 0.0

    def test_scalar_matches_grid(self) -> None:
        """Single samples agree with grid samples at the same coordinates."""
        noise = NoiseField(3, "temperature")
        grid = noise.sample_grid(12, 8)
        for x, y in [(0, 0), (5, 3), (11, 7)]:
            assert noise.sample(x, y) == pytest.approx(grid[y, x], abs=1e-12)

    def test_scalar_deterministic(self) -> None:
        """Repeated scalar samples are bit-identical."""
        noise = NoiseField(3, "temperature")
        assert noise.sample(2.5, -4.25) == noise.sample(2.5, -4.25)

    def test_far_coordinates(self) -> None:
        """Coordinates far outside any map are finite and in range."""
        noise = NoiseField(5, "elevation")
        for x, y in [(1e9, -1e9), (-1e12, 3e11), (2**40, 2**40)]:
            value = noise.sample(x, y)
            assert np.isfinite(value)
            assert -1.0 <= value <= 1.0

    def test_custom_config(self) -> None:
        """Config parameters change the field."""
        smooth = NoiseField(9, "elevation", NoiseConfig(wavelength=64.0, octaves=1))
        rough = NoiseField(9, "elevation", NoiseConfig(wavelength=4.0, octaves=6))
        smooth_grid = smooth.sample_grid(40, 40)
        rough_grid = rough.sample_grid(40, 40)
        assert np.abs(np.diff(smooth_grid, axis=1)).mean() < np.abs(
            np.diff(rough_grid, axis=1)
        ).mean()
