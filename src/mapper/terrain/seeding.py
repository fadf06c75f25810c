"""Seed derivation for generation stages.

Every stage builds its own random source from the map seed and a stage tag,
so no random state is shared between stages or between generation runs.
"""

import zlib

import numpy as np

SEED_MODULUS = 2**64


def normalize_seed(seed: int) -> int:
    """Reduce any integer seed (negative included) to an unsigned 64-bit value."""
    return int(seed) % SEED_MODULUS


def stage_salt(tag: str) -> int:
    """Stable 32-bit salt for a stage or layer tag."""
    return zlib.crc32(tag.encode("utf-8"))


def seed_sequence(seed: int, tag: str, *extra: int) -> np.random.SeedSequence:
    """Build a SeedSequence from the seed, a tag and optional integers.

    Extra values (e.g. cell coordinates) may be negative; they are reduced
    to unsigned 64-bit words first.
    """
    entropy = [normalize_seed(seed), stage_salt(tag)]
    entropy.extend(normalize_seed(value) for value in extra)
    return np.random.SeedSequence(entropy)


def derive_seed(seed: int, tag: str, *extra: int) -> int:
    """Derive an unsigned 64-bit sub-seed for a stage or layer."""
    state = seed_sequence(seed, tag, *extra).generate_state(1, dtype=np.uint64)
    return int(state[0])


def stage_rng(seed: int, tag: str, *extra: int) -> np.random.Generator:
    """Create a fresh random generator private to one stage."""
    return np.random.default_rng(seed_sequence(seed, tag, *extra))
