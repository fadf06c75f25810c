"""Phonotactic place-name generation.

Names are built from syllable templates over fixed sound inventories. Every
name is a pure function of (seed, purpose, coordinates, attempt), so the same
map always gets the same names.
"""

from collections.abc import Callable

import numpy as np

from .seeding import stage_rng

ONSETS = (
    "b", "br", "c", "d", "dr", "f", "g", "gr", "h", "k", "l", "m",
    "n", "p", "r", "s", "st", "t", "th", "tr", "v", "w", "z",
)
VOWELS = ("a", "e", "i", "o", "u")
DIPHTHONGS = ("ae", "ai", "au", "ea", "ei", "ia", "io", "ou")
CODAS = ("n", "r", "l", "s", "th", "nd", "rn", "st", "m", "x")

# C = onset, V = vowel, D = diphthong, K = coda
SYLLABLE_TEMPLATES = ("CV", "CVK", "VK", "CD")
PLACE_SUFFIXES = (
    "ton", "ford", "burg", "ham", "stead", "mouth", "wick", "dale", "mere", "holm",
)
SUFFIX_CHANCE = 0.35

FEATURE_PATTERNS: dict[str, tuple[str, ...]] = {
    "ocean": ("Sea of {}", "{} Sea", "The {} Deep"),
    "mountains": ("{} Mountains", "{} Peaks", "Mount {}"),
    "forest": ("{} Forest", "{} Woods", "{} Grove"),
    "swamp": ("{} Marsh", "{} Fen", "{} Mire"),
    "river": ("{} River", "River {}"),
}

ROAD_DESCRIPTORS = (
    "King's", "Queen's", "Merchant's", "Old", "Ancient", "Royal", "Imperial", "Trade",
    "Coastal", "Mountain", "Forest", "Valley", "Pioneer", "Settler's", "Hunter's", "Pilgrim's",
)
# Keyed by road style; a branch joins an existing road, a spur leads nowhere
ROAD_PATTERNS: dict[str, tuple[str, ...]] = {
    "highway": ("{} Highway", "{} Way"),
    "road": ("{} Road",),
    "trail": ("{} Trail",),
    "branch": ("{} Branch",),
    "spur": ("{} Path", "{} Track"),
}
BRIDGE_PREFIXES = ("Old", "New", "Great", "High", "Stone", "Iron", "Wooden", "Ancient")
BRIDGE_MIDDLES = ("River", "Creek", "Valley", "Canyon", "Gorge", "Falls", "Rapids", "Mill")

MAX_NAME_ATTEMPTS = 8

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"), (100, "C"), (90, "XC"),
    (50, "L"), (40, "XL"), (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def to_roman(number: int) -> str:
    """Roman numeral for a positive integer."""
    parts = []
    for value, numeral in _ROMAN:
        count, number = divmod(number, value)
        parts.append(numeral * count)
    return "".join(parts)


def _pick(rng: np.random.Generator, options: tuple[str, ...]) -> str:
    return options[int(rng.integers(len(options)))]


def _syllable(rng: np.random.Generator, after_vowel: bool) -> str:
    # Avoid vowel clusters across syllable boundaries
    templates = [t for t in SYLLABLE_TEMPLATES if not (after_vowel and t[0] == "V")]
    template = _pick(rng, tuple(templates))
    parts = []
    for slot in template:
        if slot == "C":
            parts.append(_pick(rng, ONSETS))
        elif slot == "V":
            parts.append(_pick(rng, VOWELS))
        elif slot == "D":
            parts.append(_pick(rng, DIPHTHONGS))
        else:
            parts.append(_pick(rng, CODAS))
    return "".join(parts)


def compose_name(rng: np.random.Generator) -> str:
    """Compose one capitalised name from 2-3 syllables and an optional suffix."""
    syllable_count = 2 if rng.random() < 0.6 else 3
    word = ""
    for _ in range(syllable_count):
        after_vowel = bool(word) and word[-1] in "aeiou"
        word += _syllable(rng, after_vowel)
    if rng.random() < SUFFIX_CHANCE:
        word += _pick(rng, PLACE_SUFFIXES)
    return word[0].upper() + word[1:]


class NameGenerator:
    """Deterministic name source for one map.

    Names for different purposes (settlements, features) come from separately
    salted streams, and every call is keyed on a coordinate.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed

    def generate(self, x: int, y: int, attempt: int = 0, purpose: str = "settlement") -> str:
        """Generate the name for a coordinate and attempt number."""
        rng = stage_rng(self.seed, f"names:{purpose}", x, y, attempt)
        return compose_name(rng)

    def unique_name(
        self,
        x: int,
        y: int,
        taken: set[str],
        purpose: str = "settlement",
    ) -> str:
        """Generate a name not present in `taken`.

        Retries up to MAX_NAME_ATTEMPTS times, then falls back to the first
        attempt's name with a Roman numeral suffix (" II", " III", ...).
        Does not add the name to `taken`.
        """
        for attempt in range(MAX_NAME_ATTEMPTS):
            name = self.generate(x, y, attempt, purpose)
            if name not in taken:
                return name
        return _disambiguate(self.generate(x, y, 0, purpose), taken)

    def feature_name(
        self,
        feature_type: str,
        x: int,
        y: int,
        taken: set[str],
    ) -> str:
        """Generate a unique name for a geographic feature, e.g. "Sea of Varn"."""
        patterns = FEATURE_PATTERNS[feature_type]
        return self._unique(
            f"names:{feature_type}",
            x,
            y,
            taken,
            lambda rng: _pick(rng, patterns).format(compose_name(rng)),
        )

    def road_name(self, style: str, x: int, y: int, taken: set[str]) -> str:
        """Generate a unique road name, e.g. "King's Highway".

        `style` is a key of ROAD_PATTERNS; (x, y) is the road's first cell.
        """
        patterns = ROAD_PATTERNS[style]
        return self._unique(
            f"names:road:{style}",
            x,
            y,
            taken,
            lambda rng: _pick(rng, patterns).format(_pick(rng, ROAD_DESCRIPTORS)),
        )

    def bridge_name(self, x: int, y: int, taken: set[str]) -> str:
        """Generate a unique bridge name, e.g. "Stone Mill Bridge"."""
        return self._unique(
            "names:bridge",
            x,
            y,
            taken,
            lambda rng: f"{_pick(rng, BRIDGE_PREFIXES)} {_pick(rng, BRIDGE_MIDDLES)} Bridge",
        )

    def _unique(
        self,
        tag: str,
        x: int,
        y: int,
        taken: set[str],
        compose: Callable[[np.random.Generator], str],
    ) -> str:
        for attempt in range(MAX_NAME_ATTEMPTS):
            name = compose(stage_rng(self.seed, tag, x, y, attempt))
            if name not in taken:
                return name
        return _disambiguate(compose(stage_rng(self.seed, tag, x, y, 0)), taken)


def _disambiguate(base: str, taken: set[str]) -> str:
    """Append the smallest Roman numeral that makes `base` unique.

    Checks at most len(taken) + 1 candidates, one of which must be free.
    """
    for number in range(2, len(taken) + 3):
        candidate = f"{base} {to_roman(number)}"
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"No free suffix for {base!r}")
