"""Text rendering: one character per tile, plus a statistics summary."""

from ..tile_types import OCEAN_KINDS, TileKind
from ..types import RoadKind, SizeClass
from ..terrain.grid import TerrainGrid
from .image import TILE_COLORS

TILE_GLYPHS: dict[TileKind, str] = {
    TileKind.DEEP_WATER: "~",
    TileKind.SHALLOW_WATER: "-",
    TileKind.LAKE: "o",
    TileKind.RIVER: "=",
    TileKind.SAND: ".",
    TileKind.GRASS: ",",
    TileKind.FOREST: "T",
    TileKind.DIRT: ":",
    TileKind.SWAMP: "%",
    TileKind.HILLS: "n",
    TileKind.STONE: "^",
    TileKind.SNOW_PEAK: "A",
}

SETTLEMENT_GLYPHS: dict[SizeClass, str] = {
    SizeClass.CITY: "@",
    SizeClass.TOWN: "*",
    SizeClass.VILLAGE: "+",
}

ROAD_GLYPHS: dict[RoadKind, str] = {
    RoadKind.HIGHWAY: "#",
    RoadKind.ROAD: "#",
    RoadKind.TRAIL: "'",
}
BRIDGE_GLYPH = "H"

_RESET = "\x1b[0m"
_SETTLEMENT_COLOR = (230, 40, 40)
_ROAD_COLOR = (150, 120, 90)


def _colored(glyph: str, rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"\x1b[38;2;{r};{g};{b}m{glyph}{_RESET}"


def render_text(grid: TerrainGrid, color: bool = False, roads: bool = True) -> str:
    """Render a grid as text, one line per row.

    Settlement glyphs replace the tile glyph of their cell; with `roads`,
    bridge and road glyphs do too, in that order of precedence.

    Args:
        grid: Terrain grid to draw.
        color: Wrap each glyph in a 24-bit ANSI color escape.
        roads: Draw roads and bridges over the terrain.

    Returns:
        The rendered map without a trailing newline.
    """
    lines = []
    for y, row in enumerate(grid.tile_kinds()):
        chars = []
        for x, kind in enumerate(row):
            settlement = grid.settlement_at(x, y)
            road = grid.road_at(x, y) if roads else None
            if settlement is not None:
                glyph = SETTLEMENT_GLYPHS[settlement.size_class]
                chars.append(_colored(glyph, _SETTLEMENT_COLOR) if color else glyph)
            elif road is not None:
                glyph = BRIDGE_GLYPH if grid.bridge_at(x, y) else ROAD_GLYPHS[road]
                chars.append(_colored(glyph, _ROAD_COLOR) if color else glyph)
            else:
                glyph = TILE_GLYPHS[kind]
                chars.append(_colored(glyph, TILE_COLORS[kind]) if color else glyph)
        lines.append("".join(chars))
    return "\n".join(lines)


def render_legend() -> str:
    """One line per glyph explaining what it stands for."""
    entries = [f"{glyph} {kind.value.replace('_', ' ')}" for kind, glyph in TILE_GLYPHS.items()]
    entries += [f"{glyph} {size.value}" for size, glyph in SETTLEMENT_GLYPHS.items()]
    entries += [
        f"{ROAD_GLYPHS[RoadKind.ROAD]} road",
        f"{ROAD_GLYPHS[RoadKind.TRAIL]} trail",
        f"{BRIDGE_GLYPH} bridge",
    ]
    return "\n".join(entries)


def render_summary(grid: TerrainGrid) -> str:
    """Formatted statistics: land share, tile breakdown, settlements, roads, labels."""
    total = grid.width * grid.height
    counts = grid.tile_counts()
    water = sum(counts.get(kind, 0) for kind in OCEAN_KINDS)

    lines = [
        f"Seed: {grid.seed}",
        f"Size: {grid.width} x {grid.height} ({total:,} tiles)",
        f"Settings: {grid.settings.describe()}",
        f"Land: {total - water:,} tiles ({(total - water) / total:.1%})",
        "",
        "Terrain:",
    ]
    for kind in TileKind:
        count = counts.get(kind, 0)
        if count:
            lines.append(f"  {kind.value:<14} {count:>8,} ({count / total:.1%})")

    lines.append("")
    lines.append(f"Rivers: {len(grid.rivers)}")
    for river in grid.rivers:
        if river.name:
            lines.append(f"  {river.name} ({len(river)} tiles, ends in {river.terminus.value})")

    lines.append(f"Settlements: {len(grid.settlements)}")
    for settlement in grid.settlements:
        lines.append(
            f"  {SETTLEMENT_GLYPHS[settlement.size_class]} {settlement.name} "
            f"{settlement.position} {settlement.size_class.value}, "
            f"pop. {settlement.population:,}"
        )

    lines.append(f"Roads: {len(grid.roads)} ({len(grid.bridges)} bridges)")
    for road in grid.roads:
        lines.append(f"  {road.name} ({road.kind.value}, {len(road)} tiles)")

    if grid.labels:
        lines.append("Features:")
        for label in grid.labels:
            lines.append(f"  {label.name} ({label.feature_type}) at ({label.x}, {label.y})")

    return "\n".join(lines)
