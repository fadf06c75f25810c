"""Raster rendering of terrain grids with Pillow."""

from pathlib import Path

import numpy as np
import structlog
from PIL import Image, ImageDraw, ImageFont

from ..tile_types import TileKind
from ..types import RoadKind, SizeClass
from ..terrain.grid import TerrainGrid

logger = structlog.get_logger()

# Colors for each tile kind (RGB)
TILE_COLORS: dict[TileKind, tuple[int, int, int]] = {
    TileKind.DEEP_WATER: (20, 60, 140),  # Dark blue
    TileKind.SHALLOW_WATER: (60, 130, 180),  # Light blue
    TileKind.LAKE: (70, 120, 200),
    TileKind.RIVER: (80, 150, 220),
    TileKind.SAND: (230, 210, 140),  # Sandy yellow
    TileKind.GRASS: (60, 150, 60),  # Green
    TileKind.FOREST: (25, 95, 35),  # Dark green
    TileKind.DIRT: (140, 100, 60),  # Brown
    TileKind.SWAMP: (85, 100, 60),
    TileKind.HILLS: (120, 130, 70),
    TileKind.STONE: (110, 110, 110),  # Gray
    TileKind.SNOW_PEAK: (240, 240, 245),
}

# Marker radius in tiles, per size class
MARKER_RADIUS = {
    SizeClass.CITY: 0.45,
    SizeClass.TOWN: 0.35,
    SizeClass.VILLAGE: 0.25,
}
MARKER_FILL = (200, 30, 30)
MARKER_OUTLINE = (0, 0, 0)
LABEL_COLOR = (255, 255, 255)
LABEL_SHADOW = (0, 0, 0)

# (color, line width in pixels) per road kind
ROAD_STYLES: dict[RoadKind, tuple[tuple[int, int, int], int]] = {
    RoadKind.HIGHWAY: ((40, 40, 45), 2),
    RoadKind.ROAD: ((60, 55, 50), 1),
    RoadKind.TRAIL: ((80, 70, 60), 1),
}
BRIDGE_COLOR = (150, 110, 70)

_PALETTE = np.array([TILE_COLORS[kind] for kind in TileKind], dtype=np.uint8)


def tile_rgb(grid: TerrainGrid) -> np.ndarray:
    """RGB array of shape (height, width, 3), one pixel per tile."""
    return _PALETTE[grid.tiles]


def render_image(
    grid: TerrainGrid,
    scale: int = 8,
    labels: bool = True,
    roads: bool = True,
) -> Image.Image:
    """Render a grid as an RGB image.

    Args:
        grid: Terrain grid to draw.
        scale: Pixels per tile edge.
        labels: Whether to draw settlement and feature names.
        roads: Whether to draw roads and bridges.

    Returns:
        PIL Image of size (width * scale, height * scale).
    """
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")

    img = Image.fromarray(tile_rgb(grid))
    if scale > 1:
        img = img.resize(
            (grid.width * scale, grid.height * scale),
            Image.Resampling.NEAREST,
        )

    draw = ImageDraw.Draw(img)
    if roads:
        _draw_roads(draw, grid, scale)

    for settlement in grid.settlements:
        cx = (settlement.position.x + 0.5) * scale
        cy = (settlement.position.y + 0.5) * scale
        r = max(MARKER_RADIUS[settlement.size_class] * scale, 1.0)
        draw.ellipse(
            (cx - r, cy - r, cx + r, cy + r),
            fill=MARKER_FILL,
            outline=MARKER_OUTLINE,
        )

    if labels:
        font = ImageFont.load_default()
        for settlement in grid.settlements:
            if settlement.size_class != SizeClass.VILLAGE:
                _draw_label(
                    draw,
                    font,
                    settlement.name,
                    (settlement.position.x + 0.5) * scale,
                    (settlement.position.y - 0.5) * scale,
                )
        for label in grid.labels:
            _draw_label(
                draw,
                font,
                label.name,
                (label.x + 0.5) * scale,
                (label.y + 0.5) * scale,
            )

    return img


def _draw_roads(draw: ImageDraw.ImageDraw, grid: TerrainGrid, scale: int) -> None:
    """Draw lesser roads first so highways stay on top, then bridges."""
    for road in sorted(grid.roads, key=lambda r: -r.kind.rank):
        color, width = ROAD_STYLES[road.kind]
        points = [((x + 0.5) * scale, (y + 0.5) * scale) for x, y in road.cells]
        if len(points) > 1:
            draw.line(points, fill=color, width=width, joint="curve")

    half = max(scale * 0.3, 0.5)
    for bridge in grid.bridges:
        cx = (bridge.x + 0.5) * scale
        cy = (bridge.y + 0.5) * scale
        draw.rectangle((cx - half, cy - half, cx + half, cy + half), fill=BRIDGE_COLOR)


def _draw_label(
    draw: ImageDraw.ImageDraw,
    font: ImageFont.ImageFont | ImageFont.FreeTypeFont,
    text: str,
    cx: float,
    cy: float,
) -> None:
    """Draw text centered on (cx, cy) with a one-pixel shadow."""
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = cx - (right - left) / 2
    y = cy - (bottom - top) / 2
    draw.text((x + 1, y + 1), text, fill=LABEL_SHADOW, font=font)
    draw.text((x, y), text, fill=LABEL_COLOR, font=font)


def save_png(
    grid: TerrainGrid,
    path: Path | str,
    scale: int = 8,
    labels: bool = True,
    roads: bool = True,
) -> Path:
    """Render a grid and write it as a PNG file.

    Parent directories are created as needed.

    Returns:
        Path written.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    render_image(grid, scale=scale, labels=labels, roads=roads).save(output_path, format="PNG")
    logger.info("map_image_saved", path=str(output_path), scale=scale)
    return output_path
