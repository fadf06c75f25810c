"""Renderers that turn finished terrain grids into text and images."""

from .image import ROAD_STYLES, TILE_COLORS, render_image, save_png
from .text import (
    BRIDGE_GLYPH,
    ROAD_GLYPHS,
    SETTLEMENT_GLYPHS,
    TILE_GLYPHS,
    render_legend,
    render_summary,
    render_text,
)

__all__ = [
    "BRIDGE_GLYPH",
    "ROAD_GLYPHS",
    "ROAD_STYLES",
    "SETTLEMENT_GLYPHS",
    "TILE_COLORS",
    "TILE_GLYPHS",
    "render_image",
    "render_legend",
    "render_summary",
    "render_text",
    "save_png",
]
