"""Command-line interface for map generation."""

import argparse
import sys
from pathlib import Path

import structlog

from .config import MapConfig, find_config, load_config
from .exceptions import ConfigNotFoundError, InvalidDimensionsError
from .log import configure_logging
from .render import render_summary, render_text, save_png
from .settings import GenerationSettings
from .terrain import MapGenerator


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mapper",
        description="Generate a seeded fantasy terrain map",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: 42)")
    parser.add_argument("--width", type=int, default=None, help="Map width in tiles (default: 60)")
    parser.add_argument("--height", type=int, default=None, help="Map height in tiles (default: 20)")
    parser.add_argument(
        "--rivers", type=float, default=None, help="River density 0.0-1.0 (default: 0.5)"
    )
    parser.add_argument(
        "--cities", type=float, default=None, help="City density 0.0-1.0 (default: 0.5)"
    )
    parser.add_argument(
        "--land", type=float, default=None, help="Land percentage 0.0-1.0 (default: 0.4)"
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write a PNG image to this path",
    )
    parser.add_argument(
        "--scale", type=int, default=None, help="Pixels per tile in the PNG (default: 8)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path or name of a TOML config file",
    )
    parser.add_argument(
        "--no-roads", action="store_true", help="Do not draw roads or bridges"
    )
    parser.add_argument(
        "--no-ascii", action="store_true", help="Do not print the text map"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def apply_overrides(config: MapConfig, args: argparse.Namespace) -> MapConfig:
    """Return a copy of `config` with command-line values applied on top."""
    settings = config.settings.model_dump()
    for field, value in (
        ("river_density", args.rivers),
        ("city_density", args.cities),
        ("land_percentage", args.land),
    ):
        if value is not None:
            settings[field] = value

    update: dict = {"settings": GenerationSettings(**settings)}
    for field in ("seed", "width", "height"):
        value = getattr(args, field)
        if value is not None:
            update[field] = value

    render = {}
    if args.output is not None:
        render["output"] = args.output
    if args.scale is not None:
        render["scale"] = args.scale
    if args.no_ascii:
        render["ascii"] = False
    if args.no_roads:
        render["roads"] = False
    if render:
        update["render"] = config.render.model_copy(update=render)

    return config.model_copy(update=update)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for map generation.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    logger = structlog.get_logger()

    if args.config:
        try:
            config_path = find_config(args.config)
        except ConfigNotFoundError:
            logger.error("config_not_found", path=args.config)
            return 1
        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = MapConfig()

    config = apply_overrides(config, args)

    try:
        grid = MapGenerator(config.seed, config.settings, config.terrain).generate(
            config.width, config.height
        )
    except InvalidDimensionsError as e:
        logger.error("invalid_dimensions", error=str(e))
        return 1

    if config.render.ascii:
        print(render_text(grid, color=config.render.color, roads=config.render.roads))
        print()
        print(render_summary(grid))

    if config.render.output:
        save_png(
            grid,
            Path(config.render.output),
            scale=config.render.scale,
            labels=config.render.labels,
            roads=config.render.roads,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
