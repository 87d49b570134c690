"""Command-line entry point: ``europe-map``.

Configuration comes from ``EUROPE_MAP_*`` environment variables;
command-line options override them.  On a pipeline error the failing
stage and error code are logged and the process exits with status 1.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from europe_map import __version__
from europe_map.core.config import PipelineConfig, parse_bbox, validate
from europe_map.core.constants import AREA_MODES
from europe_map.core.exceptions import PipelineError
from europe_map.orchestrators.europe_pipeline import PipelineResult, run_pipeline

logger = logging.getLogger("europe_map.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="europe-map",
        description="Derive European country and subregion statistics from Natural Earth borders.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--source-url", help="URL of the zipped countries shapefile")
    parser.add_argument("--cache-dir", type=Path, help="Directory the archive is extracted into")
    parser.add_argument("--layer", help="Layer name inside the cache directory")
    parser.add_argument("--continent", help="Continent to keep (default: Europe)")
    parser.add_argument("--bbox", help="Crop window as min_lon,min_lat,max_lon,max_lat")
    parser.add_argument("--group-by", help="Attribute to aggregate on (default: subregion)")
    parser.add_argument("--area-mode", choices=AREA_MODES, help="Area computation mode")
    parser.add_argument("--output-dir", type=Path, help="Write countries/groups GeoJSON here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_config(args: argparse.Namespace) -> PipelineConfig:
    """Apply command-line overrides on top of the environment configuration."""
    config = PipelineConfig.from_env(validate_config=False)
    overrides: dict[str, object] = {
        "source_url": args.source_url,
        "cache_dir": args.cache_dir,
        "layer": args.layer,
        "continent": args.continent,
        "group_by": args.group_by,
        "area_mode": args.area_mode,
        "output_dir": args.output_dir,
    }
    if args.bbox:
        overrides["bbox"] = parse_bbox(args.bbox, key="--bbox")
    config = dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
    validate(config)
    return config


def format_groups(result: PipelineResult) -> str:
    """Render the per-group table printed at the end of a run."""
    lines = [f"{'group':<28} {'countries':>9} {'population':>14} {'area':>12} {'density':>12}"]
    for group in result.groups:
        lines.append(
            f"{group.key:<28} {len(group.members):>9d} {group.population:>14,.0f} "
            f"{group.area:>12.2f} {group.density:>12.2f}"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = resolve_config(args)
        result = run_pipeline(config)
    except PipelineError as exc:
        logger.error(
            "Pipeline failed | stage=%s | code=%s | error=%s",
            exc.stage or "unknown",
            exc.code,
            exc.message,
        )
        return 1

    print(format_groups(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
