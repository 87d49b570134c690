"""Europe map pipeline orchestrator.

Runs the stages strictly forward, each consuming the complete output
of the previous one:

1. Load dataset — download on first run, parse the countries layer
2. Region filter — keep the configured continent, reduce attributes
3. Crop — clip to the map window, drop features left without area
4. Area and density — per country
5. Centroids — per country, joined back as ``x``/``y``
6. Group — per subregion (weighted density), plus group centroids
7. Export — optional GeoJSON files for the rendering side

Any stage error propagates unchanged; there is no partial result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from europe_map.activities.aggregate import compute_area_and_density, group_by
from europe_map.activities.centroids import (
    extract_centroids,
    extract_group_centroids,
    join_centroids,
)
from europe_map.activities.crop import crop_features
from europe_map.activities.export import write_geojson
from europe_map.activities.filter_region import attribute_equals, filter_region
from europe_map.activities.load_dataset import load_dataset
from europe_map.core.config import PipelineConfig
from europe_map.core.constants import CONTINENT, DEFAULT_KEEP_ATTRIBUTES
from europe_map.models.bbox import BoundingBox

if TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from europe_map.models.feature import Feature
    from europe_map.models.group import Coordinate, Group

logger = logging.getLogger("europe_map.orchestrators.europe_pipeline")

COUNTRIES_FILENAME = "countries.geojson"
GROUPS_FILENAME = "groups.geojson"


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outputs of a pipeline run.

    Attributes:
        countries: Cropped features with ``area``, ``density``, ``x``, ``y``.
        groups: Aggregates keyed by the configured group attribute.
        group_centroids: Group key -> centroid of the unioned geometry.
        exported: Paths of the GeoJSON files written (if any).
    """

    countries: list[Feature] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)
    group_centroids: dict[str, Coordinate] = field(default_factory=dict)
    exported: list[Path] = field(default_factory=list)


def process_features(features: list[Feature], config: PipelineConfig) -> PipelineResult:
    """Run stages 2-7 on already loaded features."""
    europe = filter_region(
        features,
        attribute_equals(CONTINENT, config.continent),
        tuple(dict.fromkeys((*DEFAULT_KEEP_ATTRIBUTES, config.group_by))),
    )
    cropped = crop_features(europe, BoundingBox.from_tuple(config.bbox))
    measured = compute_area_and_density(cropped, area_mode=config.area_mode)
    countries = join_centroids(measured, extract_centroids(measured))
    groups = group_by(countries, config.group_by)
    group_centroids = extract_group_centroids(groups)

    exported: list[Path] = []
    if config.output_dir is not None:
        exported.append(write_geojson(countries, config.output_dir / COUNTRIES_FILENAME))
        exported.append(write_geojson(groups, config.output_dir / GROUPS_FILENAME))

    return PipelineResult(
        countries=countries,
        groups=groups,
        group_centroids=group_centroids,
        exported=exported,
    )


def run_pipeline(
    config: PipelineConfig | None = None,
    *,
    client: httpx.Client | None = None,
) -> PipelineResult:
    """Run the full pipeline for ``config`` (defaults to ``PipelineConfig()``)."""
    config = config or PipelineConfig()
    logger.info(
        "Pipeline started | source=%s | cache=%s | continent=%s | group_by=%s",
        config.source_url,
        config.cache_dir,
        config.continent,
        config.group_by,
    )

    features = load_dataset(config.source_url, config.cache_dir, layer=config.layer, client=client)
    result = process_features(features, config)

    logger.info(
        "Pipeline finished | countries=%d | groups=%d | exported=%d",
        len(result.countries),
        len(result.groups),
        len(result.exported),
    )
    return result
