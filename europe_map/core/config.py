"""Pipeline configuration loaded from environment variables.

Every value has a default matching the Natural Earth Europe map, so a
bare ``PipelineConfig()`` reproduces the standard run.

``from_env()`` validates eagerly and raises ``ConfigValidationError``
for out-of-range values, so a bad setting stops the run before any
download is attempted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import httpx

from europe_map.core.constants import (
    AREA_MODES,
    DEFAULT_BBOX,
    DEFAULT_CACHE_DIR,
    DEFAULT_CONTINENT,
    DEFAULT_GROUP_BY,
    DEFAULT_LAYER,
    DEFAULT_SOURCE_URL,
)
from europe_map.core.exceptions import PipelineError


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable pipeline configuration.

    Attributes:
        source_url: URL of the zipped shapefile archive.
        cache_dir: Local directory the archive is extracted into.
        layer: Shapefile layer name inside ``cache_dir``.
        continent: Continent value features must match to be kept.
        bbox: Crop window ``(min_lon, min_lat, max_lon, max_lat)``.
        group_by: Attribute used to aggregate features into groups.
        area_mode: ``"planar"`` (coordinate units) or ``"geodesic"`` (km²).
        output_dir: Directory for GeoJSON exports (``None`` disables export).
    """

    source_url: str = DEFAULT_SOURCE_URL
    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    layer: str = DEFAULT_LAYER
    continent: str = DEFAULT_CONTINENT
    bbox: tuple[float, float, float, float] = DEFAULT_BBOX
    group_by: str = DEFAULT_GROUP_BY
    area_mode: str = "planar"
    output_dir: Path | None = None

    @classmethod
    def from_env(cls, *, validate_config: bool = True) -> PipelineConfig:
        """Load and validate configuration from environment variables.

        Pass ``validate_config=False`` to defer validation until overrides
        (e.g. command-line options) have been applied.

        Raises:
            ConfigValidationError: If a value is empty, malformed or
                out of range.
        """
        output_dir = os.getenv("EUROPE_MAP_OUTPUT_DIR", "").strip()
        config = cls(
            source_url=os.getenv("EUROPE_MAP_SOURCE_URL", DEFAULT_SOURCE_URL).strip(),
            cache_dir=Path(os.getenv("EUROPE_MAP_CACHE_DIR", DEFAULT_CACHE_DIR)),
            layer=os.getenv("EUROPE_MAP_LAYER", DEFAULT_LAYER).strip(),
            continent=os.getenv("EUROPE_MAP_CONTINENT", DEFAULT_CONTINENT).strip(),
            bbox=parse_bbox(os.getenv("EUROPE_MAP_BBOX", ""), key="EUROPE_MAP_BBOX"),
            group_by=os.getenv("EUROPE_MAP_GROUP_BY", DEFAULT_GROUP_BY).strip(),
            area_mode=os.getenv("EUROPE_MAP_AREA_MODE", "planar").strip().lower(),
            output_dir=Path(output_dir) if output_dir else None,
        )
        if validate_config:
            validate(config)
        return config


def parse_bbox(raw: str, *, key: str = "bbox") -> tuple[float, float, float, float]:
    """Parse ``"min_lon,min_lat,max_lon,max_lat"``; empty input gives the default.

    Raises:
        ConfigValidationError: If the value does not hold four numbers.
    """
    if not raw.strip():
        return DEFAULT_BBOX
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 4:
        raise ConfigValidationError(key, raw, "expected 4 comma-separated numbers")
    try:
        min_lon, min_lat, max_lon, max_lat = (float(p) for p in parts)
    except ValueError as exc:
        raise ConfigValidationError(key, raw, "values must be numeric") from exc
    return (min_lon, min_lat, max_lon, max_lat)


def validate(config: PipelineConfig) -> None:
    """Validate configuration values.  Raises ``ConfigValidationError``."""
    if not config.source_url:
        raise ConfigValidationError("EUROPE_MAP_SOURCE_URL", config.source_url, "must not be empty")

    try:
        url = httpx.URL(config.source_url)
    except httpx.InvalidURL as exc:
        raise ConfigValidationError(
            "EUROPE_MAP_SOURCE_URL", config.source_url, f"not a valid URL ({exc})"
        ) from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigValidationError(
            "EUROPE_MAP_SOURCE_URL", config.source_url, "must be an http(s) URL with a host"
        )

    if not config.layer:
        raise ConfigValidationError("EUROPE_MAP_LAYER", config.layer, "must not be empty")

    if not config.continent:
        raise ConfigValidationError("EUROPE_MAP_CONTINENT", config.continent, "must not be empty")

    if not config.group_by:
        raise ConfigValidationError("EUROPE_MAP_GROUP_BY", config.group_by, "must not be empty")

    if config.area_mode not in AREA_MODES:
        raise ConfigValidationError(
            "EUROPE_MAP_AREA_MODE",
            config.area_mode,
            f"must be one of {', '.join(AREA_MODES)}",
        )

    min_lon, min_lat, max_lon, max_lat = config.bbox
    if not (-180.0 <= min_lon < max_lon <= 180.0):
        raise ConfigValidationError(
            "EUROPE_MAP_BBOX",
            config.bbox,
            "longitudes must satisfy -180 <= min < max <= 180",
        )
    if not (-90.0 <= min_lat < max_lat <= 90.0):
        raise ConfigValidationError(
            "EUROPE_MAP_BBOX",
            config.bbox,
            "latitudes must satisfy -90 <= min < max <= 90",
        )
