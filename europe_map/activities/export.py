"""GeoJSON export activity.

Hands the final features (or groups) to the rendering side as a
GeoJSON file written with fiona.  Geometries are promoted to
``MultiPolygon`` so the layer has a single geometry type.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from europe_map.core.exceptions import PipelineError
from europe_map.utils.geometry import as_multipolygon

if TYPE_CHECKING:
    from collections.abc import Sequence

    from europe_map.models.feature import Feature
    from europe_map.models.group import Group

logger = logging.getLogger("europe_map.activities.export")

GEOJSON_DRIVER = "GeoJSON"
WGS84_CRS = "EPSG:4326"


class ExportError(PipelineError):
    """Raised when the GeoJSON file cannot be written."""

    default_stage = "export"
    default_code = "EXPORT_FAILED"


def write_geojson(items: Sequence[Feature] | Sequence[Group], path: Path | str) -> Path:
    """Write features or groups with their derived attributes to ``path``.

    Returns:
        The written path.

    Raises:
        ExportError: If fiona cannot create or write the file.
    """
    import fiona
    from fiona.errors import FionaError
    from shapely.geometry import mapping

    path = Path(path)
    records = [(item.to_record(), item.geometry) for item in items]
    schema = {"geometry": "MultiPolygon", "properties": _infer_schema([r for r, _ in records])}

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.unlink(missing_ok=True)
        with fiona.open(
            str(path),
            "w",
            driver=GEOJSON_DRIVER,
            schema=schema,
            crs=WGS84_CRS,
        ) as sink:
            for record, geometry in records:
                sink.write(
                    fiona.Feature.from_dict(
                        {
                            "type": "Feature",
                            "geometry": mapping(as_multipolygon(geometry)),
                            "properties": _coerce(record, schema["properties"]),
                        }
                    )
                )
    except (FionaError, OSError) as exc:
        msg = f"Cannot write GeoJSON to {path}: {exc}"
        raise ExportError(msg) from exc

    logger.info("GeoJSON written | path=%s | records=%d", path, len(records))
    return path


def _infer_schema(records: list[dict[str, object]]) -> dict[str, str]:
    """Map each property to a fiona field type from its first non-null value."""
    keys: dict[str, None] = {}
    for record in records:
        keys.update(dict.fromkeys(record))

    schema: dict[str, str] = {}
    for key in keys:
        sample = next((r[key] for r in records if r.get(key) is not None), None)
        if isinstance(sample, int) and not isinstance(sample, bool):
            schema[key] = "int"
        elif isinstance(sample, float):
            schema[key] = "float"
        else:
            schema[key] = "str"
    return schema


def _coerce(record: dict[str, object], schema: dict[str, str]) -> dict[str, object]:
    coerced: dict[str, object] = {}
    for key, field_type in schema.items():
        value = record.get(key)
        if value is not None and field_type == "str":
            value = str(value)
        coerced[key] = value
    return coerced
