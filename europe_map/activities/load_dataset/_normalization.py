"""Attribute and geometry normalization for loaded records.

Responsibilities:
- Rename dataset columns to canonical attribute names
- Coerce and check the population estimate
- Build shapely geometries and repair invalid polygons
"""

from __future__ import annotations

import logging
import math
from typing import Any

from europe_map.core.constants import COLUMN_MAPPING, POPULATION
from europe_map.core.exceptions import DatasetParseError
from europe_map.utils.geometry import POLYGONAL_TYPES, polygonal_part

logger = logging.getLogger("europe_map.activities.load_dataset")


def normalize_properties(raw: dict[str, Any], display_name: str) -> dict[str, object]:
    """Map dataset columns to canonical names; other columns are lower-cased.

    Raises:
        DatasetParseError: If the population is missing, non-numeric or negative.
    """
    properties: dict[str, object] = {}
    for column, value in raw.items():
        properties[COLUMN_MAPPING.get(column, column.lower())] = value

    population = properties.get(POPULATION)
    if population is None:
        msg = f"Feature '{display_name}' has no population estimate"
        raise DatasetParseError(msg)
    try:
        population = float(population)
    except (TypeError, ValueError) as exc:
        msg = f"Feature '{display_name}' has non-numeric population {population!r}"
        raise DatasetParseError(msg) from exc
    if math.isnan(population) or population < 0:
        msg = f"Feature '{display_name}' has invalid population {population!r}"
        raise DatasetParseError(msg)
    properties[POPULATION] = population

    return properties


def to_polygonal_geometry(geom: object, display_name: str) -> Any:
    """Convert a GeoJSON-like geometry into a valid shapely polygon geometry.

    Invalid polygons are repaired with ``make_valid()``; polygon parts of
    a repaired collection are kept and anything else is dropped.

    Raises:
        DatasetParseError: If the geometry is null, non-polygonal, or
            empty after repair.
    """
    from shapely.geometry import shape
    from shapely.validation import make_valid

    if geom is None:
        msg = f"Feature '{display_name}' has no geometry"
        raise DatasetParseError(msg)

    try:
        shp = shape(geom)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        msg = f"Cannot build geometry for feature '{display_name}': {exc}"
        raise DatasetParseError(msg) from exc

    if shp.geom_type not in POLYGONAL_TYPES:
        msg = f"Feature '{display_name}' has {shp.geom_type} geometry, expected Polygon or MultiPolygon"
        raise DatasetParseError(msg)

    if not shp.is_valid:
        logger.warning("Invalid geometry for feature '%s', attempting make_valid()", display_name)
        shp = polygonal_part(make_valid(shp))

    if shp.is_empty:
        msg = f"Feature '{display_name}' has an empty geometry"
        raise DatasetParseError(msg)

    return shp
