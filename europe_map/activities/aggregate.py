"""Area, density and grouping activity.

Per feature: area of the (possibly cropped) geometry and
``density = population / area``.  Per group: summed area and
population with the density recomputed from the sums, so large
members weigh more than small ones.

Area modes:
- ``planar`` (default): shapely area in squared coordinate units
  (square degrees for the Natural Earth layer); no unit conversion.
- ``geodesic``: area on the WGS 84 ellipsoid via ``pyproj.Geod``,
  in square kilometres.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from europe_map.core.constants import (
    AREA_MODE_GEODESIC,
    AREA_MODE_PLANAR,
    AREA_MODES,
    POPULATION,
    SQ_METRES_PER_SQ_KM,
)
from europe_map.core.exceptions import AggregationError, ValidationError, ZeroAreaError
from europe_map.models.group import Group

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shapely.geometry.base import BaseGeometry

    from europe_map.models.feature import Feature

logger = logging.getLogger("europe_map.activities.aggregate")


def compute_area(geometry: BaseGeometry, *, area_mode: str = AREA_MODE_PLANAR) -> float:
    """Return the area of ``geometry`` in the unit implied by ``area_mode``.

    Raises:
        ValidationError: If ``area_mode`` is unknown.
    """
    if area_mode == AREA_MODE_PLANAR:
        return float(geometry.area)
    if area_mode == AREA_MODE_GEODESIC:
        from pyproj import Geod
        from shapely.geometry.polygon import orient

        geod = Geod(ellps="WGS84")
        parts = getattr(geometry, "geoms", [geometry])
        # Orient each part; signed areas of mixed winding would cancel
        area_m2 = sum(abs(geod.geometry_area_perimeter(orient(part))[0]) for part in parts)
        return area_m2 / SQ_METRES_PER_SQ_KM

    msg = f"Unknown area mode {area_mode!r} (expected one of {', '.join(AREA_MODES)})"
    raise ValidationError(msg, stage="aggregate")


def population_of(feature: Feature) -> float:
    """Return the population of ``feature``.

    Raises:
        AggregationError: If the feature has no population attribute.
    """
    if feature.properties.get(POPULATION) is None:
        msg = f"Feature '{feature.name}' has no attribute '{POPULATION}'"
        raise AggregationError(msg)
    return feature.population


def density(population: float, area: float, *, label: str) -> float:
    """Return ``population / area``.

    Raises:
        ZeroAreaError: If ``area`` is zero.
    """
    if area == 0:
        msg = f"Cannot compute density for '{label}': area is zero"
        raise ZeroAreaError(msg)
    return population / area


def compute_area_and_density(
    features: Sequence[Feature],
    *,
    area_mode: str = AREA_MODE_PLANAR,
) -> list[Feature]:
    """Attach ``area`` and ``density`` to every feature.

    Raises:
        ZeroAreaError: If any feature has zero area.
        AggregationError: If any feature has no population.
        ValidationError: If ``area_mode`` is unknown.
    """
    result: list[Feature] = []
    for feature in features:
        area = compute_area(feature.geometry, area_mode=area_mode)
        result.append(
            dataclasses.replace(
                feature,
                area=area,
                density=density(population_of(feature), area, label=feature.name),
            )
        )

    logger.info("Area and density computed | features=%d | mode=%s", len(result), area_mode)
    return result


def group_by(features: Sequence[Feature], key_attribute: str) -> list[Group]:
    """Partition features by ``key_attribute`` and aggregate each partition.

    Groups are returned in first-seen key order.

    Raises:
        AggregationError: If a feature lacks ``area`` (run
            ``compute_area_and_density`` first), the key attribute or
            its population.
        ZeroAreaError: If a group's summed area is zero.
    """
    from shapely.ops import unary_union

    partitions: dict[str, list[Feature]] = {}
    for feature in features:
        if feature.area is None:
            msg = f"Feature '{feature.name}' has no area; compute area and density before grouping"
            raise AggregationError(msg)
        key = feature.get(key_attribute)
        if key is None:
            msg = f"Feature '{feature.name}' has no attribute '{key_attribute}'"
            raise AggregationError(msg)
        partitions.setdefault(str(key), []).append(feature)

    groups: list[Group] = []
    for key, members in partitions.items():
        area = sum(m.area for m in members)  # type: ignore[misc]
        population = sum(population_of(m) for m in members)
        groups.append(
            Group(
                key=key,
                geometry=unary_union([m.geometry for m in members]),
                members=tuple(m.name for m in members),
                area=area,
                population=population,
                density=density(population, area, label=key),
            )
        )
        logger.debug(
            "Group aggregated | key=%s | members=%d | population=%.0f | area=%.4f",
            key,
            len(members),
            population,
            area,
        )

    logger.info("Grouped %d feature(s) into %d group(s) by %s", len(features), len(groups), key_attribute)
    return groups
