"""Centroid extraction activity.

Centroids are planar (consistent with the crop): shapely's centroid of
the polygon, area-weighted across the parts of a multi-polygon.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from europe_map.core.exceptions import CentroidJoinError, GeometryError
from europe_map.models.group import Coordinate

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shapely.geometry.base import BaseGeometry

    from europe_map.models.feature import Feature
    from europe_map.models.group import Group

logger = logging.getLogger("europe_map.activities.centroids")


def compute_centroid(geometry: BaseGeometry) -> Coordinate:
    """Return the planar centroid of ``geometry``.

    Raises:
        GeometryError: If the geometry is empty.
    """
    if geometry.is_empty:
        msg = "Cannot compute centroid of an empty geometry"
        raise GeometryError(msg, stage="centroids")
    point = geometry.centroid
    return Coordinate(x=point.x, y=point.y)


def extract_centroids(features: Sequence[Feature]) -> dict[str, Coordinate]:
    """Map each feature name to its centroid, preserving feature order."""
    return {feature.name: compute_centroid(feature.geometry) for feature in features}


def extract_group_centroids(groups: Sequence[Group]) -> dict[str, Coordinate]:
    """Map each group key to the centroid of the group's unioned geometry."""
    return {group.key: compute_centroid(group.geometry) for group in groups}


def join_centroids(
    features: Sequence[Feature],
    centroids: Mapping[str, Coordinate],
) -> list[Feature]:
    """Attach ``x`` and ``y`` from ``centroids`` to each feature by name.

    Raises:
        CentroidJoinError: If a feature name has no centroid.
    """
    joined: list[Feature] = []
    for feature in features:
        try:
            coord = centroids[feature.name]
        except KeyError as exc:
            msg = f"No centroid for feature '{feature.name}'"
            raise CentroidJoinError(msg) from exc
        joined.append(dataclasses.replace(feature, x=coord.x, y=coord.y))

    logger.info("Centroids joined | features=%d", len(joined))
    return joined
