"""Spatial crop activity.

Intersects every feature with a bounding rectangle, treating longitude
and latitude as planar coordinates.  Features whose intersection has no
area (entirely outside, or only touching the boundary) are dropped.

Attributes are copied unchanged: a country that loses most of its
territory to the crop keeps its full population estimate.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from europe_map.utils.geometry import polygonal_part

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shapely.geometry.base import BaseGeometry

    from europe_map.models.bbox import BoundingBox
    from europe_map.models.feature import Feature

logger = logging.getLogger("europe_map.activities.crop")


def crop_geometry(geometry: BaseGeometry, bbox: BoundingBox) -> BaseGeometry:
    """Return the polygonal intersection of ``geometry`` with ``bbox``.

    The result may be empty.  Lines and points produced where a polygon
    only touches the rectangle are discarded.
    """
    return polygonal_part(geometry.intersection(bbox.to_polygon()))


def crop_features(features: Sequence[Feature], bbox: BoundingBox) -> list[Feature]:
    """Clip every feature to ``bbox`` and drop those left without area.

    Args:
        features: Input features.
        bbox: Crop window in the features' coordinate space.

    Returns:
        Cropped copies of the surviving features, in input order.
    """
    cropped: list[Feature] = []
    for feature in features:
        clipped = crop_geometry(feature.geometry, bbox)
        if clipped.is_empty or clipped.area == 0:
            logger.debug("Dropping feature outside crop window | feature=%s", feature.name)
            continue
        cropped.append(dataclasses.replace(feature, geometry=clipped))

    logger.info(
        "Crop applied | bbox=[%.4f, %.4f, %.4f, %.4f] | input=%d | kept=%d",
        *bbox.as_tuple(),
        len(features),
        len(cropped),
    )
    return cropped
