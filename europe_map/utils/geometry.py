"""Shared geometry helpers used by the loader and the cropper."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


def polygonal_part(geom: BaseGeometry) -> BaseGeometry:
    """Return only the polygonal part of ``geom`` (possibly empty).

    ``make_valid`` and ``intersection`` may return a ``GeometryCollection``
    mixing polygons with the lines and points where shapes touch.
    """
    from shapely.geometry import MultiPolygon

    if geom.geom_type in POLYGONAL_TYPES:
        return geom

    polygons = []
    for part in getattr(geom, "geoms", []):
        if part.geom_type == "Polygon":
            polygons.append(part)
        elif part.geom_type == "MultiPolygon":
            polygons.extend(part.geoms)

    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def as_multipolygon(geom: BaseGeometry) -> BaseGeometry:
    """Promote a ``Polygon`` to a one-part ``MultiPolygon``."""
    from shapely.geometry import MultiPolygon

    if geom.geom_type == "Polygon":
        return MultiPolygon([geom])
    return geom
