"""Data models derived from features: aggregated groups and centroids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A planar centroid ``(x, y)`` = ``(lon, lat)``."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Group:
    """Features sharing one value of the grouping attribute.

    Density is weighted: ``population / area`` over the summed totals,
    never the mean of member densities.

    Attributes:
        key: Value of the grouping attribute (e.g. ``"Western Europe"``).
        geometry: Union of the member geometries.
        members: Member feature names in input order.
        area: Sum of member areas.
        population: Sum of member populations.
        density: ``population / area``.
    """

    key: str
    geometry: BaseGeometry
    members: tuple[str, ...] = field(default_factory=tuple)
    area: float = 0.0
    population: float = 0.0
    density: float = 0.0

    def to_record(self) -> dict[str, object]:
        return {
            "key": self.key,
            "members": len(self.members),
            "area": self.area,
            "population": self.population,
            "density": self.density,
        }
