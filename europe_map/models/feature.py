"""Data model for a single country feature.

A Feature is one geographic entity read from the countries layer: its
unique name, a polygonal geometry in longitude/latitude, and the
remaining attribute table values.  Stages never mutate a Feature; they
return copies with a replaced geometry or the derived ``area``,
``density``, ``x`` and ``y`` fields filled in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from europe_map.core.constants import CONTINENT, POPULATION, SUBREGION

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True, slots=True)
class Feature:
    """A country with its attributes and (possibly cropped) geometry.

    Attributes:
        name: Country name, unique within a run.
        geometry: Shapely ``Polygon`` or ``MultiPolygon`` in ``(lon, lat)``.
        properties: Remaining attributes keyed by canonical name
            (``continent``, ``subregion``, ``population``, ...).
        area: Area of ``geometry``; ``None`` until computed.
        density: ``population / area``; ``None`` until computed.
        x: Centroid longitude; ``None`` until joined.
        y: Centroid latitude; ``None`` until joined.
    """

    name: str
    geometry: BaseGeometry
    properties: dict[str, object] = field(default_factory=dict)
    area: float | None = None
    density: float | None = None
    x: float | None = None
    y: float | None = None

    @property
    def continent(self) -> str:
        return str(self.properties.get(CONTINENT, ""))

    @property
    def subregion(self) -> str:
        return str(self.properties.get(SUBREGION, ""))

    @property
    def population(self) -> float:
        return float(self.properties.get(POPULATION, 0.0))  # type: ignore[arg-type]

    def get(self, key: str, default: object = None) -> object:
        """Look up an attribute by name, including ``name`` and derived fields."""
        if key == "name":
            return self.name
        if key in ("area", "density", "x", "y"):
            return getattr(self, key)
        return self.properties.get(key, default)

    def to_record(self) -> dict[str, object]:
        """Flatten attributes and derived fields into one row (no geometry)."""
        record: dict[str, object] = {"name": self.name}
        record.update(self.properties)
        record.update({"area": self.area, "density": self.density, "x": self.x, "y": self.y})
        return record
