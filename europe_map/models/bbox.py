"""Crop window in longitude/latitude."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from europe_map.core.exceptions import ValidationError

if TYPE_CHECKING:
    from shapely.geometry import Polygon


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned rectangle ``(min_lon, min_lat, max_lon, max_lat)``.

    Raises:
        ValidationError: If a minimum is not strictly below its maximum.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon >= self.max_lon:
            msg = f"BoundingBox min_lon {self.min_lon} must be < max_lon {self.max_lon}"
            raise ValidationError(msg, stage="crop")
        if self.min_lat >= self.max_lat:
            msg = f"BoundingBox min_lat {self.min_lat} must be < max_lat {self.max_lat}"
            raise ValidationError(msg, stage="crop")

    @classmethod
    def from_tuple(cls, bounds: tuple[float, float, float, float]) -> BoundingBox:
        min_lon, min_lat, max_lon, max_lat = bounds
        return cls(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def to_polygon(self) -> Polygon:
        """Return the window as a shapely rectangle."""
        from shapely.geometry import box

        return box(*self.as_tuple())
