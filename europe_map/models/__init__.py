"""Data models used throughout the pipeline.

- Feature: One country with attributes and geometry
- BoundingBox: Crop window
- Group: Per-subregion aggregate
- Coordinate: Centroid point
"""

from europe_map.models.bbox import BoundingBox
from europe_map.models.feature import Feature
from europe_map.models.group import Coordinate, Group

__all__ = [
    "BoundingBox",
    "Coordinate",
    "Feature",
    "Group",
]
