"""Fiona-based reader for the cached countries layer.

Parses every record of the layer into a ``Feature``.  Unlike a
best-effort reader, any bad record fails the whole load: downstream
stages assume every feature has a valid polygonal geometry and a
population estimate.
"""

from __future__ import annotations

import logging
from pathlib import Path

from europe_map.activities.load_dataset._normalization import (
    normalize_properties,
    to_polygonal_geometry,
)
from europe_map.core.constants import NAME
from europe_map.core.exceptions import DatasetParseError
from europe_map.models.feature import Feature

logger = logging.getLogger("europe_map.activities.load_dataset")

WGS84_EPSG = 4326


def read_features(dataset_dir: Path | str, layer: str) -> list[Feature]:
    """Read ``layer`` from ``dataset_dir`` into Features in file order.

    Raises:
        DatasetParseError: If the layer is absent, the driver cannot read
            it, the CRS is not WGS 84, or any record is malformed.
    """
    import fiona
    from fiona.errors import FionaError

    dataset_dir = Path(dataset_dir)

    try:
        layers = fiona.listlayers(str(dataset_dir))
    except FionaError as exc:
        msg = f"Cannot open dataset at {dataset_dir}: {exc}"
        raise DatasetParseError(msg) from exc

    if layer not in layers:
        msg = f"Layer '{layer}' not found in {dataset_dir} (available: {', '.join(sorted(layers)) or 'none'})"
        raise DatasetParseError(msg)

    features: list[Feature] = []
    seen: set[str] = set()
    try:
        with fiona.open(str(dataset_dir), layer=layer) as collection:
            _check_crs(collection, layer)
            for idx, record in enumerate(collection):
                feature = _record_to_feature(record, idx)
                if feature.name in seen:
                    msg = f"Duplicate feature name '{feature.name}' in layer '{layer}'"
                    raise DatasetParseError(msg)
                seen.add(feature.name)
                features.append(feature)
    except FionaError as exc:
        msg = f"Cannot read layer '{layer}' from {dataset_dir}: {exc}"
        raise DatasetParseError(msg) from exc

    return features


def _check_crs(collection: object, layer: str) -> None:
    """Raise ``DatasetParseError`` if the layer CRS is known and not WGS 84."""
    crs = getattr(collection, "crs", None)
    if not crs:
        return

    epsg = getattr(crs, "to_epsg", lambda: None)()
    if epsg is not None and epsg != WGS84_EPSG:
        msg = f"Unexpected CRS for layer '{layer}': EPSG:{epsg} (expected EPSG:{WGS84_EPSG})"
        raise DatasetParseError(msg)


def _record_to_feature(record: object, index: int) -> Feature:
    raw_props = dict(getattr(record, "properties", None) or {})
    properties = normalize_properties(raw_props, f"record {index}")

    name = str(properties.pop(NAME, "") or "").strip()
    if not name:
        msg = f"Record {index} has no name"
        raise DatasetParseError(msg)

    geometry = to_polygonal_geometry(getattr(record, "geometry", None), name)
    return Feature(name=name, geometry=geometry, properties=properties)
