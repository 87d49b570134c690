"""Dataset loading activity.

Obtains a local copy of the countries shapefile (downloading and
unpacking it when the cache directory is absent) and parses it into
Features.

The loader is split into focused stages:
- **_download**: single-shot archive download and cache population (httpx)
- **_fiona_reader**: layer parsing via fiona/OGR
- **_normalization**: column mapping, population checks, geometry repair
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from europe_map.activities.load_dataset._download import (
    download_archive,
    ensure_dataset,
    extract_archive,
)
from europe_map.activities.load_dataset._fiona_reader import read_features
from europe_map.activities.load_dataset._normalization import (
    normalize_properties,
    to_polygonal_geometry,
)
from europe_map.core.constants import DEFAULT_LAYER

if TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from europe_map.models.feature import Feature

logger = logging.getLogger("europe_map.activities.load_dataset")

__all__ = [
    "download_archive",
    "ensure_dataset",
    "extract_archive",
    "load_dataset",
    "normalize_properties",
    "read_features",
    "to_polygonal_geometry",
]


def load_dataset(
    source_url: str,
    cache_dir: Path | str,
    *,
    layer: str = DEFAULT_LAYER,
    client: httpx.Client | None = None,
) -> list[Feature]:
    """Download (first run only) and parse the countries layer.

    Args:
        source_url: URL of the zipped shapefile archive.
        cache_dir: Local cache directory; when it exists the network is
            not touched.
        layer: Layer name inside the cache directory.
        client: Optional ``httpx.Client`` for the download.

    Returns:
        Features in file order.

    Raises:
        DatasetIOError: If the download or extraction fails.
        DatasetParseError: If the cached dataset cannot be parsed.
    """
    dataset_dir = ensure_dataset(source_url, cache_dir, client=client)
    features = read_features(dataset_dir, layer)
    logger.info("Loaded %d feature(s) | layer=%s | path=%s", len(features), layer, dataset_dir)
    return features
