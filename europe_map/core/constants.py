"""Shared pipeline constants.

Dataset location, canonical attribute names and the default map window
live here so activities, config and the CLI agree on them.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Natural Earth dataset
# ---------------------------------------------------------------------------

DEFAULT_SOURCE_URL: str = (
    "https://www.naturalearthdata.com/http//www.naturalearthdata.com/"
    "download/10m/cultural/ne_10m_admin_0_countries.zip"
)
"""Zipped 1:10m admin-0 countries shapefile."""

DEFAULT_CACHE_DIR: str = "data/natural-earth"
"""Directory the archive is extracted into on first run."""

DEFAULT_LAYER: str = "ne_10m_admin_0_countries"
"""Shapefile layer name inside the cache directory."""

# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

NAME = "name"
CONTINENT = "continent"
SUBREGION = "subregion"
POPULATION = "population"

COLUMN_MAPPING: dict[str, str] = {
    "NAME": NAME,
    "CONTINENT": CONTINENT,
    "SUBREGION": SUBREGION,
    "POP_EST": POPULATION,
}
"""Natural Earth column -> canonical attribute name."""

DEFAULT_KEEP_ATTRIBUTES: tuple[str, ...] = (CONTINENT, SUBREGION, POPULATION)

# ---------------------------------------------------------------------------
# Map window and aggregation
# ---------------------------------------------------------------------------

DEFAULT_CONTINENT: str = "Europe"

DEFAULT_BBOX: tuple[float, float, float, float] = (-25.0, 35.0, 55.0, 71.0)
"""``(min_lon, min_lat, max_lon, max_lat)`` covering mainland Europe and Iceland."""

DEFAULT_GROUP_BY: str = SUBREGION

AREA_MODE_PLANAR = "planar"
AREA_MODE_GEODESIC = "geodesic"
AREA_MODES: tuple[str, ...] = (AREA_MODE_PLANAR, AREA_MODE_GEODESIC)

# Square metres per square kilometre (geodesic areas are reported in km²)
SQ_METRES_PER_SQ_KM = 1_000_000.0
