"""Shared pytest fixtures for the Europe map test suite."""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

import httpx
import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

# ---------------------------------------------------------------------------
# Synthetic Natural Earth-like records
# ---------------------------------------------------------------------------

LAYER = "ne_test_countries"
SOURCE_URL = "https://example.test/ne_test_countries.zip"

# (NAME, CONTINENT, SUBREGION, POP_EST, (minx, miny, maxx, maxy))
SAMPLE_RECORDS: list[tuple[str, str, str, float, tuple[float, float, float, float]]] = [
    ("France", "Europe", "Western Europe", 67_000_000.0, (-5.0, 42.0, 8.0, 51.0)),
    ("Germany", "Europe", "Western Europe", 83_000_000.0, (6.0, 47.0, 15.0, 55.0)),
    ("Poland", "Europe", "Eastern Europe", 38_000_000.0, (14.0, 49.0, 24.0, 55.0)),
    ("Svalbard", "Europe", "Northern Europe", 2_500.0, (10.0, 76.0, 30.0, 80.0)),
    ("Japan", "Asia", "Eastern Asia", 125_000_000.0, (129.0, 31.0, 146.0, 45.0)),
]


def write_shapefile(
    directory: Path,
    records: list[tuple[str, str, str, float, tuple[float, float, float, float]]],
    layer: str = LAYER,
) -> Path:
    """Write ``records`` as an ESRI Shapefile layer in ``directory``."""
    import fiona
    from shapely.geometry import box, mapping

    directory.mkdir(parents=True, exist_ok=True)
    schema = {
        "geometry": "Polygon",
        "properties": {
            "NAME": "str",
            "CONTINENT": "str",
            "SUBREGION": "str",
            "POP_EST": "float",
        },
    }
    with fiona.open(
        str(directory / f"{layer}.shp"),
        "w",
        driver="ESRI Shapefile",
        schema=schema,
        crs="EPSG:4326",
    ) as sink:
        for name, continent, subregion, population, bounds in records:
            sink.write(
                fiona.Feature.from_dict(
                    {
                        "type": "Feature",
                        "geometry": mapping(box(*bounds)),
                        "properties": {
                            "NAME": name,
                            "CONTINENT": continent,
                            "SUBREGION": subregion,
                            "POP_EST": population,
                        },
                    }
                )
            )
    return directory


def zip_directory(directory: Path) -> bytes:
    """Return a flat zip archive of every file in ``directory``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for path in sorted(directory.iterdir()):
            zf.write(path, arcname=path.name)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def shapefile_dir(tmp_path: Path) -> Path:
    """A directory holding the sample layer."""
    return write_shapefile(tmp_path / "source", SAMPLE_RECORDS)


@pytest.fixture()
def archive_bytes(shapefile_dir: Path) -> bytes:
    """The sample layer zipped the way Natural Earth ships it."""
    return zip_directory(shapefile_dir)


@pytest.fixture()
def make_archive(tmp_path: Path) -> Callable[..., bytes]:
    """Factory building a zipped layer from custom records."""
    counter = iter(range(1000))

    def _make(
        records: list[tuple[str, str, str, float, tuple[float, float, float, float]]],
        layer: str = LAYER,
    ) -> bytes:
        directory = write_shapefile(tmp_path / f"custom-{next(counter)}", records, layer)
        return zip_directory(directory)

    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records every request it serves."""

    def __init__(self, content: bytes = b"", status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status_code, content=content)

        super().__init__(handler)


@pytest.fixture()
def make_client() -> Callable[..., tuple[httpx.Client, RecordingTransport]]:
    """Factory returning an ``httpx.Client`` bound to a recording transport."""
    clients: list[httpx.Client] = []

    def _make(content: bytes = b"", status_code: int = 200) -> tuple[httpx.Client, RecordingTransport]:
        transport = RecordingTransport(content, status_code)
        client = httpx.Client(transport=transport)
        clients.append(client)
        return client, transport

    yield _make  # type: ignore[misc]

    for client in clients:
        client.close()


@pytest.fixture()
def layer_name() -> str:
    return LAYER


@pytest.fixture()
def source_url() -> str:
    return SOURCE_URL
