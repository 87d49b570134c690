"""Tests for the load_dataset activity.

Covers:
- Download + extraction on cache miss (single GET, no retry)
- Cache hit performs zero network requests
- Download/extraction failures raise DatasetIOError and leave no cache
- Layer parsing via fiona: column mapping, order, CRS
- Malformed datasets raise DatasetParseError
"""

from __future__ import annotations

import tempfile
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from europe_map.activities.load_dataset import (
    ensure_dataset,
    load_dataset,
    normalize_properties,
    read_features,
    to_polygonal_geometry,
)
from europe_map.core.exceptions import DatasetIOError, DatasetParseError

if TYPE_CHECKING:
    from pathlib import Path


class TestEnsureDataset:
    """Cache population and download error handling."""

    def test_downloads_and_extracts_on_cache_miss(
        self, tmp_path: Path, archive_bytes: bytes, make_client, source_url: str, layer_name: str
    ) -> None:
        client, transport = make_client(archive_bytes)
        cache_dir = tmp_path / "cache" / "natural-earth"

        result = ensure_dataset(source_url, cache_dir, client=client)

        assert result == cache_dir
        assert (cache_dir / f"{layer_name}.shp").exists()
        assert len(transport.requests) == 1
        assert transport.requests[0].method == "GET"
        assert str(transport.requests[0].url) == source_url

    def test_existing_cache_skips_network(self, tmp_path: Path, make_client, source_url: str) -> None:
        cache_dir = tmp_path / "natural-earth"
        cache_dir.mkdir()
        client, transport = make_client(b"unused")

        ensure_dataset(source_url, cache_dir, client=client)

        assert transport.requests == []

    def test_http_error_raises_dataset_io_error(
        self, tmp_path: Path, make_client, source_url: str
    ) -> None:
        client, transport = make_client(b"missing", status_code=404)
        cache_dir = tmp_path / "natural-earth"

        with pytest.raises(DatasetIOError, match="Download failed"):
            ensure_dataset(source_url, cache_dir, client=client)

        assert len(transport.requests) == 1  # no retry
        assert not cache_dir.exists()

    def test_empty_body_raises(self, tmp_path: Path, make_client, source_url: str) -> None:
        client, _ = make_client(b"")
        with pytest.raises(DatasetIOError, match="empty"):
            ensure_dataset(source_url, tmp_path / "natural-earth", client=client)

    def test_bad_archive_leaves_no_cache(self, tmp_path: Path, make_client, source_url: str) -> None:
        client, _ = make_client(b"this is not a zip archive")
        cache_dir = tmp_path / "natural-earth"

        with pytest.raises(DatasetIOError, match="Cannot extract"):
            ensure_dataset(source_url, cache_dir, client=client)

        assert not cache_dir.exists()
        assert list(tmp_path.iterdir()) == []

    def test_io_error_is_os_error(self, tmp_path: Path, make_client, source_url: str) -> None:
        client, _ = make_client(b"nope", status_code=500)
        with pytest.raises(OSError):
            ensure_dataset(source_url, tmp_path / "natural-earth", client=client)

    def test_malformed_url_raises_dataset_io_error(self, tmp_path: Path, make_client) -> None:
        client, transport = make_client(b"unused")
        cache_dir = tmp_path / "natural-earth"

        with pytest.raises(DatasetIOError, match="Download failed"):
            ensure_dataset("http://[::1/x.zip", cache_dir, client=client)

        assert transport.requests == []
        assert not cache_dir.exists()

    def test_staging_dir_failure_raises_dataset_io_error(
        self, tmp_path: Path, archive_bytes: bytes, make_client, source_url: str
    ) -> None:
        client, _ = make_client(archive_bytes)
        cache_dir = tmp_path / "cache" / "natural-earth"
        real_mkdtemp = tempfile.mkdtemp

        def fail_in_cache_parent(*args: object, **kwargs: object) -> str:
            if kwargs.get("dir") == cache_dir.parent:
                raise PermissionError("permission denied")
            return real_mkdtemp(*args, **kwargs)  # type: ignore[arg-type]

        with (
            patch(
                "europe_map.activities.load_dataset._download.tempfile.mkdtemp",
                side_effect=fail_in_cache_parent,
            ),
            pytest.raises(DatasetIOError, match="staging directory"),
        ):
            ensure_dataset(source_url, cache_dir, client=client)

        assert not cache_dir.exists()


class TestReadFeatures:
    """Layer parsing via fiona."""

    def test_reads_all_records_in_order(self, shapefile_dir: Path, layer_name: str) -> None:
        features = read_features(shapefile_dir, layer_name)
        assert [f.name for f in features] == ["France", "Germany", "Poland", "Svalbard", "Japan"]

    def test_maps_natural_earth_columns(self, shapefile_dir: Path, layer_name: str) -> None:
        france = read_features(shapefile_dir, layer_name)[0]
        assert france.continent == "Europe"
        assert france.subregion == "Western Europe"
        assert france.population == 67_000_000.0
        assert "name" not in france.properties
        assert france.area is None
        assert france.density is None

    def test_geometry_is_polygon(self, shapefile_dir: Path, layer_name: str) -> None:
        france = read_features(shapefile_dir, layer_name)[0]
        assert france.geometry.geom_type == "Polygon"
        assert france.geometry.bounds == pytest.approx((-5.0, 42.0, 8.0, 51.0))

    def test_missing_layer(self, shapefile_dir: Path) -> None:
        with pytest.raises(DatasetParseError, match="not found"):
            read_features(shapefile_dir, "ne_10m_admin_0_countries")

    def test_missing_directory(self, tmp_path: Path, layer_name: str) -> None:
        with pytest.raises(DatasetParseError):
            read_features(tmp_path / "does-not-exist", layer_name)

    def test_duplicate_names_rejected(self, tmp_path: Path, make_archive, make_client) -> None:
        records = [
            ("Atlantis", "Europe", "West", 1.0, (0.0, 0.0, 1.0, 1.0)),
            ("Atlantis", "Europe", "West", 2.0, (2.0, 0.0, 3.0, 1.0)),
        ]
        client, _ = make_client(make_archive(records))
        cache_dir = ensure_dataset("https://example.test/a.zip", tmp_path / "dup", client=client)

        with pytest.raises(DatasetParseError, match="Duplicate"):
            read_features(cache_dir, "ne_test_countries")

    def test_negative_population_rejected(self, tmp_path: Path, make_archive, make_client) -> None:
        records = [("Atlantis", "Europe", "West", -99.0, (0.0, 0.0, 1.0, 1.0))]
        client, _ = make_client(make_archive(records))
        cache_dir = ensure_dataset("https://example.test/a.zip", tmp_path / "neg", client=client)

        with pytest.raises(DatasetParseError, match="invalid population"):
            read_features(cache_dir, "ne_test_countries")


class TestLoadDataset:
    """End-to-end loader behaviour."""

    def test_second_load_is_identical_and_offline(
        self, tmp_path: Path, archive_bytes: bytes, make_client, source_url: str, layer_name: str
    ) -> None:
        cache_dir = tmp_path / "natural-earth"
        first_client, first_transport = make_client(archive_bytes)
        second_client, second_transport = make_client(archive_bytes)

        first = load_dataset(source_url, cache_dir, layer=layer_name, client=first_client)
        second = load_dataset(source_url, cache_dir, layer=layer_name, client=second_client)

        assert len(first_transport.requests) == 1
        assert second_transport.requests == []
        assert [f.name for f in first] == [f.name for f in second]
        assert [f.properties for f in first] == [f.properties for f in second]
        assert [f.geometry.wkb for f in first] == [f.geometry.wkb for f in second]


class TestNormalization:
    """Column mapping and geometry checks."""

    def test_unknown_columns_are_lower_cased(self) -> None:
        props = normalize_properties({"NAME": "X", "POP_EST": 5, "ISO_A2": "XX"}, "X")
        assert props == {"name": "X", "population": 5.0, "iso_a2": "XX"}

    def test_missing_population(self) -> None:
        with pytest.raises(DatasetParseError, match="no population"):
            normalize_properties({"NAME": "X"}, "X")

    def test_non_numeric_population(self) -> None:
        with pytest.raises(DatasetParseError, match="non-numeric"):
            normalize_properties({"NAME": "X", "POP_EST": "lots"}, "X")

    def test_null_geometry(self) -> None:
        with pytest.raises(DatasetParseError, match="no geometry"):
            to_polygonal_geometry(None, "X")

    def test_point_geometry_rejected(self) -> None:
        with pytest.raises(DatasetParseError, match="Point"):
            to_polygonal_geometry({"type": "Point", "coordinates": (1.0, 2.0)}, "X")

    def test_bowtie_is_repaired(self) -> None:
        bowtie = {
            "type": "Polygon",
            "coordinates": [[(0.0, 0.0), (2.0, 2.0), (2.0, 0.0), (0.0, 2.0), (0.0, 0.0)]],
        }
        geom = to_polygonal_geometry(bowtie, "X")
        assert geom.is_valid
        assert geom.geom_type in ("Polygon", "MultiPolygon")
        assert geom.area == pytest.approx(2.0)
