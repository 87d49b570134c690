"""Archive download and cache population.

The cache directory is keyed only by existence: once present it is
trusted and the network is never touched again.  Extraction happens in
a staging directory that is renamed onto the cache path only after the
whole archive unpacked, so a failed run leaves no cache behind.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path

import httpx

from europe_map.core.exceptions import DatasetIOError

logger = logging.getLogger("europe_map.activities.load_dataset")

CHUNK_SIZE = 1024 * 1024  # 1 MiB
USER_AGENT = "europe-map/0.1"


def ensure_dataset(
    source_url: str,
    cache_dir: Path | str,
    *,
    client: httpx.Client | None = None,
) -> Path:
    """Make sure ``cache_dir`` holds the extracted archive from ``source_url``.

    Args:
        source_url: HTTP(S) URL of a zip archive.
        cache_dir: Directory the archive is extracted into.
        client: Optional ``httpx.Client`` (a single GET is issued on it).

    Returns:
        The cache directory as a ``Path``.

    Raises:
        DatasetIOError: If the download, extraction or rename fails.
            There is no retry.
    """
    cache_dir = Path(cache_dir)
    if cache_dir.exists():
        logger.info("Dataset cache hit | path=%s", cache_dir)
        return cache_dir

    logger.info("Dataset cache miss | path=%s | url=%s", cache_dir, source_url)

    try:
        cache_dir.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Cannot create cache parent directory {cache_dir.parent}: {exc}"
        raise DatasetIOError(msg) from exc

    with tempfile.TemporaryDirectory(prefix="europe-map-") as tmp:
        archive = Path(tmp) / "dataset.zip"
        size = download_archive(source_url, archive, client=client)
        logger.info("Downloaded archive | url=%s | size=%d bytes", source_url, size)

        try:
            staging = Path(tempfile.mkdtemp(prefix=f".{cache_dir.name}-", dir=cache_dir.parent))
        except OSError as exc:
            msg = f"Cannot create staging directory in {cache_dir.parent}: {exc}"
            raise DatasetIOError(msg) from exc

        try:
            extract_archive(archive, staging)
            staging.rename(cache_dir)
        except DatasetIOError:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            msg = f"Cannot move extracted dataset into {cache_dir}: {exc}"
            raise DatasetIOError(msg) from exc

    logger.info("Dataset cached | path=%s", cache_dir)
    return cache_dir


def download_archive(
    url: str,
    dst: Path,
    *,
    client: httpx.Client | None = None,
) -> int:
    """Stream ``url`` to ``dst`` with a single GET and return the byte count.

    Raises:
        DatasetIOError: On a malformed URL, any transport error, a non-2xx
            status, or an empty response body.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            timeout=None,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    size = 0
    try:
        with client.stream("GET", url) as response, dst.open("wb") as fh:
            response.raise_for_status()
            for chunk in response.iter_bytes(CHUNK_SIZE):
                fh.write(chunk)
                size += len(chunk)
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
        msg = f"Download failed for {url}: {exc}"
        raise DatasetIOError(msg) from exc
    except OSError as exc:
        msg = f"Cannot write downloaded archive to {dst}: {exc}"
        raise DatasetIOError(msg) from exc
    finally:
        if owns_client:
            client.close()

    if size == 0:
        msg = f"Downloaded archive from {url} is empty"
        raise DatasetIOError(msg)
    return size


def extract_archive(archive: Path, dst: Path) -> None:
    """Unpack a zip archive into ``dst``.

    Raises:
        DatasetIOError: If the file is not a readable zip archive.
    """
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dst)
    except (zipfile.BadZipFile, OSError) as exc:
        msg = f"Cannot extract archive {archive.name}: {exc}"
        raise DatasetIOError(msg) from exc
