"""Download of remote font assets into the local font directory.

Fonts load fastest when served from the site's own origin: the browser
skips the extra connection and cross-origin checks. Every asset lands under
``<font_directory>/<host>/<path>`` (see :class:`AssetLocation`), and a file
already present there is never fetched again.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import httpx

from fontlocal.localizer.models import AssetLocation, DownloadError, FontFaceDeclaration
from fontlocal.localizer.tasks import run_all

logger = logging.getLogger(__name__)


async def download_asset(client: httpx.AsyncClient, location: AssetLocation) -> bool:
    """Make sure the asset at ``location`` exists locally.

    The body is streamed into a temporary file next to the target and moved
    into place once complete, so an interrupted download never leaves a
    truncated font under the final name.

    Args:
        client: HTTP client used for the download
        location: Where the asset comes from and where it goes

    Returns:
        True if the asset was downloaded, False if it was already present

    Raises:
        DownloadError: If the request fails, the response is not successful,
            its body is empty or the font cannot be stored
    """
    if location.path.is_file():
        logger.debug("Font already present: %s", location.path)
        return False

    try:
        size = await _download_to(client, location)
    except OSError as e:
        raise DownloadError(
            f"Could not store font {location.src} at {location.path} ({e})"
        ) from e

    logger.info("Downloaded font %s (%d bytes)", location.src, size)
    return True


async def _download_to(client: httpx.AsyncClient, location: AssetLocation) -> int:
    """Download into a temporary sibling, then move it to ``location.path``."""
    location.path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=location.path.parent, prefix=f".{location.path.name}.", suffix=".part"
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            size = await _stream_to(client, location.src, f)
        if size == 0:
            raise DownloadError(f"Downloaded font is empty {location.src}")
        tmp_path.replace(location.path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            tmp_path.unlink()
        raise
    return size


async def _stream_to(client: httpx.AsyncClient, url: str, f) -> int:
    """Stream ``url`` into the open binary file ``f`` and return the size."""
    size = 0
    try:
        async with client.stream("GET", url) as response:
            if not response.is_success:
                raise DownloadError(
                    f"Could not download font {url} (HTTP {response.status_code})"
                )
            async for chunk in response.aiter_bytes():
                await asyncio.to_thread(f.write, chunk)
                size += len(chunk)
    except httpx.HTTPError as e:
        raise DownloadError(f"Could not download font {url} ({e})") from e
    return size


def asset_locations(
    declarations: Iterable[FontFaceDeclaration],
    font_directory: Path | str,
    mount_prefix: str = "/",
) -> dict[str, AssetLocation]:
    """Map every distinct ``src`` of ``declarations`` to its location.

    Raises:
        DownloadError: If a source is not an absolute URL
    """
    locations: dict[str, AssetLocation] = {}
    for declaration in declarations:
        if declaration.src is None or declaration.src in locations:
            continue
        try:
            locations[declaration.src] = AssetLocation.from_src(
                declaration.src, font_directory, mount_prefix
            )
        except ValueError as e:
            raise DownloadError(str(e)) from e
    return locations


async def download_assets(
    client: httpx.AsyncClient,
    declarations: Iterable[FontFaceDeclaration],
    font_directory: Path | str,
    *,
    max_concurrency: int | None = None,
) -> list[Path]:
    """Download the sources of ``declarations`` concurrently.

    Each distinct source is an independent task; the call returns once all
    are done and the first failure cancels the rest. Assets completed before
    a failure stay on disk.

    Args:
        client: HTTP client used for the downloads
        declarations: Declarations whose sources should be available locally
        font_directory: Local directory mirroring remote hosts
        max_concurrency: Optional bound on simultaneous downloads

    Returns:
        Local paths of all assets, in order of first appearance

    Raises:
        DownloadError: If any asset cannot be downloaded
    """
    locations = asset_locations(declarations, font_directory)
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def download(location: AssetLocation) -> bool:
        if semaphore is None:
            return await download_asset(client, location)
        async with semaphore:
            return await download_asset(client, location)

    results = await run_all(download(location) for location in locations.values())
    logger.debug(
        "%d font(s) downloaded, %d already present",
        sum(results),
        len(results) - sum(results),
    )
    return [location.path for location in locations.values()]
