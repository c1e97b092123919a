"""
Streamed video download with a progress bar.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlparse

import httpx
from tqdm import tqdm

from .models import DownloadTarget

logger = logging.getLogger("vidsub")


class DownloadError(RuntimeError):
    """Fetching or saving a remote resource failed."""


def download_target(url: str, directory: str | Path) -> DownloadTarget:
    """Derive the local destination for ``url`` from its raw path basename."""
    name = urlparse(url).path.rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        msg = f"Cannot derive a file name from '{url}'"
        raise DownloadError(msg)
    path = Path(directory) / name
    if path.parent != Path(directory):
        msg = f"File name from '{url}' escapes '{directory}'"
        raise DownloadError(msg)
    return DownloadTarget(url=url, path=path)


def _content_length(response: httpx.Response, url: str) -> int:
    raw = response.headers.get("content-length")
    try:
        return int(raw)
    except (TypeError, ValueError):
        msg = f"Failed to get content length from '{url}'"
        raise DownloadError(msg) from None


async def _iter_chunks(response: httpx.Response, url: str) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        msg = f"Error while downloading file '{url}'"
        raise DownloadError(msg) from e


async def _save_stream(response: httpx.Response, target: DownloadTarget, progress: bool) -> None:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        msg = f"Failed to GET from '{target.url}': HTTP {response.status_code}"
        raise DownloadError(msg) from e
    total = _content_length(response, target.url)

    try:
        f = open(target.path, "wb")
    except OSError as e:
        msg = f"Failed to create file '{target.path}'"
        raise DownloadError(msg) from e

    downloaded = 0
    with f, tqdm(
        total=total,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        desc=f"Downloading {target.url}",
        disable=not progress,
    ) as pbar:
        async for chunk in _iter_chunks(response, target.url):
            try:
                f.write(chunk)
            except OSError as e:
                msg = f"Error while writing to file '{target.path}'"
                raise DownloadError(msg) from e
            new = min(downloaded + len(chunk), total)
            pbar.update(new - downloaded)
            downloaded = new
        pbar.set_description_str(f"Downloaded {target.url} to {target.path}")


async def download_video(
    client: httpx.AsyncClient, url: str, directory: str | Path, *, progress: bool = True
) -> str:
    """Download ``url`` into ``directory`` and return the saved file name.

    An existing file of the same name is taken as already downloaded and no
    request is made.
    """
    logger.info("Downloading video")
    target = download_target(url, directory)
    if target.path.exists():
        logger.info("Video already present -> %s", target.path)
        return target.file_name

    try:
        async with client.stream("GET", url) as response:
            await _save_stream(response, target, progress)
    except httpx.RequestError as e:
        msg = f"Failed to GET from '{url}'"
        raise DownloadError(msg) from e

    logger.info("Downloaded %s to %s", url, target.path)
    return target.file_name
