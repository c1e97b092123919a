"""
Page -> video + subtitles -> muxed MP4.
"""

import logging
import os
from pathlib import Path

import httpx
from bs4 import BeautifulSoup

from .download import DownloadError, download_video
from .io_ffmpeg import DEFAULT_OUTPUT, embed_subtitles, ensure_dir, find_ffmpeg
from .models import MuxResult, VideoQuality
from .srt_utils import generate_srt_file
from .transcript import TranscriptParseError, parse_transcript
from .video_link import resolve_video_link

logger = logging.getLogger("vidsub")

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/101.0.4951.64 Safari/537.36"
)


class MuxError(RuntimeError):
    """ffmpeg did not produce the output file."""

    def __init__(self, result: MuxResult):
        msg = f"ffmpeg failed with code {result.returncode} writing {result.output}"
        super().__init__(msg)
        self.result = result


def user_agent() -> str:
    """Page request User-Agent, overridable with VIDSUB_USER_AGENT."""
    return os.getenv("VIDSUB_USER_AGENT") or USER_AGENT


def subtitle_name_for(video_name: str) -> str:
    """``talk.hd.mp4`` -> ``talk.srt``"""
    return video_name.split(".", 1)[0] + ".srt"


async def fetch_page(client: httpx.AsyncClient, url: str) -> BeautifulSoup:
    """GET the page with a desktop browser User-Agent and parse it."""
    try:
        res = await client.get(url, headers={"User-Agent": user_agent()})
    except httpx.RequestError as e:
        msg = f"Failed to GET from '{url}'"
        raise DownloadError(msg) from e
    logger.info("Response: %s %s", res.http_version, res.status_code)
    if res.is_error:
        msg = f"Failed to GET from '{url}': HTTP {res.status_code}"
        raise DownloadError(msg)
    return BeautifulSoup(res.text, "html.parser")


async def run_pipeline(
    url: str,
    path: str | Path,
    *,
    quality: VideoQuality = VideoQuality.HD,
    output: str | Path = DEFAULT_OUTPUT,
    ffmpeg: str = "ffmpeg",
    client: httpx.AsyncClient | None = None,
    progress: bool = True,
) -> MuxResult:
    """Run fetch, download, subtitle and mux steps in order."""
    logger.info("Starting up: %s -> %s", url, path)
    ensure_dir(path)
    ffmpeg_bin = find_ffmpeg(ffmpeg)

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(follow_redirects=True, timeout=None)
    try:
        html = await fetch_page(client, url)
        link = resolve_video_link(html, quality, base_url=str(url))
        video_name = await download_video(client, link, path, progress=progress)
    finally:
        if own_client:
            await client.aclose()

    srt_name = subtitle_name_for(video_name)
    srt_path = Path(path) / srt_name

    entries = parse_transcript(html)
    if not entries:
        msg = f"No transcript found on '{url}'"
        raise TranscriptParseError(msg)
    generate_srt_file(entries, srt_path)

    result = embed_subtitles(Path(path) / video_name, srt_path, output, ffmpeg=ffmpeg_bin)
    if not result.ok:
        raise MuxError(result)
    logger.info("Done -> %s", result.output)
    return result
