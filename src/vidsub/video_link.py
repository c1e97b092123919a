"""
Download link lookup on the video page.
"""

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .models import VideoQuality

logger = logging.getLogger("vidsub")

LINK_SELECTOR = "li.download ul li a"


class VideoLinkNotFoundError(LookupError):
    """No download anchor matched the requested quality."""


def parse_video_link(soup: BeautifulSoup, quality: VideoQuality) -> str:
    """Return the href of the first anchor labelled with ``quality``, or ``""``."""
    logger.info("Parsing video link (%s)", quality.name)
    for a in soup.select(LINK_SELECTOR):
        href = a.get("href")
        if not href:
            continue
        if quality.marker in a.decode_contents():
            logger.info("%s href: %s", quality.name.lower(), href)
            return href
    return ""


def resolve_video_link(
    soup: BeautifulSoup, quality: VideoQuality, base_url: str | None = None
) -> str:
    """Like ``parse_video_link`` but raises when nothing matches."""
    link = parse_video_link(soup, quality)
    if not link:
        msg = f"No {quality.name} download link found"
        raise VideoLinkNotFoundError(msg)
    return urljoin(base_url, link) if base_url else link
