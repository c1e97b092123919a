"""
Transcript extraction from the video page markup.
"""

import logging
import math

from bs4 import BeautifulSoup, NavigableString, Tag

from .models import TranscriptEntry

logger = logging.getLogger("vidsub")

PARAGRAPH_SELECTOR = "li.supplement.transcript p"
SENTENCE_SELECTOR = "span.sentence"
START_ATTR = "data-start"


class TranscriptParseError(ValueError):
    """Transcript markup is missing or malformed."""


def _timed_node(sentence: Tag) -> Tag:
    # first non-blank child must be the timed element
    for node in sentence.children:
        if isinstance(node, NavigableString) and not node.strip():
            continue
        if isinstance(node, Tag):
            return node
        break
    msg = f"Sentence has no timed child element: {str(sentence)[:80]!r}"
    raise TranscriptParseError(msg)


def _start_ms(node: Tag) -> int:
    raw = node.get(START_ATTR)
    if raw is None:
        msg = f"Missing {START_ATTR} attribute on {str(node)[:80]!r}"
        raise TranscriptParseError(msg)
    try:
        seconds = float(raw)
    except ValueError:
        msg = f"{raw} is not a digit"
        raise TranscriptParseError(msg) from None
    if not math.isfinite(seconds) or seconds < 0:
        msg = f"{raw} is not a valid start time"
        raise TranscriptParseError(msg)
    return int(seconds * 1000)


def parse_transcript(soup: BeautifulSoup) -> list[TranscriptEntry]:
    """Extract timed sentences from the page, in document order."""
    logger.info("Parsing transcript")
    entries: list[TranscriptEntry] = []
    for paragraph in soup.select(PARAGRAPH_SELECTOR):
        for sentence in paragraph.select(SENTENCE_SELECTOR):
            node = _timed_node(sentence)
            start = _start_ms(node)
            text = node.decode_contents().strip()
            logger.debug("%d:%s", start, text)
            entries.append(TranscriptEntry(start_ms=start, text=text))
    logger.info("Parsed %d transcript sentences", len(entries))
    return entries
