"""
SRT cue building and writing utilities.
"""

import logging
from pathlib import Path

from .models import FALLBACK_CUE_MS, SubtitleCue, TranscriptEntry

logger = logging.getLogger("vidsub")


def format_timestamp(ms: int) -> str:
    """Format milliseconds as HH:MM:SS,mmm."""
    ms = max(0, int(ms))
    h, rest = divmod(ms, 3_600_000)
    m, rest = divmod(rest, 60_000)
    s, ms = divmod(rest, 1000)
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def build_cues(entries: list[TranscriptEntry]) -> list[SubtitleCue]:
    """Turn ordered transcript entries into cues.

    Each cue ends where the next entry starts; the last one lasts
    ``FALLBACK_CUE_MS``. Start times must strictly increase.
    """
    cues: list[SubtitleCue] = []
    for i, entry in enumerate(entries):
        if i + 1 < len(entries):
            end = entries[i + 1].start_ms
        else:
            end = entry.start_ms + FALLBACK_CUE_MS
        if end <= entry.start_ms:
            msg = (
                f"Transcript start times must increase: entry {i + 1} starts at "
                f"{end}ms, not after {entry.start_ms}ms"
            )
            raise ValueError(msg)
        cues.append(SubtitleCue(index=i + 1, start_ms=entry.start_ms, end_ms=end, text=entry.text))
    return cues


def write_srt(cues: list[SubtitleCue], path: str | Path) -> None:
    """Write cues to SRT file."""
    with open(path, "w", encoding="utf-8") as f:
        for i, c in enumerate(cues, 1):
            f.write(f"{i}\n{format_timestamp(c.start_ms)} --> {format_timestamp(c.end_ms)}\n{c.text}\n\n")


def generate_srt_file(entries: list[TranscriptEntry], path: str | Path) -> bool:
    """Write the subtitle file for ``entries`` unless ``path`` already exists.

    Returns True when a file was written.
    """
    logger.info("Generating subtitle -> %s", path)
    if Path(path).exists():
        logger.info("Subtitle already present, skipping -> %s", path)
        return False
    cues = build_cues(entries)
    write_srt(cues, path)
    logger.info("Saved SRT -> %s (%d cues)", path, len(cues))
    return True
