"""
Data models for the page-to-subtitled-video pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

FALLBACK_CUE_MS = 3000  # duration of the last cue, which has no successor


@dataclass
class TranscriptEntry:
    """A single transcript sentence with its start offset."""

    start_ms: int
    text: str


@dataclass
class SubtitleCue:
    """A numbered subtitle cue with timing and text."""

    index: int
    start_ms: int
    end_ms: int
    text: str


@dataclass(frozen=True)
class DownloadTarget:
    """Resolved video URL and the file it is saved to."""

    url: str
    path: Path

    @property
    def file_name(self) -> str:
        return self.path.name


class VideoQuality(Enum):
    """Download link tier, valued by the marker found in the anchor label."""

    HD = "HD"
    SD = "SD"

    @property
    def marker(self) -> str:
        return self.value


@dataclass
class MuxResult:
    """Outcome of the ffmpeg subtitle mux."""

    returncode: int
    stdout: str
    stderr: str
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0
