"""
Subtitle muxing and process helpers around ffmpeg.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from .models import MuxResult

logger = logging.getLogger("vidsub")

DEFAULT_OUTPUT = "output.mp4"


def run(
    cmd: list[str], *, check: bool = True, cwd: str | Path | None = None
) -> subprocess.CompletedProcess:
    """Run a command, capturing stdout and stderr as text."""
    logger.debug("Running: %s", " ".join(map(str, cmd)))
    proc = subprocess.run(
        cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, cwd=cwd, check=False
    )
    if proc.returncode != 0 and check:
        logger.error("Command failed with code %d: %s", proc.returncode, proc.stderr)
        msg = f"Command failed with code {proc.returncode}"
        raise RuntimeError(msg)
    return proc


def ensure_dir(path: str | Path) -> None:
    """Ensure directory exists."""
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def find_ffmpeg(binary: str = "ffmpeg") -> str:
    """Locate the ffmpeg executable or fail."""
    found = shutil.which(binary)
    if not found:
        msg = f"ffmpeg executable not found: {binary}"
        raise FileNotFoundError(msg)
    return found


def mux_command(video: str, subs: str, output: str, ffmpeg: str = "ffmpeg") -> list[str]:
    """Build the soft-subtitle mux command (streams copied, subs as mov_text)."""
    return [
        ffmpeg,
        "-y",
        "-i",
        str(video),
        "-i",
        str(subs),
        "-map",
        "0",
        "-map",
        "1",
        "-c:v",
        "copy",
        "-c:a",
        "copy",
        "-c:s",
        "mov_text",
        "-metadata:s:s:0",
        "language=eng",
        str(output),
    ]


def embed_subtitles(
    video: str | Path,
    subs: str | Path,
    output: str | Path = DEFAULT_OUTPUT,
    *,
    ffmpeg: str = "ffmpeg",
    cwd: str | Path | None = None,
) -> MuxResult:
    """Mux ``subs`` into ``video`` as a soft English track, overwriting ``output``.

    A non-zero exit is logged and returned, never raised.
    """
    logger.info("Embedding subtitle %s into %s", subs, video)
    proc = run(mux_command(str(video), str(subs), str(output), ffmpeg), check=False, cwd=cwd)
    logger.info("%s", proc.stdout)
    logger.info("%s", proc.stderr)
    logger.info("status: %d", proc.returncode)
    result = MuxResult(
        returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr, output=str(output)
    )
    if not result.ok:
        logger.error("ffmpeg exited with code %d", proc.returncode)
    return result
