"""
Command-line interface for the page-to-subtitled-video pipeline.
"""

import argparse
import asyncio
import logging
import os
import pathlib
import sys

from dotenv import load_dotenv

from .download import DownloadError
from .io_ffmpeg import DEFAULT_OUTPUT
from .models import VideoQuality
from .pipeline import MuxError, run_pipeline
from .transcript import TranscriptParseError
from .video_link import VideoLinkNotFoundError

logger = logging.getLogger("vidsub")

PIPELINE_ERRORS = (
    DownloadError,
    TranscriptParseError,
    VideoLinkNotFoundError,
    MuxError,
    OSError,
    ValueError,
)


def log_level(verbosity: int) -> int:
    """Map -q / -v counts to a logging level."""
    if verbosity < 0:
        return logging.ERROR
    return {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)


def quality_arg(value: str) -> VideoQuality:
    """Case-insensitive --quality / VIDSUB_QUALITY lookup."""
    try:
        return VideoQuality[value.strip().upper()]
    except KeyError:
        msg = f"invalid quality {value!r} (choose from HD, SD)"
        raise argparse.ArgumentTypeError(msg) from None


def setup_logging(verbosity: int = 0) -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=log_level(verbosity),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(
        description="Download a page's video, build SRT from its transcript and mux it in"
    )
    ap.add_argument("url", help="Page URL carrying the download links and transcript")
    ap.add_argument("path", type=pathlib.Path, help="Directory for the video and .srt files")
    ap.add_argument(
        "--quality",
        type=quality_arg,
        metavar="{HD,SD}",
        default=os.getenv("VIDSUB_QUALITY", VideoQuality.HD.name),
        help="Download link tier to pick",
    )
    ap.add_argument(
        "--output",
        default=os.getenv("VIDSUB_OUTPUT", DEFAULT_OUTPUT),
        help="Muxed output file (relative to the current directory)",
    )
    ap.add_argument(
        "--ffmpeg", default=os.getenv("FFMPEG_BINARY", "ffmpeg"), help="ffmpeg executable"
    )
    ap.add_argument(
        "--no-progress", action="store_true", help="Hide the download progress bar"
    )

    # Logging
    ap.add_argument(
        "--verbose", "-v", action="count", default=0, help="More logging (-vv for debug)"
    )
    ap.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )

    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    # .env in the project root, else the current directory
    env_path = pathlib.Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()

    args = parse_args(argv)
    setup_logging(-1 if args.quiet else args.verbose)

    try:
        asyncio.run(
            run_pipeline(
                args.url,
                args.path,
                quality=args.quality,
                output=args.output,
                ffmpeg=args.ffmpeg,
                progress=not args.no_progress,
            )
        )
    except PIPELINE_ERRORS as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
