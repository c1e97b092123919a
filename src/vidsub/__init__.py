"""
vidsub - Subtitled downloads from transcript-bearing video pages.

A small linear pipeline:
- Fetching the page and resolving an HD/SD download link
- Streaming the video to disk with a progress bar
- Converting the page transcript into an SRT track
- Muxing the track into an MP4 with ffmpeg
"""

__version__ = "0.1.0"
