"""
Tests for the streamed downloader.
"""

import asyncio

import httpx
import pytest

from vidsub import download
from vidsub.download import DownloadError, download_target, download_video

URL = "https://cdn.example.com/media/talk_hd.mp4?token=abc"


def _fetch(handler, tmp_path, url=URL):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await download_video(client, url, tmp_path, progress=False)

    return asyncio.run(go())


class RecordingBar:
    """Stand-in for tqdm that records progress updates."""

    instances: list["RecordingBar"] = []

    def __init__(self, total=None, **kwargs):
        self.total = total
        self.n = 0
        self.description = kwargs.get("desc")
        RecordingBar.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def update(self, n):
        self.n += n

    def set_description_str(self, s):
        self.description = s


def test_download_target_uses_path_basename(tmp_path):
    target = download_target(URL, tmp_path)

    assert target.file_name == "talk_hd.mp4"
    assert target.path == tmp_path / "talk_hd.mp4"


def test_download_target_rejects_bare_host(tmp_path):
    with pytest.raises(DownloadError):
        download_target("https://cdn.example.com/", tmp_path)


def test_download_writes_file(tmp_path):
    body = b"0123456789" * 1000

    def handler(request):
        assert request.url.path == "/media/talk_hd.mp4"
        return httpx.Response(200, content=body)

    name = _fetch(handler, tmp_path)

    assert name == "talk_hd.mp4"
    assert (tmp_path / name).read_bytes() == body


def test_download_skips_existing_file(tmp_path):
    """No request is made when the destination already exists."""
    (tmp_path / "talk_hd.mp4").write_bytes(b"partial")
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=b"new")

    assert _fetch(handler, tmp_path) == "talk_hd.mp4"
    assert calls == []
    assert (tmp_path / "talk_hd.mp4").read_bytes() == b"partial"


def test_download_requires_content_length(tmp_path):
    async def chunks():
        yield b"abc"

    def handler(request):
        return httpx.Response(200, content=chunks())

    with pytest.raises(DownloadError, match="content length"):
        _fetch(handler, tmp_path)
    assert not (tmp_path / "talk_hd.mp4").exists()


def test_download_http_error_status(tmp_path):
    def handler(request):
        return httpx.Response(404, content=b"not here")

    with pytest.raises(DownloadError, match="404"):
        _fetch(handler, tmp_path)


def test_download_connection_failure(tmp_path):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(DownloadError, match="Failed to GET from"):
        _fetch(handler, tmp_path)


def test_download_read_failure_keeps_flushed_bytes(tmp_path):
    async def chunks():
        yield b"abc"
        raise httpx.ReadError("connection reset")

    def handler(request):
        return httpx.Response(200, headers={"Content-Length": "10"}, content=chunks())

    with pytest.raises(DownloadError, match="Error while downloading file"):
        _fetch(handler, tmp_path)
    assert (tmp_path / "talk_hd.mp4").read_bytes() == b"abc"


def test_progress_counter_capped_at_content_length(monkeypatch, tmp_path):
    """An overlong body never pushes the progress past the advertised total."""
    monkeypatch.setattr(download, "tqdm", RecordingBar)
    RecordingBar.instances.clear()

    async def chunks():
        yield b"abcd"
        yield b"efgh"

    def handler(request):
        return httpx.Response(200, headers={"Content-Length": "6"}, content=chunks())

    _fetch(handler, tmp_path)

    bar = RecordingBar.instances[0]
    assert bar.total == 6
    assert bar.n == 6
    assert bar.description.startswith("Downloaded ")
    assert (tmp_path / "talk_hd.mp4").read_bytes() == b"abcdefgh"


def test_download_target_keeps_encoded_separator(tmp_path):
    """An encoded slash stays part of the name instead of climbing directories."""
    target = download_target("https://cdn.example.com/v/..%2Fescaped.mp4", tmp_path / "out")

    assert target.path.parent == tmp_path / "out"
    assert target.file_name == "..%2Fescaped.mp4"


def test_download_target_rejects_dot_segments(tmp_path):
    with pytest.raises(DownloadError):
        download_target("https://cdn.example.com/v/..", tmp_path)


def test_download_stays_inside_directory(tmp_path):
    out = tmp_path / "out"
    out.mkdir()

    def handler(request):
        return httpx.Response(200, content=b"data")

    name = _fetch(handler, out, url="https://cdn.example.com/v/..%2Fescaped.mp4")

    assert (out / name).read_bytes() == b"data"
    assert not (tmp_path / "escaped.mp4").exists()


def test_download_create_failure_names_path(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")

    def handler(request):
        return httpx.Response(200, content=b"data")

    with pytest.raises(DownloadError, match="Failed to create file") as excinfo:
        _fetch(handler, blocker)
    assert str(blocker / "talk_hd.mp4") in str(excinfo.value)


def test_download_write_failure_names_path(monkeypatch, tmp_path):
    class FullDisk:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def write(self, data):
            raise OSError(28, "No space left on device")

    monkeypatch.setattr(download, "open", lambda path, mode: FullDisk(), raising=False)

    def handler(request):
        return httpx.Response(200, content=b"data")

    with pytest.raises(DownloadError, match="Error while writing to file") as excinfo:
        _fetch(handler, tmp_path)
    assert str(tmp_path / "talk_hd.mp4") in str(excinfo.value)
