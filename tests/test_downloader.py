from pathlib import Path

import pytest
import requests

from vidbatch.core.downloader import StreamFetcher
from vidbatch.core.models import StreamDescriptor, StreamKind
from vidbatch.exceptions import TransferError


class FakeResponse:
    def __init__(self, chunks, headers=None, status_error=None, fail_after=None):
        self.chunks = chunks
        self.headers = headers or {}
        self.status_error = status_error
        self.fail_after = fail_after

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def iter_content(self, chunk_size=None):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i >= self.fail_after:
                raise requests.ConnectionError("connection reset")
            yield chunk


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return self.response


STREAM = StreamDescriptor(format_id="137", ext="mp4", kind=StreamKind.VIDEO_ONLY, height=1080,
                          url="https://cdn.example/137", http_headers={"User-Agent": "test"})


def test_fetch_writes_file_and_reports_progress(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse([b"ab", b"cde", b""], headers={"content-length": "5"}))
    events = []

    result = StreamFetcher(session=session).fetch(STREAM, tmp_path / "out.mp4",
                                                  progress_callback=lambda c, t: events.append((c, t)))

    assert result.read_bytes() == b"abcde"
    assert events == [(2, 5), (5, 5)]
    url, kwargs = session.requests[0]
    assert url == "https://cdn.example/137"
    assert kwargs["stream"] is True
    assert kwargs["headers"] == {"User-Agent": "test"}


def test_unknown_length_reports_zero_total(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse([b"xyz"]))
    events = []

    StreamFetcher(session=session).fetch(STREAM, tmp_path / "out.mp4",
                                         progress_callback=lambda c, t: events.append((c, t)))

    assert events == [(3, 0)]


def test_advertised_filesize_is_not_used_as_total(tmp_path: Path) -> None:
    stream = StreamDescriptor(format_id="140", ext="m4a", kind=StreamKind.AUDIO_ONLY,
                              filesize=4096, url="https://cdn.example/140")
    session = FakeSession(FakeResponse([b"ab", b"cd"]))
    events = []

    result = StreamFetcher(session=session).fetch(stream, tmp_path / "out.m4a",
                                                  progress_callback=lambda c, t: events.append((c, t)))

    assert events == [(2, 0), (4, 0)]
    assert result.read_bytes() == b"abcd"


def test_mid_transfer_failure_is_transfer_error(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse([b"ab", b"cd"], headers={"content-length": "4"}, fail_after=1))

    with pytest.raises(TransferError, match="connection reset"):
        StreamFetcher(session=session).fetch(STREAM, tmp_path / "out.mp4")


def test_http_error_is_transfer_error(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse([], status_error=requests.HTTPError("403 Forbidden")))

    with pytest.raises(TransferError, match="403"):
        StreamFetcher(session=session).fetch(STREAM, tmp_path / "out.mp4")


def test_short_body_is_transfer_error(tmp_path: Path) -> None:
    session = FakeSession(FakeResponse([b"abc"], headers={"content-length": "10"}))

    with pytest.raises(TransferError, match="Download incomplete"):
        StreamFetcher(session=session).fetch(STREAM, tmp_path / "out.mp4")
