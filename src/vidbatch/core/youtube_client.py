"""YouTube metadata extraction using yt-dlp."""

import logging
import re
from typing import Iterable, List, Optional, Tuple

import yt_dlp
from yt_dlp.utils import DownloadError

from ..exceptions import AuthenticationError, MetadataFetchError
from .models import StreamDescriptor, StreamKind, VideoMetadata

logger = logging.getLogger(__name__)

# Messages yt-dlp emits when the session cookies are missing, stale or rejected.
AUTH_FRAGMENTS = (
    "sign in to confirm",
    "login required",
    "cookies",
    "not a bot",
    "members-only",
    "could not find",  # browser profile / cookie database lookup failures
)

_HEIGHT_PATTERN = re.compile(r"(\d{3,4})p")


def _parse_height(fmt: dict) -> int:
    height = fmt.get('height')
    if height:
        return int(height)
    resolution = fmt.get('resolution') or ''
    if 'x' in resolution:
        try:
            return int(resolution.split('x')[1])
        except ValueError:
            pass
    match = _HEIGHT_PATTERN.search(fmt.get('format_note') or '')
    return int(match.group(1)) if match else 0


def _stream_kind(fmt: dict) -> Optional[StreamKind]:
    is_video = fmt.get('vcodec') not in (None, 'none')
    is_audio = fmt.get('acodec') not in (None, 'none')
    if is_video and is_audio:
        return StreamKind.COMBINED
    if is_video:
        return StreamKind.VIDEO_ONLY
    if is_audio:
        return StreamKind.AUDIO_ONLY
    return None


def to_descriptor(fmt: dict) -> Optional[StreamDescriptor]:
    """Convert one yt-dlp format dict into a StreamDescriptor (None for storyboards etc.)."""
    kind = _stream_kind(fmt)
    if kind is None or not fmt.get('url'):
        return None
    return StreamDescriptor(
        format_id=str(fmt.get('format_id')),
        ext=fmt.get('ext') or 'bin',
        kind=kind,
        height=_parse_height(fmt) if kind is not StreamKind.AUDIO_ONLY else 0,
        note=fmt.get('format_note') or '',
        bitrate=float(fmt.get('abr') or fmt.get('tbr') or 0),
        filesize=fmt.get('filesize') or fmt.get('filesize_approx') or 0,
        url=fmt['url'],
        vcodec=fmt.get('vcodec') or 'none',
        acodec=fmt.get('acodec') or 'none',
        http_headers=fmt.get('http_headers'),
    )


class YouTubeClient:
    """Handles interaction with YouTube to extract metadata."""

    def __init__(self, cookies_from_browser: Optional[str] = None,
                 socket_timeout: Optional[float] = None):
        self.cookies_from_browser = cookies_from_browser
        self._ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'noplaylist': True,
            'skip_download': True,
        }
        if socket_timeout:
            self._ydl_opts['socket_timeout'] = socket_timeout
        if cookies_from_browser:
            self._ydl_opts['cookiesfrombrowser'] = (cookies_from_browser,)

    def _extract(self, url: str) -> dict:
        with yt_dlp.YoutubeDL(dict(self._ydl_opts)) as ydl:
            try:
                info = ydl.extract_info(url, download=False)
            except DownloadError as e:
                raise self._classify(url, e) from e
            except Exception as e:
                # Cookie database loading raises plain exceptions outside DownloadError
                raise self._classify(url, e) from e
        if not info:
            raise MetadataFetchError(f"No metadata returned for {url}")
        return info

    def _classify(self, url: str, exc: Exception) -> Exception:
        message = str(exc)
        lowered = message.lower()
        if self.cookies_from_browser and any(x in lowered for x in AUTH_FRAGMENTS):
            return AuthenticationError(
                f"Authentication failed for {url} using {self.cookies_from_browser} cookies: {message}"
            )
        return MetadataFetchError(f"Failed to fetch metadata for {url}: {message}")

    def get_basic_info(self, url: str) -> Tuple[str, int]:
        """Returns (title, duration in seconds)."""
        info = self._extract(url)
        return info.get('title') or 'Unknown Title', int(info.get('duration') or 0)

    def get_video_info(self, url: str) -> VideoMetadata:
        """Extracts video metadata and all available stream descriptors."""
        info = self._extract(url)
        if 'entries' in info:
            raise MetadataFetchError(f"{url} is a playlist, expected a single video")

        formats = []
        for f in info.get('formats') or []:
            descriptor = to_descriptor(f)
            if descriptor is not None:
                formats.append(descriptor)

        logger.debug("Resolved %s: %d usable formats", url, len(formats))
        return VideoMetadata(
            title=info.get('title') or 'Unknown Title',
            duration=int(info.get('duration') or 0),
            formats=formats,
            original_url=url,
        )

    @staticmethod
    def filter_formats(formats: Iterable[StreamDescriptor], kind: StreamKind) -> List[StreamDescriptor]:
        """Returns the descriptors of the given kind, in their original order."""
        return [f for f in formats if f.kind is kind]
