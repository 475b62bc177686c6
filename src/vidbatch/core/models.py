"""Data models for video metadata, stream descriptors and download jobs."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Dict, Optional

from ..exceptions import ConfigurationError


class StreamKind(Enum):
    """What an encoded stream carries."""
    VIDEO_ONLY = "video-only"
    AUDIO_ONLY = "audio-only"
    COMBINED = "combined"


class DownloadMode(Enum):
    """Requested download mode."""
    VIDEO_AUDIO = "video+audio"
    VIDEO_ONLY = "video-only"
    AUDIO_ONLY = "audio-only"

    @classmethod
    def parse(cls, value: "str | DownloadMode") -> "DownloadMode":
        """Parse a mode string, accepting a few short aliases."""
        if isinstance(value, cls):
            return value
        aliases = {
            "both": cls.VIDEO_AUDIO,
            "video": cls.VIDEO_ONLY,
            "audio": cls.AUDIO_ONLY,
        }
        text = str(value or "").strip().lower()
        if text in aliases:
            return aliases[text]
        for mode in cls:
            if mode.value == text:
                return mode
        choices = ", ".join(m.value for m in cls)
        raise ConfigurationError(f"Invalid mode {value!r}; expected one of: {choices}")


@dataclass(frozen=True)
class StreamDescriptor:
    """Represents one encoded stream offered by the platform."""
    format_id: str
    ext: str
    kind: StreamKind
    height: int = 0       # e.g. 1080; 0 for audio or unknown
    note: str = ""        # e.g. "1080p"
    bitrate: float = 0.0  # kbps
    filesize: int = 0
    url: str = ""
    vcodec: str = "none"
    acodec: str = "none"
    http_headers: Optional[Dict[str, str]] = None

    @property
    def has_video(self) -> bool:
        return self.kind is not StreamKind.AUDIO_ONLY

    @property
    def has_audio(self) -> bool:
        return self.kind is not StreamKind.VIDEO_ONLY

    @property
    def resolution_label(self) -> str:
        if not self.has_video:
            return f"{self.bitrate:.0f}k" if self.bitrate else "audio"
        if self.note and self.note.endswith("p"):
            return self.note
        return f"{self.height}p" if self.height else "N/A"


@dataclass
class VideoMetadata:
    """Metadata for a single video."""
    title: str
    duration: int
    formats: List[StreamDescriptor]
    original_url: str


@dataclass(frozen=True)
class FormatPlan:
    """The stream (or stream pair) chosen for one video.

    Either a single combined stream, a single track for the one-track modes,
    or exactly one video-only plus one audio-only stream that must be merged.
    """
    mode: DownloadMode
    combined: Optional[StreamDescriptor] = None
    video: Optional[StreamDescriptor] = None
    audio: Optional[StreamDescriptor] = None

    def __post_init__(self):
        if self.combined is not None:
            if self.video is not None or self.audio is not None:
                raise ValueError("A combined stream cannot be mixed with separate tracks")
            if self.combined.kind is not StreamKind.COMBINED:
                raise ValueError("combined must be a combined stream")
        elif self.video is None and self.audio is None:
            raise ValueError("FormatPlan needs at least one stream")
        if self.video is not None and self.video.kind is not StreamKind.VIDEO_ONLY:
            raise ValueError("video must be a video-only stream")
        if self.audio is not None and self.audio.kind is not StreamKind.AUDIO_ONLY:
            raise ValueError("audio must be an audio-only stream")

    @property
    def needs_merge(self) -> bool:
        return self.video is not None and self.audio is not None

    @property
    def streams(self) -> List[StreamDescriptor]:
        if self.combined is not None:
            return [self.combined]
        return [s for s in (self.video, self.audio) if s is not None]


@dataclass
class DownloadJob:
    """Resolved plan for one URL: what to fetch and where to put it."""
    url: str
    title: str
    plan: FormatPlan
    output_path: Path
    video_path: Optional[Path] = None
    audio_path: Optional[Path] = None


class ItemState(Enum):
    """Lifecycle of one batch item."""
    PENDING = "pending"
    RESOLVING = "resolving"
    FORMAT_SELECTING = "format-selecting"
    DOWNLOADING = "downloading"
    MERGING = "merging"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ItemResult:
    """Outcome of one batch item."""
    index: int
    url: str
    state: ItemState = ItemState.PENDING
    title: Optional[str] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None


@dataclass
class BatchReport:
    """Outcome of a whole batch run."""
    items: List[ItemResult] = field(default_factory=list)

    def _count(self, state: ItemState) -> int:
        return sum(1 for item in self.items if item.state is state)

    @property
    def completed(self) -> int:
        return self._count(ItemState.DONE)

    @property
    def skipped(self) -> int:
        return self._count(ItemState.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(ItemState.FAILED)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
