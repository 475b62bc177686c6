"""Core functionality for VidBatch."""

from .models import (
    StreamKind,
    StreamDescriptor,
    VideoMetadata,
    DownloadMode,
    FormatPlan,
    DownloadJob,
    ItemState,
    ItemResult,
    BatchReport,
)
from .youtube_client import YouTubeClient
from .selector import select_format
from .downloader import StreamFetcher
from .muxer import MediaMuxer
from .retry import retry_with_backoff
from .batch import BatchOrchestrator

__all__ = [
    "StreamKind",
    "StreamDescriptor",
    "VideoMetadata",
    "DownloadMode",
    "FormatPlan",
    "DownloadJob",
    "ItemState",
    "ItemResult",
    "BatchReport",
    "YouTubeClient",
    "select_format",
    "StreamFetcher",
    "MediaMuxer",
    "retry_with_backoff",
    "BatchOrchestrator",
]
