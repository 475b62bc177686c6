"""Best-format selection for a requested download mode."""

from typing import List, Optional, Sequence

from ..exceptions import NoSuitableFormatError
from .models import DownloadMode, FormatPlan, StreamDescriptor, StreamKind


def _best(formats: Sequence[StreamDescriptor], kind: StreamKind, key) -> Optional[StreamDescriptor]:
    """Highest-scoring descriptor of *kind*; ties keep the first one seen."""
    best = None
    for fmt in formats:
        if fmt.kind is not kind:
            continue
        if best is None or key(fmt) > key(best):
            best = fmt
    return best


def _by_height(fmt: StreamDescriptor):
    return fmt.height


def _by_bitrate(fmt: StreamDescriptor):
    return fmt.bitrate


def best_audio(formats: Sequence[StreamDescriptor]) -> Optional[StreamDescriptor]:
    return _best(formats, StreamKind.AUDIO_ONLY, _by_bitrate)


def best_video(formats: Sequence[StreamDescriptor]) -> Optional[StreamDescriptor]:
    return _best(formats, StreamKind.VIDEO_ONLY, _by_height)


def best_combined(formats: Sequence[StreamDescriptor]) -> Optional[StreamDescriptor]:
    return _best(formats, StreamKind.COMBINED, _by_height)


def select_format(formats: List[StreamDescriptor], mode: DownloadMode) -> FormatPlan:
    """Pick the stream (or video+audio pair) to download for *mode*.

    In ``video+audio`` mode separate tracks win over a combined stream only when
    the video-only stream has a strictly higher resolution and an audio-only
    stream exists; combined streams are capped at lower resolutions upstream.
    """
    mode = DownloadMode.parse(mode)

    if mode is DownloadMode.AUDIO_ONLY:
        audio = best_audio(formats)
        if audio is None:
            raise NoSuitableFormatError("No audio-only stream available")
        return FormatPlan(mode=mode, audio=audio)

    if mode is DownloadMode.VIDEO_ONLY:
        video = best_video(formats)
        if video is None:
            raise NoSuitableFormatError("No video-only stream available")
        return FormatPlan(mode=mode, video=video)

    combined = best_combined(formats)
    video = best_video(formats)
    audio = best_audio(formats)

    if video is not None and audio is not None:
        if combined is None or video.height > combined.height:
            return FormatPlan(mode=mode, video=video, audio=audio)
    if combined is not None:
        return FormatPlan(mode=mode, combined=combined)
    raise NoSuitableFormatError("No combined stream and no video-only + audio-only pair available")
