"""Media muxing using FFmpeg."""

import logging
import os
import subprocess
from pathlib import Path

from ..exceptions import MergeError

logger = logging.getLogger(__name__)

MP4_FAMILY = {'.mp4', '.m4a', '.m4v', '.mov'}


def merged_extension(video_ext: str, audio_ext: str) -> str:
    """Container that can hold both tracks without re-encoding."""
    video_ext = '.' + video_ext.lower().lstrip('.')
    audio_ext = '.' + audio_ext.lower().lstrip('.')
    if video_ext in MP4_FAMILY and audio_ext in MP4_FAMILY:
        return 'mp4'
    if video_ext == '.webm' and audio_ext == '.webm':
        return 'webm'
    return 'mkv'


class MediaMuxer:
    """Merges separate video and audio tracks using FFmpeg stream copy."""

    def __init__(self, ffmpeg: str = 'ffmpeg'):
        self.ffmpeg = ffmpeg

    def build_command(self, video_path: Path, audio_path: Path, output_path: Path) -> list:
        # Both codecs are copied bit-for-bit, never transcoded
        return [
            self.ffmpeg, '-y', '-loglevel', 'error',
            '-i', str(video_path),
            '-i', str(audio_path),
            '-map', '0:v:0',
            '-map', '1:a:0',
            '-c:v', 'copy',
            '-c:a', 'copy',
            str(output_path),
        ]

    def merge(self, video_path: Path, audio_path: Path, output_path: Path) -> Path:
        """Merges video and audio, then deletes both inputs. Requires ffmpeg in PATH."""
        video_path, audio_path, output_path = Path(video_path), Path(audio_path), Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if not video_path.exists() or video_path.stat().st_size == 0:
            raise MergeError(f"Video file is missing or empty: {video_path}")
        if not audio_path.exists() or audio_path.stat().st_size == 0:
            raise MergeError(f"Audio file is missing or empty: {audio_path}")

        cmd = self.build_command(video_path, audio_path, output_path)

        # On Windows, prevent console window popping up
        startupinfo = None
        if os.name == 'nt':
            startupinfo = subprocess.STARTUPINFO()
            startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW

        logger.debug("Running %s", cmd)
        try:
            process = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                startupinfo=startupinfo,
            )
        except FileNotFoundError as e:
            raise MergeError(f"FFmpeg not found ({self.ffmpeg}). Please install FFmpeg and add it to your PATH.") from e

        if process.returncode != 0:
            # Inputs stay for manual inspection; a half-written output must not look finished
            if output_path.exists():
                output_path.unlink()
            stderr = (process.stderr or b'').decode('utf-8', errors='ignore').strip()
            raise MergeError(f"FFmpeg failed with exit code {process.returncode}: {stderr[-500:]}")

        video_path.unlink()
        audio_path.unlink()
        return output_path
