"""Output path utilities."""

import re
from pathlib import Path
from typing import Iterable, Optional

# Every container a finished download of any mode can end up in
OUTPUT_EXTENSIONS = ('mp4', 'webm', 'mkv', 'm4a', 'mp3', 'opus', 'ogg')

_ILLEGAL_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_filename(title: str) -> str:
    """Replace characters that are illegal in file paths with an underscore."""
    cleaned = _ILLEGAL_CHARS.sub('_', title or '').strip()
    # Windows refuses names ending in a dot or space
    cleaned = cleaned.rstrip('. ')
    return cleaned or 'untitled'


def find_existing_output(directory: Path, stem: str,
                         extensions: Iterable[str] = OUTPUT_EXTENSIONS) -> Optional[Path]:
    """Returns the first non-empty ``<stem>.<ext>`` in *directory*, if any."""
    for ext in extensions:
        candidate = Path(directory) / f"{stem}.{ext}"
        if candidate.is_file() and candidate.stat().st_size > 0:
            return candidate
    return None


def part_path(path: Path) -> Path:
    """Temporary name used while *path* is still being written."""
    return path.with_name(f"{path.name}.part")
