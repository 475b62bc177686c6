"""Configuration management."""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.models import DownloadMode
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_COOKIES_FROM_BROWSER = "VIDBATCH_COOKIES_FROM_BROWSER"

DEFAULT_LINKS_FILE = Path("links.json")
DEFAULT_LINKS_KEY = "links"


@dataclass
class BatchConfig:
    """Everything one batch run needs, passed explicitly to the orchestrator."""
    urls: List[str] = field(default_factory=list)
    mode: DownloadMode = DownloadMode.VIDEO_AUDIO
    output_dir: Path = field(default_factory=Path.cwd)
    delay: float = 2.0
    retry_attempts: int = 3
    retry_base_delay: float = 1.0
    cookies_from_browser: Optional[str] = None
    ffmpeg: str = "ffmpeg"
    timeout: float = 60.0
    error_log: Optional[Path] = None
    strict: bool = False

    def __post_init__(self):
        self.urls = _string_list(self.urls, "urls")
        self.mode = DownloadMode.parse(self.mode)
        self.output_dir = _as_path(self.output_dir, "output_dir")
        if self.error_log is not None:
            self.error_log = _as_path(self.error_log, "error_log")
        self.delay = _as_number(self.delay, float, "delay")
        self.retry_attempts = _as_number(self.retry_attempts, int, "retry_attempts")
        self.retry_base_delay = _as_number(self.retry_base_delay, float, "retry_base_delay")
        self.timeout = _as_number(self.timeout, float, "timeout")
        if not isinstance(self.strict, bool):
            raise ConfigurationError(f"strict must be true or false, got {self.strict!r}")
        if self.cookies_from_browser is not None and not isinstance(self.cookies_from_browser, str):
            raise ConfigurationError(
                f"cookies_from_browser must be a browser name, got {self.cookies_from_browser!r}")
        if not isinstance(self.ffmpeg, str) or not self.ffmpeg:
            raise ConfigurationError(f"ffmpeg must be a path, got {self.ffmpeg!r}")

    def validate(self) -> "BatchConfig":
        if not self.urls:
            raise ConfigurationError("No video URLs configured")
        if self.delay < 0:
            raise ConfigurationError("delay must not be negative")
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")
        if self.retry_base_delay < 0:
            raise ConfigurationError("retry_base_delay must not be negative")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        return self

    @classmethod
    def from_settings(cls, data: Dict[str, Any], **overrides) -> "BatchConfig":
        """Build a config from settings-file values; non-None *overrides* win."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        if not values.get("cookies_from_browser"):
            values["cookies_from_browser"] = os.environ.get(ENV_COOKIES_FROM_BROWSER) or None
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def _as_number(value: Any, kind: type, name: str):
    # JSON true/false would otherwise pass as 1/0
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def _as_path(value: Any, name: str) -> Path:
    try:
        return Path(value)
    except TypeError as e:
        raise ConfigurationError(f"{name} must be a path, got {value!r}") from e


def _string_list(value: Any, where: str) -> List[str]:
    """Validate a list of URL strings, stripping blanks."""
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{where}: expected an array of links, got {value!r}")
    links = []
    for entry in value:
        if not isinstance(entry, str):
            raise ConfigurationError(f"{where}: links must be strings, got {entry!r}")
        entry = entry.strip()
        if entry:
            links.append(entry)
    return links


def _read_json(path: Path) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e


def load_settings(path: Optional[Path]) -> Dict[str, Any]:
    """Load settings from a JSON object file. No path yields no settings."""
    if path is None:
        return {}

    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")

    known = {f.name for f in fields(BatchConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning("Unknown settings ignored: %s", ", ".join(sorted(unknown)))
    return {k: v for k, v in data.items() if k in known}


def load_links(path: Path, key: str = DEFAULT_LINKS_KEY) -> List[str]:
    """Load video URLs from a JSON file holding a named array (or a bare array)."""
    data = _read_json(Path(path))
    if isinstance(data, dict):
        if key not in data:
            raise ConfigurationError(f"{path} has no {key!r} array")
        data = data[key]
    return _string_list(data, str(path))
