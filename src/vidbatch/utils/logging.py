"""Logging utilities."""

import logging
import traceback
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

ERROR_LOG_FILE = Path.home() / "vidbatch_error.log"

LOG_FORMAT = "%(message)s"
LOG_DATEFMT = "[%X]"


def build_console_handler(console: Console) -> RichHandler:
    """Log handler that renders through *console*, above any live progress bar."""
    return RichHandler(
        console=console,
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )


def setup_logging(verbose: bool = False, console: Console | None = None):
    """Setup logging to console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=[
            build_console_handler(console or Console())
        ],
    )
    # yt-dlp and urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_error(msg: str, exc: Exception | None = None, log_file: Path | None = None):
    """Log errors to a file for debugging."""
    log_file = Path(log_file) if log_file else ERROR_LOG_FILE
    try:
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"{msg}\n")
            if exc is not None:
                f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
            f.write("-" * 50 + "\n")
    except OSError as e:
        logging.getLogger(__name__).warning("Could not write error log %s: %s", log_file, e)
