"""Main entry point for VidBatch."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .core import BatchOrchestrator, DownloadMode
from .exceptions import ConfigurationError
from .ui import ConsoleProgress
from .utils import BatchConfig, load_links, load_settings, setup_logging
from .utils.config import DEFAULT_LINKS_FILE, DEFAULT_LINKS_KEY
from .version import __version__

logger = logging.getLogger(__name__)

# Shared by the log handler and the progress bars
console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidbatch",
        description="Download a fixed list of videos in the best available quality.",
    )
    parser.add_argument("urls", nargs="*", metavar="URL",
                        help="Video URLs (default: read from the links file)")
    parser.add_argument("--links", type=Path, default=None,
                        help=f"JSON file with a named array of links (default: {DEFAULT_LINKS_FILE})")
    parser.add_argument("--links-key", default=DEFAULT_LINKS_KEY,
                        help="Name of the array inside the links file")
    parser.add_argument("--settings", type=Path, default=None,
                        help="JSON settings file; command line flags take precedence")
    parser.add_argument("-m", "--mode", default=None,
                        choices=[m.value for m in DownloadMode] + ["both", "video", "audio"],
                        help="What to download (default: video+audio)")
    parser.add_argument("-o", "--output", dest="output_dir", type=Path, default=None,
                        help="Output directory (default: current directory)")
    parser.add_argument("--delay", type=float, default=None,
                        help="Seconds to wait between videos (default: 2)")
    parser.add_argument("--retries", dest="retry_attempts", type=int, default=None,
                        help="Attempts per network operation (default: 3)")
    parser.add_argument("--retry-delay", dest="retry_base_delay", type=float, default=None,
                        help="Base backoff delay in seconds (default: 1)")
    parser.add_argument("--cookies-from-browser", default=None, metavar="BROWSER",
                        help="Authenticate with cookies from a local browser (e.g. firefox, chrome)")
    parser.add_argument("--ffmpeg", default=None, help="Path to the ffmpeg binary")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Network timeout in seconds (default: 60)")
    parser.add_argument("--error-log", type=Path, default=None,
                        help="File that failed items are appended to")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="Exit with status 1 when any video failed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> BatchConfig:
    """Merge defaults, the settings file and command line flags into a BatchConfig."""
    settings = load_settings(args.settings)

    urls = list(args.urls)
    if not urls:
        if args.links is None and settings.get("urls"):
            urls = settings["urls"]
        else:
            urls = load_links(args.links or DEFAULT_LINKS_FILE, args.links_key)

    config = BatchConfig.from_settings(
        settings,
        urls=urls,
        mode=args.mode,
        output_dir=args.output_dir,
        delay=args.delay,
        retry_attempts=args.retry_attempts,
        retry_base_delay=args.retry_base_delay,
        cookies_from_browser=args.cookies_from_browser,
        ffmpeg=args.ffmpeg,
        timeout=args.timeout,
        error_log=args.error_log,
        strict=args.strict,
    )
    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, console)

    try:
        config = resolve_config(args)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 2

    logger.info("Starting VidBatch v%s (%s mode)", __version__, config.mode.value)
    try:
        report = BatchOrchestrator(config, progress=ConsoleProgress(console)).run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if report.has_failures:
        for item in report.items:
            if item.error:
                logger.warning("Failed: %s (%s)", item.url, item.error)
        if config.strict:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
