"""Sequential batch download orchestration."""

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional

from ..exceptions import AuthenticationError, TransferError, VidBatchError
from ..utils.logging import log_error
from ..utils.paths import find_existing_output, part_path, safe_filename
from .downloader import StreamFetcher
from .models import (
    BatchReport,
    DownloadJob,
    FormatPlan,
    ItemResult,
    ItemState,
    StreamDescriptor,
    VideoMetadata,
)
from .muxer import MediaMuxer, merged_extension
from .retry import retry_with_backoff
from .selector import select_format
from .youtube_client import YouTubeClient

if TYPE_CHECKING:
    from ..ui.console import ConsoleProgress
    from ..utils.config import BatchConfig

logger = logging.getLogger(__name__)


def build_job(url: str, metadata: VideoMetadata, plan: FormatPlan, output_dir: Path) -> DownloadJob:
    """Derive on-disk names for *plan* from the sanitized video title."""
    stem = safe_filename(metadata.title)
    output_dir = Path(output_dir)

    if plan.needs_merge:
        ext = merged_extension(plan.video.ext, plan.audio.ext)
        return DownloadJob(
            url=url,
            title=metadata.title,
            plan=plan,
            output_path=output_dir / f"{stem}.{ext}",
            video_path=output_dir / f"{stem}_video.{plan.video.ext}",
            audio_path=output_dir / f"{stem}_audio.{plan.audio.ext}",
        )

    stream = plan.streams[0]
    return DownloadJob(url=url, title=metadata.title, plan=plan,
                       output_path=output_dir / f"{stem}.{stream.ext}")


class BatchOrchestrator:
    """Downloads a list of videos one at a time; a failed item never stops the batch."""

    def __init__(self, config: "BatchConfig",
                 client: Optional[YouTubeClient] = None,
                 fetcher: Optional[StreamFetcher] = None,
                 muxer: Optional[MediaMuxer] = None,
                 progress: Optional["ConsoleProgress"] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 jitter: Optional[Callable[[], float]] = None):
        self.config = config
        self.client = client or YouTubeClient(
            cookies_from_browser=config.cookies_from_browser,
            socket_timeout=config.timeout,
        )
        self.fetcher = fetcher or StreamFetcher(timeout=config.timeout)
        self.muxer = muxer or MediaMuxer(config.ffmpeg)
        if progress is None:
            from ..ui.console import ConsoleProgress
            progress = ConsoleProgress()
        self.progress = progress
        self._sleep = sleep
        self._jitter = jitter

    def run(self, urls: Optional[List[str]] = None) -> BatchReport:
        """Process every URL in order and return the per-item outcomes."""
        urls = list(self.config.urls if urls is None else urls)
        total = len(urls)
        report = BatchReport()
        logger.info("Starting download of %d videos...", total)

        for index, url in enumerate(urls, start=1):
            report.items.append(self.process(index, url, total))

            if index < total and self.config.delay > 0:
                logger.info("Waiting %g seconds before next download...", self.config.delay)
                self._sleep(self.config.delay)

        logger.info("All downloads completed! %d downloaded, %d skipped, %d failed",
                    report.completed, report.skipped, report.failed)
        return report

    def process(self, index: int, url: str, total: int) -> ItemResult:
        """Run one item through its states, converting any error into FAILED."""
        result = ItemResult(index=index, url=url)
        logger.info("Starting download %d/%d...", index, total)
        try:
            self._process(url, result)
        except AuthenticationError as e:
            self._fail(result, e)
            logger.error("Refresh your %s session cookies (sign in again) and retry.",
                         self.config.cookies_from_browser or "browser")
        except VidBatchError as e:
            self._fail(result, e)
        except Exception as e:
            logger.exception("Unexpected error processing %s", url)
            self._fail(result, e)
        finally:
            self.progress.finish()
        return result

    def _fail(self, result: ItemResult, exc: Exception):
        failed_in = result.state
        result.state = ItemState.FAILED
        result.error = str(exc)
        logger.error("Skipping video %d (%s) due to error while %s: %s",
                     result.index, result.url, failed_in.value, exc)
        log_error(f"[{type(exc).__name__}] {result.url}: {exc}", exc, self.config.error_log)

    def _retry(self, operation, description: str):
        return retry_with_backoff(
            operation,
            max_attempts=self.config.retry_attempts,
            base_delay=self.config.retry_base_delay,
            sleep=self._sleep,
            jitter=self._jitter,
            description=description,
        )

    def _process(self, url: str, result: ItemResult):
        result.state = ItemState.RESOLVING
        metadata = self._retry(lambda: self.client.get_video_info(url), f"Metadata fetch for {url}")
        result.title = metadata.title
        logger.info("Video: %s", metadata.title)
        logger.info("Duration: %d seconds", metadata.duration)

        existing = find_existing_output(self.config.output_dir, safe_filename(metadata.title))
        if existing is not None:
            result.state = ItemState.SKIPPED
            result.output_path = existing
            logger.info("Already downloaded, skipping: %s", existing)
            return

        result.state = ItemState.FORMAT_SELECTING
        plan = select_format(metadata.formats, self.config.mode)
        job = build_job(url, metadata, plan, self.config.output_dir)
        logger.debug("Plan for %s: %s", url, [s.format_id for s in plan.streams])

        result.state = ItemState.DOWNLOADING
        if plan.needs_merge:
            self._fetch(plan.video, job.video_path, "Video")
            self._fetch(plan.audio, job.audio_path, "Audio")

            result.state = ItemState.MERGING
            logger.info("Merging video and audio...")
            self.muxer.merge(job.video_path, job.audio_path, job.output_path)
        else:
            temp_path = part_path(job.output_path)
            try:
                self._fetch(plan.streams[0], temp_path, "Download")
            except TransferError:
                if temp_path.exists():
                    temp_path.unlink()
                raise
            temp_path.replace(job.output_path)

        result.state = ItemState.DONE
        result.output_path = job.output_path
        logger.info("Downloaded: %s", job.output_path)

    def _fetch(self, stream: StreamDescriptor, destination: Path, label: str):
        def attempt():
            self.progress.start(f"{label} {stream.resolution_label} ({stream.ext})")
            try:
                return self.fetcher.fetch(stream, destination, progress_callback=self.progress.update)
            finally:
                self.progress.finish()

        return self._retry(attempt, f"{label} transfer")
