"""Console progress display for stream transfers."""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class ConsoleProgress:
    """Renders one progress bar per active transfer (percentage, size, speed, ETA)."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.progress = Progress(
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>5.1f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=self.console,
            transient=False,
        )
        self._task: Optional[TaskID] = None
        self._running = False

    def start(self, label: str):
        """Begin a new transfer bar labelled *label* (e.g. ``Video``)."""
        self.finish()
        self.progress.start()
        self._running = True
        self._task = self.progress.add_task(label, total=None)

    def update(self, current: int, total: int):
        """Progress callback: ``(bytes_so_far, total_bytes)``."""
        if self._task is None:
            return
        self.progress.update(self._task, completed=current, total=total or None)

    def finish(self):
        """Stop rendering; the last frame of the bar stays on screen."""
        if self._running:
            self.progress.stop()
            self._running = False
        if self._task is not None:
            self.progress.remove_task(self._task)
            self._task = None
