from io import StringIO

from rich.console import Console

from vidbatch.ui.console import ConsoleProgress


def test_progress_renders_percentage() -> None:
    output = StringIO()
    progress = ConsoleProgress(Console(file=output, width=120, force_terminal=False))

    progress.start("Video 1080p (mp4)")
    progress.update(512, 1024)
    progress.update(1024, 1024)
    progress.finish()

    text = output.getvalue()
    assert "Video 1080p (mp4)" in text
    assert "100.0%" in text
    assert progress.progress.tasks == []


def test_update_without_active_transfer_is_ignored() -> None:
    progress = ConsoleProgress(Console(file=StringIO()))
    progress.update(10, 100)
    progress.finish()
