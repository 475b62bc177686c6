"""Console UI components for VidBatch."""

from .console import ConsoleProgress

__all__ = ["ConsoleProgress"]
