"""Progress reporting adapters."""

from remotefile.progress.rich_progress import RichProgressReporter


__all__ = ["RichProgressReporter"]
