"""Rich-based progress reporter for terminal output."""

from __future__ import annotations

from typing import TYPE_CHECKING

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


if TYPE_CHECKING:
    from types import TracebackType

    from remotefile.core.ports import ProgressCallback


class RichProgressReporter:
    """Progress reporter using Rich for terminal display.

    Draws transfer bars with speed and ETA on stderr, so that command
    output written to stdout stays machine readable.

    Example:
        with RichProgressReporter() as reporter:
            record = manager.read(attrs, target, progress=reporter)
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to draw on. Defaults to a stderr console.
        """
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console or Console(stderr=True),
            transient=True,
        )
        self._tasks: dict[str, TaskID] = {}
        self._started = False

    def __enter__(self) -> RichProgressReporter:
        """Start the progress display."""
        self._progress.start()
        self._started = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop the progress display."""
        self._progress.stop()
        self._started = False

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a transfer.

        A retried transfer reuses the bar of the earlier attempt.

        Args:
            name: Remote path being transferred.
            total: Total bytes to transfer.

        Returns:
            A callback to update progress.
        """
        # Auto-start if not in context manager
        if not self._started:
            self._progress.start()
            self._started = True

        task_id = self._tasks.get(name)
        if task_id is None:
            task_id = self._progress.add_task(name, total=total)
            self._tasks[name] = task_id
        else:
            self._progress.reset(task_id, total=total)

        def callback(done: int, _total: int) -> None:
            self._progress.update(task_id, completed=done)

        return callback

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name.
        """
        if name in self._tasks:
            task_id = self._tasks[name]
            task = self._progress.tasks[task_id]
            self._progress.update(task_id, completed=task.total)
