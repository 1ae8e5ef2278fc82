"""Core domain services for remotefile."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from remotefile.core import file_operations
from remotefile.core.models import RetryPolicy
from remotefile.core.ports import NullProgressReporter, ProgressReporter, SessionFactory
from remotefile.core.retry import Sleeper, run_with_policy


if TYPE_CHECKING:
    import threading

    from remotefile.core.models import (
        ConnectionAttributes,
        ObservationRecord,
        RemoteFileTarget,
    )
    from remotefile.core.ports import ProgressCallback, SFTPClientPort


logger = logging.getLogger(__name__)

T = TypeVar("T")


class _TaskProgress:
    """Starts a reporter task on the first progress update of each attempt."""

    def __init__(self, reporter: ProgressReporter, name: str) -> None:
        self._reporter = reporter
        self._name = name
        self._callback: ProgressCallback | None = None
        self._started = False

    def __call__(self, done: int, total: int) -> None:
        if self._callback is None:
            self._callback = self._reporter.start_task(self._name, total)
            self._started = True
        self._callback(done, total)

    def restart(self) -> None:
        """Forget the started task so the next attempt starts it afresh."""
        self._callback = None

    def finish(self) -> None:
        if self._started:
            self._reporter.finish_task(self._name)
        self._callback = None
        self._started = False


class RemoteFileManager:
    """Reconciles one remote file per call: read it, write it or remove it.

    Each call runs the retry unit "resolve attributes, open a session, run
    one file operation, close the session" under a RetryPolicy. Calls are
    synchronous and share no state, so different targets may be handled
    from different threads.

    Example:
        manager = RemoteFileManager.default()
        record = manager.read(
            ConnectionAttributes(host="files.example.com", password="pw"),
            RemoteFileTarget(path="/etc/motd", allow_missing=True),
        )
    """

    def __init__(
        self,
        connector: SessionFactory,
        sleep: Sleeper | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            connector: Opens a session from connection attributes.
            sleep: Optional sleep function used between attempts.
        """
        self._connector = connector
        self._sleep = sleep

    @classmethod
    def default(cls) -> RemoteFileManager:
        """Create a manager backed by the paramiko SSH connector."""
        from remotefile.adapters.ssh import SSHConnector

        return cls(connector=SSHConnector())

    def _run(
        self,
        attributes: ConnectionAttributes,
        policy: RetryPolicy | None,
        operation: Callable[[SFTPClientPort], T],
        cancel: threading.Event | None,
        on_attempt: Callable[[], None] | None = None,
    ) -> T:
        def unit() -> T:
            if on_attempt is not None:
                on_attempt()
            with self._connector.open(attributes) as session:
                return operation(session.sftp)

        return run_with_policy(
            policy or RetryPolicy(),
            unit,
            sleep=self._sleep,
            cancel=cancel,
        )

    def read(
        self,
        attributes: ConnectionAttributes,
        target: RemoteFileTarget,
        policy: RetryPolicy | None = None,
        *,
        progress: ProgressReporter | None = None,
        cancel: threading.Event | None = None,
    ) -> ObservationRecord:
        """Observe the current contents and metadata of a remote file.

        Args:
            attributes: How to reach the host.
            target: The file to read; allow_missing tolerates absence.
            policy: Retry policy, defaults to 10 retries 10s apart.
            progress: Optional progress reporter for the download.
            cancel: Optional event that aborts the operation when set.

        Returns:
            ObservationRecord of the file, or the "missing" record.

        Raises:
            NotFoundError: If the file is absent and absence is not allowed.
            ConfigError: If the connection attributes are invalid.
            TransportError: If connecting failed on every attempt.
            RemoteIOError: If reading failed on every attempt.
        """
        task = _TaskProgress(progress or NullProgressReporter(), target.path)
        try:
            return self._run(
                attributes,
                policy,
                lambda sftp: file_operations.fetch(
                    sftp, target, progress=task, cancel=cancel
                ),
                cancel,
                on_attempt=task.restart,
            )
        finally:
            task.finish()

    def write(
        self,
        attributes: ConnectionAttributes,
        target: RemoteFileTarget,
        policy: RetryPolicy | None = None,
        *,
        progress: ProgressReporter | None = None,
        cancel: threading.Event | None = None,
    ) -> ObservationRecord:
        """Create or overwrite a remote file with target.contents.

        Returns:
            ObservationRecord with the written contents and re-stat metadata.

        Raises:
            ConfigError: If the attributes or permissions are invalid.
            TransportError: If connecting failed on every attempt.
            RemoteIOError: If writing failed on every attempt.
        """
        task = _TaskProgress(progress or NullProgressReporter(), target.path)
        try:
            return self._run(
                attributes,
                policy,
                lambda sftp: file_operations.store(
                    sftp, target, progress=task, cancel=cancel
                ),
                cancel,
                on_attempt=task.restart,
            )
        finally:
            task.finish()

    def delete(
        self,
        attributes: ConnectionAttributes,
        target: RemoteFileTarget,
        policy: RetryPolicy | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Remove a remote file. Removing an absent file succeeds.

        Raises:
            ConfigError: If the connection attributes are invalid.
            TransportError: If connecting failed on every attempt.
            RemoteIOError: If deletion failed on every attempt.
        """
        self._run(
            attributes,
            policy,
            lambda sftp: file_operations.remove(sftp, target),
            cancel,
        )
        logger.debug("Deleted %s on %s", target.path, attributes.host)
