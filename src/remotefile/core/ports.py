"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations, so
the transport can be replaced by in-memory fakes in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from types import TracebackType

    from remotefile.core.models import ConnectionAttributes, ResolvedConfig

ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class RemoteFileHandle(Protocol):
    """An open file on the remote side of the sub-channel."""

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; an empty result means end of file."""
        ...

    def write(self, data: bytes) -> object:
        """Write data at the current position."""
        ...

    def close(self) -> None:
        """Release the remote handle."""
        ...

    def __enter__(self) -> RemoteFileHandle:
        """Enter context manager."""
        ...

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        """Close on exit."""
        ...


@runtime_checkable
class RemoteStat(Protocol):
    """Stat result of a remote path (the subset the core reads)."""

    st_size: int | None
    st_mtime: float | int | None
    st_mode: int | None


@runtime_checkable
class SFTPClientPort(Protocol):
    """File-transfer sub-channel multiplexed over the secure channel."""

    def lstat(self, path: str) -> RemoteStat:
        """Stat a path without following a final symlink."""
        ...

    def open(self, filename: str, mode: str = "r", bufsize: int = -1) -> RemoteFileHandle:
        """Open a remote file ("rb" to read, "wb" to create or truncate)."""
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of a remote path."""
        ...

    def remove(self, path: str) -> None:
        """Delete a remote file."""
        ...

    def close(self) -> None:
        """Close the sub-channel."""
        ...


@runtime_checkable
class SecureChannel(Protocol):
    """An authenticated, encrypted connection to a remote host."""

    def close(self) -> None:
        """Close the secure channel."""
        ...


Dialer = Callable[["ResolvedConfig"], SecureChannel]
SubchannelOpener = Callable[[SecureChannel], SFTPClientPort]


@runtime_checkable
class SessionPort(Protocol):
    """One secure channel plus its sub-channel, owned for one operation."""

    @property
    def sftp(self) -> SFTPClientPort:
        """The open file-transfer sub-channel."""
        ...

    def close(self) -> None:
        """Release the sub-channel, then the secure channel."""
        ...

    def __enter__(self) -> SessionPort:
        """Enter context manager."""
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the session on exit."""
        ...


@runtime_checkable
class SessionFactory(Protocol):
    """Resolves connection attributes and opens a session from them."""

    def open(self, attributes: ConnectionAttributes) -> SessionPort:
        """Resolve attributes and open a fresh session.

        Raises:
            ConfigError: If the attributes cannot be resolved.
            TransportError: If dialing or opening the sub-channel fails.
        """
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports transfer progress to the user.

    The core domain uses this to report progress without depending
    on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a transfer.

        Args:
            name: Human-readable name for the task (the remote path).
            total: Total bytes to transfer.

        Returns:
            A ProgressCallback to call with (bytes_done, total_bytes).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _done, _total: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol
