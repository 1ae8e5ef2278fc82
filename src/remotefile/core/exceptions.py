"""Domain exceptions for remotefile.

All library errors inherit from RemoteFileError, allowing callers to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error and a
retryable property used by the retry orchestrator.
"""

from __future__ import annotations


class RemoteFileError(Exception):
    """Base class for all remotefile exceptions.

    Attributes:
        phase: Short label of the step that failed (e.g. "stat failed").
        cause: The underlying exception, if any.
    """

    def __init__(self, phase: str, cause: BaseException | None = None) -> None:
        self.phase = phase
        self.cause = cause
        message = phase if cause is None else f"{phase}: {cause}"
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether re-driving the whole attempt could succeed."""
        return True

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConfigError(RemoteFileError):
    """Raised for malformed or insufficient caller input.

    Covers missing credentials and unparsable private keys, host keys,
    timeouts, retry intervals and permission strings. Never retried.
    """

    @property
    def retryable(self) -> bool:
        """Bad input cannot be fixed by retrying."""
        return False

    @property
    def recovery_hint(self) -> str:
        """Point at the offending attribute."""
        hints = {
            "missing credentials": "Provide either a password or a private key",
            "invalid private key": "Supply the private key in PEM/OpenSSH format",
            "invalid host key": "Supply the host key as an authorized_keys line",
            "invalid timeout": "Use a duration such as '30s', '5m' or '1h30m'",
            "invalid retry interval": "Use a duration such as '10s'",
            "invalid permissions": "Use an octal mode such as '0644'",
        }
        return hints.get(self.phase, "Check the supplied attributes")


class TransportError(RemoteFileError):
    """Raised when the secure channel or file-transfer sub-channel fails.

    Attributes:
        address: The "host:port" address that was being contacted.
    """

    def __init__(
        self,
        phase: str,
        address: str,
        cause: BaseException | None = None,
    ) -> None:
        self.address = address
        super().__init__(phase, cause)

    @property
    def recovery_hint(self) -> str:
        """Suggest checking reachability and credentials."""
        return f"Check that {self.address} is reachable and the credentials are valid"


class RemoteIOError(RemoteFileError):
    """Raised when a stat/read/write/chmod/delete on the remote path fails.

    Attributes:
        path: The remote path being operated on.
    """

    def __init__(
        self,
        phase: str,
        path: str,
        cause: BaseException | None = None,
    ) -> None:
        self.path = path
        super().__init__(phase, cause)

    @property
    def recovery_hint(self) -> str:
        """Suggest checking remote permissions."""
        return f"Check permissions and free space for {self.path}"


class NotFoundError(RemoteIOError):
    """Raised when the remote path does not exist."""

    @property
    def retryable(self) -> bool:
        """A missing file rarely appears between attempts."""
        return False

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the path or tolerating absence."""
        return f"Verify the remote path exists, or allow it to be missing: {self.path}"


class OperationCancelledError(RemoteFileError):
    """Raised when the caller cancels an operation that is in flight."""

    def __init__(self, phase: str = "cancelled") -> None:
        super().__init__(phase)

    @property
    def retryable(self) -> bool:
        """Cancellation is final."""
        return False
