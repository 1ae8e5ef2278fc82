"""Core domain models for remotefile.

These models are pure Python dataclasses with no I/O dependencies.
They describe what the caller declares (connection attributes, the remote
file target, the retry policy) and what an operation observes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Self

from remotefile.core.durations import parse_duration
from remotefile.core.exceptions import ConfigError


DEFAULT_PORT = 22
DEFAULT_TIMEOUT = "5m"
DEFAULT_RETRY_COUNT = 10
DEFAULT_RETRY_INTERVAL = "10s"

MISSING_ID = "missing"
MISSING_SIZE = -1


class AuthMethod(Enum):
    """How the secure channel authenticates."""

    PASSWORD = "password"
    PUBLIC_KEY = "public-key"


class HostKeyPolicy(Enum):
    """How the server's host key is verified."""

    PINNED = "pinned"
    ACCEPT_ANY = "accept-any"


@dataclass(frozen=True, slots=True)
class ConnectionAttributes:
    """Caller-declared connection attributes for one host.

    Password and private key are each optional but at least one must be
    present. When both are given the password wins.

    Attributes:
        host: Hostname or IP address of the remote server.
        port: SSH port.
        user: Login name. Empty when the server does not need one.
        password: Password for password authentication.
        private_key: PEM/OpenSSH encoded private key text.
        host_key: Public key of the server to pin, as wire-format bytes
            or an authorized_keys style line.
        timeout: Connect timeout as a duration string (e.g. "5m").

    Example:
        >>> attrs = ConnectionAttributes(host="files.example.com", password="pw")
        >>> attrs.port
        22
    """

    host: str
    port: int = DEFAULT_PORT
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    private_key: str | None = field(default=None, repr=False)
    host_key: bytes | str | None = None
    timeout: str = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Validate connection fields after initialization."""
        if not self.host:
            raise ValueError("Connection host cannot be empty")


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """A validated, ready-to-dial transport configuration.

    Built fresh for every attempt and never mutated. Key objects are
    whatever the transport library parsed them into.
    """

    host: str
    port: int
    user: str
    auth_method: AuthMethod
    host_key_policy: HostKeyPolicy
    timeout: timedelta
    password: str | None = field(default=None, repr=False)
    private_key: Any = field(default=None, repr=False)
    host_key: Any = None

    @property
    def address(self) -> str:
        """The "host:port" address to dial."""
        return f"{self.host}:{self.port}"


@dataclass(frozen=True, slots=True)
class RemoteFileTarget:
    """The remote file an operation acts on.

    Attributes:
        path: Remote path; the identity of the file on its host.
        allow_missing: Read only. Report absence instead of failing.
        contents: Write only. Bytes to store.
        permissions: Write only. Octal mode string such as "0644".
    """

    path: str
    allow_missing: bool = False
    contents: bytes = b""
    permissions: str | None = None

    def __post_init__(self) -> None:
        """Validate target fields after initialization."""
        if not self.path:
            raise ValueError("Remote path cannot be empty")

    @property
    def name(self) -> str:
        """Base name of the remote path."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class ObservationRecord:
    """What an operation observed about a remote file.

    Attributes:
        identifier: Base name of the remote file, or "missing".
        contents: File contents (empty when missing).
        last_modified: Modification time of the remote file (UTC).
        size: Size in bytes, or -1 when the file is absent.
    """

    identifier: str
    contents: bytes
    last_modified: datetime
    size: int

    @classmethod
    def missing(cls, now: datetime | None = None) -> Self:
        """Build the record reported for a tolerated missing file."""
        return cls(
            identifier=MISSING_ID,
            contents=b"",
            last_modified=now if now is not None else datetime.now(UTC),
            size=MISSING_SIZE,
        )

    @property
    def is_missing(self) -> bool:
        """Whether this record stands for an absent file."""
        return self.size == MISSING_SIZE

    @property
    def last_modified_rfc3339(self) -> str:
        """Modification time formatted as RFC 3339."""
        return self.last_modified.isoformat(timespec="seconds")

    def to_state(self) -> dict[str, Any]:
        """Flatten into the field names the controller records."""
        return {
            "id": self.identifier,
            "contents": self.contents.decode("utf-8", errors="replace"),
            "last_modified": self.last_modified_rfc3339,
            "size": self.size,
        }


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How often, and how far apart, a failing attempt is re-driven.

    Attributes:
        max_attempts: Number of retries after the first try. 10 means up
            to 11 tries in total.
        delay: Constant pause between tries.
        fail_fast: Stop as soon as an error is known to be permanent
            (e.g. a missing file) instead of spending the whole budget.
    """

    max_attempts: int = DEFAULT_RETRY_COUNT
    delay: timedelta = field(
        default_factory=lambda: parse_duration(DEFAULT_RETRY_INTERVAL)
    )
    fail_fast: bool = False

    def __post_init__(self) -> None:
        """Validate policy fields after initialization."""
        if self.max_attempts < 0:
            raise ValueError("max_attempts cannot be negative")
        if self.delay < timedelta(0):
            raise ValueError("delay cannot be negative")

    @classmethod
    def from_attributes(
        cls,
        retry_count: int | None = None,
        retry_interval: str | None = None,
        *,
        fail_fast: bool = False,
    ) -> Self:
        """Build a policy from declared attributes, applying defaults.

        Raises:
            ConfigError: If the count is negative or the interval malformed.
        """
        count = DEFAULT_RETRY_COUNT if retry_count is None else retry_count
        interval = DEFAULT_RETRY_INTERVAL if retry_interval is None else retry_interval
        try:
            delay = parse_duration(interval)
        except ValueError as e:
            raise ConfigError("invalid retry interval", cause=e) from e
        if delay < timedelta(0):
            raise ConfigError(
                "invalid retry interval",
                cause=ValueError(f"negative interval {interval!r}"),
            )
        try:
            return cls(max_attempts=count, delay=delay, fail_fast=fail_fast)
        except (TypeError, ValueError) as e:
            raise ConfigError("invalid retry count", cause=e) from e


def resource_id(host: str, path: str) -> str:
    """Stable external key for a remote file: "<host>:<path>"."""
    return f"{host}:{path}"


def parse_import_id(value: str) -> tuple[str, str]:
    """Split an import id of the form "host:path".

    Raises:
        ConfigError: If the id does not have exactly two non-empty parts.
    """
    parts = value.split(":")
    if len(parts) != 2 or not all(parts):
        raise ConfigError(
            "invalid import id",
            cause=ValueError(f"expected 'host:path', got {value!r}"),
        )
    return parts[0], parts[1]
