"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
in-memory fakes of the SFTP sub-channel and the secure channel, so no
test needs a real SSH server.
"""

from __future__ import annotations

import errno
import io
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from remotefile.core.models import ConnectionAttributes, ResolvedConfig


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "transport: SSH resolver and session adapters")
    config.addinivalue_line("markers", "operations: Fetch, store and remove")
    config.addinivalue_line("markers", "retry: Retry orchestrator")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "property: Property-based tests using hypothesis")
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow)",
    )


@dataclass
class FakeStat:
    """Subset of paramiko.SFTPAttributes read by the core."""

    st_size: int | None
    st_mtime: float | None
    st_mode: int | None


class FakeRemoteFile:
    """File handle of FakeSFTPClient; writes land on close."""

    def __init__(self, client: FakeSFTPClient, path: str, mode: str) -> None:
        self._client = client
        self._path = path
        self._writing = "w" in mode
        self._buffer = io.BytesIO(b"" if self._writing else client.files[path])
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        if self._client.fail_on.get("read"):
            raise self._client.fail_on["read"]
        return self._buffer.read(size)

    def write(self, data: bytes) -> int:
        if self._client.fail_on.get("write"):
            raise self._client.fail_on["write"]
        return self._buffer.write(data)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._writing:
            self._client.files[self._path] = self._buffer.getvalue()
            self._client.mtimes[self._path] = self._client.clock

    def __enter__(self) -> FakeRemoteFile:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()


class FakeSFTPClient:
    """In-memory stand-in for paramiko.SFTPClient.

    Missing paths raise FileNotFoundError, as paramiko does for
    SFTP_NO_SUCH_FILE. Put an exception in fail_on[<method>] to make that
    method fail.
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.modes: dict[str, int] = {}
        self.mtimes: dict[str, float] = {}
        self.fail_on: dict[str, BaseException] = {}
        self.clock = 1_700_000_000.0
        self.calls: list[str] = []
        self.closed = False

    def _maybe_fail(self, method: str) -> None:
        self.calls.append(method)
        if method in self.fail_on:
            raise self.fail_on[method]

    def _missing(self, path: str) -> FileNotFoundError:
        return FileNotFoundError(errno.ENOENT, "No such file", path)

    def lstat(self, path: str) -> FakeStat:
        self._maybe_fail("lstat")
        if path not in self.files:
            raise self._missing(path)
        return FakeStat(
            st_size=len(self.files[path]),
            st_mtime=self.mtimes.get(path, self.clock),
            st_mode=0o100000 | self.modes.get(path, 0o644),
        )

    def open(self, filename: str, mode: str = "r", bufsize: int = -1) -> FakeRemoteFile:
        self._maybe_fail("open")
        if "w" not in mode and filename not in self.files:
            raise self._missing(filename)
        return FakeRemoteFile(self, filename, mode)

    def chmod(self, path: str, mode: int) -> None:
        self._maybe_fail("chmod")
        if path not in self.files:
            raise self._missing(path)
        self.modes[path] = mode

    def remove(self, path: str) -> None:
        self._maybe_fail("remove")
        if path not in self.files:
            raise self._missing(path)
        del self.files[path]

    def close(self) -> None:
        self.calls.append("close")
        self.closed = True


class FakeChannel:
    """Stand-in for an authenticated paramiko.Transport."""

    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeNetwork:
    """Dialer and sub-channel opener pair backed by one FakeSFTPClient.

    dial_failures is a list of exceptions raised by successive dials
    before dialing starts to succeed.
    """

    def __init__(self, sftp: FakeSFTPClient) -> None:
        self.sftp = sftp
        self.dial_failures: list[BaseException] = []
        self.dialed: list[ResolvedConfig] = []
        self.channels: list[FakeChannel] = []

    def dial(self, config: ResolvedConfig) -> FakeChannel:
        self.dialed.append(config)
        if self.dial_failures:
            raise self.dial_failures.pop(0)
        channel = FakeChannel()
        self.channels.append(channel)
        return channel

    def open_sftp(self, channel: FakeChannel) -> FakeSFTPClient:
        self.sftp.closed = False
        return self.sftp


@pytest.fixture
def fake_sftp() -> FakeSFTPClient:
    """Empty in-memory SFTP sub-channel."""
    return FakeSFTPClient()


@pytest.fixture
def fake_network(fake_sftp: FakeSFTPClient) -> FakeNetwork:
    """Fake dialer/opener pair serving fake_sftp."""
    return FakeNetwork(fake_sftp)


@pytest.fixture
def sleeps() -> list[float]:
    """Records delays instead of sleeping."""
    return []


@pytest.fixture
def manager(fake_network: FakeNetwork, sleeps: list[float]):
    """RemoteFileManager wired to the fake network with a recording sleep."""
    from remotefile.adapters.ssh import SSHConnector
    from remotefile.core.services import RemoteFileManager

    connector = SSHConnector(
        dialer=fake_network.dial, subchannel_opener=fake_network.open_sftp
    )
    return RemoteFileManager(connector=connector, sleep=sleeps.append)


@pytest.fixture
def password_attrs() -> ConnectionAttributes:
    """Password-authenticated connection attributes."""
    from remotefile.core.models import ConnectionAttributes

    return ConnectionAttributes(host="files.example.com", user="deploy", password="pw")
