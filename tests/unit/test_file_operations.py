"""Unit tests for Fetch, Store and Remove against an in-memory SFTP client."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from tests.conftest import FakeSFTPClient


@pytest.mark.operations
@pytest.mark.tier(0)
class TestParsePermissions:
    """Tests for parse_permissions."""

    @pytest.mark.parametrize(
        ("value", "mode"), [("0644", 0o644), ("600", 0o600), ("0", 0), ("7777", 0o7777)]
    )
    def test_valid_modes(self, value: str, mode: int) -> None:
        """Octal strings should parse to their numeric mode."""
        from remotefile.core.file_operations import parse_permissions

        assert parse_permissions(value) == mode

    @pytest.mark.parametrize(
        "value",
        ["rw-r--r--", "0999", "10000", "", "-1", "0o644", " 644", "+644", "6_44", "644\n"],
    )
    def test_invalid_modes(self, value: str) -> None:
        """Non-octal or out-of-range strings should be ConfigError."""
        from remotefile.core.exceptions import ConfigError
        from remotefile.core.file_operations import parse_permissions

        with pytest.raises(ConfigError, match="invalid permissions"):
            parse_permissions(value)


@pytest.mark.operations
@pytest.mark.tier(1)
class TestFetch:
    """Tests for fetch."""

    def test_reads_contents_and_metadata(self, fake_sftp: FakeSFTPClient) -> None:
        """Fetch should return contents, size, basename and mtime."""
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/etc/app.conf"] = b"key=value\n"
        fake_sftp.mtimes["/etc/app.conf"] = 1_700_000_000.0

        record = fetch(fake_sftp, RemoteFileTarget(path="/etc/app.conf"))

        assert record.identifier == "app.conf"
        assert record.contents == b"key=value\n"
        assert record.size == 10
        assert record.last_modified == datetime.fromtimestamp(1_700_000_000.0, tz=UTC)

    def test_large_file_is_read_in_chunks(self, fake_sftp: FakeSFTPClient) -> None:
        """Progress should be reported once per chunk, ending at the total."""
        from remotefile.core.file_operations import _CHUNK_SIZE, fetch
        from remotefile.core.models import RemoteFileTarget

        data = b"x" * (_CHUNK_SIZE * 2 + 10)
        fake_sftp.files["/data.bin"] = data
        updates: list[tuple[int, int]] = []

        record = fetch(
            fake_sftp,
            RemoteFileTarget(path="/data.bin"),
            progress=lambda done, total: updates.append((done, total)),
        )

        assert record.contents == data
        assert len(updates) == 3
        assert updates[-1] == (len(data), len(data))

    def test_missing_allowed_returns_missing_record(self, fake_sftp: FakeSFTPClient) -> None:
        """allow_missing should turn a failed stat into the missing record."""
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        record = fetch(fake_sftp, RemoteFileTarget(path="/nope", allow_missing=True))

        assert record.identifier == "missing"
        assert record.size == -1
        assert record.contents == b""
        assert "open" not in fake_sftp.calls

    def test_missing_not_allowed_raises_not_found(self, fake_sftp: FakeSFTPClient) -> None:
        """Without allow_missing a missing path should be NotFoundError."""
        from remotefile.core.exceptions import NotFoundError
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        with pytest.raises(NotFoundError) as exc_info:
            fetch(fake_sftp, RemoteFileTarget(path="/nope"))
        assert exc_info.value.phase == "stat failed"
        assert exc_info.value.path == "/nope"

    def test_other_stat_failure_raises_remote_io_error(
        self, fake_sftp: FakeSFTPClient
    ) -> None:
        """A stat failure that is not absence should be RemoteIOError."""
        from remotefile.core.exceptions import NotFoundError, RemoteIOError
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"x"
        fake_sftp.fail_on["lstat"] = PermissionError("denied")

        with pytest.raises(RemoteIOError) as exc_info:
            fetch(fake_sftp, RemoteFileTarget(path="/f"))
        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.phase == "stat failed"

    def test_read_failure_raises_remote_io_error(self, fake_sftp: FakeSFTPClient) -> None:
        """A failing read should be RemoteIOError("read failed")."""
        from remotefile.core.exceptions import RemoteIOError
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"x"
        fake_sftp.fail_on["read"] = EOFError("connection lost")

        with pytest.raises(RemoteIOError, match="read failed"):
            fetch(fake_sftp, RemoteFileTarget(path="/f"))

    def test_cancel_stops_read(self, fake_sftp: FakeSFTPClient) -> None:
        """A set cancel event should abort the read unwrapped."""
        from remotefile.core.exceptions import OperationCancelledError
        from remotefile.core.file_operations import fetch
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"x"
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(OperationCancelledError):
            fetch(fake_sftp, RemoteFileTarget(path="/f"), cancel=cancel)


@pytest.mark.operations
@pytest.mark.tier(1)
class TestStore:
    """Tests for store."""

    def test_creates_file(self, fake_sftp: FakeSFTPClient) -> None:
        """Store should write the contents and report re-stat metadata."""
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        record = store(fake_sftp, RemoteFileTarget(path="/srv/out.txt", contents=b"hello"))

        assert fake_sftp.files["/srv/out.txt"] == b"hello"
        assert record.identifier == "out.txt"
        assert record.contents == b"hello"
        assert record.size == 5
        assert record.last_modified == datetime.fromtimestamp(fake_sftp.clock, tz=UTC)
        assert "chmod" not in fake_sftp.calls

    def test_overwrites_existing_file(self, fake_sftp: FakeSFTPClient) -> None:
        """Store should truncate what was there before."""
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"old contents that are longer"
        store(fake_sftp, RemoteFileTarget(path="/f", contents=b"new"))
        assert fake_sftp.files["/f"] == b"new"

    def test_empty_contents(self, fake_sftp: FakeSFTPClient) -> None:
        """Storing nothing should still create an empty file."""
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        record = store(fake_sftp, RemoteFileTarget(path="/empty"))
        assert fake_sftp.files["/empty"] == b""
        assert record.size == 0

    def test_applies_permissions(self, fake_sftp: FakeSFTPClient) -> None:
        """Permissions should be applied after the write."""
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        store(fake_sftp, RemoteFileTarget(path="/secret", contents=b"x", permissions="0600"))

        assert fake_sftp.modes["/secret"] == 0o600
        assert fake_sftp.calls.index("chmod") > fake_sftp.calls.index("open")

    def test_invalid_permissions_write_nothing(self, fake_sftp: FakeSFTPClient) -> None:
        """Malformed permissions should fail before the file is created."""
        from remotefile.core.exceptions import ConfigError
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        with pytest.raises(ConfigError):
            store(fake_sftp, RemoteFileTarget(path="/f", contents=b"x", permissions="abc"))
        assert "/f" not in fake_sftp.files
        assert fake_sftp.calls == []

    @pytest.mark.parametrize(
        ("method", "phase"),
        [("open", "create failed"), ("write", "write failed"), ("chmod", "chmod failed")],
    )
    def test_failures_name_their_phase(
        self, fake_sftp: FakeSFTPClient, method: str, phase: str
    ) -> None:
        """Each failing step should surface as RemoteIOError with its phase."""
        from remotefile.core.exceptions import RemoteIOError
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.fail_on[method] = OSError("boom")

        with pytest.raises(RemoteIOError) as exc_info:
            store(fake_sftp, RemoteFileTarget(path="/f", contents=b"x", permissions="0644"))
        assert exc_info.value.phase == phase

    def test_restat_failure(self, fake_sftp: FakeSFTPClient) -> None:
        """A failing re-stat should be RemoteIOError("stat failed")."""
        from remotefile.core.exceptions import RemoteIOError
        from remotefile.core.file_operations import store
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.fail_on["lstat"] = OSError("boom")

        with pytest.raises(RemoteIOError, match="stat failed"):
            store(fake_sftp, RemoteFileTarget(path="/f", contents=b"x"))


@pytest.mark.operations
@pytest.mark.tier(1)
class TestRemove:
    """Tests for remove."""

    def test_deletes_file(self, fake_sftp: FakeSFTPClient) -> None:
        """Remove should delete an existing file."""
        from remotefile.core.file_operations import remove
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"x"
        remove(fake_sftp, RemoteFileTarget(path="/f"))
        assert "/f" not in fake_sftp.files

    def test_missing_file_succeeds(self, fake_sftp: FakeSFTPClient) -> None:
        """Removing an absent file should not raise."""
        from remotefile.core.file_operations import remove
        from remotefile.core.models import RemoteFileTarget

        remove(fake_sftp, RemoteFileTarget(path="/never-existed"))

    def test_other_failure_raises(self, fake_sftp: FakeSFTPClient) -> None:
        """Any other deletion failure should be RemoteIOError."""
        from remotefile.core.exceptions import RemoteIOError
        from remotefile.core.file_operations import remove
        from remotefile.core.models import RemoteFileTarget

        fake_sftp.files["/f"] = b"x"
        fake_sftp.fail_on["remove"] = PermissionError("denied")

        with pytest.raises(RemoteIOError, match="delete failed"):
            remove(fake_sftp, RemoteFileTarget(path="/f"))
        assert "/f" in fake_sftp.files
