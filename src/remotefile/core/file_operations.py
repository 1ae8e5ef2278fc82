"""Fetch, Store and Remove over an open file-transfer sub-channel.

Each operation acts on exactly one remote path and either produces a
fully populated ObservationRecord or raises; records are never partial.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from remotefile.core.classification import is_not_found
from remotefile.core.exceptions import (
    ConfigError,
    NotFoundError,
    OperationCancelledError,
    RemoteIOError,
)
from remotefile.core.models import ObservationRecord


if TYPE_CHECKING:
    import threading

    from remotefile.core.models import RemoteFileTarget
    from remotefile.core.ports import ProgressCallback, RemoteStat, SFTPClientPort


logger = logging.getLogger(__name__)

# Chunk size for streaming reads and writes (32KB, the SFTP packet limit)
_CHUNK_SIZE = 32 * 1024

_MAX_MODE = 0o7777

_OCTAL_DIGITS = re.compile(r"[0-7]+")


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError("cancelled during transfer")


def _modified_at(stat: RemoteStat) -> datetime:
    if stat.st_mtime is None:
        return datetime.now(UTC)
    return datetime.fromtimestamp(stat.st_mtime, tz=UTC)


def _stat_error(path: str, error: Exception) -> RemoteIOError:
    if is_not_found(error):
        return NotFoundError("stat failed", path=path, cause=error)
    return RemoteIOError("stat failed", path=path, cause=error)


def parse_permissions(value: str) -> int:
    """Parse an octal permission string such as "0644".

    Raises:
        ConfigError: If the value is not an octal mode between 0 and 7777.
    """
    # int(value, 8) alone would also take "0o644", " 644" and "6_44"
    if not _OCTAL_DIGITS.fullmatch(value):
        raise ConfigError(
            "invalid permissions",
            cause=ValueError(f"{value!r} is not an octal number"),
        )
    mode = int(value, 8)
    if not 0 <= mode <= _MAX_MODE:
        raise ConfigError(
            "invalid permissions",
            cause=ValueError(f"mode {value!r} is out of range"),
        )
    return mode


def fetch(
    sftp: SFTPClientPort,
    target: RemoteFileTarget,
    *,
    progress: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> ObservationRecord:
    """Stat and read a remote file into memory.

    Args:
        sftp: Open sub-channel.
        target: The file to read. With allow_missing, a failed stat yields
            the "missing" record instead of an error.
        progress: Optional callback(bytes_read, total_bytes).
        cancel: Optional event checked between chunks.

    Returns:
        ObservationRecord populated from the stat and the bytes read.

    Raises:
        NotFoundError: If the path does not exist and absence is not allowed.
        RemoteIOError: If the stat or the read fails for another reason.
        OperationCancelledError: If cancel is set mid-transfer.
    """
    path = target.path
    try:
        stat = sftp.lstat(path)
    except Exception as e:
        if target.allow_missing:
            logger.debug("Stat of %s failed, reporting it as missing: %s", path, e)
            return ObservationRecord.missing()
        raise _stat_error(path, e) from e

    total = stat.st_size or 0
    done = 0
    chunks: list[bytes] = []
    try:
        with sftp.open(path, "rb") as handle:
            while True:
                _check_cancel(cancel)
                chunk = handle.read(_CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
                done += len(chunk)
                if progress:
                    progress(done, total)
    except OperationCancelledError:
        raise
    except Exception as e:
        raise RemoteIOError("read failed", path=path, cause=e) from e

    contents = b"".join(chunks)
    logger.debug("Read %d bytes from %s", len(contents), path)
    return ObservationRecord(
        identifier=target.name,
        contents=contents,
        last_modified=_modified_at(stat),
        size=stat.st_size if stat.st_size is not None else len(contents),
    )


def store(
    sftp: SFTPClientPort,
    target: RemoteFileTarget,
    *,
    progress: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> ObservationRecord:
    """Create or overwrite a remote file, optionally chmod it, and re-stat.

    The permission string is validated before anything is written so that
    malformed input never leaves a half-configured file behind.

    Raises:
        ConfigError: If the permission string is not a valid octal mode.
        RemoteIOError: If create, write, chmod or the re-stat fails.
        OperationCancelledError: If cancel is set mid-transfer.
    """
    path = target.path
    mode = parse_permissions(target.permissions) if target.permissions else None

    try:
        handle = sftp.open(path, "wb")
    except Exception as e:
        raise RemoteIOError("create failed", path=path, cause=e) from e

    data = target.contents
    total = len(data)
    try:
        with handle:
            for offset in range(0, total, _CHUNK_SIZE):
                _check_cancel(cancel)
                chunk = data[offset : offset + _CHUNK_SIZE]
                handle.write(chunk)
                if progress:
                    progress(offset + len(chunk), total)
    except OperationCancelledError:
        raise
    except Exception as e:
        raise RemoteIOError("write failed", path=path, cause=e) from e

    if mode is not None:
        try:
            sftp.chmod(path, mode)
        except Exception as e:
            raise RemoteIOError("chmod failed", path=path, cause=e) from e

    try:
        stat = sftp.lstat(path)
    except Exception as e:
        raise RemoteIOError("stat failed", path=path, cause=e) from e

    logger.debug("Wrote %d bytes to %s", total, path)
    return ObservationRecord(
        identifier=target.name,
        contents=data,
        last_modified=_modified_at(stat),
        size=stat.st_size if stat.st_size is not None else total,
    )


def remove(sftp: SFTPClientPort, target: RemoteFileTarget) -> None:
    """Delete a remote file; an already-absent file counts as deleted.

    Raises:
        RemoteIOError: If deletion fails for any reason other than absence.
    """
    path = target.path
    try:
        sftp.remove(path)
    except Exception as e:
        if is_not_found(e):
            logger.debug("%s was already absent", path)
            return
        raise RemoteIOError("delete failed", path=path, cause=e) from e
    logger.debug("Removed %s", path)
