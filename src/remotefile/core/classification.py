"""Failure classification shared by file operations and the orchestrator."""

from __future__ import annotations

import errno
import logging

from remotefile.core.exceptions import NotFoundError, RemoteFileError


logger = logging.getLogger(__name__)

# Last-resort markers for transports that report absence only as text.
_NOT_FOUND_MARKERS = ("no such file", "file does not exist")


def _has_typed_not_found(error: BaseException) -> bool:
    if isinstance(error, (NotFoundError, FileNotFoundError)):
        return True
    return isinstance(error, OSError) and error.errno == errno.ENOENT


def is_not_found(error: BaseException | None) -> bool:
    """Decide whether a failure means the remote path does not exist.

    Typed signals win: NotFoundError, FileNotFoundError or an OSError with
    errno ENOENT anywhere along the cause chain. Only when none is present
    is the message text inspected for "no such file" or "file does not
    exist" (case-insensitive).
    """
    if error is None:
        return False

    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if _has_typed_not_found(current):
            return True
        if isinstance(current, RemoteFileError) and current.cause is not None:
            current = current.cause
        else:
            current = current.__cause__

    message = str(error).lower()
    if any(marker in message for marker in _NOT_FOUND_MARKERS):
        logger.debug("Classified %r as not-found from its message", error)
        return True
    return False


def is_retryable(error: BaseException) -> bool:
    """Whether re-driving an attempt that raised error could succeed.

    Library errors answer for themselves; anything else (socket errors,
    unexpected library exceptions) is treated as transient.
    """
    if isinstance(error, RemoteFileError):
        return error.retryable
    return not is_not_found(error)
