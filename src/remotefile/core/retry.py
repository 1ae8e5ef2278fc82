"""Retry orchestrator for whole connect-and-operate attempts.

A retry unit is the full resolve, connect, operate and close sequence.
Units are re-driven with a constant delay; there is no backoff growth.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING, TypeVar

from remotefile.core.classification import is_not_found, is_retryable
from remotefile.core.exceptions import ConfigError, OperationCancelledError


if TYPE_CHECKING:
    import threading

    from remotefile.core.models import RetryPolicy


logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], None]


def _is_terminal(error: Exception, fail_fast: bool) -> bool:
    # Bad input and cancellation can never be fixed by another attempt.
    if isinstance(error, (ConfigError, OperationCancelledError)):
        return True
    return fail_fast and not is_retryable(error)


def _pause(seconds: float, sleep: Sleeper, cancel: threading.Event | None) -> None:
    if cancel is None:
        sleep(seconds)
        return
    if cancel.wait(seconds):
        raise OperationCancelledError("cancelled while waiting to retry")


def with_retry(
    max_attempts: int,
    delay: timedelta | float,
    unit: Callable[[], T],
    *,
    sleep: Sleeper | None = None,
    cancel: threading.Event | None = None,
    fail_fast: bool = False,
) -> T:
    """Run unit, re-driving it after failures.

    The unit runs once, then up to max_attempts more times. Success on
    any try returns immediately without sleeping. After the final allowed
    try the last error propagates unchanged.

    ConfigError and OperationCancelledError are never retried. With
    fail_fast, any error classified as permanent (e.g. NotFoundError)
    also stops the loop at once.

    Args:
        max_attempts: Retries allowed after the first try (0 = run once).
        delay: Constant pause between tries, as a timedelta or seconds.
        unit: Zero-argument callable performing one whole attempt.
        sleep: Sleep function, replaceable in tests. Ignored when cancel
            is given, since the pause then waits on the event instead.
        cancel: Optional event; when set, the pause is cut short and
            OperationCancelledError is raised.
        fail_fast: Stop on permanent errors instead of spending the budget.

    Returns:
        Whatever the first successful unit call returned.
    """
    if max_attempts < 0:
        raise ValueError("max_attempts cannot be negative")

    seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
    sleeper = sleep if sleep is not None else time.sleep

    attempt = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError("cancelled before attempt")

        logger.debug("Attempt %d of %d", attempt + 1, max_attempts + 1)
        try:
            return unit()
        except Exception as e:
            if _is_terminal(e, fail_fast):
                logger.debug("Not retrying permanent failure: %s", e)
                raise
            if attempt == max_attempts:
                logger.debug("Retry budget of %d exhausted", max_attempts)
                raise
            if is_not_found(e):
                logger.info(
                    "Retrying a missing path; enable fail_fast to stop early: %s", e
                )
            logger.warning(
                "Attempt %d failed (%s); retrying in %ss",
                attempt + 1,
                e,
                seconds,
            )

        _pause(seconds, sleeper, cancel)
        attempt += 1


def run_with_policy(
    policy: RetryPolicy,
    unit: Callable[[], T],
    *,
    sleep: Sleeper | None = None,
    cancel: threading.Event | None = None,
) -> T:
    """Run unit under a RetryPolicy."""
    return with_retry(
        policy.max_attempts,
        policy.delay,
        unit,
        sleep=sleep,
        cancel=cancel,
        fail_fast=policy.fail_fast,
    )
