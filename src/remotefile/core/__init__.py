"""Core domain module for remotefile.

This module contains pure Python domain models, port definitions, the
file operations and the retry orchestrator. It has no third-party
dependencies and can be tested against in-memory fakes.
"""

from remotefile.core.models import (
    ConnectionAttributes,
    ObservationRecord,
    RemoteFileTarget,
    ResolvedConfig,
    RetryPolicy,
)
from remotefile.core.ports import ProgressCallback, SessionFactory, SFTPClientPort


__all__ = [
    "ConnectionAttributes",
    "ObservationRecord",
    "ProgressCallback",
    "RemoteFileTarget",
    "ResolvedConfig",
    "RetryPolicy",
    "SFTPClientPort",
    "SessionFactory",
]
