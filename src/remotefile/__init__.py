"""remotefile - Reconcile a single file on a remote host over SFTP.

This library reads, writes or removes one remote file per call, over an
authenticated SSH connection, and reports what it observed. Every call is
wrapped in a constant-delay retry loop so flaky hosts are re-driven.

Example:
    >>> from remotefile import ConnectionAttributes, RemoteFileManager, RemoteFileTarget
    >>> manager = RemoteFileManager.default()
    >>> record = manager.write(  # doctest: +SKIP
    ...     ConnectionAttributes(host="files.example.com", user="deploy", password="pw"),
    ...     RemoteFileTarget(path="/etc/app.conf", contents=b"debug = false\\n", permissions="0640"),
    ... )
"""

from remotefile.adapters.ssh import SSHConnector, SSHSession, open_session, resolve_connection
from remotefile.config import attributes_from_mapping, load_attributes
from remotefile.core.exceptions import (
    ConfigError,
    NotFoundError,
    OperationCancelledError,
    RemoteFileError,
    RemoteIOError,
    TransportError,
)
from remotefile.core.models import (
    AuthMethod,
    ConnectionAttributes,
    HostKeyPolicy,
    ObservationRecord,
    RemoteFileTarget,
    ResolvedConfig,
    RetryPolicy,
    parse_import_id,
    resource_id,
)
from remotefile.core.ports import (
    NullProgressReporter,
    ProgressCallback,
    ProgressReporter,
    SessionFactory,
    SessionPort,
    SFTPClientPort,
)
from remotefile.core.retry import with_retry
from remotefile.core.services import RemoteFileManager
from remotefile.progress import RichProgressReporter


__version__ = "0.1.0"

__all__ = [
    "AuthMethod",
    "ConfigError",
    "ConnectionAttributes",
    "HostKeyPolicy",
    "NotFoundError",
    "NullProgressReporter",
    "ObservationRecord",
    "OperationCancelledError",
    "ProgressCallback",
    "ProgressReporter",
    "RemoteFileError",
    "RemoteFileManager",
    "RemoteFileTarget",
    "RemoteIOError",
    "ResolvedConfig",
    "RetryPolicy",
    "RichProgressReporter",
    "SFTPClientPort",
    "SSHConnector",
    "SSHSession",
    "SessionFactory",
    "SessionPort",
    "TransportError",
    "__version__",
    "attributes_from_mapping",
    "load_attributes",
    "open_session",
    "parse_import_id",
    "resolve_connection",
    "resource_id",
    "with_retry",
]
