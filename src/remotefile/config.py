"""Configuration utilities for remotefile.

The reconciliation controller hands attributes over as a flat set of
named fields. This module turns such a mapping (or a JSON file holding
one) into the typed records the core works with, applying defaults.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from remotefile.core.exceptions import ConfigError
from remotefile.core.models import (
    DEFAULT_PORT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_INTERVAL,
    DEFAULT_TIMEOUT,
    ConnectionAttributes,
    RemoteFileTarget,
    RetryPolicy,
)


__all__ = [
    "ATTRIBUTE_NAMES",
    "DEFAULT_PORT",
    "DEFAULT_RETRY_COUNT",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_TIMEOUT",
    "attributes_from_mapping",
    "load_attributes",
]

_CONNECTION_FIELDS = ("host", "port", "user", "password", "private_key", "host_key", "timeout")
_TARGET_FIELDS = ("path", "allow_missing", "contents", "permissions")
_RETRY_FIELDS = ("retry_count", "retry_interval", "fail_fast")

ATTRIBUTE_NAMES = frozenset(_CONNECTION_FIELDS + _TARGET_FIELDS + _RETRY_FIELDS)


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def attributes_from_mapping(
    mapping: Mapping[str, Any],
) -> tuple[ConnectionAttributes, RemoteFileTarget, RetryPolicy]:
    """Build the connection, target and retry records from flat attributes.

    Keys absent or set to None fall back to their defaults (port 22,
    timeout "5m", 10 retries every "10s").

    Args:
        mapping: Attribute names as the controller declares them, e.g.
            {"host": "files.example.com", "password": "pw", "path": "/etc/motd"}.

    Returns:
        Tuple of (ConnectionAttributes, RemoteFileTarget, RetryPolicy).

    Raises:
        ConfigError: If a key is unknown, host or path is missing, or a
            value has the wrong type.

    Example:
        >>> conn, target, policy = attributes_from_mapping(
        ...     {"host": "h", "password": "pw", "path": "/tmp/x"}
        ... )
        >>> conn.port, policy.max_attempts
        (22, 10)
    """
    unknown = sorted(set(mapping) - ATTRIBUTE_NAMES)
    if unknown:
        raise ConfigError(
            "unknown attributes", cause=ValueError(", ".join(unknown))
        )

    values = {k: v for k, v in mapping.items() if v is not None}
    for required in ("host", "path"):
        if not values.get(required):
            raise ConfigError(f"missing {required}")

    try:
        connection = ConnectionAttributes(
            host=str(values["host"]),
            port=int(values.get("port", DEFAULT_PORT)),
            user=values.get("user"),
            password=values.get("password"),
            private_key=values.get("private_key"),
            host_key=values.get("host_key"),
            timeout=str(values.get("timeout", DEFAULT_TIMEOUT)),
        )
        target = RemoteFileTarget(
            path=str(values["path"]),
            allow_missing=bool(values.get("allow_missing", False)),
            contents=_as_bytes(values.get("contents", b"")),
            permissions=values.get("permissions"),
        )
        retry_count = int(values.get("retry_count", DEFAULT_RETRY_COUNT))
    except (TypeError, ValueError) as e:
        raise ConfigError("invalid attributes", cause=e) from e

    policy = RetryPolicy.from_attributes(
        retry_count,
        str(values.get("retry_interval", DEFAULT_RETRY_INTERVAL)),
        fail_fast=bool(values.get("fail_fast", False)),
    )
    return connection, target, policy


def load_attributes(path: Path) -> dict[str, Any]:
    """Read a flat attribute mapping from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object.
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError("unreadable attributes file", cause=e) from e
    if not isinstance(data, dict):
        raise ConfigError(
            "unreadable attributes file",
            cause=ValueError(f"{path.name} must contain a JSON object"),
        )
    return data
