"""Resolve declared connection attributes into a ready-to-dial config.

Resolution is pure: keys are parsed with paramiko but nothing touches
the network.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import struct

import paramiko
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from remotefile.core.durations import parse_duration
from remotefile.core.exceptions import ConfigError
from remotefile.core.models import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    AuthMethod,
    ConnectionAttributes,
    HostKeyPolicy,
    ResolvedConfig,
)


logger = logging.getLogger(__name__)

_PRIVATE_KEY_CLASSES: tuple[type[paramiko.PKey], ...] = (
    paramiko.Ed25519Key,
    paramiko.ECDSAKey,
    paramiko.RSAKey,
)

_PEM_KEY_CLASSES: dict[str, type[paramiko.PKey]] = {
    "RSA": paramiko.RSAKey,
    "EC": paramiko.ECDSAKey,
}

# An empty label is the PKCS#8 form written by `openssl genpkey`.
_BEGIN_TAG = re.compile(r"-----BEGIN (RSA |EC |OPENSSH |)PRIVATE KEY-----")

_OPENSSH_MAGIC = b"openssh-key-v1\x00"

_KEY_PARSE_ERRORS = (paramiko.SSHException, paramiko.UnknownKeyType, ValueError, TypeError)


def _private_key_class(text: str) -> type[paramiko.PKey]:
    """Pick the key class from the PEM label or the OpenSSH public blob."""
    match = _BEGIN_TAG.search(text)
    if match is None:
        raise ValueError("no PEM or OpenSSH private key header found")
    label = match.group(1).strip()
    if label in _PEM_KEY_CLASSES:
        return _PEM_KEY_CLASSES[label]

    body = text[match.end() :].split("-----END", 1)[0]
    blob = base64.b64decode("".join(body.split()))
    if not blob.startswith(_OPENSSH_MAGIC):
        raise ValueError("OpenSSH private key is missing its magic header")
    message = paramiko.Message(blob[len(_OPENSSH_MAGIC) :])
    message.get_text()  # cipher name
    message.get_text()  # kdf name
    message.get_binary()  # kdf options
    message.get_int()  # key count
    key_type = paramiko.Message(message.get_binary()).get_text()

    for key_class in _PRIVATE_KEY_CLASSES:
        if key_type in key_class.identifiers():
            return key_class
    raise ValueError(f"unsupported private key type {key_type!r}")


def _pkcs8_to_openssh(text: str) -> str:
    """Re-encode an unencrypted PKCS#8 key in the OpenSSH format paramiko reads."""
    try:
        key = serialization.load_pem_private_key(text.encode(), password=None)
        return key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.OpenSSH,
            serialization.NoEncryption(),
        ).decode()
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"malformed PKCS#8 private key: {e}") from e


def parse_private_key(text: str) -> paramiko.PKey:
    """Parse PEM (traditional or PKCS#8) or OpenSSH private key text.

    Raises:
        ValueError: If the key type is unsupported or the text is malformed.
    """
    match = _BEGIN_TAG.search(text)
    if match is not None and not match.group(1):
        text = _pkcs8_to_openssh(text)
    key_class = _private_key_class(text)
    try:
        return key_class.from_private_key(io.StringIO(text))
    except _KEY_PARSE_ERRORS as e:
        raise ValueError(f"malformed {key_class.__name__}: {e}") from e


def parse_host_key(value: bytes | str) -> paramiko.PKey:
    """Parse a server public key for pinning.

    Accepts either an authorized_keys style line ("ssh-ed25519 AAAA... comment")
    or the raw SSH wire-format key blob.

    Raises:
        ValueError: If the key cannot be decoded.
    """
    raw = value.encode() if isinstance(value, str) else bytes(value)

    # Wire blobs start with the 4-byte length of the key type name.
    if raw.startswith(b"\x00"):
        blob = raw
        try:
            key_type = paramiko.Message(blob).get_text()
        except (UnicodeDecodeError, IndexError, struct.error) as e:
            raise ValueError(f"malformed host key blob: {e}") from e
    else:
        fields = raw.strip().split()
        if len(fields) < 2:
            raise ValueError("host key must be '<type> <base64>' or a wire blob")
        try:
            blob = base64.b64decode(fields[1], validate=True)
            key_type = fields[0].decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"host key is not valid base64: {e}") from e

    try:
        return paramiko.PKey.from_type_string(key_type, blob)
    except _KEY_PARSE_ERRORS as e:
        raise ValueError(f"unsupported or malformed host key: {e}") from e


def resolve_connection(attributes: ConnectionAttributes) -> ResolvedConfig:
    """Turn connection attributes into a validated transport configuration.

    Password takes precedence over a private key when both are given. When
    no host key is supplied the resulting policy accepts any server key,
    which leaves the connection open to interception; a warning is logged.

    Args:
        attributes: Declared connection attributes.

    Returns:
        ResolvedConfig with auth method, host-key policy, timeout and address.

    Raises:
        ConfigError: For missing credentials or an unparsable private key,
            host key or timeout.
    """
    if attributes.password is None and attributes.private_key is None:
        raise ConfigError("missing credentials")

    private_key = None
    if attributes.password is not None:
        auth_method = AuthMethod.PASSWORD
    else:
        auth_method = AuthMethod.PUBLIC_KEY
        try:
            private_key = parse_private_key(attributes.private_key or "")
        except ValueError as e:
            raise ConfigError("invalid private key", cause=e) from e

    host_key = None
    if attributes.host_key is not None:
        try:
            host_key = parse_host_key(attributes.host_key)
        except ValueError as e:
            raise ConfigError("invalid host key", cause=e) from e
        policy = HostKeyPolicy.PINNED
    else:
        policy = HostKeyPolicy.ACCEPT_ANY
        logger.warning(
            "No host key pinned for %s; accepting any server key", attributes.host
        )

    try:
        timeout = parse_duration(attributes.timeout or DEFAULT_TIMEOUT)
    except ValueError as e:
        raise ConfigError("invalid timeout", cause=e) from e
    if timeout.total_seconds() < 0:
        raise ConfigError(
            "invalid timeout", cause=ValueError(f"negative timeout {attributes.timeout!r}")
        )

    return ResolvedConfig(
        host=attributes.host,
        port=attributes.port if attributes.port is not None else DEFAULT_PORT,
        user=attributes.user or "",
        auth_method=auth_method,
        host_key_policy=policy,
        timeout=timeout,
        password=attributes.password,
        private_key=private_key,
        host_key=host_key,
    )
