"""Secure channel and SFTP sub-channel lifecycle, built on paramiko.

A session owns exactly one authenticated transport and one SFTP client
for the duration of a single file operation. Sessions are never pooled.
"""

from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING

import paramiko

from remotefile.core.exceptions import TransportError
from remotefile.core.models import AuthMethod, HostKeyPolicy


if TYPE_CHECKING:
    from types import TracebackType

    from remotefile.core.models import ResolvedConfig
    from remotefile.core.ports import (
        Dialer,
        SecureChannel,
        SFTPClientPort,
        SubchannelOpener,
    )


logger = logging.getLogger(__name__)


def _verify_host_key(transport: paramiko.Transport, config: ResolvedConfig) -> None:
    if config.host_key_policy is not HostKeyPolicy.PINNED:
        return
    server_key = transport.get_remote_server_key()
    if server_key != config.host_key:
        raise paramiko.BadHostKeyException(config.host, server_key, config.host_key)


def dial(config: ResolvedConfig) -> paramiko.Transport:
    """Open and authenticate a paramiko Transport to config.address.

    Connect, banner, key exchange and authentication are each bounded by
    the configured timeout.
    """
    timeout = config.timeout.total_seconds() or None
    sock = socket.create_connection((config.host, config.port), timeout=timeout)
    try:
        transport = paramiko.Transport(sock)
    except BaseException:
        sock.close()
        raise

    transport.banner_timeout = timeout
    transport.auth_timeout = timeout
    try:
        transport.start_client(timeout=timeout)
        _verify_host_key(transport, config)
        if config.auth_method is AuthMethod.PASSWORD:
            transport.auth_password(config.user, config.password or "")
        else:
            transport.auth_publickey(config.user, config.private_key)
    except BaseException:
        transport.close()
        raise
    return transport


def open_sftp(channel: SecureChannel) -> paramiko.SFTPClient:
    """Open an SFTP client over an authenticated paramiko Transport."""
    client = paramiko.SFTPClient.from_transport(channel)
    if client is None:
        raise paramiko.SSHException("server refused the sftp subsystem")
    return client


def _close_quietly(resource: object, label: str) -> None:
    try:
        resource.close()  # type: ignore[attr-defined]
    except Exception as e:
        logger.debug("Ignoring error while closing %s: %s", label, e)


class SSHSession:
    """An open secure channel and its SFTP sub-channel.

    Implements SessionPort. Use as a context manager so the handles are
    released even when the operation fails or is cancelled.

    Example:
        with open_session(config) as session:
            session.sftp.lstat("/etc/motd")
    """

    def __init__(
        self, channel: SecureChannel, sftp: SFTPClientPort, address: str
    ) -> None:
        """Wrap already opened handles.

        Args:
            channel: Authenticated secure channel.
            sftp: SFTP client running over channel.
            address: The "host:port" the channel is connected to.
        """
        self._channel = channel
        self._sftp = sftp
        self.address = address
        self._closed = False

    @property
    def sftp(self) -> SFTPClientPort:
        """The open SFTP sub-channel."""
        return self._sftp

    @property
    def closed(self) -> bool:
        """Whether close() has run."""
        return self._closed

    def close(self) -> None:
        """Close the sub-channel, then the channel, ignoring close errors.

        A close error must not mask whatever made the operation fail.
        """
        if self._closed:
            return
        self._closed = True
        _close_quietly(self._sftp, "sftp sub-channel")
        _close_quietly(self._channel, "secure channel")
        logger.debug("Closed session to %s", self.address)

    def __enter__(self) -> SSHSession:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the session."""
        self.close()


def open_session(
    config: ResolvedConfig,
    *,
    dialer: Dialer | None = None,
    subchannel_opener: SubchannelOpener | None = None,
) -> SSHSession:
    """Dial config.address and open an SFTP sub-channel over it.

    Args:
        config: Resolved connection configuration.
        dialer: Replaces the paramiko dialer (used by tests).
        subchannel_opener: Replaces the paramiko SFTP opener (used by tests).

    Returns:
        An SSHSession owning both handles.

    Raises:
        TransportError: "dial failed" when the channel cannot be established
            or authenticated; "subchannel failed" when SFTP cannot start.
    """
    dial_fn = dialer or dial
    open_fn = subchannel_opener or open_sftp

    logger.debug("Dialing %s", config.address)
    try:
        channel = dial_fn(config)
    except Exception as e:
        raise TransportError("dial failed", address=config.address, cause=e) from e

    try:
        sftp = open_fn(channel)
    except Exception as e:
        _close_quietly(channel, "secure channel")
        raise TransportError(
            "subchannel failed", address=config.address, cause=e
        ) from e

    logger.debug("Opened session to %s", config.address)
    return SSHSession(channel, sftp, config.address)
