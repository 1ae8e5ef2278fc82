"""SSH/SFTP transport adapters built on paramiko."""

from remotefile.adapters.ssh.connector import SSHConnector
from remotefile.adapters.ssh.parameters import (
    parse_host_key,
    parse_private_key,
    resolve_connection,
)
from remotefile.adapters.ssh.session import SSHSession, dial, open_session, open_sftp


__all__ = [
    "SSHConnector",
    "SSHSession",
    "dial",
    "open_session",
    "open_sftp",
    "parse_host_key",
    "parse_private_key",
    "resolve_connection",
]
