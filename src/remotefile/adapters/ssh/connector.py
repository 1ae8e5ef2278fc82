"""SessionFactory adapter combining resolution and session opening."""

from __future__ import annotations

from typing import TYPE_CHECKING

from remotefile.adapters.ssh.parameters import resolve_connection
from remotefile.adapters.ssh.session import SSHSession, open_session


if TYPE_CHECKING:
    from remotefile.core.models import ConnectionAttributes
    from remotefile.core.ports import Dialer, SubchannelOpener


class SSHConnector:
    """Opens a fresh SSH/SFTP session for each attempt.

    Implements SessionFactory. Every call resolves the attributes again,
    so nothing is shared between attempts or between targets.
    """

    def __init__(
        self,
        dialer: Dialer | None = None,
        subchannel_opener: SubchannelOpener | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            dialer: Optional replacement for the paramiko dialer.
            subchannel_opener: Optional replacement for the SFTP opener.
        """
        self._dialer = dialer
        self._subchannel_opener = subchannel_opener

    def open(self, attributes: ConnectionAttributes) -> SSHSession:
        """Resolve attributes and open a session.

        Raises:
            ConfigError: If the attributes cannot be resolved.
            TransportError: If dialing or opening SFTP fails.
        """
        config = resolve_connection(attributes)
        return open_session(
            config,
            dialer=self._dialer,
            subchannel_opener=self._subchannel_opener,
        )
