"""Error handling patterns with recovery hints.

This example demonstrates how to handle common errors and use
the recovery_hint property to provide actionable guidance.
"""

from remotefile import (
    ConfigError,
    ConnectionAttributes,
    NotFoundError,
    ObservationRecord,
    RemoteFileError,
    RemoteFileManager,
    RemoteFileTarget,
    RetryPolicy,
    TransportError,
)


manager = RemoteFileManager.default()
attrs = ConnectionAttributes(host="files.example.com", user="deploy", password="s3cret")


# Pattern 1: Stop early on a file that does not exist
def read_or_none(path: str) -> ObservationRecord | None:
    """Read a file, returning None when it is absent."""
    try:
        return manager.read(attrs, RemoteFileTarget(path=path), RetryPolicy(fail_fast=True))
    except NotFoundError as e:
        print(f"Remote file not found: {e.path}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Pattern 2: Bad input is reported at once and never retried
def check_attributes(connection: ConnectionAttributes) -> bool:
    """Return False when the attributes cannot be used."""
    try:
        manager.read(connection, RemoteFileTarget(path="/", allow_missing=True))
    except ConfigError as e:
        print(f"Invalid attributes ({e.phase})")
        print(f"Hint: {e.recovery_hint}")
        return False
    return True


# Pattern 3: Catch-all for any library error
def write_safe(path: str, contents: bytes) -> ObservationRecord | None:
    """Write a file with comprehensive error handling."""
    try:
        return manager.write(attrs, RemoteFileTarget(path=path, contents=contents))
    except TransportError as e:
        print(f"Could not connect to {e.address}: {e}")
        return None
    except RemoteFileError as e:
        # Catch any other library errors
        print(f"Unexpected error: {e}")
        print(f"Hint: {e.recovery_hint}")
        return None


# Example usage
if __name__ == "__main__":
    # No password and no key: prints the hint without dialing
    check_attributes(ConnectionAttributes(host="files.example.com"))
    read_or_none("/etc/does-not-exist")
