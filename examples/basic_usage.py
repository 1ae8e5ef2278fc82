"""Basic single-file reconcile example.

This example shows the simplest usage pattern: describe how to reach
the host, describe the remote file, then write it and read it back. Each
call opens its own SSH session and retries on failure.
"""

from remotefile import (
    ConnectionAttributes,
    RemoteFileManager,
    RemoteFileTarget,
    RetryPolicy,
)


# How to reach the host. Pin host_key in production; without it any
# server key is accepted and a warning is logged.
attrs = ConnectionAttributes(
    host="files.example.com",
    user="deploy",
    password="s3cret",
    timeout="30s",
)

manager = RemoteFileManager.default()

# Write creates or overwrites the file, then applies the mode
record = manager.write(
    attrs,
    RemoteFileTarget(path="/etc/app.conf", contents=b"debug = false\n", permissions="0640"),
)
print(f"Wrote {record.size} bytes, modified {record.last_modified_rfc3339}")

# Read observes the current contents; allow_missing reports an absent
# file as id "missing" instead of raising
record = manager.read(attrs, RemoteFileTarget(path="/etc/app.conf", allow_missing=True))
print(record.to_state())

# Fewer, quicker retries than the default 10 every 10s
manager.delete(attrs, RemoteFileTarget(path="/etc/app.conf.bak"), RetryPolicy(max_attempts=2))
