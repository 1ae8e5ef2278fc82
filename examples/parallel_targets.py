"""Reconcile several remote files in parallel.

Calls share no state, so different targets can be handled from
different threads. Each thread opens and closes its own session.
"""

from concurrent.futures import ThreadPoolExecutor

from remotefile import (
    ConnectionAttributes,
    RemoteFileManager,
    RemoteFileTarget,
    RichProgressReporter,
)


attrs = ConnectionAttributes(host="files.example.com", user="deploy", password="s3cret")
manager = RemoteFileManager.default()

targets = [
    RemoteFileTarget(path="/srv/app/settings.toml", allow_missing=True),
    RemoteFileTarget(path="/srv/app/secrets.env", allow_missing=True),
    RemoteFileTarget(path="/srv/app/VERSION", allow_missing=True),
]

# One progress display, one bar per remote path
with RichProgressReporter() as progress, ThreadPoolExecutor(max_workers=3) as pool:
    records = list(pool.map(lambda t: manager.read(attrs, t, progress=progress), targets))

for target, record in zip(targets, records, strict=True):
    print(f"{target.path}: {record.identifier} ({record.size} bytes)")
