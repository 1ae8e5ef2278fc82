"""CLI commands for remotefile."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from remotefile.cli.formatting import observation_json, observation_table
from remotefile.config import attributes_from_mapping, load_attributes
from remotefile.core.exceptions import ConfigError, RemoteFileError
from remotefile.core.models import parse_import_id, resource_id


if TYPE_CHECKING:
    from remotefile.core.services import RemoteFileManager


app = typer.Typer(
    name="remotefile",
    help="Read, write or delete a single file on a remote host over SFTP.",
    no_args_is_help=True,
)

# Options shared by read, write and delete
HOST_ARG = typer.Argument(None, help="Remote hostname or IP address.")
PATH_ARG = typer.Argument(None, help="Path of the file on the remote host.")
ATTRIBUTES_OPT = typer.Option(
    None,
    "--attributes",
    "-a",
    help="JSON file of flat attributes. Command-line values override it.",
    exists=True,
    dir_okay=False,
)
PORT_OPT = typer.Option(None, "--port", "-p", help="SSH port (default 22).")
USER_OPT = typer.Option(None, "--user", "-u", help="Login name.")
PASSWORD_OPT = typer.Option(
    None,
    "--password",
    envvar="REMOTEFILE_PASSWORD",
    help="Password. Takes precedence over a private key.",
)
PRIVATE_KEY_OPT = typer.Option(
    None,
    "--private-key-file",
    "-i",
    envvar="REMOTEFILE_PRIVATE_KEY_FILE",
    help="PEM/OpenSSH private key file.",
    exists=True,
    dir_okay=False,
)
HOST_KEY_OPT = typer.Option(
    None,
    "--host-key-file",
    help="Server public key to pin (authorized_keys format). Without it any key is accepted.",
    exists=True,
    dir_okay=False,
)
TIMEOUT_OPT = typer.Option(None, "--timeout", help="Connect timeout, e.g. '30s' (default 5m).")
RETRY_COUNT_OPT = typer.Option(
    None, "--retry-count", help="Retries after the first try (default 10)."
)
RETRY_INTERVAL_OPT = typer.Option(
    None, "--retry-interval", help="Pause between tries, e.g. '10s' (default 10s)."
)
FAIL_FAST_OPT = typer.Option(
    False,
    "--fail-fast",
    help="Stop retrying as soon as a failure is known to be permanent.",
)
JSON_OPT = typer.Option(False, "--json", help="Print the observation as JSON.")


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def _root(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log connection and retry details."
    ),
) -> None:
    """Read, write or delete a single file on a remote host over SFTP."""
    configure_logging(verbose)


def _create_manager() -> RemoteFileManager:
    """Build the manager used by commands."""
    from remotefile.core.services import RemoteFileManager

    return RemoteFileManager.default()


@contextmanager
def _report_errors() -> Iterator[None]:
    """Turn library errors into a message, a hint and exit code 1."""
    try:
        yield
    except RemoteFileError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.recovery_hint:
            typer.echo(f"Hint: {e.recovery_hint}", err=True)
        raise typer.Exit(1) from None


def _collect_attributes(
    attributes_file: Path | None,
    **overrides: Any,
) -> dict[str, Any]:
    """Merge an attributes file with command-line values."""
    mapping = load_attributes(attributes_file) if attributes_file else {}

    private_key_file = overrides.pop("private_key_file", None)
    if private_key_file is not None:
        overrides["private_key"] = private_key_file.read_text()
    host_key_file = overrides.pop("host_key_file", None)
    if host_key_file is not None:
        overrides["host_key"] = host_key_file.read_bytes()
    if not overrides.get("fail_fast"):
        overrides.pop("fail_fast", None)

    mapping.update({k: v for k, v in overrides.items() if v is not None})
    return mapping


@app.command()
def read(
    host: str | None = HOST_ARG,
    path: str | None = PATH_ARG,
    allow_missing: bool = typer.Option(
        False,
        "--allow-missing",
        help="Report a missing file as id 'missing' and size -1 instead of failing.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the remote contents to this local file.",
        dir_okay=False,
    ),
    as_json: bool = JSON_OPT,
    attributes_file: Path | None = ATTRIBUTES_OPT,
    port: int | None = PORT_OPT,
    user: str | None = USER_OPT,
    password: str | None = PASSWORD_OPT,
    private_key_file: Path | None = PRIVATE_KEY_OPT,
    host_key_file: Path | None = HOST_KEY_OPT,
    timeout: str | None = TIMEOUT_OPT,
    retry_count: int | None = RETRY_COUNT_OPT,
    retry_interval: str | None = RETRY_INTERVAL_OPT,
    fail_fast: bool = FAIL_FAST_OPT,
) -> None:
    """Observe a remote file's contents and metadata."""
    from remotefile.progress import RichProgressReporter

    with _report_errors():
        mapping = _collect_attributes(
            attributes_file,
            host=host,
            path=path,
            allow_missing=allow_missing or None,
            port=port,
            user=user,
            password=password,
            private_key_file=private_key_file,
            host_key_file=host_key_file,
            timeout=timeout,
            retry_count=retry_count,
            retry_interval=retry_interval,
            fail_fast=fail_fast,
        )
        connection, target, policy = attributes_from_mapping(mapping)
        with RichProgressReporter() as progress:
            record = _create_manager().read(
                connection, target, policy, progress=progress
            )

    key = resource_id(connection.host, target.path)
    if output is not None:
        output.write_bytes(record.contents)
    if as_json:
        typer.echo(observation_json(record, key))
    else:
        Console().print(observation_table(record, key))


@app.command()
def write(
    host: str | None = HOST_ARG,
    path: str | None = PATH_ARG,
    contents: str | None = typer.Option(
        None, "--contents", "-c", help="Text to store in the remote file."
    ),
    from_file: Path | None = typer.Option(
        None,
        "--from-file",
        "-f",
        help="Local file whose bytes are stored in the remote file.",
        exists=True,
        dir_okay=False,
    ),
    permissions: str | None = typer.Option(
        None, "--permissions", "-m", help="Octal mode to apply, e.g. '0644'."
    ),
    as_json: bool = JSON_OPT,
    attributes_file: Path | None = ATTRIBUTES_OPT,
    port: int | None = PORT_OPT,
    user: str | None = USER_OPT,
    password: str | None = PASSWORD_OPT,
    private_key_file: Path | None = PRIVATE_KEY_OPT,
    host_key_file: Path | None = HOST_KEY_OPT,
    timeout: str | None = TIMEOUT_OPT,
    retry_count: int | None = RETRY_COUNT_OPT,
    retry_interval: str | None = RETRY_INTERVAL_OPT,
    fail_fast: bool = FAIL_FAST_OPT,
) -> None:
    """Create or overwrite a remote file."""
    from remotefile.progress import RichProgressReporter

    if contents is not None and from_file is not None:
        typer.echo("Error: --contents and --from-file are mutually exclusive.", err=True)
        raise typer.Exit(1)

    with _report_errors():
        data = from_file.read_bytes() if from_file is not None else contents
        mapping = _collect_attributes(
            attributes_file,
            host=host,
            path=path,
            contents=data,
            permissions=permissions,
            port=port,
            user=user,
            password=password,
            private_key_file=private_key_file,
            host_key_file=host_key_file,
            timeout=timeout,
            retry_count=retry_count,
            retry_interval=retry_interval,
            fail_fast=fail_fast,
        )
        if "contents" not in mapping:
            raise ConfigError("missing contents")
        connection, target, policy = attributes_from_mapping(mapping)
        with RichProgressReporter() as progress:
            record = _create_manager().write(
                connection, target, policy, progress=progress
            )

    key = resource_id(connection.host, target.path)
    if as_json:
        typer.echo(observation_json(record, key))
    else:
        Console().print(observation_table(record, key))


@app.command()
def delete(
    host: str | None = HOST_ARG,
    path: str | None = PATH_ARG,
    attributes_file: Path | None = ATTRIBUTES_OPT,
    port: int | None = PORT_OPT,
    user: str | None = USER_OPT,
    password: str | None = PASSWORD_OPT,
    private_key_file: Path | None = PRIVATE_KEY_OPT,
    host_key_file: Path | None = HOST_KEY_OPT,
    timeout: str | None = TIMEOUT_OPT,
    retry_count: int | None = RETRY_COUNT_OPT,
    retry_interval: str | None = RETRY_INTERVAL_OPT,
    fail_fast: bool = FAIL_FAST_OPT,
) -> None:
    """Delete a remote file. Deleting a missing file succeeds."""
    with _report_errors():
        mapping = _collect_attributes(
            attributes_file,
            host=host,
            path=path,
            port=port,
            user=user,
            password=password,
            private_key_file=private_key_file,
            host_key_file=host_key_file,
            timeout=timeout,
            retry_count=retry_count,
            retry_interval=retry_interval,
            fail_fast=fail_fast,
        )
        connection, target, policy = attributes_from_mapping(mapping)
        _create_manager().delete(connection, target, policy)

    typer.echo(f"Deleted {resource_id(connection.host, target.path)}")


@app.command(name="import-id")
def import_id(
    value: str = typer.Argument(..., help="Resource id in the form 'host:path'."),
    as_json: bool = typer.Option(False, "--json", help="Print host and path as JSON."),
) -> None:
    """Split a 'host:path' resource id into its host and path."""
    with _report_errors():
        host, path = parse_import_id(value)

    if as_json:
        typer.echo(json.dumps({"id": value, "host": host, "path": path}))
    else:
        typer.echo(f"host: {host}")
        typer.echo(f"path: {path}")


def main() -> None:
    """Entry point for the CLI."""
    app()
