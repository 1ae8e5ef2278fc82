"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text


if TYPE_CHECKING:
    from remotefile.core.models import ObservationRecord


def _format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable format."""
    if size_bytes < 0:
        return "absent"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def observation_state(record: ObservationRecord, resource_key: str) -> dict[str, Any]:
    """Observation fields plus the "<host>:<path>" resource key."""
    state = record.to_state()
    state["resource_id"] = resource_key
    return state


def observation_json(record: ObservationRecord, resource_key: str) -> str:
    """Render an observation as indented JSON."""
    return json.dumps(observation_state(record, resource_key), indent=2)


def observation_table(record: ObservationRecord, resource_key: str) -> Table:
    """Render an observation's metadata as a two-column Rich table."""
    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")

    ident = Text(record.identifier, style="red") if record.is_missing else Text(record.identifier)
    table.add_row("id", ident)
    table.add_row("resource", resource_key)
    table.add_row("size", _format_size(record.size))
    table.add_row("last modified", record.last_modified_rfc3339)
    return table
