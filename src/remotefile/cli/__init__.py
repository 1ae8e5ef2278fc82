"""CLI for remotefile."""

from remotefile.cli.main import app, main


__all__ = ["app", "main"]
