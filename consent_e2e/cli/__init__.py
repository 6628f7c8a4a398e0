"""Command-line interface for the consent cookie suite."""

from .main import app, cli_main

__all__ = ["app", "cli_main"]
