#!/usr/bin/env python3
"""Command-line entry point for the consent cookie suite using Typer.

Provides helpers around the browser tests: inspecting the cookie expectation
registry, decoding consent cookie values and analyzing exported run records.
"""

import json
import logging
from enum import IntEnum
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .. import __version__
from ..cookies.analysis import analyze_directory, format_analysis
from ..cookies.config import ConfigLoadError, load_suite_config
from ..cookies.decoder import decode_consent_value


class ExitCode(IntEnum):
    """CLI exit codes."""
    SUCCESS = 0
    NOT_FOUND = 1         # Requested project or records not found
    CONFIG_ERROR = 3      # Configuration or setup error


app = typer.Typer(
    name="consent-e2e",
    help="Cookie consent suite - expectation registry and run analysis tools",
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main():
    """
    Cookie consent suite tools.

    The browser scenarios themselves run under pytest; these commands help
    author and review the cookie expectations they validate against.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"consent-e2e v{__version__}")


@app.command()
def expectations(
    project: Annotated[
        Optional[str],
        typer.Argument(help="Execution project name (omit to list all)")
    ] = None,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Suite configuration file")
    ] = None,

    env: Annotated[
        Optional[str],
        typer.Option("--env", "-e", help="Configuration environment")
    ] = None,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging")
    ] = False,
):
    """Show the cookies expected for an execution project."""
    _configure_logging(verbose)

    try:
        config = load_suite_config(
            str(config_file) if config_file else None,
            environment=env,
        )
    except ConfigLoadError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    registry = config.registry
    projects = [project] if project else registry.environments

    for name in projects:
        expected = registry.lookup(name)
        if expected is None:
            typer.echo(f"⚠️  No validation rules defined for project: {name}", err=True)
            raise typer.Exit(code=ExitCode.NOT_FOUND.value)

        typer.echo(f"{name}:")
        for cookie in expected.required_cookies:
            typer.echo(f"   required  {cookie}")
        for cookie in expected.optional_cookies:
            typer.echo(f"   optional  {cookie}")


@app.command()
def decode(
    value: Annotated[
        str,
        typer.Argument(help="Raw consent cookie value")
    ],

    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print flags as JSON")
    ] = False,
):
    """Decode a consent cookie value into consent flags."""
    flags = decode_consent_value(value)

    if json_output:
        typer.echo(json.dumps(flags.model_dump(), indent=2))
        return

    for name, granted in flags.model_dump().items():
        typer.echo(f"   {'✅' if granted else '❌'} {name}: {'yes' if granted else 'no'}")


@app.command()
def analyze(
    directory: Annotated[
        Path,
        typer.Argument(help="Directory containing exported run records (*.json)")
    ] = Path("data-export"),

    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print analysis as JSON")
    ] = False,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging")
    ] = False,
):
    """Analyze exported customization runs per execution project."""
    _configure_logging(verbose)

    try:
        results = analyze_directory(directory)
    except FileNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=ExitCode.NOT_FOUND.value)

    if results is None:
        typer.echo(f"⚠️  No run records found in {directory}", err=True)
        raise typer.Exit(code=ExitCode.NOT_FOUND.value)

    if json_output:
        payload = {project: analysis.model_dump() for project, analysis in results.items()}
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(format_analysis(results))


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    app()
