"""Command-line entry point: ``metadefender-scan FILE_PATH API_KEY``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from metadefender_scan.client import ReputationClient
from metadefender_scan.config import ScanConfig
from metadefender_scan.exceptions import ConfigurationError

EXIT_OK = 0
EXIT_SCAN_FAILED = 1

app = typer.Typer(
    name="metadefender-scan",
    help="Look up a file on MetaDefender Cloud by hash, uploading it if unknown.",
    add_completion=False,
)


@app.command()
def scan(
    file_path: Annotated[Path, typer.Argument(help="File to scan")],
    api_key: Annotated[str, typer.Argument(help="MetaDefender API key")],
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log progress to stderr")
    ] = False,
) -> None:
    """Scan FILE_PATH and print the per-engine report."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        client = ReputationClient(api_key, ScanConfig(), echo=typer.echo)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(EXIT_SCAN_FAILED) from e

    with client:
        outcome = client.scan(file_path)
        if not outcome.succeeded:
            typer.echo(outcome.diagnostic, err=True)
            raise typer.Exit(EXIT_SCAN_FAILED)
        client.render(outcome)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
