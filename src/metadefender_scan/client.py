"""ReputationClient, the main entry point for the MetaDefender scan client.

This client wires configuration, the MetaDefender API client and the scan
state machine together behind one object.

Usage:
    from metadefender_scan import ReputationClient

    with ReputationClient(api_key) as client:
        outcome = client.scan("suspicious.exe")
        if outcome.succeeded:
            client.render(outcome)  # prints the per-engine report
        else:
            print(outcome.diagnostic)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from metadefender_scan.config import ScanConfig
from metadefender_scan.exceptions import ConfigurationError
from metadefender_scan.metadefender.client import MetaDefenderClient
from metadefender_scan.report import ScanReport, render_report
from metadefender_scan.scanner import FileScanner, ScanOutcome
from metadefender_scan.utils.aio import run_async

logger = logging.getLogger("metadefender_scan")


class ReputationClient:
    """File reputation client for MetaDefender Cloud.

    Reuses a cached report when the file's hash is already known to the
    service, and otherwise uploads the file and waits for the analysis.
    """

    def __init__(
        self,
        api_key: str,
        config: ScanConfig | None = None,
        *,
        echo: Callable[[str], None] = print,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: MetaDefender API key. Sent only in the ``apikey`` header.
            config: Full ScanConfig object. If not provided, auto-loads from env.
            echo: Where status lines and rendered reports are written.
        """
        if not api_key:
            raise ConfigurationError("An API key is required to scan files.")

        self._config = config if config is not None else ScanConfig()
        self._config.validate()
        self._echo = echo

        self._service = MetaDefenderClient(self._config, api_key)
        self._scanner = FileScanner(self._service, self._config, echo=echo)

        logger.info("ReputationClient initialized, endpoint: %s", self._config.api_root)

    # ------------------------------------------------------------------
    # Primary API
    # ------------------------------------------------------------------

    def scan(self, file: str | Path) -> ScanOutcome:
        """Scan a file and wait for a complete report.

        Args:
            file: Path of the file to scan.

        Returns:
            ScanOutcome in state DONE with the report payload, or FAILED with
            a failure reason and diagnostic.
        """
        return self._scanner.scan(file)

    async def scan_async(self, file: str | Path) -> ScanOutcome:
        """Async version of scan(). The session stays open until close_async()."""
        return await self._scanner.scan_async(file)

    def render(self, outcome: ScanOutcome) -> ScanReport | None:
        """Print the report carried by a successful outcome."""
        if not outcome.succeeded:
            self._echo(outcome.diagnostic)
            return None
        return render_report(outcome.payload, self._echo)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close_async(self) -> None:
        """Close the HTTP session (async)."""
        await self._service.close()

    def close(self) -> None:
        """Close the HTTP session."""
        run_async(self.close_async())

    def __enter__(self) -> ReputationClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    async def __aenter__(self) -> ReputationClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close_async()

    def __repr__(self) -> str:
        return f"ReputationClient(endpoint={self._config.api_root!r})"
