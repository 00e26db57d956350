"""MetaDefender Cloud API client for hash lookups and file analysis.

MetaDefender uses a lookup-then-submit-then-poll pattern:
1. Look up the file's SHA-256 to see if a report is already cached
2. Otherwise upload the file via multipart/form-data POST and get a data_id
3. Poll the data_id until scan_results.progress_percentage reaches 100

Auth is passed in an ``apikey`` header, and responses are JSON. Each method
is a single request/response cycle; retry decisions belong to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp

from metadefender_scan.config import ScanConfig
from metadefender_scan.exceptions import (
    FileErrorKind,
    FileReadError,
    HttpStatusError,
    TransportError,
)
from metadefender_scan.metadefender.json_parser import parse_submit_response
from metadefender_scan.metadefender.models import ProbeResult, SubmitResult

logger = logging.getLogger("metadefender_scan.metadefender")


class MetaDefenderClient:
    """Client for the MetaDefender Cloud v4 API.

    Handles hash lookups, file submission and report retrieval.
    """

    def __init__(self, config: ScanConfig, api_key: str) -> None:
        self._config = config
        self._base_url = config.api_root
        self._api_key = api_key
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout)
            )
        return self._session

    @property
    def _headers(self) -> dict[str, str]:
        return {"apikey": self._api_key}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def probe_by_digest(self, digest: str) -> ProbeResult:
        """Check whether MetaDefender already holds a report for a hash.

        Any non-2xx status (404 included) means "not cached". Only transport
        failures raise.
        """
        session = await self._get_session()
        url = f"{self._base_url}/hash/{digest}"
        logger.debug("Looking up hash: %s", digest[:16])

        try:
            async with session.get(url, headers=self._headers) as resp:
                found = 200 <= resp.status < 300
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"MetaDefender HTTP error during hash lookup: {e}") from e

        logger.info("Hash lookup for %s: %s", digest[:16], "hit" if found else "miss")
        return ProbeResult.FOUND if found else ProbeResult.NOT_FOUND

    async def submit(
        self,
        file: str | Path,
        filename: str | None = None,
    ) -> SubmitResult:
        """Upload a file to MetaDefender for analysis.

        Args:
            file: Path of the file to upload. It is streamed, not buffered.
            filename: Optional filename override sent with the upload.

        Returns:
            SubmitResult carrying the data_id to poll.
        """
        session = await self._get_session()
        file_path = Path(file)
        resolved_filename = filename or file_path.name
        url = f"{self._base_url}/file"

        try:
            fh = file_path.open("rb")
        except FileNotFoundError as e:
            raise FileReadError(f"File not found: {file_path}", kind=FileErrorKind.NOT_FOUND) from e
        except PermissionError as e:
            raise FileReadError(
                f"Permission denied: {file_path}", kind=FileErrorKind.PERMISSION_DENIED
            ) from e
        except OSError as e:
            raise FileReadError(f"I/O error opening {file_path}: {e}") from e

        logger.info("Submitting file to MetaDefender: %s", resolved_filename)

        with fh:
            data = aiohttp.FormData()
            data.add_field(
                "file",
                fh,
                filename=resolved_filename,
                content_type="application/octet-stream",
            )
            try:
                async with session.post(url, data=data, headers=self._headers) as resp:
                    body = await resp.text()
                    if not 200 <= resp.status < 300:
                        raise HttpStatusError(
                            f"MetaDefender submit failed with HTTP {resp.status}",
                            status_code=resp.status,
                            details={"response_body": body[:500]},
                        )
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
                raise TransportError(f"MetaDefender HTTP error during submit: {e}") from e

        return parse_submit_response(body)

    async def fetch_by_digest(self, digest: str) -> str:
        """Fetch the cached report for a hash. Returns the raw JSON body."""
        url = f"{self._base_url}/hash/{digest}"
        logger.debug("Fetching cached report for hash: %s", digest[:16])
        return await self._fetch(url, "cached report fetch")

    async def fetch_by_submission(self, data_id: str) -> str:
        """Fetch the report for a submission. Returns the raw JSON body."""
        url = f"{self._base_url}/file/{data_id}"
        logger.debug("Polling MetaDefender report for data_id: %s", data_id)
        return await self._fetch(url, "report fetch")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _fetch(self, url: str, context: str) -> str:
        session = await self._get_session()
        try:
            async with session.get(url, headers=self._headers) as resp:
                body = await resp.text()
                if not 200 <= resp.status < 300:
                    raise HttpStatusError(
                        f"MetaDefender {context} failed with HTTP {resp.status}",
                        status_code=resp.status,
                        details={"response_body": body[:500]},
                    )
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            raise TransportError(f"MetaDefender HTTP error during {context}: {e}") from e

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> MetaDefenderClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"MetaDefenderClient(base_url={self._base_url!r})"
