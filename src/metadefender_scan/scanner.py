"""Scan orchestration: hash, look up, submit if needed, poll until complete.

The scan is an explicit state machine. Each non-terminal ScanState has one
handler that does a single step of work and returns the next state:

    INIT -> PROBING_CACHE -+-> FETCHING ---------------> DONE
                           +-> SUBMITTING -> POLLING --> DONE
    (any step)                                       --> FAILED

This is the only place that decides whether an error ends the run or is
tolerated. Failures in INIT, PROBING_CACHE, FETCHING and SUBMITTING are fatal.
Failures while POLLING are counted and tolerated until either
``max_poll_failures`` consecutive failures or ``max_wait`` seconds of polling.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from metadefender_scan.config import ScanConfig
from metadefender_scan.digest import compute_digest
from metadefender_scan.exceptions import FileReadError, ScanTimeoutError, ServiceError
from metadefender_scan.metadefender.client import MetaDefenderClient
from metadefender_scan.metadefender.json_parser import parse_progress_response
from metadefender_scan.metadefender.models import ProbeResult
from metadefender_scan.utils.aio import run_async

logger = logging.getLogger("metadefender_scan.scanner")

CACHE_HIT_MESSAGE = "Cached results found!"
CACHE_MISS_MESSAGE = "Cached results not found! Wait for results."


class ScanState(str, Enum):
    """States of a single file scan."""

    INIT = "init"
    PROBING_CACHE = "probing_cache"
    FETCHING = "fetching"
    SUBMITTING = "submitting"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ScanState.DONE, ScanState.FAILED})


class FailureReason(str, Enum):
    """Why a scan ended in FAILED."""

    FILE_UNREADABLE = "file_unreadable"
    CACHE_PROBE_FAILED = "cache_probe_failed"
    CACHE_FETCH_FAILED = "cache_fetch_failed"
    SUBMIT_FAILED = "submit_failed"
    POLL_FAILED = "poll_failed"
    POLL_TIMED_OUT = "poll_timed_out"

    @property
    def operation(self) -> str:
        return _FAILURE_OPERATIONS[self]


_FAILURE_OPERATIONS: dict[FailureReason, str] = {
    FailureReason.FILE_UNREADABLE: "reading file",
    FailureReason.CACHE_PROBE_FAILED: "performing hash lookup",
    FailureReason.CACHE_FETCH_FAILED: "retrieving cached results",
    FailureReason.SUBMIT_FAILED: "uploading file",
    FailureReason.POLL_FAILED: "polling API for scan result",
    FailureReason.POLL_TIMED_OUT: "polling API for scan result",
}


@dataclass
class ScanOutcome:
    """Terminal result of a scan.

    ``payload`` is only set when ``state`` is DONE, and is then always a
    complete report. ``failure_reason`` and ``error`` are only set on FAILED.
    """

    state: ScanState
    file_path: str
    digest: str = ""
    cache_hit: bool | None = None
    submission_id: str = ""
    payload: str = ""
    failure_reason: FailureReason | None = None
    error: Exception | None = None
    poll_attempts: int = 0
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state == ScanState.DONE

    @property
    def diagnostic(self) -> str:
        """One-line description of the failure, naming the failed operation."""
        if self.failure_reason is None:
            return ""
        return f"Error {self.failure_reason.operation}: {self.error}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "file_path": self.file_path,
            "digest": self.digest,
            "cache_hit": self.cache_hit,
            "submission_id": self.submission_id,
            "failure_reason": self.failure_reason.value if self.failure_reason else None,
            "error": str(self.error) if self.error else None,
            "poll_attempts": self.poll_attempts,
            "duration_ms": self.duration_ms,
        }


@dataclass
class _ScanRun:
    """Mutable context carried between state handlers for one scan."""

    file_path: Path
    state: ScanState = ScanState.INIT
    digest: str = ""
    cache_hit: bool | None = None
    submission_id: str = ""
    payload: str = ""
    failure_reason: FailureReason | None = None
    error: Exception | None = None
    poll_attempts: int = 0
    consecutive_failures: int = 0
    poll_started: float = 0.0

    def fail(self, reason: FailureReason, error: Exception) -> ScanState:
        self.failure_reason = reason
        self.error = error
        return ScanState.FAILED

    def to_outcome(self, duration_ms: int) -> ScanOutcome:
        return ScanOutcome(
            state=self.state,
            file_path=str(self.file_path),
            digest=self.digest,
            cache_hit=self.cache_hit,
            submission_id=self.submission_id,
            payload=self.payload if self.state == ScanState.DONE else "",
            failure_reason=self.failure_reason,
            error=self.error,
            poll_attempts=self.poll_attempts,
            duration_ms=duration_ms,
        )


class FileScanner:
    """Drives one file through the MetaDefender lookup/submit/poll cycle.

    Args:
        service: MetaDefender API client.
        config: Poll interval and polling bounds.
        sleep: Awaitable used between polls (injectable for tests).
        clock: Monotonic clock used for the polling deadline.
        echo: Optional callback for user-facing status lines.
    """

    def __init__(
        self,
        service: MetaDefenderClient,
        config: ScanConfig,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        self._service = service
        self._config = config
        self._sleep = sleep
        self._clock = clock
        self._echo = echo
        self._handlers: dict[ScanState, Callable[[_ScanRun], Awaitable[ScanState]]] = {
            ScanState.INIT: self._compute_digest,
            ScanState.PROBING_CACHE: self._probe_cache,
            ScanState.FETCHING: self._fetch_cached,
            ScanState.SUBMITTING: self._submit,
            ScanState.POLLING: self._poll,
        }

    async def scan_async(self, file: str | Path) -> ScanOutcome:
        """Run the state machine to completion for one file."""
        run = _ScanRun(file_path=Path(file))
        start_time = self._clock()

        while run.state not in TERMINAL_STATES:
            next_state = await self._handlers[run.state](run)
            logger.debug("Scan state %s -> %s", run.state.value, next_state.value)
            run.state = next_state

        duration_ms = int((self._clock() - start_time) * 1000)
        outcome = run.to_outcome(duration_ms)
        if outcome.succeeded:
            logger.info(
                "Scan of %s finished (%s) in %.1fs",
                run.file_path.name,
                "cached" if run.cache_hit else f"{run.poll_attempts} polls",
                duration_ms / 1000,
            )
        else:
            logger.info("Scan of %s failed: %s", run.file_path.name, outcome.diagnostic)
        return outcome

    def scan(self, file: str | Path) -> ScanOutcome:
        """Synchronous wrapper for scan_async. Closes the HTTP session afterwards."""
        return run_async(self._scan_and_close(file))

    async def _scan_and_close(self, file: str | Path) -> ScanOutcome:
        # run_async gives each call its own event loop, and the session is
        # bound to the loop it was created on
        try:
            return await self.scan_async(file)
        finally:
            await self._service.close()

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    async def _compute_digest(self, run: _ScanRun) -> ScanState:
        try:
            run.digest = compute_digest(run.file_path)
        except FileReadError as e:
            return run.fail(FailureReason.FILE_UNREADABLE, e)
        return ScanState.PROBING_CACHE

    async def _probe_cache(self, run: _ScanRun) -> ScanState:
        try:
            probe = await self._service.probe_by_digest(run.digest)
        except ServiceError as e:
            return run.fail(FailureReason.CACHE_PROBE_FAILED, e)

        run.cache_hit = probe == ProbeResult.FOUND
        if run.cache_hit:
            self._notify(CACHE_HIT_MESSAGE)
            return ScanState.FETCHING
        self._notify(CACHE_MISS_MESSAGE)
        return ScanState.SUBMITTING

    async def _fetch_cached(self, run: _ScanRun) -> ScanState:
        # Cached reports are always complete, so no progress check here
        try:
            run.payload = await self._service.fetch_by_digest(run.digest)
        except ServiceError as e:
            return run.fail(FailureReason.CACHE_FETCH_FAILED, e)
        return ScanState.DONE

    async def _submit(self, run: _ScanRun) -> ScanState:
        try:
            result = await self._service.submit(run.file_path)
        except (ServiceError, FileReadError) as e:
            return run.fail(FailureReason.SUBMIT_FAILED, e)

        run.submission_id = result.data_id
        run.poll_started = self._clock()
        logger.info("File submitted. data_id: %s", result.data_id)
        return ScanState.POLLING

    async def _poll(self, run: _ScanRun) -> ScanState:
        """One polling iteration. No sleep precedes the first fetch."""
        if run.poll_attempts:
            elapsed = self._clock() - run.poll_started
            if elapsed >= self._config.max_wait:
                return run.fail(
                    FailureReason.POLL_TIMED_OUT,
                    ScanTimeoutError(
                        f"timed out waiting for analysis of {run.submission_id} "
                        f"after {elapsed:.0f}s",
                        elapsed_seconds=elapsed,
                        details={"data_id": run.submission_id},
                    ),
                )
            await self._sleep(self._config.poll_interval)

        run.poll_attempts += 1
        try:
            body = await self._service.fetch_by_submission(run.submission_id)
            progress = parse_progress_response(body)
        except ServiceError as e:
            run.consecutive_failures += 1
            logger.warning(
                "Failed to retrieve scan result (%d/%d consecutive): %s",
                run.consecutive_failures,
                self._config.max_poll_failures,
                e,
            )
            if run.consecutive_failures >= self._config.max_poll_failures:
                return run.fail(FailureReason.POLL_FAILED, e)
            return ScanState.POLLING

        run.consecutive_failures = 0
        if progress.is_complete:
            run.payload = progress.body
            return ScanState.DONE

        logger.debug(
            "Analysis %s at %d%%, waiting %ds...",
            run.submission_id,
            progress.progress,
            self._config.poll_interval,
        )
        return ScanState.POLLING

    def _notify(self, message: str) -> None:
        if self._echo is not None:
            self._echo(message)
