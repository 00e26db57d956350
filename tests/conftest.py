"""Shared test fixtures for the metadefender-scan test suite."""

from __future__ import annotations

import json
import os
from typing import Any

import pytest

from metadefender_scan.config import ScanConfig

TEST_API_KEY = "test-metadefender-key-12345"


@pytest.fixture
def config() -> ScanConfig:
    """Config with short, predictable polling bounds and no env lookup."""
    return ScanConfig(
        poll_interval=10,
        max_wait=300,
        max_poll_failures=3,
        _loaded=True,
    )


@pytest.fixture
def sample_file(tmp_path):
    f = tmp_path / "invoice.pdf"
    f.write_bytes(b"%PDF-1.0 test content")
    return f


# ---------------------------------------------------------------------------
# Sample MetaDefender responses
# ---------------------------------------------------------------------------

SUBMIT_JSON = json.dumps(
    {
        "data_id": "abc123",
        "status": "inqueue",
        "in_queue": 1,
        "queue_priority": "normal",
    }
)


def make_report(
    progress: int = 100,
    display_name: str = "invoice.pdf",
    verdict: str = "Infected",
    details: dict[str, Any] | None = None,
) -> str:
    """Build a report body in the shape MetaDefender returns for /file and /hash."""
    if details is None:
        details = {
            "ClamAV": {
                "threat_found": "Trojan.Generic",
                "scan_result_i": 1,
                "def_time": "2026-10-18T08:00:00.000Z",
            },
            "Avira": {
                "threat_found": "",
                "scan_result_i": 0,
                "def_time": "2026-10-18T09:30:00.000Z",
            },
        }
    return json.dumps(
        {
            "data_id": "abc123",
            "file_info": {"display_name": display_name, "file_size": 21},
            "scan_results": {
                "progress_percentage": progress,
                "scan_all_result_a": verdict,
                "scan_all_result_i": 1,
                "scan_details": details,
            },
        }
    )


@pytest.fixture
def complete_report() -> str:
    return make_report()


# ---------------------------------------------------------------------------
# aiohttp stand-ins
# ---------------------------------------------------------------------------


class FakeResponse:
    """Async context manager mimicking aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, body: str = "") -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args: object) -> bool:
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses: FakeResponse | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, kwargs)

    async def close(self) -> None:
        self.closed = True

    def _next(self, method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    """Monotonic clock that only advances when the scanner sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Live API gating
# ---------------------------------------------------------------------------


def has_real_api_key() -> bool:
    """Check if a real MetaDefender key is available for integration tests."""
    return bool(os.getenv("METADEFENDER_API_KEY"))


skip_no_api_key = pytest.mark.skipif(
    not has_real_api_key(),
    reason="METADEFENDER_API_KEY not set",
)
