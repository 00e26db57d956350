"""Event loop bridge for the blocking entry points.

ReputationClient.scan, ReputationClient.close and FileScanner.scan are plain
functions wrapping coroutines. Each call runs on its own event loop, so the
caller must not carry an aiohttp session from one call into the next.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion and return its result.

    Works from a script (no loop running) and from inside a running loop,
    such as a notebook, where the coroutine is handed to a worker thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
