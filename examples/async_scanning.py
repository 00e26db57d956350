"""Async scanning pattern.

Uses the async API inside an existing event loop, e.g. from a web handler.
Files are scanned one after another; the client issues one request at a time.

Usage:
    python examples/async_scanning.py <api_key> <file> [<file> ...]
"""

import asyncio
import sys

from metadefender_scan import ReputationClient
from metadefender_scan.exceptions import ReportParseError
from metadefender_scan.report import parse_report


async def main(api_key: str, files: list[str]) -> None:
    async with ReputationClient(api_key, echo=lambda _: None) as client:
        for path in files:
            outcome = await client.scan_async(path)
            if not outcome.succeeded:
                print(f"  ERROR: {path} → {outcome.diagnostic}")
                continue
            try:
                report = parse_report(outcome.payload)
            except ReportParseError as e:
                print(f"  UNREADABLE: {path} → {e}")
                continue
            print(f"  {report.verdict}: {path} ({report.infected_count} detections)")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python examples/async_scanning.py <api_key> <file> [<file> ...]")
        sys.exit(2)
    asyncio.run(main(sys.argv[1], sys.argv[2:]))
