"""Basic file reputation lookup with MetaDefender Cloud.

Looks the file up by hash and uploads it only if MetaDefender has not seen it.

Usage:
    python examples/basic_file_scan.py <file> <api_key>
"""

import sys

from metadefender_scan import ReputationClient

if len(sys.argv) != 3:
    print("Usage: python examples/basic_file_scan.py <file> <api_key>")
    sys.exit(2)

file_path, api_key = sys.argv[1], sys.argv[2]

with ReputationClient(api_key) as client:
    print(f"Scanning: {file_path}")
    outcome = client.scan(file_path)

    if not outcome.succeeded:
        print(outcome.diagnostic)
        sys.exit(1)

    print(f"SHA-256: {outcome.digest[:16]}...")
    print(f"Cached: {outcome.cache_hit}")
    print(f"Duration: {outcome.duration_ms}ms")

    report = client.render(outcome)
    if report is not None and report.infected_count:
        print(f"\n{report.infected_count} of {len(report.findings)} engines flagged this file.")
