"""Parse MetaDefender JSON API responses.

Only the fields the client depends on are validated here; the full report
body is handed to the renderer untouched.
"""

from __future__ import annotations

import json
from typing import Any

from metadefender_scan.exceptions import ShapeViolationError
from metadefender_scan.metadefender.models import ProgressResult, SubmitResult


def parse_submit_response(body: str) -> SubmitResult:
    """Parse the JSON response from POST /file.

    Expected format:
        {"data_id": "bzIyMDQwN...", "status": "inqueue", "in_queue": 1, ...}
    """
    root = _load_object(body, "submit")

    data_id = root.get("data_id")
    if not isinstance(data_id, str) or not data_id:
        raise ShapeViolationError(
            "MetaDefender submit response missing data_id",
            details={"response_body": body[:500]},
        )

    in_queue = root.get("in_queue")
    return SubmitResult(
        data_id=data_id,
        status=str(root.get("status") or ""),
        in_queue=in_queue if isinstance(in_queue, int) else None,
    )


def parse_progress_response(body: str) -> ProgressResult:
    """Parse the JSON response from GET /file/{data_id}.

    Expected format:
        {"scan_results": {"progress_percentage": 40, ...}, "file_info": {...}}
    """
    root = _load_object(body, "progress")

    scan_results = root.get("scan_results")
    if not isinstance(scan_results, dict):
        raise ShapeViolationError(
            "MetaDefender progress response missing scan_results",
            details={"response_body": body[:500]},
        )

    progress = scan_results.get("progress_percentage")
    # bool is an int subclass; reject it explicitly
    if isinstance(progress, bool) or not isinstance(progress, int):
        raise ShapeViolationError(
            f"Invalid progress_percentage: {progress!r}",
            details={"response_body": body[:500]},
        )
    if not 0 <= progress <= 100:
        raise ShapeViolationError(f"progress_percentage out of range: {progress}")

    return ProgressResult(progress=progress, body=body)


def _load_object(body: str, context: str) -> dict[str, Any]:
    try:
        root = json.loads(body)
    except json.JSONDecodeError as e:
        raise ShapeViolationError(
            f"Failed to parse MetaDefender {context} response JSON: {e}",
            details={"response_body": body[:500]},
        ) from e

    if not isinstance(root, dict):
        raise ShapeViolationError(
            f"MetaDefender {context} response is not a JSON object",
            details={"response_body": body[:500]},
        )
    return root
