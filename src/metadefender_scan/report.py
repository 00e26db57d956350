"""Scan report models and the plain-text report renderer.

MetaDefender returns the same report JSON for cached hash lookups and for
finished submissions. This module turns that JSON into a ScanReport and prints
it in a fixed, deterministic layout.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from metadefender_scan.exceptions import ReportParseError

logger = logging.getLogger("metadefender_scan.report")

NO_RESULTS_NOTICE = "No results to display."
END_MARKER = "END"


@dataclass
class EngineFinding:
    """One antivirus engine's result within a report."""

    engine: str
    threat_found: str | None
    scan_result: int
    def_time: str

    @property
    def is_clean(self) -> bool:
        return not self.threat_found

    def to_dict(self) -> dict[str, Any]:
        return {
            "engine": self.engine,
            "threat_found": self.threat_found,
            "scan_result": self.scan_result,
            "def_time": self.def_time,
        }


@dataclass
class ScanReport:
    """Parsed MetaDefender report.

    ``findings`` keeps the order the engines appear in the payload. That order
    is whatever the service returned and is not sorted.
    """

    display_name: str
    verdict: str
    findings: list[EngineFinding] = field(default_factory=list)

    @property
    def infected_count(self) -> int:
        return sum(1 for f in self.findings if not f.is_clean)

    def to_dict(self) -> dict[str, Any]:
        return {
            "display_name": self.display_name,
            "verdict": self.verdict,
            "findings": [f.to_dict() for f in self.findings],
            "infected_count": self.infected_count,
        }


def parse_report(raw: str) -> ScanReport:
    """Parse a report body into a ScanReport.

    Expected format:
        {
          "file_info": {"display_name": "invoice.pdf", ...},
          "scan_results": {
            "scan_all_result_a": "No Threat Detected",
            "scan_details": {
              "ClamAV": {"threat_found": "", "scan_result_i": 0, "def_time": "..."},
              ...
            }
          }
        }
    """
    try:
        root = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ReportParseError(f"Report is not valid JSON: {e}") from e

    file_info = _require_object(root, "file_info", "report")
    display_name = _require_str(file_info, "display_name", "file_info")

    scan_results = _require_object(root, "scan_results", "report")
    verdict = _require_str(scan_results, "scan_all_result_a", "scan_results")
    details = _require_object(scan_results, "scan_details", "scan_results")

    findings = [_parse_finding(name, info) for name, info in details.items()]
    return ScanReport(display_name=display_name, verdict=verdict, findings=findings)


def _parse_finding(engine: str, info: Any) -> EngineFinding:
    if not isinstance(info, dict):
        raise ReportParseError(f"Engine entry for {engine} is not an object")

    if "threat_found" not in info:
        raise ReportParseError(f"Report missing engine {engine}.threat_found")
    threat = info["threat_found"]
    if threat is not None and not isinstance(threat, str):
        raise ReportParseError(f"Invalid threat_found for engine {engine}: {threat!r}")

    scan_result = info.get("scan_result_i")
    if isinstance(scan_result, bool) or not isinstance(scan_result, int):
        raise ReportParseError(f"Invalid scan_result_i for engine {engine}: {scan_result!r}")

    return EngineFinding(
        engine=engine,
        threat_found=threat,
        scan_result=scan_result,
        def_time=_require_str(info, "def_time", f"engine {engine}"),
    )


def _require_object(parent: Any, key: str, context: str) -> dict[str, Any]:
    if not isinstance(parent, dict):
        raise ReportParseError(f"Expected a JSON object for {context}")
    value = parent.get(key)
    if not isinstance(value, dict):
        raise ReportParseError(f"Report missing {context}.{key}")
    return value


def _require_str(parent: dict[str, Any], key: str, context: str) -> str:
    value = parent.get(key)
    if not isinstance(value, str):
        raise ReportParseError(f"Report missing {context}.{key}")
    return value


def format_report(report: ScanReport) -> list[str]:
    """Lay out a report as output lines, engines in payload order."""
    lines = [
        "",
        f"Filename: {report.display_name}",
        f"OverallStatus: {report.verdict}",
    ]
    for finding in report.findings:
        lines.extend(
            [
                f"Engine: {finding.engine}",
                f"ThreatFound: {finding.threat_found or ''}",
                f"ScanResult: {finding.scan_result}",
                f"DefTime: {finding.def_time}",
                "",
            ]
        )
    lines.append(END_MARKER)
    return lines


def render_report(raw: str | None, echo: Callable[[str], None] = print) -> ScanReport | None:
    """Parse and print a report body.

    Blank payloads print a notice without being parsed. Parse errors are
    reported through ``echo`` and never raised, so nothing half-printed
    reaches the output.
    """
    if raw is None or not raw.strip():
        echo(NO_RESULTS_NOTICE)
        return None

    try:
        report = parse_report(raw)
    except ReportParseError as e:
        logger.warning("Could not parse scan report: %s", e)
        echo(f"Error displaying results: {e}")
        return None

    for line in format_report(report):
        echo(line)
    return report
