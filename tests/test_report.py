"""Tests for report parsing and rendering."""

import json

import pytest

from metadefender_scan.exceptions import ReportParseError
from metadefender_scan.report import (
    END_MARKER,
    NO_RESULTS_NOTICE,
    EngineFinding,
    ScanReport,
    format_report,
    parse_report,
    render_report,
)
from tests.conftest import make_report


class TestParseReport:
    def test_parse_complete_report(self, complete_report) -> None:
        report = parse_report(complete_report)
        assert report.display_name == "invoice.pdf"
        assert report.verdict == "Infected"
        assert [f.engine for f in report.findings] == ["ClamAV", "Avira"]
        assert report.findings[0].threat_found == "Trojan.Generic"
        assert report.findings[0].scan_result == 1
        assert not report.findings[0].is_clean
        assert report.findings[1].is_clean
        assert report.infected_count == 1

    def test_keeps_payload_order(self) -> None:
        details = {
            name: {"threat_found": None, "scan_result_i": 0, "def_time": "t"}
            for name in ["Zillya", "Avast", "McAfee"]
        }
        report = parse_report(make_report(details=details))
        assert [f.engine for f in report.findings] == ["Zillya", "Avast", "McAfee"]

    def test_null_threat_is_clean(self) -> None:
        details = {"K7": {"threat_found": None, "scan_result_i": 0, "def_time": "t"}}
        report = parse_report(make_report(details=details))
        assert report.findings[0].threat_found is None
        assert report.findings[0].is_clean

    def test_empty_threat_is_clean(self) -> None:
        details = {"K7": {"threat_found": "", "scan_result_i": 0, "def_time": "t"}}
        report = parse_report(make_report(details=details))
        assert report.findings[0].threat_found == ""
        assert report.findings[0].is_clean

    def test_missing_threat_found_is_rejected(self) -> None:
        details = {"ClamAV": {"scan_result_i": 1, "def_time": "t"}}
        with pytest.raises(ReportParseError, match="ClamAV.threat_found"):
            parse_report(make_report(details=details))

    def test_empty_scan_details(self) -> None:
        report = parse_report(make_report(details={}))
        assert report.findings == []

    def test_missing_display_name(self) -> None:
        body = json.loads(make_report())
        del body["file_info"]["display_name"]
        with pytest.raises(ReportParseError, match="file_info.display_name"):
            parse_report(json.dumps(body))

    def test_missing_verdict(self) -> None:
        body = json.loads(make_report())
        del body["scan_results"]["scan_all_result_a"]
        with pytest.raises(ReportParseError, match="scan_all_result_a"):
            parse_report(json.dumps(body))

    def test_missing_scan_details(self) -> None:
        body = json.loads(make_report())
        del body["scan_results"]["scan_details"]
        with pytest.raises(ReportParseError, match="scan_details"):
            parse_report(json.dumps(body))

    def test_invalid_engine_result_code(self) -> None:
        details = {"ClamAV": {"threat_found": "", "scan_result_i": "one", "def_time": "t"}}
        with pytest.raises(ReportParseError, match="scan_result_i"):
            parse_report(make_report(details=details))

    def test_missing_def_time(self) -> None:
        details = {"ClamAV": {"threat_found": "", "scan_result_i": 0}}
        with pytest.raises(ReportParseError, match="def_time"):
            parse_report(make_report(details=details))

    def test_invalid_json(self) -> None:
        with pytest.raises(ReportParseError, match="not valid JSON"):
            parse_report("{truncated")

    def test_non_object_root(self) -> None:
        with pytest.raises(ReportParseError):
            parse_report("[]")


class TestFormatReport:
    def test_layout(self) -> None:
        report = ScanReport(
            display_name="a.exe",
            verdict="No Threat Detected",
            findings=[EngineFinding("Avira", None, 0, "2026-10-18")],
        )
        assert format_report(report) == [
            "",
            "Filename: a.exe",
            "OverallStatus: No Threat Detected",
            "Engine: Avira",
            "ThreatFound: ",
            "ScanResult: 0",
            "DefTime: 2026-10-18",
            "",
            END_MARKER,
        ]

    def test_to_dict(self) -> None:
        report = parse_report(make_report())
        data = report.to_dict()
        assert data["display_name"] == "invoice.pdf"
        assert data["infected_count"] == 1
        assert data["findings"][0]["engine"] == "ClamAV"


class TestRenderReport:
    def test_renders_two_engines_in_payload_order(self, complete_report) -> None:
        out: list[str] = []
        report = render_report(complete_report, out.append)

        assert report is not None
        assert out == [
            "",
            "Filename: invoice.pdf",
            "OverallStatus: Infected",
            "Engine: ClamAV",
            "ThreatFound: Trojan.Generic",
            "ScanResult: 1",
            "DefTime: 2026-10-18T08:00:00.000Z",
            "",
            "Engine: Avira",
            "ThreatFound: ",
            "ScanResult: 0",
            "DefTime: 2026-10-18T09:30:00.000Z",
            "",
            "END",
        ]

    @pytest.mark.parametrize("payload", ["", "   \n", None])
    def test_blank_payload_prints_notice(self, payload) -> None:
        out: list[str] = []
        assert render_report(payload, out.append) is None
        assert out == [NO_RESULTS_NOTICE]

    def test_blank_payload_is_not_parsed(self, monkeypatch) -> None:
        def _boom(raw: str) -> ScanReport:
            raise AssertionError("parse_report should not be called")

        monkeypatch.setattr("metadefender_scan.report.parse_report", _boom)
        out: list[str] = []
        render_report("", out.append)
        assert out == [NO_RESULTS_NOTICE]

    def test_parse_error_is_reported_not_raised(self) -> None:
        body = json.loads(make_report())
        del body["file_info"]["display_name"]
        out: list[str] = []

        assert render_report(json.dumps(body), out.append) is None
        assert len(out) == 1
        assert out[0].startswith("Error displaying results:")
        assert END_MARKER not in out

    def test_engine_without_threat_field_prints_no_report(self) -> None:
        details = {"ClamAV": {"scan_result_i": 1, "def_time": "t"}}
        out: list[str] = []

        assert render_report(make_report(details=details), out.append) is None
        assert out == ["Error displaying results: Report missing engine ClamAV.threat_found"]
