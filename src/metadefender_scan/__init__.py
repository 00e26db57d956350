"""File reputation scanning against MetaDefender Cloud: hash lookup, upload and polling."""

from metadefender_scan.client import ReputationClient
from metadefender_scan.config import ScanConfig
from metadefender_scan.exceptions import (
    ConfigurationError,
    FileReadError,
    HttpStatusError,
    MetaDefenderScanError,
    ReportParseError,
    ScanTimeoutError,
    ServiceError,
    ShapeViolationError,
    TransportError,
)
from metadefender_scan.report import EngineFinding, ScanReport
from metadefender_scan.scanner import FailureReason, ScanOutcome, ScanState

__version__ = "0.1.0"

__all__ = [
    "ReputationClient",
    "ScanConfig",
    "ScanOutcome",
    "ScanState",
    "FailureReason",
    "ScanReport",
    "EngineFinding",
    "MetaDefenderScanError",
    "ConfigurationError",
    "FileReadError",
    "ServiceError",
    "TransportError",
    "HttpStatusError",
    "ShapeViolationError",
    "ReportParseError",
    "ScanTimeoutError",
]
