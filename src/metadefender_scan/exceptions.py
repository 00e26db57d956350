"""Exception hierarchy for the MetaDefender scan client."""

from __future__ import annotations

from enum import Enum


class MetaDefenderScanError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(MetaDefenderScanError):
    """Raised when configuration is missing or invalid.

    Common causes: non-numeric timeout env vars, a base URL without a scheme.
    """


class FileErrorKind(str, Enum):
    """Why a local file could not be read."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    READ_FAILED = "read_failed"


class FileReadError(MetaDefenderScanError):
    """Raised when the file to scan cannot be opened or fully read."""

    def __init__(
        self,
        message: str,
        kind: FileErrorKind = FileErrorKind.READ_FAILED,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind


class ServiceErrorKind(str, Enum):
    """Failure classes for a single MetaDefender API call."""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    SHAPE_VIOLATION = "shape_violation"


class ServiceError(MetaDefenderScanError):
    """Raised when a MetaDefender API call fails.

    Use ``kind`` (or the subclasses below) to tell a network failure apart
    from a non-2xx status or a response body that lacks an expected field.
    """

    kind: ServiceErrorKind = ServiceErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class TransportError(ServiceError):
    """Connection refused, timeout, dropped connection or unreadable body."""

    kind = ServiceErrorKind.TRANSPORT


class HttpStatusError(ServiceError):
    """The service answered with a non-success HTTP status."""

    kind = ServiceErrorKind.HTTP_STATUS


class ShapeViolationError(ServiceError):
    """The response body is not valid JSON or lacks a required field."""

    kind = ServiceErrorKind.SHAPE_VIOLATION


class ReportParseError(MetaDefenderScanError):
    """Raised when a scan report payload cannot be parsed for display."""


class ScanTimeoutError(MetaDefenderScanError):
    """Raised when polling for an analysis exceeds the configured deadline."""

    def __init__(
        self,
        message: str,
        elapsed_seconds: float = 0.0,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.elapsed_seconds = elapsed_seconds
