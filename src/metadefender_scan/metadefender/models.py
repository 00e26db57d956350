"""MetaDefender-specific data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ProbeResult(str, Enum):
    """Outcome of a hash lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass
class SubmitResult:
    """Result from uploading a file to MetaDefender."""

    data_id: str
    status: str = ""
    in_queue: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_id": self.data_id,
            "status": self.status,
            "in_queue": self.in_queue,
        }


@dataclass
class ProgressResult:
    """Progress of a submitted analysis, with the raw body it came from."""

    progress: int
    body: str

    @property
    def is_complete(self) -> bool:
        return self.progress == 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "progress": self.progress,
            "is_complete": self.is_complete,
        }
