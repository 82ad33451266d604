"""Exception hierarchy for the alert engine."""
from __future__ import annotations

from typing import Any, Optional


class VitalAlertsError(Exception):
    """Base exception for all alert engine errors."""

    code: str = "UNKNOWN_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class UnknownDetectorError(VitalAlertsError, KeyError):
    """Lookup of a detector id that was never registered."""

    code = "UNKNOWN_DETECTOR"


class DuplicateDetectorError(VitalAlertsError, ValueError):
    """A detector id or alert kind is claimed twice in one registry."""

    code = "DUPLICATE_DETECTOR"


class MalformedRecordError(VitalAlertsError, ValueError):
    """Raw input rejected at the ingestion boundary."""

    code = "MALFORMED_RECORD"
