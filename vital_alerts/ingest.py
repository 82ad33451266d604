"""Parse raw upstream lines into measurement records.

Two text formats arrive from upstream producers:

* record lines: ``patientId,value,signalKind,timestamp[,annotation]``
* socket messages: ``patientId,timestamp,signalKind,value``

Alert markers sent over the socket carry their annotation in the value slot
(``7,1700000000000,Alert,triggered``). Anything that does not fit is rejected
with :class:`MalformedRecordError` and never reaches the engine.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Optional

from pydantic import ValidationError

from models.record_models import RecordPayload

from .exceptions import MalformedRecordError
from .models import MeasurementRecord, SignalKind

logger = logging.getLogger(__name__)

LineParser = Callable[[str], MeasurementRecord]


def payload_to_record(payload: RecordPayload) -> MeasurementRecord:
    return MeasurementRecord(
        patient_id=payload.patientId,
        signal_kind=payload.recordType,
        value=payload.measurementValue,
        timestamp=payload.timestamp,
        annotation=payload.additionalInfo,
    )


def parse_record_line(line: str) -> MeasurementRecord:
    """Parse ``patientId,value,signalKind,timestamp[,annotation]``."""

    parts = _split(line)
    patient_id, value, signal_kind, timestamp = parts[:4]
    annotation = ",".join(parts[4:]) or None
    return _build(line, patient_id, value, signal_kind, timestamp, annotation)


def parse_socket_message(message: str) -> MeasurementRecord:
    """Parse ``patientId,timestamp,signalKind,value``."""

    parts = _split(message)
    patient_id, timestamp, signal_kind, value = parts[:4]
    return _build(message, patient_id, value, signal_kind, timestamp, None)


def iter_records(lines: Iterable[str], parser: LineParser = parse_record_line) -> Iterator[MeasurementRecord]:
    """Yield parsed records, skipping blank and malformed lines."""

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield parser(line)
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed line %d: %s", line_number, exc)


def _split(line: str) -> list[str]:
    parts = [part.strip() for part in line.strip().split(",")]
    if len(parts) < 4:
        raise MalformedRecordError(
            f"Expected at least 4 comma-separated fields, got {len(parts)}: {line.strip()!r}",
            details={"line": line},
        )
    return parts


def _build(
    raw: str,
    patient_id: str,
    value: str,
    signal_kind: str,
    timestamp: str,
    annotation: Optional[str],
) -> MeasurementRecord:
    value = value.rstrip("%").strip()
    if signal_kind == SignalKind.ALERT_MARKER and not _is_number(value):
        annotation = annotation or value
        value = "1.0" if value.lower() == "triggered" else "0.0"

    try:
        payload = RecordPayload(
            patientId=patient_id,
            measurementValue=value,
            recordType=signal_kind,
            timestamp=timestamp,
            additionalInfo=annotation,
        )
    except ValidationError as exc:
        fields = ", ".join(".".join(str(loc) for loc in error["loc"]) for error in exc.errors())
        raise MalformedRecordError(
            f"Invalid {fields} in {raw.strip()!r}",
            details={"line": raw, "errors": exc.errors()},
        ) from exc
    return payload_to_record(payload)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True
