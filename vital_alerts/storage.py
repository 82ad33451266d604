"""In-memory record storage used to backfill evaluation history."""
from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterable, List

from .models import MeasurementRecord

logger = logging.getLogger(__name__)


@dataclass
class InMemoryRecordStorage:
    """Explicitly constructed record store keyed by patient.

    Records are kept sorted by timestamp. Create one per process (or per
    test) and pass it where needed; ``clear`` resets it.
    """

    _records: Dict[int, List[MeasurementRecord]] = field(default_factory=dict, repr=False)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def add_record(self, record: MeasurementRecord) -> None:
        with self._lock:
            series = self._records.setdefault(record.patient_id, [])
            keys = [existing.timestamp for existing in series]
            series.insert(bisect.bisect_right(keys, record.timestamp), record)

    def add_records(self, records: Iterable[MeasurementRecord]) -> int:
        count = 0
        for record in records:
            self.add_record(record)
            count += 1
        return count

    def fetch_records(self, patient_id: int, from_time: int, to_time: int) -> list[MeasurementRecord]:
        """Records for ``patient_id`` with ``from_time <= timestamp <= to_time``."""

        with self._lock:
            series = list(self._records.get(patient_id, ()))
        return [record for record in series if from_time <= record.timestamp <= to_time]

    def patient_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._records)

    def clear(self) -> None:
        with self._lock:
            cleared = sum(len(series) for series in self._records.values())
            self._records.clear()
        logger.debug("Cleared %d stored records", cleared)
