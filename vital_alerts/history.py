"""Bounded per-patient, per-signal measurement history."""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

from .models import MeasurementRecord, SignalKind

DEFAULT_HISTORY_CAPACITY = 100


@dataclass
class HistoryStore:
    """In-memory history keyed by patient/signal kind.

    Each series is ordered by timestamp, holds at most one record per
    timestamp and keeps only the most recent ``capacity`` entries.
    """

    capacity: int = DEFAULT_HISTORY_CAPACITY
    _store: Dict[Tuple[int, str], List[MeasurementRecord]] = field(default_factory=dict, repr=False)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")

    def merge(self, patient_id: int, records: Iterable[MeasurementRecord]) -> int:
        """Insert records not already present by timestamp; return how many were added."""

        grouped: dict[str, list[MeasurementRecord]] = {}
        for record in records:
            grouped.setdefault(SignalKind.canonical(record.signal_kind), []).append(record)
        if not grouped:
            return 0

        inserted = 0
        with self._lock:
            for signal_kind, incoming in grouped.items():
                key = (patient_id, signal_kind)
                series = self._store.get(key, [])
                seen = {existing.timestamp for existing in series}
                for record in incoming:
                    if record.timestamp in seen:
                        continue
                    series.append(record)
                    seen.add(record.timestamp)
                    inserted += 1
                series.sort(key=lambda item: item.timestamp)
                self._store[key] = series[-self.capacity :]
        return inserted

    def latest_window(
        self,
        patient_id: int,
        signal_kind: str,
        n: Optional[int] = None,
    ) -> tuple[MeasurementRecord, ...]:
        """Return the last ``n`` records (all of them when ``n`` is None)."""

        series = self._store.get((patient_id, SignalKind.canonical(signal_kind)), ())
        if n is None:
            return tuple(series)
        if n <= 0:
            return ()
        return tuple(series[-n:])

    def latest(self, patient_id: int, signal_kind: str) -> MeasurementRecord | None:
        window = self.latest_window(patient_id, signal_kind, 1)
        return window[0] if window else None

    def signal_kinds(self, patient_id: int) -> list[str]:
        return sorted(kind for pid, kind in list(self._store) if pid == patient_id)

    def patient_ids(self) -> list[int]:
        return sorted({pid for pid, _ in list(self._store)})

    def latest_timestamp(self, patient_id: int) -> int | None:
        """Most recent timestamp across every signal of a patient."""

        latest: int | None = None
        for (pid, _), series in list(self._store.items()):
            if pid != patient_id or not series:
                continue
            if latest is None or series[-1].timestamp > latest:
                latest = series[-1].timestamp
        return latest

    def clear(self, patient_id: int | None = None) -> None:
        """Drop history for one patient, or for everyone."""

        with self._lock:
            if patient_id is None:
                self._store.clear()
                return
            for key in [key for key in self._store if key[0] == patient_id]:
                del self._store[key]
