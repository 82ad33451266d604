"""Evaluation engine: merge new records, run detectors, apply verdicts."""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from threading import Lock
from typing import Any, Callable, Dict, Iterable, Mapping, Protocol, Sequence

from .detector_base import AlertDetector
from .history import HistoryStore
from .lifecycle import AlertLifecycleManager
from .models import (
    Alert,
    DetectionContext,
    LifecycleEvent,
    MeasurementRecord,
    SignalWindow,
    Verdict,
)
from .registry import DetectorRegistry

logger = logging.getLogger(__name__)

DEFAULT_BACKFILL_WINDOW_MS = 60 * 60 * 1000


class RecordSource(Protocol):
    """Protocol for a backing store serving historical records."""

    def fetch_records(self, patient_id: int, from_time: int, to_time: int) -> Sequence[MeasurementRecord]:
        ...


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class AlertEngine:
    """Runs registered detectors over per-patient history.

    Evaluations for the same patient are serialized with a per-patient lock;
    different patients can be evaluated concurrently.

    With a ``record_source``, each evaluation first fetches
    ``[latest_known - backfill_window_ms, clock()]`` (from 0 when the patient
    has no history yet). Stored records newer than ``clock()``, or older than
    the window below the latest known timestamp, are not backfilled.
    """

    def __init__(
        self,
        registry: DetectorRegistry,
        *,
        history: HistoryStore | None = None,
        lifecycle: AlertLifecycleManager | None = None,
        record_source: RecordSource | None = None,
        backfill_window_ms: int = DEFAULT_BACKFILL_WINDOW_MS,
        detector_ids: Iterable[str] | None = None,
        default_thresholds: Mapping[str, Any] | None = None,
        default_detector_settings: Mapping[str, Mapping[str, Any]] | None = None,
        context_builder: Callable[[int], DetectionContext] | None = None,
        clock: Callable[[], int] = _wall_clock_ms,
    ) -> None:
        if backfill_window_ms < 0:
            raise ValueError("backfill_window_ms must be >= 0")
        self._registry = registry
        # Resolve the selection up front so unknown ids fail at construction.
        self._selected = registry.select(detector_ids) if detector_ids is not None else None
        self._history = history or HistoryStore()
        self._lifecycle = lifecycle or AlertLifecycleManager()
        self._source = record_source
        self._backfill_window_ms = backfill_window_ms
        self._default_thresholds = default_thresholds or {}
        self._default_detector_settings = default_detector_settings or {}
        self._context_builder = context_builder
        self._clock = clock
        self._patient_locks: Dict[int, Lock] = {}
        self._locks_guard = Lock()

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def lifecycle(self) -> AlertLifecycleManager:
        return self._lifecycle

    def evaluate(
        self,
        patient_id: int,
        new_records: Iterable[MeasurementRecord] = (),
        *,
        detector_filter: Callable[[AlertDetector], bool] | None = None,
    ) -> list[LifecycleEvent]:
        """Merge ``new_records`` for one patient and re-run every detector."""

        records = list(new_records)
        for record in records:
            if record.patient_id != patient_id:
                raise ValueError(
                    f"Record patient_id {record.patient_id} does not match evaluated patient {patient_id}"
                )

        with self._lock_for(patient_id):
            if self._source is not None:
                self._backfill(patient_id, self._source)
            inserted = self._history.merge(patient_id, records)
            logger.debug("Merged %d/%d new records for patient %s", inserted, len(records), patient_id)

            context = self._build_context(patient_id)
            events: list[LifecycleEvent] = []
            for verdict in self._detect(patient_id, context, detector_filter):
                logger.debug(
                    "Detector %s -> %s for patient %s",
                    verdict.detector_id,
                    verdict.status.value,
                    patient_id,
                )
                events.extend(self._lifecycle.apply(patient_id, verdict))
        return events

    def evaluate_many(
        self,
        records: Iterable[MeasurementRecord],
        *,
        workers: int = 1,
    ) -> dict[int, list[LifecycleEvent]]:
        """Group records by patient and evaluate each patient once."""

        grouped: dict[int, list[MeasurementRecord]] = {}
        for record in records:
            grouped.setdefault(record.patient_id, []).append(record)

        results: dict[int, list[LifecycleEvent]] = {}
        worker_count = max(1, workers)
        if worker_count == 1:
            for patient_id, patient_records in grouped.items():
                results[patient_id] = self.evaluate(patient_id, patient_records)
            return results

        with ThreadPoolExecutor(max_workers=worker_count) as executor:
            future_map = {
                executor.submit(self.evaluate, patient_id, patient_records): patient_id
                for patient_id, patient_records in grouped.items()
            }
            for future in as_completed(future_map):
                results[future_map[future]] = future.result()
        return results

    def active_alerts_for(self, patient_id: int) -> list[Alert]:
        return self._lifecycle.active_alerts_for(patient_id)

    def all_active_alerts(self) -> list[Alert]:
        return self._lifecycle.all_active_alerts()

    def reset(self) -> None:
        """Forget all history, active alerts and per-patient locks.

        Call only while no evaluation is in flight.
        """

        self._history.clear()
        self._lifecycle.clear()
        with self._locks_guard:
            self._patient_locks.clear()

    def _detect(
        self,
        patient_id: int,
        context: DetectionContext,
        detector_filter: Callable[[AlertDetector], bool] | None,
    ) -> list[Verdict]:
        window_for = partial(self._build_window, patient_id)
        if self._selected is None:
            return self._registry.detect_all(window_for, context, predicate=detector_filter)
        return [
            detector.detect(window_for(detector), context)
            for detector in self._selected
            if detector_filter is None or detector_filter(detector)
        ]

    def _build_window(self, patient_id: int, detector: AlertDetector) -> SignalWindow:
        series = {
            signal_kind: self._history.latest_window(patient_id, signal_kind, detector.window_size)
            for signal_kind in detector.inputs
        }
        return SignalWindow(patient_id=patient_id, series=series)

    def _build_context(self, patient_id: int) -> DetectionContext:
        if self._context_builder is not None:
            return self._context_builder(patient_id)
        return DetectionContext(
            patient_id=patient_id,
            evaluated_at=self._clock(),
            thresholds=self._default_thresholds,
            detector_settings=self._default_detector_settings,
        )

    def _backfill(self, patient_id: int, source: RecordSource) -> None:
        latest = self._history.latest_timestamp(patient_id)
        from_time = 0 if latest is None else max(0, latest - self._backfill_window_ms)
        fetched = source.fetch_records(patient_id, from_time, self._clock())
        inserted = self._history.merge(patient_id, fetched)
        if inserted:
            logger.info("Backfilled %d records for patient %s", inserted, patient_id)

    def _lock_for(self, patient_id: int) -> Lock:
        with self._locks_guard:
            lock = self._patient_locks.get(patient_id)
            if lock is None:
                lock = self._patient_locks[patient_id] = Lock()
            return lock
