"""Active-alert bookkeeping with trigger/update/resolve transitions."""
from __future__ import annotations

import logging
from collections.abc import Callable
from threading import Lock
from typing import Dict, List

from .models import Alert, AlertCandidate, AlertKind, LifecycleEvent, LifecycleTransition, Verdict

logger = logging.getLogger(__name__)

LifecycleListener = Callable[[LifecycleEvent], None]


class AlertLifecycleManager:
    """Sole owner of the active-alert set.

    Holds at most one alert per ``(patient_id, kind)``. An ``ALERT`` verdict
    creates the alert or refreshes its message/timestamp (severity is kept);
    every other verdict status resolves the detector's active kinds.
    """

    def __init__(self) -> None:
        self._active: Dict[int, Dict[AlertKind, Alert]] = {}
        self._listeners: List[LifecycleListener] = []
        self._lock = Lock()

    def apply(self, patient_id: int, verdict: Verdict) -> list[LifecycleEvent]:
        """Apply one detector verdict and return the transitions it caused."""

        candidate = verdict.candidate if verdict.is_alert else None
        alert_kind = candidate.kind if candidate is not None else None
        events: list[LifecycleEvent] = []
        with self._lock:
            for kind in verdict.alert_kinds:
                if kind is alert_kind:
                    continue
                event = self._resolve(patient_id, kind, verdict)
                if event is not None:
                    events.append(event)
            if candidate is not None:
                events.append(self._trigger_or_update(patient_id, candidate, verdict.detector_id))

        for event in events:
            logger.info(
                "Alert %s: patient=%s kind=%s severity=%s%s",
                event.transition.value,
                event.patient_id,
                event.kind.value,
                event.alert.severity.value,
                " (forced)" if event.forced else "",
            )
            self._notify(event)
        return events

    def _trigger_or_update(self, patient_id: int, candidate: AlertCandidate, detector_id: str) -> LifecycleEvent:
        patient_alerts = self._active.setdefault(patient_id, {})
        existing = patient_alerts.get(candidate.kind)
        if existing is None:
            alert = candidate.to_alert(patient_id)
            patient_alerts[candidate.kind] = alert
            return LifecycleEvent(LifecycleTransition.TRIGGERED, alert.copy(), detector_id)
        existing.refresh(candidate.message, candidate.timestamp)
        return LifecycleEvent(LifecycleTransition.UPDATED, existing.copy(), detector_id)

    def _resolve(self, patient_id: int, kind: AlertKind, verdict: Verdict) -> LifecycleEvent | None:
        patient_alerts = self._active.get(patient_id)
        if not patient_alerts or kind not in patient_alerts:
            return None
        alert = patient_alerts.pop(kind)
        if not patient_alerts:
            del self._active[patient_id]
        return LifecycleEvent(
            LifecycleTransition.RESOLVED,
            alert,
            verdict.detector_id,
            forced=verdict.forced,
        )

    def active_alerts_for(self, patient_id: int) -> list[Alert]:
        """Snapshot of the patient's active alerts (empty when none)."""

        with self._lock:
            return [alert.copy() for alert in self._active.get(patient_id, {}).values()]

    def all_active_alerts(self) -> list[Alert]:
        """Snapshot of every active alert, grouped by patient."""

        with self._lock:
            return [alert.copy() for alerts in self._active.values() for alert in alerts.values()]

    def is_active(self, patient_id: int, kind: AlertKind) -> bool:
        with self._lock:
            return AlertKind(kind) in self._active.get(patient_id, {})

    def patient_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._active)

    def subscribe(self, listener: LifecycleListener) -> Callable[[], None]:
        """Register a listener for transitions; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear(self, patient_id: int | None = None) -> None:
        """Drop active alerts without emitting events."""

        with self._lock:
            if patient_id is None:
                self._active.clear()
            else:
                self._active.pop(patient_id, None)

    def _notify(self, event: LifecycleEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
