"""Raise or clear alerts flagged manually by patients or staff."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector
from .utils import normalized_annotation

TRIGGERED = "triggered"
RESOLVED = "resolved"


@register_detector
class ManualTriggerDetector(AlertDetector):
    """Follows the most recent alert marker only.

    ``triggered`` raises the alert, ``resolved`` is an explicit resolve signal,
    and any other annotation (or none) is a plain no-alert.
    """

    id = "manual_trigger"
    description = "Latest alert marker annotated 'triggered' raises, 'resolved' clears"
    version = "1.0.0"
    inputs = (SignalKind.ALERT_MARKER,)
    alert_kinds = (AlertKind.MANUAL_TRIGGER,)
    window_size = 1

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        marker = window.latest(SignalKind.ALERT_MARKER)
        if marker is None:
            return self.insufficient_data(available=0, required=1)

        annotation = normalized_annotation(marker)
        evidence = {"marker_timestamp": marker.timestamp, "annotation": annotation}
        if annotation == TRIGGERED:
            return self.alert(
                AlertKind.MANUAL_TRIGGER,
                "Manual alert triggered by patient or staff",
                marker.timestamp,
                AlertSeverity.HIGH,
                evidence=evidence,
            )
        if annotation == RESOLVED:
            return self.resolve(evidence=evidence)
        return self.no_alert(evidence=evidence)
