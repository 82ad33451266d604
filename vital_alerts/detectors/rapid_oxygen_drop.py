"""Detect a rapid fall in oxygen saturation within a short time window."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector
from .utils import MINUTE_MS


@register_detector
class RapidOxygenDropDetector(AlertDetector):
    id = "rapid_oxygen_drop"
    description = "Oxygen saturation falls by >=5 points relative to a reading within the last 10 minutes"
    version = "1.0.0"
    inputs = (SignalKind.OXYGEN_SATURATION,)
    alert_kinds = (AlertKind.RAPID_OXYGEN_DROP,)
    window_size = None

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        drop_threshold = float(self.resolved_threshold(context, "oxygen_drop", 5.0))
        window_ms = int(self.resolved_threshold(context, "oxygen_drop_window_ms", 10 * MINUTE_MS))

        readings = window.records(SignalKind.OXYGEN_SATURATION)
        if len(readings) < 2:
            return self.insufficient_data(available=len(readings), required=2)

        latest = readings[-1]
        scanned = 0
        for earlier in reversed(readings[:-1]):
            if latest.timestamp - earlier.timestamp > window_ms:
                break
            scanned += 1
            drop = earlier.value - latest.value
            if drop >= drop_threshold:
                return self.alert(
                    AlertKind.RAPID_OXYGEN_DROP,
                    f"Rapid drop in oxygen saturation of {drop:.1f}% within {window_ms / MINUTE_MS:g} minutes",
                    latest.timestamp,
                    AlertSeverity.HIGH,
                    evidence={"reference_timestamp": earlier.timestamp, "reference_value": earlier.value},
                    metrics={"drop": drop, "drop_threshold": drop_threshold, "window_ms": float(window_ms)},
                )

        return self.no_alert(metrics={"readings_in_window": float(scanned), "drop_threshold": drop_threshold})
