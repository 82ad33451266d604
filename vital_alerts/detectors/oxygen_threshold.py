"""Detect low blood oxygen saturation."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector


@register_detector
class OxygenThresholdDetector(AlertDetector):
    id = "oxygen_threshold"
    description = "Latest oxygen saturation below 92%"
    version = "1.0.0"
    inputs = (SignalKind.OXYGEN_SATURATION,)
    alert_kinds = (AlertKind.LOW_OXYGEN_SATURATION,)
    window_size = 1

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        low_threshold = float(self.resolved_threshold(context, "oxygen_low", 92.0))

        latest = window.latest(SignalKind.OXYGEN_SATURATION)
        if latest is None:
            return self.insufficient_data(available=0, required=1)

        metrics = {"latest_value": latest.value, "low_threshold": low_threshold}
        if latest.value < low_threshold:
            return self.alert(
                AlertKind.LOW_OXYGEN_SATURATION,
                f"Low oxygen saturation: {latest.value}%",
                latest.timestamp,
                AlertSeverity.HIGH,
                metrics=metrics,
            )
        return self.no_alert(metrics=metrics)
