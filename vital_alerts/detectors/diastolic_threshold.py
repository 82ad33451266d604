"""Detect high or low diastolic blood pressure."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector


@register_detector
class DiastolicThresholdDetector(AlertDetector):
    id = "diastolic_threshold"
    description = "Latest diastolic pressure >=120 mmHg or <=60 mmHg"
    version = "1.0.0"
    inputs = (SignalKind.DIASTOLIC_BP,)
    alert_kinds = (AlertKind.HIGH_DIASTOLIC_BP, AlertKind.LOW_DIASTOLIC_BP)
    window_size = 1

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        high_threshold = float(self.resolved_threshold(context, "diastolic_high", 120.0))
        low_threshold = float(self.resolved_threshold(context, "diastolic_low", 60.0))

        latest = window.latest(SignalKind.DIASTOLIC_BP)
        if latest is None:
            return self.insufficient_data(available=0, required=1)

        metrics = {
            "latest_value": latest.value,
            "high_threshold": high_threshold,
            "low_threshold": low_threshold,
        }
        if latest.value >= high_threshold:
            return self.alert(
                AlertKind.HIGH_DIASTOLIC_BP,
                f"Critical high diastolic blood pressure: {latest.value} mmHg",
                latest.timestamp,
                AlertSeverity.HIGH,
                metrics=metrics,
            )
        if latest.value <= low_threshold:
            return self.alert(
                AlertKind.LOW_DIASTOLIC_BP,
                f"Critical low diastolic blood pressure: {latest.value} mmHg",
                latest.timestamp,
                AlertSeverity.MEDIUM,
                metrics=metrics,
            )
        return self.no_alert(metrics=metrics)
