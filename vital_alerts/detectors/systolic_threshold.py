"""Detect critically high or low systolic blood pressure."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector


@register_detector
class SystolicThresholdDetector(AlertDetector):
    id = "systolic_threshold"
    description = "Latest systolic pressure >=180 mmHg (critical) or <=90 mmHg"
    version = "1.0.0"
    inputs = (SignalKind.SYSTOLIC_BP,)
    alert_kinds = (AlertKind.HIGH_SYSTOLIC_BP, AlertKind.LOW_SYSTOLIC_BP)
    window_size = 1

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        high_threshold = float(self.resolved_threshold(context, "systolic_high", 180.0))
        low_threshold = float(self.resolved_threshold(context, "systolic_low", 90.0))

        latest = window.latest(SignalKind.SYSTOLIC_BP)
        if latest is None:
            return self.insufficient_data(available=0, required=1)

        metrics = {
            "latest_value": latest.value,
            "high_threshold": high_threshold,
            "low_threshold": low_threshold,
        }
        if latest.value >= high_threshold:
            return self.alert(
                AlertKind.HIGH_SYSTOLIC_BP,
                f"Critical high systolic blood pressure: {latest.value} mmHg",
                latest.timestamp,
                AlertSeverity.CRITICAL,
                metrics=metrics,
            )
        if latest.value <= low_threshold:
            return self.alert(
                AlertKind.LOW_SYSTOLIC_BP,
                f"Critical low systolic blood pressure: {latest.value} mmHg",
                latest.timestamp,
                AlertSeverity.HIGH,
                metrics=metrics,
            )
        return self.no_alert(metrics=metrics)
