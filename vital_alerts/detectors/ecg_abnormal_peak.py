"""Detect ECG readings that deviate sharply from the recent window."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector
from .utils import window_stats


@register_detector
class EcgAbnormalPeakDetector(AlertDetector):
    id = "ecg_abnormal_peak"
    description = "Latest ECG value more than 2 standard deviations from the mean of the last 20 readings"
    version = "1.0.0"
    inputs = (SignalKind.ECG,)
    alert_kinds = (AlertKind.ECG_ABNORMAL_PEAK,)
    window_size = 20

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        deviation_limit = float(self.resolved_threshold(context, "ecg_std_multiplier", 2.0))
        required = self.window_size or 20

        readings = list(window.records(SignalKind.ECG))[-required:]
        if len(readings) < required:
            return self.insufficient_data(available=len(readings), required=required)

        mean, std = window_stats(readings)
        latest = readings[-1]
        deviation = abs(latest.value - mean)
        metrics = {
            "window_mean": mean,
            "window_std": std,
            "deviation": deviation,
            "std_multiplier": deviation_limit,
        }
        if deviation > deviation_limit * std:
            return self.alert(
                AlertKind.ECG_ABNORMAL_PEAK,
                f"Abnormal ECG peak detected: {latest.value} (exceeds threshold)",
                latest.timestamp,
                AlertSeverity.HIGH,
                metrics=metrics,
            )
        return self.no_alert(metrics=metrics)
