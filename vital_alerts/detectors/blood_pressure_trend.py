"""Detect consistent rising or falling blood pressure over consecutive readings."""
from __future__ import annotations

import numpy as np

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector
from .utils import consecutive_deltas

_LABELS = {
    SignalKind.SYSTOLIC_BP: "systolic blood pressure",
    SignalKind.DIASTOLIC_BP: "diastolic blood pressure",
}


@register_detector
class BloodPressureTrendDetector(AlertDetector):
    """Every step among the last three readings moves >10 mmHg the same way.

    Systolic is checked before diastolic; the first series showing a trend
    produces the verdict.
    """

    id = "blood_pressure_trend"
    description = "Each of the last 3 BP readings changes by more than 10 mmHg in one direction"
    version = "1.0.0"
    inputs = (SignalKind.SYSTOLIC_BP, SignalKind.DIASTOLIC_BP)
    alert_kinds = (AlertKind.BP_INCREASING_TREND, AlertKind.BP_DECREASING_TREND)
    window_size = 3

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        change_threshold = float(self.resolved_threshold(context, "bp_trend_change", 10.0))
        required = self.window_size or 3

        evaluated: list[str] = []
        for signal_kind in self.inputs:
            readings = list(window.records(signal_kind))[-required:]
            if len(readings) < required:
                continue
            evaluated.append(signal_kind)

            deltas = consecutive_deltas(readings)
            latest = readings[-1]
            metrics = {
                "change_threshold": change_threshold,
                "min_step": float(deltas.min()),
                "max_step": float(deltas.max()),
            }
            label = _LABELS[signal_kind]
            if bool(np.all(deltas > change_threshold)):
                return self.alert(
                    AlertKind.BP_INCREASING_TREND,
                    f"Increasing trend in {label} detected over {required} readings",
                    latest.timestamp,
                    AlertSeverity.MEDIUM,
                    evidence={"signal_kind": signal_kind, "values": [r.value for r in readings]},
                    metrics=metrics,
                )
            if bool(np.all(-deltas > change_threshold)):
                return self.alert(
                    AlertKind.BP_DECREASING_TREND,
                    f"Decreasing trend in {label} detected over {required} readings",
                    latest.timestamp,
                    AlertSeverity.MEDIUM,
                    evidence={"signal_kind": signal_kind, "values": [r.value for r in readings]},
                    metrics=metrics,
                )

        if not evaluated:
            longest = max(len(window.records(kind)) for kind in self.inputs)
            return self.insufficient_data(available=longest, required=required)
        return self.no_alert(evidence={"evaluated_signals": evaluated})
