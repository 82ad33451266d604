"""Detect simultaneous low systolic pressure and low oxygen saturation."""
from __future__ import annotations

from ..detector_base import AlertDetector
from ..models import AlertKind, AlertSeverity, DetectionContext, SignalKind, SignalWindow, Verdict
from ..registry import register_detector


@register_detector
class HypotensiveHypoxemiaDetector(AlertDetector):
    id = "hypotensive_hypoxemia"
    description = "Latest systolic pressure <90 mmHg together with latest oxygen saturation <92%"
    version = "1.0.0"
    inputs = (SignalKind.SYSTOLIC_BP, SignalKind.OXYGEN_SATURATION)
    alert_kinds = (AlertKind.HYPOTENSIVE_HYPOXEMIA,)
    window_size = 1

    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        systolic_threshold = float(self.resolved_threshold(context, "hypotension_systolic", 90.0))
        oxygen_threshold = float(self.resolved_threshold(context, "hypoxemia_oxygen", 92.0))

        systolic = window.latest(SignalKind.SYSTOLIC_BP)
        oxygen = window.latest(SignalKind.OXYGEN_SATURATION)
        if systolic is None or oxygen is None:
            return self.insufficient_data(
                available=int(systolic is not None) + int(oxygen is not None),
                required=2,
            )

        metrics = {"systolic": systolic.value, "oxygen": oxygen.value}
        if systolic.value < systolic_threshold and oxygen.value < oxygen_threshold:
            return self.alert(
                AlertKind.HYPOTENSIVE_HYPOXEMIA,
                "Critical condition: Hypotensive Hypoxemia detected - "
                "Low blood pressure and low oxygen saturation",
                max(systolic.timestamp, oxygen.timestamp),
                AlertSeverity.CRITICAL,
                evidence={"systolic_timestamp": systolic.timestamp, "oxygen_timestamp": oxygen.timestamp},
                metrics=metrics,
            )
        return self.no_alert(metrics=metrics)
