"""Core data models for vital-sign alert evaluation."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class SignalKind:
    """Well-known measurement type tags."""

    SYSTOLIC_BP = "SystolicBP"
    DIASTOLIC_BP = "DiastolicBP"
    OXYGEN_SATURATION = "OxygenSaturation"
    ECG = "ECG"
    ALERT_MARKER = "Alert"

    # Labels emitted by the vital-sign simulator.
    ALIASES: Mapping[str, str] = {
        "SystolicPressure": SYSTOLIC_BP,
        "DiastolicPressure": DIASTOLIC_BP,
        "Saturation": OXYGEN_SATURATION,
    }

    @classmethod
    def canonical(cls, name: str) -> str:
        return cls.ALIASES.get(name, name)


class AlertKind(str, Enum):
    """Closed set of rule outcomes."""

    HIGH_SYSTOLIC_BP = "HIGH_SYSTOLIC_BP"
    LOW_SYSTOLIC_BP = "LOW_SYSTOLIC_BP"
    HIGH_DIASTOLIC_BP = "HIGH_DIASTOLIC_BP"
    LOW_DIASTOLIC_BP = "LOW_DIASTOLIC_BP"
    BP_INCREASING_TREND = "BP_INCREASING_TREND"
    BP_DECREASING_TREND = "BP_DECREASING_TREND"
    LOW_OXYGEN_SATURATION = "LOW_OXYGEN_SATURATION"
    RAPID_OXYGEN_DROP = "RAPID_OXYGEN_DROP"
    HYPOTENSIVE_HYPOXEMIA = "HYPOTENSIVE_HYPOXEMIA"
    ECG_ABNORMAL_PEAK = "ECG_ABNORMAL_PEAK"
    MANUAL_TRIGGER = "MANUAL_TRIGGER"


class AlertSeverity(str, Enum):
    """Alert severity, ordered from least to most urgent."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def escalated(self) -> "AlertSeverity":
        """Return the next severity level; CRITICAL stays CRITICAL."""

        return _SEVERITY_ORDER[min(self.rank + 1, len(_SEVERITY_ORDER) - 1)]


_SEVERITY_ORDER: tuple[AlertSeverity, ...] = (
    AlertSeverity.LOW,
    AlertSeverity.MEDIUM,
    AlertSeverity.HIGH,
    AlertSeverity.CRITICAL,
)


class VerdictStatus(str, Enum):
    """Outcome of a single detector evaluation."""

    ALERT = "alert"
    NO_ALERT = "no_alert"
    INSUFFICIENT_DATA = "insufficient_data"
    RESOLVE = "resolve"


class LifecycleTransition(str, Enum):
    TRIGGERED = "triggered"
    UPDATED = "updated"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class MeasurementRecord:
    """A single time-stamped measurement for one patient."""

    patient_id: int
    signal_kind: str
    value: float
    timestamp: int
    annotation: Optional[str] = None


@dataclass
class Alert:
    """An active condition for a patient; identity is ``(patient_id, kind)``."""

    patient_id: int
    kind: AlertKind
    message: str
    timestamp: int
    severity: AlertSeverity

    @property
    def key(self) -> tuple[int, AlertKind]:
        return (self.patient_id, self.kind)

    def refresh(self, message: str, timestamp: int) -> None:
        """Overwrite message and timestamp; severity is left untouched."""

        self.message = message
        self.timestamp = timestamp

    def copy(self) -> "Alert":
        return replace(self)


@dataclass(frozen=True)
class AlertCandidate:
    """Fully formed alert description produced by a detector."""

    kind: AlertKind
    message: str
    timestamp: int
    severity: AlertSeverity

    def to_alert(self, patient_id: int) -> Alert:
        return Alert(
            patient_id=patient_id,
            kind=self.kind,
            message=self.message,
            timestamp=self.timestamp,
            severity=self.severity,
        )


@dataclass(frozen=True)
class Verdict:
    """Standardized output for a single detector evaluation."""

    detector_id: str
    status: VerdictStatus
    alert_kinds: tuple[AlertKind, ...]
    candidate: Optional[AlertCandidate] = None
    evidence: Mapping[str, Any] = field(default_factory=dict)
    metrics: Mapping[str, float] = field(default_factory=dict)
    version: Optional[str] = None

    @property
    def is_alert(self) -> bool:
        return self.status is VerdictStatus.ALERT

    @property
    def forced(self) -> bool:
        return self.status is VerdictStatus.RESOLVE


@dataclass(frozen=True)
class DetectorDescriptor:
    """Static metadata describing a detector."""

    detector_id: str
    name: str
    description: str
    version: str = "1.0.0"
    inputs: tuple[str, ...] = ()
    alert_kinds: tuple[AlertKind, ...] = ()
    window_size: Optional[int] = None


@dataclass(frozen=True)
class SignalWindow:
    """Per-signal history slices handed to one detector call."""

    patient_id: int
    series: Mapping[str, Sequence[MeasurementRecord]] = field(default_factory=dict)

    def records(self, signal_kind: str) -> Sequence[MeasurementRecord]:
        return self.series.get(SignalKind.canonical(signal_kind), ())

    def latest(self, signal_kind: str) -> MeasurementRecord | None:
        records = self.records(signal_kind)
        return records[-1] if records else None


@dataclass(frozen=True)
class DetectionContext:
    """Auxiliary context passed to each detector."""

    patient_id: int
    evaluated_at: Optional[int] = None
    thresholds: Mapping[str, Any] = field(default_factory=dict)
    detector_settings: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)

    def detector_threshold(self, detector_id: str, key: str, default: Any) -> Any:
        """Return detector-specific override, falling back to global thresholds"""

        specific = self.detector_settings.get(detector_id, {})
        if key in specific:
            return specific[key]
        return self.thresholds.get(key, default)


@dataclass(frozen=True)
class LifecycleEvent:
    """A trigger, update or resolve transition of one alert."""

    transition: LifecycleTransition
    alert: Alert
    detector_id: str
    forced: bool = False

    @property
    def patient_id(self) -> int:
        return self.alert.patient_id

    @property
    def kind(self) -> AlertKind:
        return self.alert.kind
