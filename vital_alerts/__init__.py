"""Vital-sign alert evaluation and lifecycle engine."""

from .decorators import PriorityEscalation, RepeatScheduler, Repetition, decorate
from .detector_base import AlertDetector
from .engine import AlertEngine, RecordSource
from .exceptions import (
    DuplicateDetectorError,
    MalformedRecordError,
    UnknownDetectorError,
    VitalAlertsError,
)
from .history import HistoryStore
from .lifecycle import AlertLifecycleManager
from .models import (
    Alert,
    AlertCandidate,
    AlertKind,
    AlertSeverity,
    DetectionContext,
    DetectorDescriptor,
    LifecycleEvent,
    LifecycleTransition,
    MeasurementRecord,
    SignalKind,
    SignalWindow,
    Verdict,
    VerdictStatus,
)
from .registry import register_detector, registry
from .storage import InMemoryRecordStorage

__all__ = [
    "Alert",
    "AlertCandidate",
    "AlertDetector",
    "AlertEngine",
    "AlertKind",
    "AlertLifecycleManager",
    "AlertSeverity",
    "DetectionContext",
    "DetectorDescriptor",
    "DuplicateDetectorError",
    "HistoryStore",
    "InMemoryRecordStorage",
    "LifecycleEvent",
    "LifecycleTransition",
    "MalformedRecordError",
    "MeasurementRecord",
    "PriorityEscalation",
    "RecordSource",
    "Repetition",
    "RepeatScheduler",
    "SignalKind",
    "SignalWindow",
    "UnknownDetectorError",
    "Verdict",
    "VerdictStatus",
    "VitalAlertsError",
    "decorate",
    "register_detector",
    "registry",
]
