import pytest

from vital_alerts.detector_base import AlertDetector
from vital_alerts.exceptions import DuplicateDetectorError, UnknownDetectorError
from vital_alerts.models import (
    AlertKind,
    AlertSeverity,
    DetectionContext,
    SignalKind,
    SignalWindow,
    VerdictStatus,
)
from vital_alerts.registry import DetectorRegistry


class _HighSystolicStub(AlertDetector):
    id = "stub_high"
    description = "Stub Detector"
    version = "2.0.0"
    inputs = (SignalKind.SYSTOLIC_BP,)
    alert_kinds = (AlertKind.HIGH_SYSTOLIC_BP,)

    def detect(self, window: SignalWindow, context: DetectionContext):
        return self.alert(AlertKind.HIGH_SYSTOLIC_BP, "stub", 1, AlertSeverity.HIGH)


class _OverlappingStub(AlertDetector):
    id = "stub_overlap"
    alert_kinds = ("HIGH_SYSTOLIC_BP", "LOW_SYSTOLIC_BP")

    def detect(self, window: SignalWindow, context: DetectionContext):
        return self.no_alert()


class _OxygenStub(AlertDetector):
    id = "stub_oxygen"
    inputs = (SignalKind.OXYGEN_SATURATION,)
    alert_kinds = (AlertKind.LOW_OXYGEN_SATURATION,)

    def detect(self, window: SignalWindow, context: DetectionContext):
        return self.no_alert()


def test_descriptor_exposes_metadata():
    descriptor = _HighSystolicStub().descriptor

    assert descriptor.detector_id == "stub_high"
    assert descriptor.name == "Stub Detector"
    assert descriptor.version == "2.0.0"
    assert descriptor.inputs == (SignalKind.SYSTOLIC_BP,)
    assert descriptor.alert_kinds == (AlertKind.HIGH_SYSTOLIC_BP,)
    assert descriptor.window_size == 1


def test_alert_kinds_are_coerced_to_enum():
    assert _OverlappingStub.alert_kinds == (AlertKind.HIGH_SYSTOLIC_BP, AlertKind.LOW_SYSTOLIC_BP)


def test_detector_requires_id_and_alert_kinds():
    with pytest.raises(ValueError):

        class _NoId(AlertDetector):
            alert_kinds = (AlertKind.ECG_ABNORMAL_PEAK,)

            def detect(self, window, context):  # pragma: no cover - never instantiated
                raise NotImplementedError

    with pytest.raises(ValueError):

        class _NoKinds(AlertDetector):
            id = "no_kinds"

            def detect(self, window, context):  # pragma: no cover - never instantiated
                raise NotImplementedError


def test_alert_for_unowned_kind_is_rejected():
    with pytest.raises(ValueError):
        _OxygenStub().alert(AlertKind.RAPID_OXYGEN_DROP, "nope", 1, AlertSeverity.HIGH)


def test_register_rejects_duplicate_id_and_kind():
    registry = DetectorRegistry()
    registry.register(_HighSystolicStub)

    with pytest.raises(DuplicateDetectorError):
        registry.register(_HighSystolicStub)
    with pytest.raises(DuplicateDetectorError) as excinfo:
        registry.register(_OverlappingStub)

    assert excinfo.value.details["owner"] == "stub_high"
    assert registry.ids() == ["stub_high"]


def test_get_unknown_detector():
    registry = DetectorRegistry()
    registry.register(_OxygenStub)

    with pytest.raises(UnknownDetectorError) as excinfo:
        registry.get("missing")

    assert isinstance(excinfo.value, KeyError)
    assert "stub_oxygen" in str(excinfo.value)
    with pytest.raises(UnknownDetectorError):
        registry.select(["stub_oxygen", "missing"])


def test_owner_lookup_and_containment():
    registry = DetectorRegistry()
    registry.register(_HighSystolicStub)
    registry.register(_OxygenStub)

    assert registry.owner_of(AlertKind.LOW_OXYGEN_SATURATION).id == "stub_oxygen"
    assert "stub_high" in registry
    assert len(registry) == 2
    with pytest.raises(UnknownDetectorError):
        registry.owner_of(AlertKind.MANUAL_TRIGGER)


def test_detect_all_with_predicate():
    registry = DetectorRegistry()
    registry.register(_HighSystolicStub)
    registry.register(_OxygenStub)
    context = DetectionContext(patient_id=1)

    def window_for(detector):
        return SignalWindow(patient_id=1)

    verdicts = registry.detect_all(window_for, context)
    filtered = registry.detect_all(window_for, context, predicate=lambda d: d.id == "stub_oxygen")

    assert [v.detector_id for v in verdicts] == ["stub_high", "stub_oxygen"]
    assert [v.status for v in filtered] == [VerdictStatus.NO_ALERT]


def test_clear_releases_ids_and_kinds():
    registry = DetectorRegistry()
    registry.register(_HighSystolicStub)
    registry.clear()

    registry.register(_OverlappingStub)
    assert registry.ids() == ["stub_overlap"]
