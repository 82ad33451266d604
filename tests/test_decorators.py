import pytest

from vital_alerts.decorators import PriorityEscalation, RepeatScheduler, Repetition, decorate
from vital_alerts.models import Alert, AlertKind, AlertSeverity, LifecycleEvent, LifecycleTransition


def _alert(timestamp: int = 0, severity: AlertSeverity = AlertSeverity.HIGH) -> Alert:
    return Alert(
        patient_id=1,
        kind=AlertKind.LOW_OXYGEN_SATURATION,
        message="Low oxygen saturation: 90.0%",
        timestamp=timestamp,
        severity=severity,
    )


def _event(transition: LifecycleTransition, timestamp: int) -> LifecycleEvent:
    return LifecycleEvent(transition, _alert(timestamp), "oxygen_threshold")


def test_priority_escalation():
    alert = _alert()

    escalated = decorate(alert, [PriorityEscalation("ICU patient")])

    assert escalated.severity is AlertSeverity.CRITICAL
    assert escalated.message == "PRIORITY: Low oxygen saturation: 90.0% - ICU patient"
    assert alert.severity is AlertSeverity.HIGH
    assert alert.message == "Low oxygen saturation: 90.0%"


def test_priority_escalation_caps_at_critical():
    escalated = PriorityEscalation("again").apply(_alert(severity=AlertSeverity.CRITICAL))
    assert escalated.severity is AlertSeverity.CRITICAL


def test_repetition_and_priority_compose_in_order():
    decorated = decorate(_alert(), [PriorityEscalation("ICU"), Repetition(60_000, 3, 2)])

    assert decorated.message == "PRIORITY: Low oxygen saturation: 90.0% - ICU [REPEAT 2/3]"


@pytest.mark.parametrize("interval_ms,max_repeats", [(0, 3), (-1, 3), (1000, -1)])
def test_invalid_repeat_settings(interval_ms, max_repeats):
    with pytest.raises(ValueError):
        Repetition(interval_ms, max_repeats)
    with pytest.raises(ValueError):
        RepeatScheduler(interval_ms, max_repeats)


def test_repeat_scheduler_emits_after_interval_until_max():
    emitted = []
    scheduler = RepeatScheduler(interval_ms=60_000, max_repeats=2, sink=emitted.append)

    assert scheduler(_event(LifecycleTransition.TRIGGERED, 0)) is None
    assert scheduler(_event(LifecycleTransition.UPDATED, 30_000)) is None
    first = scheduler(_event(LifecycleTransition.UPDATED, 60_000))
    assert scheduler(_event(LifecycleTransition.UPDATED, 90_000)) is None
    second = scheduler(_event(LifecycleTransition.UPDATED, 120_000))
    assert scheduler(_event(LifecycleTransition.UPDATED, 500_000)) is None

    assert first.message.endswith("[REPEAT 1/2]")
    assert second.message.endswith("[REPEAT 2/2]")
    assert emitted == [first, second]
    assert scheduler.repeats_for(1, AlertKind.LOW_OXYGEN_SATURATION) == 2


def test_repeat_scheduler_resets_on_resolve():
    scheduler = RepeatScheduler(interval_ms=1_000, max_repeats=1)
    scheduler(_event(LifecycleTransition.TRIGGERED, 0))
    scheduler(_event(LifecycleTransition.UPDATED, 1_000))

    scheduler(_event(LifecycleTransition.RESOLVED, 2_000))
    assert scheduler.repeats_for(1, AlertKind.LOW_OXYGEN_SATURATION) == 0

    scheduler(_event(LifecycleTransition.TRIGGERED, 3_000))
    repeated = scheduler(_event(LifecycleTransition.UPDATED, 4_000))
    assert repeated.message.endswith("[REPEAT 1/1]")


def test_repeat_scheduler_applies_extra_policies():
    scheduler = RepeatScheduler(interval_ms=1_000, max_repeats=1, policies=[PriorityEscalation("ward 3")])
    scheduler(_event(LifecycleTransition.TRIGGERED, 0))

    repeated = scheduler(_event(LifecycleTransition.UPDATED, 1_000))

    assert repeated.severity is AlertSeverity.CRITICAL
    assert repeated.message.startswith("PRIORITY: ")
