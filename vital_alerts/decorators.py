"""Optional decorations applied to alerts after lifecycle transitions.

Decorations never touch the lifecycle manager's state: ``decorate`` returns a
new ``Alert`` built from the one passed in.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Protocol, Sequence

from .models import Alert, AlertKind, LifecycleEvent, LifecycleTransition

logger = logging.getLogger(__name__)


class AlertPolicy(Protocol):
    def apply(self, alert: Alert) -> Alert:
        ...


@dataclass(frozen=True)
class PriorityEscalation:
    """Raise severity by one level and prefix the message."""

    reason: str

    def apply(self, alert: Alert) -> Alert:
        return replace(
            alert,
            severity=alert.severity.escalated(),
            message=f"PRIORITY: {alert.message} - {self.reason}",
        )


@dataclass(frozen=True)
class Repetition:
    """Mark an alert as the ``count``-th of ``max_repeats`` reminders."""

    interval_ms: int
    max_repeats: int
    count: int = 0

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if self.max_repeats < 0:
            raise ValueError("max_repeats must be >= 0")

    def apply(self, alert: Alert) -> Alert:
        return replace(alert, message=f"{alert.message} [REPEAT {self.count}/{self.max_repeats}]")


def decorate(alert: Alert, policies: Sequence[AlertPolicy]) -> Alert:
    """Apply ``policies`` in order to a copy of ``alert``."""

    decorated = alert.copy()
    for policy in policies:
        decorated = policy.apply(decorated)
    return decorated


@dataclass
class _RepeatState:
    last_emitted_at: int
    count: int = 0


@dataclass
class RepeatScheduler:
    """Lifecycle listener that re-announces alerts which stay active.

    Time is measured with alert timestamps, not wall-clock timers: an
    ``UPDATED`` event at least ``interval_ms`` after the previous announcement
    emits a repetition, up to ``max_repeats`` times. Updates do not reset the
    count; a resolve does, so a re-trigger starts again from zero.
    """

    interval_ms: int
    max_repeats: int
    sink: Callable[[Alert], None] | None = None
    policies: Sequence[AlertPolicy] = ()
    _state: Dict[tuple[int, AlertKind], _RepeatState] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if self.max_repeats < 0:
            raise ValueError("max_repeats must be >= 0")

    def __call__(self, event: LifecycleEvent) -> Alert | None:
        key = event.alert.key
        if event.transition is LifecycleTransition.RESOLVED:
            self._state.pop(key, None)
            return None
        if event.transition is LifecycleTransition.TRIGGERED:
            self._state[key] = _RepeatState(last_emitted_at=event.alert.timestamp)
            return None

        state = self._state.get(key)
        if state is None:
            # Alert was active before this scheduler subscribed.
            self._state[key] = _RepeatState(last_emitted_at=event.alert.timestamp)
            return None
        if state.count >= self.max_repeats:
            return None
        if event.alert.timestamp - state.last_emitted_at < self.interval_ms:
            return None

        state.count += 1
        state.last_emitted_at = event.alert.timestamp
        repeated = decorate(
            event.alert,
            [*self.policies, Repetition(self.interval_ms, self.max_repeats, state.count)],
        )
        logger.info("Alert repeated: %s (%d/%d)", repeated.message, state.count, self.max_repeats)
        if self.sink is not None:
            self.sink(repeated)
        return repeated

    def repeats_for(self, patient_id: int, kind: AlertKind) -> int:
        state = self._state.get((patient_id, AlertKind(kind)))
        return state.count if state else 0
