"""Base class and utilities for alert detectors."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from .models import (
    AlertCandidate,
    AlertKind,
    AlertSeverity,
    DetectionContext,
    DetectorDescriptor,
    SignalWindow,
    Verdict,
    VerdictStatus,
)


class AlertDetector(ABC):
    """Abstract detector with metadata.

    ``inputs`` names the signal kinds the detector reads and ``window_size``
    how many of the most recent records of each it needs (``None`` means the
    whole retained history). ``alert_kinds`` is the set of alert kinds the
    detector owns: any owned kind not named by an ``ALERT`` verdict is
    resolved by the lifecycle manager.
    """

    id: str = ""
    description: str = ""
    version: str = "1.0.0"
    inputs: tuple[str, ...] = ()
    alert_kinds: tuple[AlertKind, ...] = ()
    window_size: Optional[int] = 1

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.id:
            raise ValueError(f"Detector {cls.__name__} must define a non-empty id")
        if not cls.alert_kinds:
            raise ValueError(f"Detector {cls.__name__} must own at least one alert kind")
        cls.alert_kinds = tuple(AlertKind(kind) for kind in cls.alert_kinds)

    @property
    def descriptor(self) -> DetectorDescriptor:
        """Return static metadata describing this detector."""

        return DetectorDescriptor(
            detector_id=self.id,
            name=self.description or self.id,
            description=self.description or self.id,
            version=self.version,
            inputs=self.inputs,
            alert_kinds=self.alert_kinds,
            window_size=self.window_size,
        )

    @abstractmethod
    def detect(self, window: SignalWindow, context: DetectionContext) -> Verdict:
        """Evaluate the rule against the supplied history slice."""

    def resolved_threshold(self, context: DetectionContext, key: str, default: Any) -> Any:
        """Helper to fetch detector-specific threshold overrides."""

        return context.detector_threshold(self.id, key, default)

    def alert(
        self,
        kind: AlertKind,
        message: str,
        timestamp: int,
        severity: AlertSeverity,
        *,
        evidence: Mapping[str, Any] | None = None,
        metrics: Mapping[str, float] | None = None,
    ) -> Verdict:
        if kind not in self.alert_kinds:
            raise ValueError(f"Detector {self.id!r} does not own alert kind {kind.value}")
        return Verdict(
            detector_id=self.id,
            status=VerdictStatus.ALERT,
            alert_kinds=self.alert_kinds,
            candidate=AlertCandidate(kind=kind, message=message, timestamp=timestamp, severity=severity),
            evidence=evidence or {},
            metrics=metrics or {},
            version=self.version,
        )

    def no_alert(
        self,
        *,
        evidence: Mapping[str, Any] | None = None,
        metrics: Mapping[str, float] | None = None,
    ) -> Verdict:
        return self._verdict(VerdictStatus.NO_ALERT, evidence, metrics)

    def resolve(self, *, evidence: Mapping[str, Any] | None = None) -> Verdict:
        """Explicit resolve signal, as opposed to merely not re-triggering."""

        return self._verdict(VerdictStatus.RESOLVE, evidence, None)

    def insufficient_data(self, available: int, required: int, **evidence: Any) -> Verdict:
        """Rule not applicable yet; treated like ``NO_ALERT`` by the lifecycle."""

        return self._verdict(
            VerdictStatus.INSUFFICIENT_DATA,
            {"available_readings": available, "required_readings": required, **evidence},
            None,
        )

    def _verdict(
        self,
        status: VerdictStatus,
        evidence: Mapping[str, Any] | None,
        metrics: Mapping[str, float] | None,
    ) -> Verdict:
        return Verdict(
            detector_id=self.id,
            status=status,
            alert_kinds=self.alert_kinds,
            evidence=evidence or {},
            metrics=metrics or {},
            version=self.version,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} id={self.id!r} version={self.version!r}>"
