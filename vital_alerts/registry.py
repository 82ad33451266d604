"""Registry for discovering and executing alert detectors."""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Dict, Type

from .detector_base import AlertDetector
from .exceptions import DuplicateDetectorError, UnknownDetectorError
from .models import AlertKind, DetectionContext, SignalWindow, Verdict


class DetectorRegistry:
    """Keeps track of available detectors by id."""

    def __init__(self) -> None:
        self._detectors: Dict[str, AlertDetector] = {}
        self._owners: Dict[AlertKind, str] = {}

    def register(self, detector_cls: Type[AlertDetector]) -> Type[AlertDetector]:
        if detector_cls.id in self._detectors:
            raise DuplicateDetectorError(f"Detector '{detector_cls.id}' already registered")
        for kind in detector_cls.alert_kinds:
            owner = self._owners.get(kind)
            if owner is not None:
                raise DuplicateDetectorError(
                    f"Alert kind {kind.value} is already owned by detector '{owner}'",
                    details={"detector_id": detector_cls.id, "owner": owner},
                )
        self._detectors[detector_cls.id] = detector_cls()
        for kind in detector_cls.alert_kinds:
            self._owners[kind] = detector_cls.id
        return detector_cls

    def clear(self) -> None:
        """Remove all registered detectors."""

        self._detectors.clear()
        self._owners.clear()

    def get(self, detector_id: str) -> AlertDetector:
        try:
            return self._detectors[detector_id]
        except KeyError:
            known = ", ".join(sorted(self._detectors)) or "<none>"
            raise UnknownDetectorError(
                f"Unknown detector category '{detector_id}' (registered: {known})"
            ) from None

    def select(self, detector_ids: Iterable[str]) -> list[AlertDetector]:
        """Resolve ids to detectors, failing on the first unknown id."""

        return [self.get(detector_id) for detector_id in detector_ids]

    def owner_of(self, kind: AlertKind) -> AlertDetector:
        detector_id = self._owners.get(AlertKind(kind))
        if detector_id is None:
            raise UnknownDetectorError(f"No detector owns alert kind {AlertKind(kind).value}")
        return self._detectors[detector_id]

    def ids(self) -> list[str]:
        return list(self._detectors)

    def items(self) -> Iterable[tuple[str, AlertDetector]]:
        return self._detectors.items()

    def values(self) -> Iterable[AlertDetector]:
        return self._detectors.values()

    def __contains__(self, detector_id: object) -> bool:
        return detector_id in self._detectors

    def __len__(self) -> int:
        return len(self._detectors)

    def detect_all(
        self,
        window_for: Callable[[AlertDetector], SignalWindow],
        context: DetectionContext,
        predicate: Callable[[AlertDetector], bool] | None = None,
    ) -> list[Verdict]:
        """Run every registered detector, optionally filtering."""

        outputs: list[Verdict] = []
        for detector in list(self._detectors.values()):
            if predicate is not None and not predicate(detector):
                continue
            outputs.append(detector.detect(window_for(detector), context))
        return outputs


registry = DetectorRegistry()


def register_detector(detector_cls: Type[AlertDetector]) -> Type[AlertDetector]:
    """Decorator for registering a detector at definition time."""

    return registry.register(detector_cls)
