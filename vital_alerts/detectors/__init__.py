"""Built-in vital-sign detectors.

Importing this package imports every detector module, and each detector
registers itself with the shared registry. After loading, every ``AlertKind``
must have exactly one owning detector.
"""
from __future__ import annotations

import logging
import pkgutil
from importlib import import_module

from ..models import AlertKind
from ..registry import DetectorRegistry, registry

logger = logging.getLogger(__name__)

_HELPER_MODULES = frozenset({"utils"})

DETECTOR_MODULES: tuple[str, ...] = tuple(
    sorted(
        info.name
        for info in pkgutil.iter_modules(__path__)
        if not info.ispkg and not info.name.startswith("_") and info.name not in _HELPER_MODULES
    )
)


def unowned_alert_kinds(detectors: DetectorRegistry = registry) -> list[AlertKind]:
    """Alert kinds that no detector in ``detectors`` can raise."""

    owned = {kind for detector in detectors.values() for kind in detector.alert_kinds}
    return [kind for kind in AlertKind if kind not in owned]


def load_detectors() -> list[str]:
    """Import every detector module and return the registered detector ids."""

    for module_name in DETECTOR_MODULES:
        import_module(f"{__name__}.{module_name}")
    missing = unowned_alert_kinds()
    if missing:
        logger.warning("No detector raises alert kinds: %s", ", ".join(kind.value for kind in missing))
    return registry.ids()


load_detectors()

__all__ = ["DETECTOR_MODULES", "load_detectors", "unowned_alert_kinds"]
