"""Shared utilities for detector implementations."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import MeasurementRecord

MINUTE_MS = 60_000


def reading_values(records: Sequence[MeasurementRecord]) -> np.ndarray:
    """Return measurement values as a float array in history order."""

    return np.fromiter((record.value for record in records), dtype=float, count=len(records))


def consecutive_deltas(records: Sequence[MeasurementRecord]) -> np.ndarray:
    """Differences between each reading and the one before it."""

    return np.diff(reading_values(records))


def window_stats(records: Sequence[MeasurementRecord]) -> tuple[float, float]:
    """Mean and population standard deviation of the supplied readings."""

    values = reading_values(records)
    return float(np.mean(values)), float(np.std(values, ddof=0))


def normalized_annotation(record: MeasurementRecord) -> str:
    return (record.annotation or "").strip().lower()
