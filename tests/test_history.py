from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from vital_alerts.history import HistoryStore
from vital_alerts.models import MeasurementRecord, SignalKind


def _record(value: float, timestamp: int, kind: str = SignalKind.SYSTOLIC_BP, patient_id: int = 1) -> MeasurementRecord:
    return MeasurementRecord(patient_id=patient_id, signal_kind=kind, value=value, timestamp=timestamp)


def test_merge_orders_by_timestamp_and_skips_duplicates():
    history = HistoryStore()

    inserted = history.merge(1, [_record(130, 3000), _record(120, 1000), _record(125, 2000)])
    again = history.merge(1, [_record(999, 2000), _record(140, 4000)])

    window = history.latest_window(1, SignalKind.SYSTOLIC_BP)
    assert inserted == 3
    assert again == 1
    assert [r.timestamp for r in window] == [1000, 2000, 3000, 4000]
    # The first record seen for a timestamp wins.
    assert window[1].value == 125


def test_capacity_keeps_most_recent_records():
    history = HistoryStore(capacity=3)
    history.merge(1, [_record(100 + i, i * 1000) for i in range(5)])

    window = history.latest_window(1, SignalKind.SYSTOLIC_BP)
    assert [r.value for r in window] == [102, 103, 104]


def test_latest_window_sizes():
    history = HistoryStore()
    history.merge(1, [_record(100 + i, i * 1000) for i in range(4)])

    assert [r.value for r in history.latest_window(1, SignalKind.SYSTOLIC_BP, 2)] == [102, 103]
    assert history.latest_window(1, SignalKind.SYSTOLIC_BP, 0) == ()
    assert len(history.latest_window(1, SignalKind.SYSTOLIC_BP, 10)) == 4
    assert history.latest_window(2, SignalKind.SYSTOLIC_BP) == ()
    assert history.latest(1, SignalKind.SYSTOLIC_BP).value == 103


def test_simulator_labels_share_canonical_series():
    history = HistoryStore()
    history.merge(
        1,
        [
            _record(97, 1000, kind="Saturation"),
            _record(95, 2000, kind=SignalKind.OXYGEN_SATURATION),
        ],
    )

    assert history.signal_kinds(1) == [SignalKind.OXYGEN_SATURATION]
    assert [r.value for r in history.latest_window(1, "Saturation")] == [97, 95]


def test_latest_timestamp_and_clear():
    history = HistoryStore()
    history.merge(1, [_record(120, 1000), _record(95, 5000, kind=SignalKind.OXYGEN_SATURATION)])
    history.merge(2, [_record(120, 9000, patient_id=2)])

    assert history.latest_timestamp(1) == 5000
    assert history.latest_timestamp(3) is None
    assert history.patient_ids() == [1, 2]

    history.clear(1)
    assert history.patient_ids() == [2]
    history.clear()
    assert history.patient_ids() == []


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryStore(capacity=0)
