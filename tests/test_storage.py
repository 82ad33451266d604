from vital_alerts.models import MeasurementRecord, SignalKind
from vital_alerts.storage import InMemoryRecordStorage


def _record(patient_id: int, timestamp: int, value: float = 120.0) -> MeasurementRecord:
    return MeasurementRecord(patient_id, SignalKind.SYSTOLIC_BP, value, timestamp)


def test_fetch_records_is_inclusive_and_ordered():
    storage = InMemoryRecordStorage()
    storage.add_records([_record(1, 3000), _record(1, 1000), _record(1, 2000), _record(1, 4000)])

    fetched = storage.fetch_records(1, 2000, 3000)

    assert [r.timestamp for r in fetched] == [2000, 3000]
    assert [r.timestamp for r in storage.fetch_records(1, 0, 10_000)] == [1000, 2000, 3000, 4000]


def test_fetch_records_is_scoped_to_patient():
    storage = InMemoryRecordStorage()
    storage.add_record(_record(1, 1000))
    storage.add_record(_record(2, 1000))

    assert [r.patient_id for r in storage.fetch_records(2, 0, 5000)] == [2]
    assert storage.fetch_records(3, 0, 5000) == []
    assert storage.patient_ids() == [1, 2]


def test_clear_empties_storage():
    storage = InMemoryRecordStorage()
    assert storage.add_records([_record(1, 1000), _record(2, 2000)]) == 2

    storage.clear()

    assert storage.patient_ids() == []
    assert storage.fetch_records(1, 0, 5000) == []
