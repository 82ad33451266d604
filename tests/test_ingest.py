import logging

import pytest

from vital_alerts.exceptions import MalformedRecordError
from vital_alerts.ingest import iter_records, parse_record_line, parse_socket_message
from vital_alerts.models import MeasurementRecord, SignalKind


def test_parse_record_line():
    record = parse_record_line("7,182.5,SystolicBP,1700000000000\n")

    assert record == MeasurementRecord(
        patient_id=7,
        signal_kind=SignalKind.SYSTOLIC_BP,
        value=182.5,
        timestamp=1700000000000,
    )


def test_parse_record_line_keeps_annotation():
    record = parse_record_line("7,1,Alert,1700000000000,triggered")

    assert record.signal_kind == SignalKind.ALERT_MARKER
    assert record.annotation == "triggered"


def test_parse_socket_message_strips_percent_suffix():
    record = parse_socket_message("12,1700000000000,Saturation,95%")

    assert record.patient_id == 12
    assert record.signal_kind == "Saturation"
    assert record.value == 95.0
    assert record.timestamp == 1700000000000
    assert record.annotation is None


@pytest.mark.parametrize("state,value", [("triggered", 1.0), ("resolved", 0.0)])
def test_socket_alert_marker_moves_state_into_annotation(state, value):
    record = parse_socket_message(f"3,1700000000000,Alert,{state}")

    assert record.signal_kind == SignalKind.ALERT_MARKER
    assert record.annotation == state
    assert record.value == value


@pytest.mark.parametrize(
    "line",
    [
        "7,182.5,SystolicBP",
        "x,182.5,SystolicBP,1700000000000",
        "7,high,SystolicBP,1700000000000",
        "7,182.5,,1700000000000",
        "7,182.5,SystolicBP,-5",
        "1,nan,ECG,1000",
        "1,inf,SystolicBP,1000",
        "1,-Infinity,OxygenSaturation,1000",
    ],
)
def test_malformed_record_lines_are_rejected(line):
    with pytest.raises(MalformedRecordError) as excinfo:
        parse_record_line(line)

    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.code == "MALFORMED_RECORD"


def test_iter_records_skips_blank_and_malformed_lines(caplog):
    lines = [
        "1,120,SystolicBP,1000",
        "",
        "garbage",
        "1,95,OxygenSaturation,2000",
    ]

    with caplog.at_level(logging.WARNING, logger="vital_alerts.ingest"):
        records = list(iter_records(lines))

    assert [r.signal_kind for r in records] == [SignalKind.SYSTOLIC_BP, SignalKind.OXYGEN_SATURATION]
    assert "Skipping malformed line 3" in caplog.text


def test_iter_records_accepts_socket_parser():
    records = list(iter_records(["5,1000,ECG,0.42", "5,2000,Alert,resolved"], parser=parse_socket_message))

    assert [r.timestamp for r in records] == [1000, 2000]
    assert records[1].annotation == "resolved"


@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "NaN%"])
def test_socket_message_rejects_non_finite_values(value):
    with pytest.raises(MalformedRecordError):
        parse_socket_message(f"1,1000,SystolicBP,{value}")
