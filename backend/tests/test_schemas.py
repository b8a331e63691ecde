from datetime import date

import pytest

from traincore.errors import MissingDataError
from traincore.schemas import AttendanceRow, BatchRow, StudentRow, load_rows, parse_row


def test_parse_row_names_missing_field():
    with pytest.raises(MissingDataError) as excinfo:
        parse_row(AttendanceRow, {"student_id": "s-1", "date": date(2024, 5, 1)})
    assert "status" in str(excinfo.value)


def test_parse_row_rejects_non_mapping():
    with pytest.raises(MissingDataError):
        parse_row(AttendanceRow, ["present"])


def test_load_rows_skips_bad_rows():
    rows = [
        {"id": "s-1", "student_code": "STU-1"},
        {"id": "s-2", "student_code": "STU-2", "technical_score": 11},
        {"student_code": "STU-3"},
    ]
    loaded = load_rows(StudentRow, rows)
    assert [s.id for s in loaded] == ["s-1"]


def test_load_rows_none_is_empty():
    assert load_rows(BatchRow, None) == []


def test_extra_columns_are_ignored():
    row = parse_row(BatchRow, {"id": "b", "batch_code": "X", "status": "Active", "colour": "red"})
    assert row.status.value == "active"
