from datetime import date

from traincore.schemas import TeacherAttendanceRow
from traincore.services.teacher_attendance import (
    attendance_by_teacher, teacher_attendance_percentage, teacher_attendance_stats,
)

TODAY = date(2024, 5, 15)


def rec(status, teacher="t-1", day=TODAY):
    return {"teacher_id": teacher, "status": status, "date": day}


def teacher(id, is_active=True):
    return {"id": id, "first_name": id, "last_name": "T", "is_active": is_active}


def test_percentage_counts_late_as_attended():
    rows = [rec("present", day=date(2024, 5, d)) for d in (1, 2)] + \
           [rec("late", day=date(2024, 5, 3)), rec("absent", day=date(2024, 5, 4))]
    assert teacher_attendance_percentage(rows, "t-1") == 75


def test_percentage_without_records_is_zero():
    assert teacher_attendance_percentage([rec("present", teacher="t-2")], "t-1") == 0
    assert teacher_attendance_percentage([], "t-1") == 0


def test_percentage_rounds_half_up_once():
    # 1 of 8 attended is 12.5%
    rows = [rec("present", day=date(2024, 5, 1))] + \
           [rec("absent", day=date(2024, 5, d)) for d in range(2, 9)]
    assert teacher_attendance_percentage(rows, "t-1") == 13


def test_attendance_by_teacher():
    rows = [rec("present", teacher="t-1"), rec("excused", teacher="t-2"),
            rec("late", teacher="t-2", day=date(2024, 5, 14))]
    assert attendance_by_teacher(rows) == {"t-1": 100, "t-2": 50}


def test_daily_stats():
    teachers = [teacher("t-1"), teacher("t-2"), teacher("t-3"), teacher("t-4", is_active=False)]
    rows = [
        rec("present", teacher="t-1"),
        rec("late", teacher="t-2"),
        rec("absent", teacher="t-1", day=date(2024, 5, 14)),
    ]

    stats = teacher_attendance_stats(teachers, rows, TODAY)

    assert stats.total_teachers == 3
    assert stats.present_today == 1
    assert stats.late_today == 1
    assert stats.absent_today == 0
    assert stats.not_marked_today == 1
    assert stats.attendance_today == 100


def test_daily_stats_empty():
    stats = teacher_attendance_stats([], [], TODAY)
    assert stats.model_dump() == {
        "total_teachers": 0, "present_today": 0, "absent_today": 0, "late_today": 0,
        "not_marked_today": 0, "attendance_today": 0,
    }


def test_malformed_rows_are_skipped():
    rows = [rec("present"), {"teacher_id": "t-1", "status": "on_leave", "date": TODAY},
            {"status": "present", "date": TODAY}]
    assert teacher_attendance_percentage(rows, "t-1") == 100


def test_accepts_typed_records():
    rows = [TeacherAttendanceRow(teacher_id="t-1", status="ABSENT", date=TODAY)]
    assert teacher_attendance_percentage(rows, "t-1") == 0
