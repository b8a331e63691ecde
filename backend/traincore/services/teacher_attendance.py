"""
Teacher Attendance Aggregator - per-teacher rates and the daily staff card.

Uses the same rules as student attendance: present and late are attended,
every valid record counts toward the total, and rounding happens once in
to_percentage.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel

from traincore.logging_config import get_logger, log_with_context
from traincore.schemas import AttendanceStatus, TeacherAttendanceRow, TeacherRow, load_rows
from traincore.services.attendance import attended_share, to_percentage

logger = get_logger("attendance")


class TeacherAttendanceStats(BaseModel):
    total_teachers: int
    present_today: int
    absent_today: int
    late_today: int
    not_marked_today: int
    attendance_today: int


def _records(rows: Optional[Iterable[Union[TeacherAttendanceRow, dict]]]) -> List[TeacherAttendanceRow]:
    if rows is None:
        return load_rows(TeacherAttendanceRow, None)
    rows = list(rows)
    typed = [r for r in rows if isinstance(r, TeacherAttendanceRow)]
    raw = [r for r in rows if not isinstance(r, TeacherAttendanceRow)]
    return typed + load_rows(TeacherAttendanceRow, raw) if raw else typed


def teacher_attendance_percentage(rows: Iterable, teacher_id: str) -> int:
    """Pooled (present + late) / total for one teacher; 0 with no records."""
    return to_percentage(attended_share([r for r in _records(rows) if r.teacher_id == teacher_id]))


def attendance_by_teacher(rows: Iterable) -> Dict[str, int]:
    """Whole-percent attendance per teacher id, for teachers with records."""
    grouped = {}
    for record in _records(rows):
        grouped.setdefault(record.teacher_id, []).append(record)
    return {teacher_id: to_percentage(attended_share(records))
            for teacher_id, records in grouped.items()}


def teacher_attendance_stats(teacher_rows: Iterable, attendance_rows: Iterable,
                             today: date) -> TeacherAttendanceStats:
    """
    Dashboard card for staff attendance on `today`.

    total_teachers counts active teachers only. Status counts cover every
    record dated today; present_today excludes late arrivals, which are
    reported separately. attendance_today is the attended share of the
    records marked today.
    """
    active_ids = {t.id for t in load_rows(TeacherRow, teacher_rows) if t.is_active}
    today_records = [r for r in _records(attendance_rows) if r.date == today]

    def _count(status):
        return sum(1 for r in today_records if r.status == status)

    marked = {r.teacher_id for r in today_records}
    stats = TeacherAttendanceStats(
        total_teachers=len(active_ids),
        present_today=_count(AttendanceStatus.PRESENT),
        absent_today=_count(AttendanceStatus.ABSENT),
        late_today=_count(AttendanceStatus.LATE),
        not_marked_today=len(active_ids - marked),
        attendance_today=to_percentage(attended_share(today_records)),
    )

    log_with_context(logger, "DEBUG",
        "Teacher attendance for {}: {}/{} marked".format(
            today.isoformat(), len(marked & active_ids), stats.total_teachers),
        extra_data={"records": len(today_records)})
    return stats
