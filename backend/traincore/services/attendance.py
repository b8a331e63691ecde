"""
Attendance Aggregator - turns attendance rows into rate statistics.

Rules applied throughout:
1. present and late both count as attended; absent and excused do not,
   but every valid record counts toward the day's total
2. any rate over zero records is 0, never a division error
3. rates are kept as unrounded fractions; rounding to a whole percent
   happens once, in to_percentage, when the display value is built
4. a period average is the unweighted mean of its daily rates, so a day
   with 3 students weighs the same as a day with 300

Malformed rows are dropped by schemas.load_rows before any math runs.
"""

import math
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel

from traincore.logging_config import get_logger, log_with_context
from traincore.schemas import AttendanceRow, AttendanceStatus, load_rows

logger = get_logger("attendance")

RowLike = Union[AttendanceRow, dict]

WEEKDAY_LABELS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class AttendanceSnapshot(BaseModel):
    percentage: int
    present: int
    total: int


class AttendanceStats(BaseModel):
    today: AttendanceSnapshot
    weekly_average: int
    late_arrivals: int
    absent_students: int


def _records(rows: Optional[Iterable[RowLike]]) -> List[AttendanceRow]:
    """Accept typed records or raw storage rows; validate the raw ones."""
    if rows is None:
        return load_rows(AttendanceRow, None)
    rows = list(rows)
    if all(isinstance(r, AttendanceRow) for r in rows):
        return rows
    typed = [r for r in rows if isinstance(r, AttendanceRow)]
    raw = [r for r in rows if not isinstance(r, AttendanceRow)]
    return typed + load_rows(AttendanceRow, raw)


def to_percentage(rate: float) -> int:
    """Fraction in [0, 1] -> whole percent, rounding halves up."""
    return int(math.floor(rate * 100 + 0.5))


def day_of_week(day: date) -> str:
    """Weekday label stored alongside each record, e.g. 'Monday'."""
    return WEEKDAY_LABELS[day.weekday()]


def week_start(today: date) -> date:
    """
    First day of the local week containing `today`.

    Weeks start on Sunday (weekday index 0), so a Sunday is its own week
    start and a Saturday reaches back six days.
    """
    days_since_sunday = (today.weekday() + 1) % 7
    return today - timedelta(days=days_since_sunday)


def attended_share(records: Sequence) -> float:
    """(present + late) / total over typed status records; 0 when empty."""
    if not records:
        return 0.0
    attended = sum(1 for r in records if r.attended)
    return attended / len(records)


def bucket_by_date(rows: Iterable[RowLike], start: Optional[date] = None,
                   end: Optional[date] = None) -> Dict[date, List[AttendanceRow]]:
    """Group records by calendar date, optionally within [start, end]."""
    buckets = OrderedDict()
    for record in sorted(_records(rows), key=lambda r: r.date):
        if start is not None and record.date < start:
            continue
        if end is not None and record.date > end:
            continue
        buckets.setdefault(record.date, []).append(record)
    return buckets


def daily_rate(rows: Iterable[RowLike], day: date) -> float:
    """(present + late) / total for `day`; 0 when the day has no records."""
    return attended_share([r for r in _records(rows) if r.date == day])


def period_average(rows: Iterable[RowLike], start: date, end: date) -> float:
    """
    Unweighted mean of daily rates over [start, end], both inclusive.

    Days without records are not buckets and do not pull the mean down.
    Returns 0 when no day in the period has records.
    """
    buckets = bucket_by_date(rows, start, end)
    if not buckets:
        return 0.0
    daily = [attended_share(day_records) for day_records in buckets.values()]
    return sum(daily) / len(daily)


def attendance_snapshot(rows: Iterable[RowLike], day: date) -> AttendanceSnapshot:
    """{percentage, present, total} for one day; present includes late."""
    day_records = [r for r in _records(rows) if r.date == day]
    attended = sum(1 for r in day_records if r.attended)
    return AttendanceSnapshot(
        percentage=to_percentage(attended_share(day_records)),
        present=attended,
        total=len(day_records),
    )


def attendance_stats(rows: Iterable[RowLike], today: date) -> AttendanceStats:
    """
    Dashboard attendance card values for `today`.

    Late arrivals and absences are raw counts for today only; the weekly
    average covers week_start(today) through today.
    """
    records = _records(rows)
    today_records = [r for r in records if r.date == today]
    late_today = sum(1 for r in today_records if r.status == AttendanceStatus.LATE)
    absent_today = sum(1 for r in today_records if r.status == AttendanceStatus.ABSENT)
    weekly = period_average(records, week_start(today), today)

    stats = AttendanceStats(
        today=attendance_snapshot(today_records, today),
        weekly_average=to_percentage(weekly),
        late_arrivals=late_today,
        absent_students=absent_today,
    )

    log_with_context(logger, "DEBUG",
        "Attendance stats for {}: today={}%, week={}%".format(
            today.isoformat(), stats.today.percentage, stats.weekly_average),
        extra_data={"records": len(records), "today_total": stats.today.total})
    return stats


def attendance_rate(rows: Iterable[RowLike], student_id: Optional[str] = None,
                    batch_id: Optional[str] = None) -> float:
    """
    Pooled attended / total over every record for a student or a batch.

    Unlike period_average this is headcount-weighted: it answers "what
    share of this student's (or batch's) sessions were attended".
    """
    records = _records(rows)
    if student_id is not None:
        records = [r for r in records if r.student_id == student_id]
    if batch_id is not None:
        records = [r for r in records if r.batch_id == batch_id]
    return attended_share(records)


def attendance_percentage(rows: Iterable[RowLike], student_id: Optional[str] = None,
                          batch_id: Optional[str] = None) -> int:
    return to_percentage(attendance_rate(rows, student_id=student_id, batch_id=batch_id))


def attendance_by_student(rows: Iterable[RowLike]) -> Dict[str, float]:
    """
    Unrounded attendance percentage (0-100) per student id.

    Students without records are absent from the mapping, which lets the
    scorer tell "never recorded" apart from "0% attended".
    """
    grouped = {}
    for record in _records(rows):
        grouped.setdefault(record.student_id, []).append(record)
    return {student_id: attended_share(records) * 100 for student_id, records in grouped.items()}
