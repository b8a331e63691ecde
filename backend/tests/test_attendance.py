from datetime import date

import pytest

from traincore.schemas import AttendanceRow
from traincore.services.attendance import (
    attendance_by_student, attendance_percentage, attendance_snapshot, attendance_stats,
    bucket_by_date, daily_rate, day_of_week, period_average, to_percentage, week_start,
)

TODAY = date(2024, 5, 15)  # a Wednesday


def rec(status, day=TODAY, student="s-1", batch="b-1"):
    return {"student_id": student, "batch_id": batch, "status": status, "date": day}


def test_today_scenario():
    rows = [rec("present", student="a"), rec("present", student="b"),
            rec("late", student="c"), rec("absent", student="d")]

    stats = attendance_stats(rows, TODAY)

    assert stats.today.percentage == 75
    assert stats.today.present == 3
    assert stats.today.total == 4
    assert stats.absent_students == 1
    assert stats.late_arrivals == 1


def test_daily_rate_empty_day_is_zero():
    assert daily_rate([], TODAY) == 0
    assert daily_rate([rec("present", day=date(2024, 5, 14))], TODAY) == 0


@pytest.mark.parametrize("statuses", [
    ["present"], ["absent"], ["late", "absent"], ["excused", "present", "late"],
    ["absent"] * 7 + ["present"],
])
def test_daily_rate_is_bounded(statuses):
    rows = [rec(s, student=str(i)) for i, s in enumerate(statuses)]
    assert 0 <= daily_rate(rows, TODAY) <= 1


def test_excused_counts_toward_total_but_not_attended():
    rows = [rec("excused", student="a"), rec("present", student="b")]
    assert daily_rate(rows, TODAY) == 0.5


def test_period_average_weighs_days_equally():
    small_day = date(2024, 5, 13)
    big_day = date(2024, 5, 14)
    rows = [rec("present", day=small_day)]
    rows += [rec("present", day=big_day, student=str(i)) for i in range(100)]
    assert to_percentage(period_average(rows, small_day, big_day)) == 100


def test_period_average_is_mean_of_daily_rates_not_pooled():
    day1 = date(2024, 5, 13)
    day2 = date(2024, 5, 14)
    # day1: 1/1 attended; day2: 1/4 attended. Pooled would be 2/5 = 40%.
    rows = [rec("present", day=day1)]
    rows += [rec("present", day=day2, student="a")]
    rows += [rec("absent", day=day2, student=x) for x in "bcd"]

    assert period_average(rows, day1, day2) == pytest.approx((1.0 + 0.25) / 2)
    assert to_percentage(period_average(rows, day1, day2)) == 63


def test_period_average_ignores_days_outside_range():
    rows = [rec("absent", day=date(2024, 5, 1)), rec("present", day=TODAY)]
    assert period_average(rows, date(2024, 5, 12), TODAY) == 1.0


def test_period_average_with_no_records_is_zero():
    assert period_average([], date(2024, 5, 12), TODAY) == 0


@pytest.mark.parametrize("today, expected", [
    (date(2024, 5, 12), date(2024, 5, 12)),  # Sunday
    (date(2024, 5, 13), date(2024, 5, 12)),  # Monday
    (date(2024, 5, 15), date(2024, 5, 12)),  # Wednesday
    (date(2024, 5, 18), date(2024, 5, 12)),  # Saturday
])
def test_week_start_is_most_recent_sunday(today, expected):
    assert week_start(today) == expected


def test_weekly_average_only_covers_current_week():
    rows = [
        rec("absent", day=date(2024, 5, 11)),   # previous Saturday
        rec("present", day=date(2024, 5, 12)),
        rec("absent", day=date(2024, 5, 13)),
        rec("present", day=TODAY),
    ]
    stats = attendance_stats(rows, TODAY)
    assert stats.weekly_average == 67


def test_rounding_happens_once():
    # day1 is 1/8 (12.5%), day2 is 0%. Rounding per day would give
    # (13 + 0) / 2 = 6.5 -> 7; the unrounded mean is 6.25 -> 6.
    day1 = date(2024, 5, 13)
    day2 = date(2024, 5, 14)
    rows = [rec("present", day=day1, student="x")]
    rows += [rec("absent", day=day1, student=str(i)) for i in range(7)]
    rows += [rec("absent", day=day2, student="x")]
    assert to_percentage(period_average(rows, day1, day2)) == 6


def test_malformed_rows_are_skipped():
    rows = [
        rec("present", student="a"),
        {"student_id": "b", "date": TODAY},                     # no status
        {"student_id": "c", "status": "present", "date": "not-a-date"},
        {"student_id": "d", "status": "teleported", "date": TODAY},
        "garbage",
        rec("absent", student="e"),
    ]
    snapshot = attendance_snapshot(rows, TODAY)
    assert snapshot.total == 2
    assert snapshot.present == 1
    assert snapshot.percentage == 50


def test_missing_collection_yields_zeros():
    stats = attendance_stats(None, TODAY)
    assert stats.today.percentage == 0
    assert stats.today.total == 0
    assert stats.weekly_average == 0


def test_status_is_case_insensitive():
    assert AttendanceRow.model_validate(rec("Present")).attended is True


def test_iso_date_strings_are_accepted():
    rows = [rec("late", day="2024-05-15")]
    assert daily_rate(rows, TODAY) == 1.0


def test_pooled_percentage_per_student_and_batch():
    rows = [
        rec("present", day=date(2024, 5, 13), student="a", batch="b-1"),
        rec("absent", day=date(2024, 5, 14), student="a", batch="b-1"),
        rec("late", day=date(2024, 5, 14), student="b", batch="b-2"),
    ]
    assert attendance_percentage(rows, student_id="a") == 50
    assert attendance_percentage(rows, batch_id="b-2") == 100
    assert attendance_percentage(rows, student_id="nobody") == 0


def test_attendance_by_student_omits_students_without_records():
    rows = [rec("present", student="a"), rec("absent", student="a", day=date(2024, 5, 14))]
    assert attendance_by_student(rows) == {"a": 50.0}


def test_bucket_by_date_orders_days():
    rows = [rec("present", day=date(2024, 5, 14)), rec("present", day=date(2024, 5, 13))]
    assert list(bucket_by_date(rows)) == [date(2024, 5, 13), date(2024, 5, 14)]


def test_day_of_week_label():
    assert day_of_week(TODAY) == "Wednesday"


def test_to_percentage_rounds_half_up():
    assert to_percentage(0.125) == 13
    assert to_percentage(0.5) == 50
    assert to_percentage(0) == 0
