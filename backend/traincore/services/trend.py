"""
Trend Calculator - signed change between two aggregates of the same kind.

direction is "up" only for a strictly positive delta. A zero delta reads as
"down" (neutral), so callers must not treat delta == 0 as improvement.
"""

from datetime import date, timedelta
from typing import Iterable

from pydantic import BaseModel

from traincore.services.attendance import period_average, to_percentage, week_start


class Trend(BaseModel):
    delta: float
    direction: str


def compute_trend(current: float, previous: float) -> Trend:
    """delta = current - previous, in the aggregates' own unit."""
    delta = current - previous
    return Trend(delta=delta, direction="up" if delta > 0 else "down")


def weekly_attendance_trend(rows: Iterable[dict], today: date) -> Trend:
    """
    This week's attendance average against last week's, in percentage points.

    This week runs week_start(today) through today; last week is the seven
    days before that.
    """
    rows = list(rows)
    this_week_start = week_start(today)
    last_week_start = this_week_start - timedelta(days=7)
    last_week_end = this_week_start - timedelta(days=1)

    current = to_percentage(period_average(rows, this_week_start, today))
    previous = to_percentage(period_average(rows, last_week_start, last_week_end))
    return compute_trend(current, previous)
