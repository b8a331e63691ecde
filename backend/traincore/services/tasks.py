"""
Task lifecycle rules.

completed_at is a pure function of the status transition:
- entering COMPLETED stamps the transition time
- staying COMPLETED keeps the original stamp
- any other status clears it
"""

from datetime import datetime
from typing import Optional

from traincore.schemas import TaskStatus


def parse_status(value) -> TaskStatus:
    """Raise ValueError for anything but the three task statuses."""
    return TaskStatus(value)


def resolve_completed_at(previous_status: Optional[str], new_status: str,
                         previous_completed_at: Optional[datetime],
                         now: datetime) -> Optional[datetime]:
    new_status = parse_status(new_status)
    if new_status is not TaskStatus.COMPLETED:
        return None
    if previous_status == TaskStatus.COMPLETED.value and previous_completed_at is not None:
        return previous_completed_at
    return now
