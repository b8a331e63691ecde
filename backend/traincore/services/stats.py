"""
Statistics Reducer - entity counts partitioned by a discriminant field.

Counts always sum to the size of the input: values outside the known
categories land in "other" instead of disappearing. Empty input gives
all-zero counts.
"""

from collections import Counter
from typing import Dict, Iterable, Optional, Sequence

from traincore.logging_config import get_logger, log_with_context
from traincore.schemas import BatchStatus, TaskStatus
from traincore.services.attendance import to_percentage

logger = get_logger("stats")

OTHER = "other"


def _value(row, field: str):
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def count_by(rows: Optional[Iterable], field: str, categories: Sequence[str]) -> Dict[str, int]:
    """
    Count rows per value of `field`.

    Returns one key per category (zero when absent), plus "other" for
    unknown or missing values, plus "total".
    """
    rows = list(rows or [])
    counter = Counter()
    for row in rows:
        value = _value(row, field)
        if hasattr(value, "value"):
            value = value.value
        counter[value if value in categories else OTHER] += 1

    counts = {category: counter.get(category, 0) for category in categories}
    counts[OTHER] = counter.get(OTHER, 0)
    counts["total"] = len(rows)

    if counts[OTHER]:
        log_with_context(logger, "WARNING",
            "{} rows with unrecognized {}".format(counts[OTHER], field),
            extra_data={"field": field, "categories": list(categories)})
    return counts


def task_stats(tasks: Optional[Iterable]) -> Dict[str, int]:
    """{total, notStarted, inProgress, completed, other} for a task collection."""
    counts = count_by(tasks, "status", [s.value for s in TaskStatus])
    return {
        "total": counts["total"],
        "notStarted": counts[TaskStatus.NOT_STARTED.value],
        "inProgress": counts[TaskStatus.IN_PROGRESS.value],
        "completed": counts[TaskStatus.COMPLETED.value],
        "other": counts[OTHER],
    }


def admin_stats(admins: Optional[Iterable]) -> Dict[str, int]:
    """{total, superAdmins, admins, viewers, other} for a staff collection."""
    counts = count_by(admins, "role", ["super_admin", "admin", "viewer"])
    return {
        "total": counts["total"],
        "superAdmins": counts["super_admin"],
        "admins": counts["admin"],
        "viewers": counts["viewer"],
        "other": counts[OTHER],
    }


def batch_stats(batches: Optional[Iterable]) -> Dict[str, int]:
    counts = count_by(batches, "status", [s.value for s in BatchStatus])
    return {
        "totalBatches": counts["total"],
        "activeBatches": counts[BatchStatus.ACTIVE.value],
        "upcomingBatches": counts[BatchStatus.UPCOMING.value],
        "completedBatches": counts[BatchStatus.COMPLETED.value],
        "otherBatches": counts[OTHER],
    }


def share(part: int, total: int) -> int:
    """part / total as a whole percent; 0 when total is 0."""
    if total <= 0:
        return 0
    return to_percentage(part / total)


def completion_rate(stats: Dict[str, int]) -> int:
    return share(stats.get("completed", 0), stats.get("total", 0))
