"""
Typed records validated at the storage boundary.

Rows arrive from the storage collaborator as plain column -> value
mappings. Each row is validated into one of the pydantic records below
before any aggregation runs, so the services never see a half-formed row.
A row that fails validation is skipped (see load_rows) rather than failing
the whole computation: partial dashboard statistics beat an error page.
"""

import datetime as dt
from enum import Enum
from typing import Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from traincore.errors import MissingDataError
from traincore.logging_config import get_logger, log_with_context

logger = get_logger("db")

RecordT = TypeVar("RecordT", bound=BaseModel)


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class BatchStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Statuses that count as "attended" for every rate computation
ATTENDED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class _StatusRecord(_Record):
    """A status for one calendar date; shared by student and teacher attendance."""
    id: Optional[str] = None
    status: AttendanceStatus
    date: dt.date
    day_of_week: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _lower_status(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def attended(self) -> bool:
        return self.status in ATTENDED_STATUSES


class AttendanceRow(_StatusRecord):
    """One student's attendance status for one calendar date."""
    student_id: str
    batch_id: Optional[str] = None


class TeacherAttendanceRow(_StatusRecord):
    teacher_id: str


class StudentRow(_Record):
    id: str
    student_code: str
    first_name: str = ""
    last_name: str = ""
    batch_id: Optional[str] = None
    is_active: bool = True
    technical_score: Optional[float] = Field(None, ge=0, le=10)
    communication_score: Optional[float] = Field(None, ge=0, le=10)

    @property
    def full_name(self) -> str:
        return "{} {}".format(self.first_name, self.last_name).strip()


class TeacherRow(_Record):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return "{} {}".format(self.first_name, self.last_name).strip()


class BatchRow(_Record):
    id: str
    batch_code: str
    status: BatchStatus
    current_module: int = 1
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @field_validator("status", mode="before")
    @classmethod
    def _lower_status(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


def parse_row(model: Type[RecordT], row: dict) -> RecordT:
    """
    Validate a single storage row into a typed record.

    Raises:
        MissingDataError: the row is not a mapping or lacks/garbles a
            required field.
    """
    if not isinstance(row, dict):
        raise MissingDataError("Row is not a mapping: {!r}".format(type(row).__name__))
    try:
        return model.model_validate(row)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MissingDataError(
            "Invalid {} row: {}".format(model.__name__, ", ".join(fields)), row=row
        ) from e


def load_rows(model: Type[RecordT], rows: Optional[Iterable[dict]]) -> List[RecordT]:
    """
    Validate a collection of rows, excluding malformed ones.

    An absent collection is treated as empty. Every skipped row is logged
    at WARNING with the offending field names.
    """
    if rows is None:
        log_with_context(logger, "WARNING",
            "No {} collection supplied; treating as empty".format(model.__name__))
        return []

    records = []
    skipped = 0
    for row in rows:
        try:
            records.append(parse_row(model, row))
        except MissingDataError as e:
            skipped += 1
            log_with_context(logger, "WARNING", str(e),
                context={"row_id": str(e.row.get("id")) if e.row else None})

    if skipped:
        log_with_context(logger, "INFO",
            "Loaded {} {} rows, skipped {} malformed".format(len(records), model.__name__, skipped),
            extra_data={"loaded": len(records), "skipped": skipped})
    return records
