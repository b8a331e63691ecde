"""
Attendance API routes.

Provides endpoints for:
- Today's attendance snapshot, weekly average and week-over-week trend
- Listing recent attendance records with filters
- Marking (or correcting) a student's attendance for a day
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, joinedload

from traincore.database import get_db, to_row
from traincore.logging_config import get_logger, log_with_context
from traincore.models.attendance import AttendanceRecord
from traincore.models.student import Student
from traincore.routes.deps import parse_day, require
from traincore.schemas import AttendanceStatus
from traincore.services.attendance import attendance_stats, day_of_week, week_start
from traincore.services.trend import weekly_attendance_trend

router = APIRouter()
logger = get_logger("http")
db_logger = get_logger("db")


# ── Pydantic schemas ─────────────────────────────────────────

class MarkAttendanceRequest(BaseModel):
    """Schema for marking one student's attendance on one date."""
    student_id: str
    date: Optional[str] = Field(None, description="ISO date; defaults to today")
    status: AttendanceStatus
    notes: Optional[str] = None


@router.get("/api/attendance/stats")
def get_attendance_stats(
    day: Optional[str] = Query(None, description="Reference day (ISO date), defaults to today"),
    db: Session = Depends(get_db),
    role=Depends(require("view_students"))
):
    """Today's snapshot, weekly average, late/absent counts and weekly trend."""
    start_time = time.time()
    today = parse_day(day)

    # Covers this week and the previous one for the trend
    since = week_start(today) - timedelta(days=7)
    rows = [
        to_row(r) for r in db.query(AttendanceRecord).filter(
            AttendanceRecord.date >= since,
            AttendanceRecord.date <= today
        ).all()
    ]

    stats = attendance_stats(rows, today)
    trend = weekly_attendance_trend(rows, today)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Attendance stats for {}: {}% today".format(today.isoformat(), stats.today.percentage),
        extra_data={"duration_ms": round(duration_ms, 2), "records": len(rows)})

    return {
        "date": today.isoformat(),
        "todayAttendance": stats.today.model_dump(),
        "weeklyAverage": stats.weekly_average,
        "lateArrivals": stats.late_arrivals,
        "absentStudents": stats.absent_students,
        "weeklyTrend": trend.model_dump(),
    }


@router.get("/api/attendance")
def list_attendance(
    batch_id: Optional[str] = Query(None, description="Filter by batch ID"),
    status: Optional[str] = Query(None, description="Filter by status"),
    day: Optional[str] = Query(None, description="Filter by ISO date"),
    search: Optional[str] = Query(None, description="Search student name/code"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    role=Depends(require("view_students"))
):
    """List the most recent attendance records, newest first."""
    query = db.query(AttendanceRecord).options(joinedload(AttendanceRecord.student))

    if batch_id and batch_id != "all":
        query = query.filter(AttendanceRecord.batch_id == batch_id)
    if status and status != "all":
        query = query.filter(AttendanceRecord.status == status.lower())
    if day:
        query = query.filter(AttendanceRecord.date == parse_day(day))
    if search:
        pattern = "%{}%".format(search)
        query = query.join(Student).filter(
            (Student.first_name.ilike(pattern)) |
            (Student.last_name.ilike(pattern)) |
            (Student.student_code.ilike(pattern))
        )

    records = query.order_by(AttendanceRecord.created_at.desc()).limit(limit).all()

    return {
        "data": [
            {
                **to_row(r),
                "student": {
                    "id": r.student.id,
                    "name": r.student.full_name,
                    "student_code": r.student.student_code,
                } if r.student else None,
            }
            for r in records
        ]
    }


@router.post("/api/attendance")
def mark_attendance(
    request: MarkAttendanceRequest,
    db: Session = Depends(get_db),
    role=Depends(require("mark_student_attendance"))
):
    """
    Mark a student's status for a day.

    The (student, date) record is unique: marking an already-recorded day
    corrects its status in place. Student, batch and date never change.
    """
    day = parse_day(request.date)
    student = db.query(Student).filter(Student.id == request.student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if not student.batch_id:
        raise HTTPException(status_code=400, detail="Student is not assigned to a batch")

    record = db.query(AttendanceRecord).filter(
        AttendanceRecord.student_id == student.id,
        AttendanceRecord.date == day
    ).first()

    if record:
        previous = record.status
        record.status = request.status.value
        record.notes = request.notes
        action = "corrected"
    else:
        previous = None
        record = AttendanceRecord(
            student_id=student.id,
            batch_id=student.batch_id,
            status=request.status.value,
            date=day,
            day_of_week=day_of_week(day),
            notes=request.notes,
            created_at=datetime.now(timezone.utc)
        )
        db.add(record)
        action = "marked"

    db.commit()
    db.refresh(record)

    log_with_context(db_logger, "INFO",
        "Attendance {}: {} -> {}".format(action, previous, record.status),
        context={"student_id": student.id, "batch_id": student.batch_id, "date": day.isoformat()})

    return {"message": "Attendance {}".format(action), "record": to_row(record)}

