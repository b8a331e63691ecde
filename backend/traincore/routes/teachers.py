"""
Teacher API routes.

Provides endpoints for:
- Listing active teachers with their attendance percentage
- Adding teachers (super admins only)
- Marking (or correcting) a teacher's attendance for a day (super admins only)
- Today's teacher attendance card and one teacher's history
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from traincore.database import get_db, to_row
from traincore.logging_config import get_logger, log_with_context
from traincore.models.teacher import Teacher
from traincore.models.teacher_attendance import TeacherAttendance
from traincore.routes.deps import parse_day, require
from traincore.schemas import AttendanceStatus
from traincore.services.attendance import day_of_week
from traincore.services.teacher_attendance import (
    attendance_by_teacher, teacher_attendance_percentage, teacher_attendance_stats
)

router = APIRouter()
logger = get_logger("http")
db_logger = get_logger("db")


class TeacherCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    department: Optional[str] = None


class MarkTeacherAttendanceRequest(BaseModel):
    teacher_id: str
    date: Optional[str] = Field(None, description="ISO date; defaults to today")
    status: AttendanceStatus
    notes: Optional[str] = None
    marked_by: Optional[str] = None


@router.get("/api/teachers")
def list_teachers(
    department: Optional[str] = Query(None, description="Filter by department"),
    db: Session = Depends(get_db),
    role=Depends(require("view_teacher_attendance"))
):
    """Active teachers by first name, each with a pooled attendance percentage."""
    query = db.query(Teacher).filter(Teacher.is_active.is_(True))
    if department and department != "all":
        query = query.filter(Teacher.department == department)
    teachers = query.order_by(Teacher.first_name).all()

    rows = [to_row(r) for r in db.query(TeacherAttendance).filter(
        TeacherAttendance.teacher_id.in_([t.id for t in teachers])
    ).all()] if teachers else []
    percentages = attendance_by_teacher(rows)

    return {
        "data": [
            {**to_row(t), "attendance_percentage": percentages.get(t.id, 0)}
            for t in teachers
        ]
    }


@router.post("/api/teachers", status_code=201)
def create_teacher(request: TeacherCreate, db: Session = Depends(get_db),
                   role=Depends(require("manage_teachers"))):
    now = datetime.now(timezone.utc)
    teacher = Teacher(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        department=request.department,
        created_at=now,
        updated_at=now,
    )
    db.add(teacher)
    db.commit()
    db.refresh(teacher)

    log_with_context(db_logger, "INFO", "Teacher added: {}".format(teacher.full_name),
        context={"teacher_id": teacher.id})
    return to_row(teacher)


@router.get("/api/teachers/attendance/stats")
def get_teacher_attendance_stats(
    day: Optional[str] = Query(None, description="Reference day (ISO date), defaults to today"),
    db: Session = Depends(get_db),
    role=Depends(require("view_teacher_attendance"))
):
    """Active teacher count and today's present/absent/late counts."""
    today = parse_day(day)
    teachers = [to_row(t) for t in db.query(Teacher).all()]
    rows = [to_row(r) for r in db.query(TeacherAttendance).filter(
        TeacherAttendance.date == today
    ).all()]

    stats = teacher_attendance_stats(teachers, rows, today)
    return {
        "date": today.isoformat(),
        "totalTeachers": stats.total_teachers,
        "presentToday": stats.present_today,
        "absentToday": stats.absent_today,
        "lateToday": stats.late_today,
        "notMarkedToday": stats.not_marked_today,
        "attendanceToday": stats.attendance_today,
    }


@router.post("/api/teachers/attendance")
def mark_teacher_attendance(
    request: MarkTeacherAttendanceRequest,
    db: Session = Depends(get_db),
    role=Depends(require("mark_teacher_attendance"))
):
    """
    Mark a teacher's status for a day.

    (teacher, date) is unique: marking an already-recorded day corrects the
    status in place.
    """
    day = parse_day(request.date)
    teacher = db.query(Teacher).filter(Teacher.id == request.teacher_id).first()
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")

    record = db.query(TeacherAttendance).filter(
        TeacherAttendance.teacher_id == teacher.id,
        TeacherAttendance.date == day
    ).first()

    if record:
        previous = record.status
        record.status = request.status.value
        record.notes = request.notes
        record.marked_by = request.marked_by
        action = "corrected"
    else:
        previous = None
        record = TeacherAttendance(
            teacher_id=teacher.id,
            status=request.status.value,
            date=day,
            day_of_week=day_of_week(day),
            notes=request.notes,
            marked_by=request.marked_by,
            created_at=datetime.now(timezone.utc)
        )
        db.add(record)
        action = "marked"

    db.commit()
    db.refresh(record)

    log_with_context(db_logger, "INFO",
        "Teacher attendance {}: {} -> {}".format(action, previous, record.status),
        context={"teacher_id": teacher.id, "date": day.isoformat()})

    return {"message": "Attendance {}".format(action), "record": to_row(record)}


@router.get("/api/teachers/{teacher_id}/attendance")
def get_teacher_attendance(teacher_id: str, db: Session = Depends(get_db),
                           role=Depends(require("view_teacher_attendance"))):
    """One teacher's records, newest first, with the pooled percentage."""
    teacher = db.query(Teacher).filter(Teacher.id == teacher_id).first()
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")

    records = db.query(TeacherAttendance).filter(
        TeacherAttendance.teacher_id == teacher_id
    ).order_by(TeacherAttendance.date.desc()).all()
    rows = [to_row(r) for r in records]

    return {
        "teacher_id": teacher_id,
        "name": teacher.full_name,
        "attendance_percentage": teacher_attendance_percentage(rows, teacher_id),
        "records": rows,
    }
