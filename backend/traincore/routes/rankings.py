"""
Rankings API routes - ranked student performance view.

Ranks active students by overall score, the weighted mean of:
1. Technical score (0-10)
2. Communication score (0-10)
3. Attendance percentage rescaled to 0-10

Ranks are recomputed from current sub-scores on every request.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from traincore.database import get_db, to_row
from traincore.logging_config import get_logger, log_with_context
from traincore.models.attendance import AttendanceRecord
from traincore.models.batch import Batch
from traincore.models.student import Student
from traincore.routes.deps import require
from traincore.services.scoring import (
    build_score_entries, category_averages, rank_students, rankings_stats, TieBreak
)

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class PerformanceUpdate(BaseModel):
    """Schema for updating a student's performance sub-scores."""
    technical_score: Optional[float] = Field(None, ge=0, le=10)
    communication_score: Optional[float] = Field(None, ge=0, le=10)


def _matches(entry, search: str) -> bool:
    term = search.lower()
    return term in entry.name.lower() or term in entry.student_code.lower()


@router.get("/api/rankings")
def get_rankings(
    batch_id: Optional[str] = Query(None, description="Restrict to one batch"),
    search: Optional[str] = Query(None, description="Search student name/code"),
    tie_break: Optional[TieBreak] = Query(None, description="Order of equal scores"),
    db: Session = Depends(get_db),
    role=Depends(require("view_students"))
):
    """
    Get the ranked student list with summary stats.

    Search filters the already-ranked list, so a student keeps their
    cohort-wide rank when found by name.
    """
    query = db.query(Student).filter(Student.is_active.is_(True))
    if batch_id and batch_id != "all":
        query = query.filter(Student.batch_id == batch_id)
    students = query.order_by(Student.first_name).all()

    student_ids = [s.id for s in students]
    attendance = db.query(AttendanceRecord).filter(
        AttendanceRecord.student_id.in_(student_ids)
    ).all() if student_ids else []

    entries = build_score_entries([to_row(s) for s in students], [to_row(a) for a in attendance])
    ranked = rank_students(entries, tie_break=tie_break)

    active_batches = db.query(Batch).filter(Batch.status == "active").count()
    stats = rankings_stats(ranked, active_batches=active_batches)

    if search:
        visible_ids = {e.student_id for e in entries if _matches(e, search)}
        ranked = [r for r in ranked if r.student_id in visible_ids]

    log_with_context(logger, "INFO",
        "Rankings generated: {} students".format(len(ranked)),
        extra_data={"batch_id": batch_id, "entries": len(ranked)})

    return {
        "rankings": [r.model_dump() for r in ranked],
        "stats": stats.model_dump(),
        "categories": category_averages(entries),
    }


@router.put("/api/students/{student_id}/performance")
def update_performance(
    student_id: str,
    update: PerformanceUpdate,
    db: Session = Depends(get_db),
    role=Depends(require("manage_students"))
):
    """Update a student's sub-scores; the overall score is never written."""
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    changes = update.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(student, field, value)
    student.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(student)

    log_with_context(logger, "INFO",
        "Performance updated for {}".format(student.student_code),
        context={"student_id": student.id},
        extra_data={"fields": sorted(changes)})

    return {
        "message": "Performance updated successfully",
        "student_id": student.id,
        "technical_score": student.technical_score,
        "communication_score": student.communication_score,
    }
