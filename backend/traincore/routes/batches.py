"""
Batch API routes - cohort overview and module progression.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from traincore.database import get_db, to_row
from traincore.logging_config import get_logger, log_with_context
from traincore.models.attendance import AttendanceRecord
from traincore.models.batch import Batch
from traincore.models.student import Student
from traincore.routes.deps import require
from traincore.schemas import BatchRow, load_rows
from traincore.services.attendance import attendance_percentage
from traincore.services.scoring import (
    average_score, build_score_entries, module_progress, rank_students, validate_module
)
from traincore.services.stats import batch_stats

router = APIRouter()
logger = get_logger("http")


class ModuleUpdate(BaseModel):
    current_module: int


@router.get("/api/batches/stats")
def get_batch_stats(db: Session = Depends(get_db), role=Depends(require("view_students"))):
    """Batch counts by status."""
    return batch_stats([to_row(b) for b in db.query(Batch).all()])


@router.get("/api/batches/overview")
def get_batch_overview(db: Session = Depends(get_db), role=Depends(require("view_students"))):
    """
    Per active batch: student count, module progress, attendance and
    average overall score.
    """
    batches = load_rows(BatchRow, [
        to_row(b) for b in db.query(Batch).filter(Batch.status == "active").order_by(Batch.batch_code).all()
    ])
    batch_ids = [b.id for b in batches]
    if not batch_ids:
        return {"batches": []}

    students = db.query(Student).filter(
        Student.batch_id.in_(batch_ids), Student.is_active.is_(True)
    ).all()
    attendance_rows = [
        to_row(a) for a in db.query(AttendanceRecord).filter(
            AttendanceRecord.batch_id.in_(batch_ids)
        ).all()
    ]
    ranked = rank_students(build_score_entries([to_row(s) for s in students], attendance_rows))

    overview = []
    for batch in batches:
        overview.append({
            "id": batch.id,
            "batch_code": batch.batch_code,
            "studentCount": sum(1 for s in students if s.batch_id == batch.id),
            "progress": module_progress(batch.status, batch.current_module),
            "attendance": attendance_percentage(attendance_rows, batch_id=batch.id),
            "avgScore": average_score(ranked, batch_id=batch.id),
        })

    log_with_context(logger, "INFO",
        "Batch overview generated: {} active batches".format(len(overview)))
    return {"batches": overview}


@router.put("/api/batches/{batch_id}/module")
def update_batch_module(
    batch_id: str,
    update: ModuleUpdate,
    db: Session = Depends(get_db),
    role=Depends(require("manage_students"))
):
    """Move a batch to another module; progress is derived, never stored."""
    batch = db.query(Batch).filter(Batch.id == batch_id).first()
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")

    try:
        batch.current_module = validate_module(update.current_module)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    batch.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(batch)

    log_with_context(logger, "INFO",
        "Batch {} moved to module {}".format(batch.batch_code, batch.current_module),
        context={"batch_id": batch.id})

    return {
        "id": batch.id,
        "current_module": batch.current_module,
        "progress": module_progress(batch.status, batch.current_module),
    }
