"""
Task API routes - internal staff task tracking.

Provides endpoints for:
- Listing tasks and task statistics (admins only, viewers are kept out)
- Creating, updating and deleting tasks

completed_at is never taken from the request; it follows the status
transition through services.tasks.resolve_completed_at.

Deadline locks belong to super admins: only they may set or clear
deadline_locked, and only they may move a deadline that is locked.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from traincore.database import get_db, to_row
from traincore.logging_config import get_logger, log_with_context
from traincore.models.task import Task
from traincore.routes.deps import require
from traincore.schemas import TaskStatus
from traincore.services.gate import gate
from traincore.services.stats import completion_rate, share, task_stats
from traincore.services.tasks import resolve_completed_at

router = APIRouter()
logger = get_logger("tasks")


# ── Pydantic schemas ─────────────────────────────────────────

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    created_by: Optional[str] = None
    assigned_to: Optional[str] = None
    deadline: Optional[datetime] = None
    deadline_locked: bool = False


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = None
    deadline: Optional[datetime] = None
    deadline_locked: Optional[bool] = None


def _get_task(db: Session, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _require_lock_permission(role, message=None):
    decision = gate("lock_task_deadline", role, message)
    if not decision.allowed:
        raise HTTPException(status_code=403, detail=decision.model_dump())


@router.get("/api/tasks")
def list_tasks(db: Session = Depends(get_db), role=Depends(require("access_tasks"))):
    """All tasks, newest first."""
    tasks = db.query(Task).order_by(Task.created_at.desc()).all()
    return {"data": [to_row(t) for t in tasks]}


@router.get("/api/tasks/stats")
def get_task_stats(db: Session = Depends(get_db), role=Depends(require("access_tasks"))):
    """Task counts by status, plus completion and in-progress rates."""
    stats = task_stats([to_row(t) for t in db.query(Task).all()])
    return {
        **stats,
        "completionRate": completion_rate(stats),
        "inProgressRate": share(stats["inProgress"], stats["total"]),
    }


@router.post("/api/tasks", status_code=201)
def create_task(request: TaskCreate, db: Session = Depends(get_db),
                role=Depends(require("manage_tasks"))):
    if request.deadline_locked:
        _require_lock_permission(role)

    now = datetime.now(timezone.utc)
    task = Task(
        title=request.title,
        description=request.description,
        status=request.status.value,
        created_by=request.created_by,
        assigned_to=request.assigned_to,
        deadline=request.deadline,
        deadline_locked=request.deadline_locked,
        created_at=now,
        updated_at=now,
        completed_at=resolve_completed_at(None, request.status.value, None, now),
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    log_with_context(logger, "INFO", "Task created: {}".format(task.title[:100]),
        context={"task_id": task.id})
    return to_row(task)


@router.put("/api/tasks/{task_id}")
def update_task(task_id: str, request: TaskUpdate, db: Session = Depends(get_db),
                role=Depends(require("manage_tasks"))):
    """
    Partial update. Changing the lock, or moving a locked deadline, needs
    the lock_task_deadline permission.
    """
    task = _get_task(db, task_id)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("deadline_locked", False) is None:
        del changes["deadline_locked"]
    now = datetime.now(timezone.utc)

    if "deadline_locked" in changes and bool(changes["deadline_locked"]) != bool(task.deadline_locked):
        _require_lock_permission(role)
    if "deadline" in changes and task.deadline_locked:
        _require_lock_permission(role, "Deadline is locked; only super admins can move it")

    previous_status = task.status
    for field, value in changes.items():
        if field == "status":
            continue
        setattr(task, field, value)

    if changes.get("status") is not None:
        new_status = changes["status"].value
        task.completed_at = resolve_completed_at(previous_status, new_status, task.completed_at, now)
        task.status = new_status
    task.updated_at = now

    db.commit()
    db.refresh(task)

    log_with_context(logger, "INFO",
        "Task updated: {} -> {}".format(previous_status, task.status),
        context={"task_id": task.id},
        extra_data={"fields": sorted(changes)})
    return to_row(task)


@router.delete("/api/tasks/{task_id}")
def delete_task(task_id: str, db: Session = Depends(get_db),
                role=Depends(require("manage_tasks"))):
    task = _get_task(db, task_id)
    db.delete(task)
    db.commit()

    log_with_context(logger, "INFO", "Task deleted", context={"task_id": task_id})
    return {"message": "Task deleted", "task_id": task_id}
