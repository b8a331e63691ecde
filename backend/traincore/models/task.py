"""
Task model - internal staff tasks.

completed_at is owned by services.tasks.resolve_completed_at and is
never written from request payloads.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, Boolean, String, Index
from traincore.database import Base


class Task(Base):
    """SQLAlchemy model for the tasks table."""
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="NOT_STARTED",
                    doc="NOT_STARTED | IN_PROGRESS | COMPLETED")
    created_by = Column(String(36), nullable=True)
    assigned_to = Column(String(36), nullable=True)
    deadline = Column(DateTime, nullable=True)
    deadline_locked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_tasks_status", "status"),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title[:30]}', status='{self.status}')>"
