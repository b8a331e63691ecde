"""
Batch model - a cohort of students moving through the training modules.

Module progress is never stored; it is derived from status and
current_module by services.scoring.module_progress.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Date, DateTime, Integer, String, Index
from sqlalchemy.orm import relationship
from traincore.database import Base


class Batch(Base):
    """
    SQLAlchemy model for the batches table.

    Lifecycle statuses: upcoming -> active -> completed.
    """
    __tablename__ = "batches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique batch identifier")
    batch_code = Column(Text, nullable=False, unique=True,
                        doc="Human-facing batch code, e.g. 2024-Q1-A")
    status = Column(Text, nullable=False, default="upcoming",
                    doc="Lifecycle status: upcoming | active | completed")
    current_module = Column(Integer, nullable=False, default=1,
                            doc="1-based index of the module being taught")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    students = relationship("Student", back_populates="batch")

    __table_args__ = (
        Index("ix_batches_status", "status"),
    )

    def __repr__(self):
        return f"<Batch(id={self.id}, code='{self.batch_code}', status='{self.status}')>"
