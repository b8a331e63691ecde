"""
Student model - a trainee enrolled in exactly one batch.

Performance sub-scores live on the student row; the overall score and
rank are recomputed on demand and never persisted.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Date, DateTime, Boolean, Float, ForeignKey, String, Index
from sqlalchemy.orm import relationship
from traincore.database import Base


class Student(Base):
    """SQLAlchemy model for the students table."""
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    student_code = Column(Text, nullable=False, unique=True,
                          doc="Public student code, e.g. STU-2024-1234")
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    batch_id = Column(String(36), ForeignKey("batches.id"), nullable=True,
                      doc="Reference to the student's batch")
    is_active = Column(Boolean, nullable=False, default=True)
    enrolled_at = Column(Date, nullable=True)
    technical_score = Column(Float, nullable=True,
                             doc="Technical skills sub-score, 0-10 (NULL until assessed)")
    communication_score = Column(Float, nullable=True,
                                 doc="Communication sub-score, 0-10 (NULL until assessed)")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    batch = relationship("Batch", back_populates="students")
    attendance = relationship("AttendanceRecord", back_populates="student",
                              cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_students_batch_id", "batch_id"),
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Student(id={self.id}, code='{self.student_code}', name='{self.full_name}')>"
