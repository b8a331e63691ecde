"""
AttendanceRecord model - one student's status for one class day.

(student_id, date) is unique: the row is the canonical status for that
day. Status may be corrected; student, batch and date are immutable.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Date, DateTime, ForeignKey, String, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from traincore.database import Base


class AttendanceRecord(Base):
    """SQLAlchemy model for the attendance table."""
    __tablename__ = "attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False)
    batch_id = Column(String(36), ForeignKey("batches.id"), nullable=False)
    status = Column(Text, nullable=False,
                    doc="present | absent | late | excused")
    date = Column(Date, nullable=False)
    day_of_week = Column(Text, nullable=False,
                         doc="Weekday label derived from date, e.g. Monday")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    student = relationship("Student", back_populates="attendance")

    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
        Index("ix_attendance_date", "date"),
        Index("ix_attendance_batch_id", "batch_id"),
    )

    def __repr__(self):
        return f"<AttendanceRecord(student={self.student_id}, date={self.date}, status='{self.status}')>"
