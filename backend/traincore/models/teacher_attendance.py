"""
TeacherAttendance model - one teacher's status for one day.

(teacher_id, date) is unique, same as student attendance.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Date, DateTime, ForeignKey, String, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from traincore.database import Base


class TeacherAttendance(Base):
    """SQLAlchemy model for the teacher_attendance table."""
    __tablename__ = "teacher_attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id = Column(String(36), ForeignKey("teachers.id"), nullable=False)
    status = Column(Text, nullable=False,
                    doc="present | absent | late | excused")
    date = Column(Date, nullable=False)
    day_of_week = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    marked_by = Column(String(36), nullable=True,
                       doc="user_id of the admin who marked the record")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    teacher = relationship("Teacher", back_populates="attendance")

    __table_args__ = (
        UniqueConstraint("teacher_id", "date", name="uq_teacher_attendance_teacher_date"),
        Index("ix_teacher_attendance_date", "date"),
    )

    def __repr__(self):
        return f"<TeacherAttendance(teacher={self.teacher_id}, date={self.date}, status='{self.status}')>"
