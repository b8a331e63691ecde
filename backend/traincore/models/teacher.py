"""
Teacher model - an instructor whose own attendance is tracked daily.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, Boolean, String
from sqlalchemy.orm import relationship
from traincore.database import Base


class Teacher(Base):
    """SQLAlchemy model for the teachers table."""
    __tablename__ = "teachers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True, unique=True)
    department = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True,
                       doc="Only active teachers count toward the daily total")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    attendance = relationship("TeacherAttendance", back_populates="teacher",
                              cascade="all, delete-orphan")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Teacher(id={self.id}, name='{self.full_name}')>"
