"""
AdminProfile model - a staff account and its role.

The role column is the only authorization input. It changes only through
the role-management endpoint, never as a side effect of a read.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String
from traincore.database import Base


class AdminProfile(Base):
    """SQLAlchemy model for the admins table."""
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, unique=True,
                     doc="Identity-provider user id")
    email = Column(Text, nullable=False)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default="viewer",
                  doc="super_admin | admin | viewer")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<AdminProfile(user_id={self.user_id}, role='{self.role}')>"
