"""Emergency contact model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from backend.database import Base


class EmergencyContact(Base):
    """A phone contact saved by a user."""
    __tablename__ = "emergency_contacts"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    type = Column(String, nullable=False, default="personal")
    description = Column(String)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
