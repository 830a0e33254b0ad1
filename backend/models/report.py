"""Disaster report model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from backend.database import Base


class DisasterReport(Base):
    """An incident reported by a user."""
    __tablename__ = "disaster_reports"

    id = Column(Integer, primary_key=True, index=True)
    disaster_type = Column(String, nullable=False)
    location = Column(String, nullable=False)  # "lat,lng"
    description = Column(String)
    severity = Column(String, nullable=False, default="medium")
    reporter_id = Column(Integer, ForeignKey("users.id"), index=True)
    reporter_name = Column(String)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
