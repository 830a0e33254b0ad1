"""Resource request model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from backend.database import Base


class Resource(Base):
    """A request for (or offer of) supplies tied to a location."""
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    location = Column(String, nullable=False)
    description = Column(String)
    status = Column(String, nullable=False, default="pending")
    provided_by_id = Column(Integer, ForeignKey("users.id"), index=True)
    provided_by_name = Column(String)
    timestamp = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
