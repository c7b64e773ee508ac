"""Activity log model: append-only."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from portal.db.base import Base


class Activity(Base):
    """Record of a single mutation performed through the portal.

    Rows are never updated or deleted by the application.
    """
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String(500), nullable=False)
    type = Column(String(50), nullable=False, index=True)  # permission key, "auth", "user_management"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    metadata_json = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    user = relationship("User", lazy="joined")
