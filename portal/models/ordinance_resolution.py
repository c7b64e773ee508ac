"""Ordinance and resolution model."""

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, JSON, ForeignKey, func
from portal.db.base import Base


class OrdinanceResolution(Base):
    """Legislative measure passed by the Sangguniang Bayan."""
    __tablename__ = "ordinance_resolutions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    number = Column(String(100), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)  # ordinance, resolution
    description = Column(Text, nullable=True)
    date_approved = Column(Date, nullable=False)
    date_effectivity = Column(Date, nullable=True)
    sponsor = Column(String(255), nullable=True)
    co_sponsors = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    amendatory_to = Column(JSON, nullable=True)
    repealed_by = Column(JSON, nullable=True)
    categories = Column(JSON, nullable=True)
    file_path = Column(String(500), nullable=True)
    file_size = Column(Integer, nullable=True)  # bytes
    file_type = Column(String(20), nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
