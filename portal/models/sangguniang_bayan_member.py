"""Sangguniang Bayan council member model."""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, func
from portal.db.base import Base


class SangguniangBayanMember(Base):
    __tablename__ = "sangguniang_bayan_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    position_type = Column(String(50), nullable=False, default="regular")
    bio = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    photo = Column(String(500), nullable=True)
    order = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    committees = Column(JSON, nullable=True)
    district = Column(String(255), nullable=True)
    term_start = Column(String(20), nullable=True)
    term_end = Column(String(20), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
