"""Bids and awards model."""

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, Numeric, JSON, ForeignKey, func
from portal.db.base import Base


class BidsAward(Base):
    """Procurement notice, from invitation to bid through award."""
    __tablename__ = "bids_awards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    reference_number = Column(String(100), unique=True, nullable=False, index=True)
    bid_type = Column(String(50), nullable=False)
    estimated_budget = Column(Numeric(15, 2), nullable=True)
    bid_opening_date = Column(Date, nullable=True)
    bid_closing_date = Column(Date, nullable=False)
    award_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    awarded_to = Column(String(255), nullable=True)
    awarded_amount = Column(Numeric(15, 2), nullable=True)
    award_remarks = Column(Text, nullable=True)
    documents = Column(JSON, nullable=True)  # list of stored paths
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime, nullable=True)  # soft delete
