"""Awards and recognition model."""

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, JSON, ForeignKey, func
from portal.db.base import Base


class AwardsRecognition(Base):
    """An award received by the municipality, an office or a resident."""
    __tablename__ = "awards_recognitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    awarding_body = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    award_date = Column(Date, nullable=False)
    received_date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    award_type = Column(String(50), nullable=False)
    scope = Column(String(50), nullable=False)
    significance = Column(Text, nullable=True)
    criteria = Column(Text, nullable=True)
    recipient_type = Column(String(50), nullable=False)
    recipient_name = Column(String(255), nullable=True)
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    featured_image = Column(String(500), nullable=True)
    gallery_images = Column(JSON, nullable=True)
    supporting_documents = Column(JSON, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime, nullable=True)  # soft delete
