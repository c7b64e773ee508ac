"""Presentation context: the per-request view model for the signed-in user."""

from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.permissions import permission_flags
from portal.schemas.schemas import PresentationContext
from portal.services.auth_service import auth_service
from portal.services.badge_service import badge_service


def build_context(db: Session, user) -> PresentationContext:
    """Permission flags and badge counts for ``user``, computed once."""
    return PresentationContext(
        user=auth_service.to_out(user),
        permissions=permission_flags(user),
        badge_counts=badge_service.compute(db, user),
        storage_url=settings.STORAGE_URL,
    )
