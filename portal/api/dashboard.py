"""Dashboard and presentation-context API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.core.security import get_current_user
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import PresentationContext
from portal.services.context_service import build_context
from portal.services.dashboard_service import dashboard_service

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard")
async def dashboard(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Totals and recent records for every category the user may manage."""
    return {**dashboard_service.summary(db, user), "context": build_context(db, user)}


@router.get("/context", response_model=PresentationContext)
async def context(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Permission flags and badge counts for navigation."""
    return build_context(db, user)
