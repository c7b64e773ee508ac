"""Activity log API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from portal.core.security import require_activity_logs
from portal.db.session import get_db
from portal.models.user import User
from portal.services.activity_service import activity_service
from portal.services.context_service import build_context

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])


@router.get("/")
async def list_activity_logs(
    type: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    user: User = Depends(require_activity_logs),
):
    """Query activity logs, newest first."""
    result = activity_service.query_logs(db, type, user_id, search, page, page_size)
    return {**result, "context": build_context(db, user)}
