"""Trash API router: soft-deleted news articles."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portal.api.common import client_ip, record_payload
from portal.core.security import get_current_user
from portal.db.session import get_db
from portal.models.user import User
from portal.services.context_service import build_context
from portal.services.news_service import news_service
from portal.services.trash_service import trash_service

router = APIRouter(prefix="/trash", tags=["trash"])


@router.get("/")
async def list_trash(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = trash_service.list(db, user, search, page, page_size)
    return {**result, "context": build_context(db, user)}


@router.post("/{news_id}/restore")
async def restore_article(
    news_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user),
):
    record = trash_service.restore(db, user, news_id, ip_address=client_ip(request))
    return record_payload(record, news_service, build_context(db, user), "Article restored successfully.")


@router.delete("/{news_id}")
async def purge_article(
    news_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user),
):
    """Permanently delete a trashed article and its image."""
    trash_service.purge(db, user, news_id, ip_address=client_ip(request))
    return {"message": "Article permanently deleted.", "context": build_context(db, user)}
