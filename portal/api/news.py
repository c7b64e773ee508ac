"""News API router."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.core.security import require_news
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.context_service import build_context
from portal.services.news_service import news_service

router = APIRouter(prefix="/news", tags=["news"])


@router.get("/")
async def list_news(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_news),
):
    """List articles with search, status and category filters."""
    result = news_service.list(
        db, user, {"search": search, "status": status, "category": category}, page, page_size,
    )
    return page_payload(result, news_service, build_context(db, user))


@router.get("/{news_id}")
async def get_news(news_id: int, db: Session = Depends(get_db), user: User = Depends(require_news)):
    record = news_service.get(db, user, news_id)
    return record_payload(record, news_service, build_context(db, user))


@router.post("/", status_code=201)
async def create_news(
    request: Request,
    data: str = Form("{}"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_news),
):
    """Create an article. Fields travel as JSON in ``data``."""
    record = news_service.create(
        db, user, parse_payload(data), {"image_path": uploads(image)}, ip_address=client_ip(request),
    )
    return record_payload(record, news_service, build_context(db, user), "Article created successfully.")


@router.put("/{news_id}")
async def update_news(
    news_id: int,
    request: Request,
    data: str = Form("{}"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_news),
):
    """Update an article. ``"remove_image": true`` in ``data`` clears the image."""
    payload = parse_payload(data)
    remove = ["image_path"] if payload.pop("remove_image", False) else []
    record = news_service.update(
        db, user, news_id, payload, {"image_path": uploads(image)}, remove=remove,
        ip_address=client_ip(request),
    )
    return record_payload(record, news_service, build_context(db, user), "Article updated successfully.")


@router.delete("/{news_id}")
async def delete_news(
    news_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_news),
):
    news_service.delete(db, user, news_id, ip_address=client_ip(request))
    return {"message": "Article moved to trash.", "context": build_context(db, user)}


@router.patch("/{news_id}/featured", response_model=ToggleResponse)
async def toggle_news_featured(
    news_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_news),
):
    return news_service.toggle_featured(db, user, news_id, ip_address=client_ip(request))


@router.patch("/{news_id}/status")
async def update_news_status(
    news_id: int,
    request: Request,
    status: str = Body(..., embed=True),
    db: Session = Depends(get_db),
    user: User = Depends(require_news),
):
    """Set an article to draft, published or archived."""
    record = news_service.update_status(db, user, news_id, status, ip_address=client_ip(request))
    return record_payload(
        record, news_service, build_context(db, user), f"Article status updated to {record.status}.",
    )
