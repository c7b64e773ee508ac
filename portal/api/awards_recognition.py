"""Awards & Recognition API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.core.security import require_awards_recognition
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.awards_service import awards_service
from portal.services.context_service import build_context

router = APIRouter(prefix="/awards-recognition", tags=["awards-recognition"])

REMOVE_FLAGS = {
    "remove_featured_image": "featured_image",
    "remove_gallery_images": "gallery_images",
    "remove_supporting_documents": "supporting_documents",
}


def _files(featured_image, gallery_images, supporting_documents):
    return {
        "featured_image": uploads(featured_image),
        "gallery_images": gallery_images or [],
        "supporting_documents": supporting_documents or [],
    }


@router.get("/")
async def list_awards(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    award_type: Optional[str] = Query(None),
    scope: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_awards_recognition),
):
    filters = {
        "search": search, "category": category, "award_type": award_type,
        "scope": scope, "status": status,
    }
    result = awards_service.list(db, user, filters, page, page_size)
    return page_payload(result, awards_service, build_context(db, user))


@router.get("/{award_id}")
async def get_award(award_id: int, db: Session = Depends(get_db), user: User = Depends(require_awards_recognition)):
    record = awards_service.get(db, user, award_id)
    return record_payload(record, awards_service, build_context(db, user))


@router.post("/", status_code=201)
async def create_award(
    request: Request,
    data: str = Form("{}"),
    featured_image: Optional[UploadFile] = File(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    supporting_documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_awards_recognition),
):
    record = awards_service.create(
        db, user, parse_payload(data),
        _files(featured_image, gallery_images, supporting_documents),
        ip_address=client_ip(request),
    )
    return record_payload(record, awards_service, build_context(db, user), "Award created successfully.")


@router.put("/{award_id}")
async def update_award(
    award_id: int,
    request: Request,
    data: str = Form("{}"),
    featured_image: Optional[UploadFile] = File(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    supporting_documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_awards_recognition),
):
    payload = parse_payload(data)
    remove = [field for flag, field in REMOVE_FLAGS.items() if payload.pop(flag, False)]
    record = awards_service.update(
        db, user, award_id, payload,
        _files(featured_image, gallery_images, supporting_documents),
        remove=remove, ip_address=client_ip(request),
    )
    return record_payload(record, awards_service, build_context(db, user), "Award updated successfully.")


@router.delete("/{award_id}")
async def delete_award(
    award_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_awards_recognition),
):
    awards_service.delete(db, user, award_id, ip_address=client_ip(request))
    return {"message": "Award deleted successfully.", "context": build_context(db, user)}


@router.patch("/{award_id}/featured", response_model=ToggleResponse)
async def toggle_award_featured(
    award_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_awards_recognition),
):
    return awards_service.toggle_featured(db, user, award_id, ip_address=client_ip(request))


@router.patch("/{award_id}/status", response_model=ToggleResponse)
async def toggle_award_status(
    award_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_awards_recognition),
):
    return awards_service.toggle_status(db, user, award_id, ip_address=client_ip(request))
