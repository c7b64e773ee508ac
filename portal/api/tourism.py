"""Tourism packages API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.core.security import require_tourism
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.context_service import build_context
from portal.services.tourism_service import tourism_service

router = APIRouter(prefix="/tourism", tags=["tourism"])

REMOVE_FLAGS = {"remove_featured_image": "featured_image", "remove_gallery_images": "gallery_images"}


@router.get("/")
async def list_packages(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_tourism),
):
    """List tourism packages. ``status`` is ``active`` or ``featured``."""
    filters = {"search": search, "category": category, "status": status, "difficulty": difficulty}
    result = tourism_service.list(db, user, filters, page, page_size)
    return page_payload(result, tourism_service, build_context(db, user))


@router.get("/{package_id}")
async def get_package(package_id: int, db: Session = Depends(get_db), user: User = Depends(require_tourism)):
    record = tourism_service.get(db, user, package_id)
    return record_payload(record, tourism_service, build_context(db, user))


@router.post("/", status_code=201)
async def create_package(
    request: Request,
    data: str = Form("{}"),
    featured_image: Optional[UploadFile] = File(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_tourism),
):
    files = {"featured_image": uploads(featured_image), "gallery_images": gallery_images or []}
    record = tourism_service.create(db, user, parse_payload(data), files, ip_address=client_ip(request))
    return record_payload(record, tourism_service, build_context(db, user), "Tourism package created successfully.")


@router.put("/{package_id}")
async def update_package(
    package_id: int,
    request: Request,
    data: str = Form("{}"),
    featured_image: Optional[UploadFile] = File(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_tourism),
):
    payload = parse_payload(data)
    remove = [field for flag, field in REMOVE_FLAGS.items() if payload.pop(flag, False)]
    files = {"featured_image": uploads(featured_image), "gallery_images": gallery_images or []}
    record = tourism_service.update(
        db, user, package_id, payload, files, remove=remove, ip_address=client_ip(request),
    )
    return record_payload(record, tourism_service, build_context(db, user), "Tourism package updated successfully.")


@router.delete("/{package_id}")
async def delete_package(
    package_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_tourism),
):
    tourism_service.delete(db, user, package_id, ip_address=client_ip(request))
    return {"message": "Tourism package deleted successfully.", "context": build_context(db, user)}


@router.patch("/{package_id}/featured", response_model=ToggleResponse)
async def toggle_package_featured(
    package_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_tourism),
):
    return tourism_service.toggle_featured(db, user, package_id, ip_address=client_ip(request))


@router.patch("/{package_id}/status", response_model=ToggleResponse)
async def toggle_package_status(
    package_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_tourism),
):
    return tourism_service.toggle_status(db, user, package_id, ip_address=client_ip(request))
