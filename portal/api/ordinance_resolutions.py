"""Ordinances & Resolutions API router."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.api.full_disclosure import attachment
from portal.core.security import require_ordinance_resolutions
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.context_service import build_context
from portal.services.ordinance_service import ordinance_service

router = APIRouter(prefix="/ordinance-resolutions", tags=["ordinance-resolutions"])


@router.get("/")
async def list_ordinances(
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    filters = {"search": search, "type": type, "status": status, "category": category}
    result = ordinance_service.list(db, user, filters, page, page_size)
    return page_payload(result, ordinance_service, build_context(db, user))


@router.get("/{ordinance_id}")
async def get_ordinance(
    ordinance_id: int, db: Session = Depends(get_db), user: User = Depends(require_ordinance_resolutions),
):
    record = ordinance_service.get(db, user, ordinance_id)
    return record_payload(record, ordinance_service, build_context(db, user))


@router.get("/{ordinance_id}/download")
async def download_ordinance(
    ordinance_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    """Download the attached file as ``<number>.<ext>``."""
    _, stream, filename = ordinance_service.download(db, user, ordinance_id, ip_address=client_ip(request))
    return attachment(stream, filename)


@router.post("/", status_code=201)
async def create_ordinance(
    request: Request,
    data: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    record = ordinance_service.create(
        db, user, parse_payload(data), {"file_path": uploads(file)}, ip_address=client_ip(request),
    )
    return record_payload(
        record, ordinance_service, build_context(db, user), "Ordinance/Resolution created successfully.",
    )


@router.put("/{ordinance_id}")
async def update_ordinance(
    ordinance_id: int,
    request: Request,
    data: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    payload = parse_payload(data)
    remove = ["file_path"] if payload.pop("remove_file", False) else []
    record = ordinance_service.update(
        db, user, ordinance_id, payload, {"file_path": uploads(file)}, remove=remove,
        ip_address=client_ip(request),
    )
    return record_payload(
        record, ordinance_service, build_context(db, user), "Ordinance/Resolution updated successfully.",
    )


@router.delete("/{ordinance_id}")
async def delete_ordinance(
    ordinance_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    ordinance_service.delete(db, user, ordinance_id, ip_address=client_ip(request))
    return {"message": "Ordinance/Resolution deleted successfully.", "context": build_context(db, user)}


@router.patch("/{ordinance_id}/featured", response_model=ToggleResponse)
async def toggle_ordinance_featured(
    ordinance_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    return ordinance_service.toggle_featured(db, user, ordinance_id, ip_address=client_ip(request))


@router.patch("/{ordinance_id}/status", response_model=ToggleResponse)
async def toggle_ordinance_status(
    ordinance_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_ordinance_resolutions),
):
    return ordinance_service.toggle_status(db, user, ordinance_id, ip_address=client_ip(request))
