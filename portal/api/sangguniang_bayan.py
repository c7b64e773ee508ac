"""Sangguniang Bayan members API router."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload, uploads
from portal.core.security import require_sangguniang_bayan
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.context_service import build_context
from portal.services.sangguniang_bayan_service import sangguniang_bayan_service

router = APIRouter(prefix="/sangguniang-bayan", tags=["sangguniang-bayan"])


@router.get("/")
async def list_members(
    search: Optional[str] = Query(None),
    position_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_sangguniang_bayan),
):
    """List members in display order."""
    filters = {"search": search, "position_type": position_type, "status": status}
    result = sangguniang_bayan_service.list(db, user, filters, page, page_size)
    return page_payload(result, sangguniang_bayan_service, build_context(db, user))


@router.get("/{member_id}")
async def get_member(member_id: int, db: Session = Depends(get_db), user: User = Depends(require_sangguniang_bayan)):
    record = sangguniang_bayan_service.get(db, user, member_id)
    return record_payload(record, sangguniang_bayan_service, build_context(db, user))


@router.post("/", status_code=201)
async def create_member(
    request: Request,
    data: str = Form("{}"),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_sangguniang_bayan),
):
    record = sangguniang_bayan_service.create(
        db, user, parse_payload(data), {"photo": uploads(photo)}, ip_address=client_ip(request),
    )
    return record_payload(record, sangguniang_bayan_service, build_context(db, user), "Member created successfully.")


@router.put("/{member_id}")
async def update_member(
    member_id: int,
    request: Request,
    data: str = Form("{}"),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_sangguniang_bayan),
):
    payload = parse_payload(data)
    remove = ["photo"] if payload.pop("remove_photo", False) else []
    record = sangguniang_bayan_service.update(
        db, user, member_id, payload, {"photo": uploads(photo)}, remove=remove,
        ip_address=client_ip(request),
    )
    return record_payload(record, sangguniang_bayan_service, build_context(db, user), "Member updated successfully.")


@router.delete("/{member_id}")
async def delete_member(
    member_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_sangguniang_bayan),
):
    sangguniang_bayan_service.delete(db, user, member_id, ip_address=client_ip(request))
    return {"message": "Member deleted successfully.", "context": build_context(db, user)}


@router.patch("/{member_id}/featured", response_model=ToggleResponse)
async def toggle_member_featured(
    member_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_sangguniang_bayan),
):
    return sangguniang_bayan_service.toggle_featured(db, user, member_id, ip_address=client_ip(request))


@router.patch("/{member_id}/status", response_model=ToggleResponse)
async def toggle_member_status(
    member_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_sangguniang_bayan),
):
    return sangguniang_bayan_service.toggle_status(db, user, member_id, ip_address=client_ip(request))


@router.patch("/{member_id}/order")
async def update_member_order(
    member_id: int,
    request: Request,
    order: int = Body(..., embed=True),
    db: Session = Depends(get_db),
    user: User = Depends(require_sangguniang_bayan),
):
    """Move a member to a new display position."""
    record = sangguniang_bayan_service.update_order(db, user, member_id, order, ip_address=client_ip(request))
    return record_payload(
        record, sangguniang_bayan_service, build_context(db, user), "Member order updated successfully.",
    )
