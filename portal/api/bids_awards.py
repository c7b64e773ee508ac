"""Bids & Awards API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from portal.api.common import client_ip, page_payload, parse_payload, record_payload
from portal.core.security import require_bids_awards
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.bids_award_service import bids_award_service
from portal.services.context_service import build_context

router = APIRouter(prefix="/bids-awards", tags=["bids-awards"])


@router.get("/")
async def list_bids_awards(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    bid_type: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(require_bids_awards),
):
    """List bids and awards with search, status and bid type filters."""
    result = bids_award_service.list(
        db, user, {"search": search, "status": status, "bid_type": bid_type}, page, page_size,
    )
    return page_payload(result, bids_award_service, build_context(db, user))


@router.get("/{bid_id}")
async def get_bids_award(bid_id: int, db: Session = Depends(get_db), user: User = Depends(require_bids_awards)):
    record = bids_award_service.get(db, user, bid_id)
    return record_payload(record, bids_award_service, build_context(db, user))


@router.post("/", status_code=201)
async def create_bids_award(
    request: Request,
    data: str = Form("{}"),
    documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_bids_awards),
):
    record = bids_award_service.create(
        db, user, parse_payload(data), {"documents": documents or []}, ip_address=client_ip(request),
    )
    return record_payload(record, bids_award_service, build_context(db, user), "Bid/Award created successfully.")


@router.put("/{bid_id}")
async def update_bids_award(
    bid_id: int,
    request: Request,
    data: str = Form("{}"),
    documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_bids_awards),
):
    """Update a bid/award. New documents replace the stored set."""
    payload = parse_payload(data)
    remove = ["documents"] if payload.pop("remove_documents", False) else []
    record = bids_award_service.update(
        db, user, bid_id, payload, {"documents": documents or []}, remove=remove,
        ip_address=client_ip(request),
    )
    return record_payload(record, bids_award_service, build_context(db, user), "Bid/Award updated successfully.")


@router.delete("/{bid_id}")
async def delete_bids_award(
    bid_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_bids_awards),
):
    bids_award_service.delete(db, user, bid_id, ip_address=client_ip(request))
    return {"message": "Bid/Award deleted successfully.", "context": build_context(db, user)}


@router.patch("/{bid_id}/featured", response_model=ToggleResponse)
async def toggle_bids_award_featured(
    bid_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(require_bids_awards),
):
    return bids_award_service.toggle_featured(db, user, bid_id, ip_address=client_ip(request))
