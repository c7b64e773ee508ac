"""User management API router.

Listing, creating, deleting and toggling accounts require the
``user_management`` permission. Any signed-in user may read and edit
their own account.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session

from portal.api.common import client_ip
from portal.core.options import options_for
from portal.core.permissions import PERMISSION_LABELS, PermissionKey
from portal.core.security import get_current_user
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import ToggleResponse
from portal.services.auth_service import auth_service
from portal.services.context_service import build_context
from portal.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"])


def _options() -> Dict[str, Any]:
    return {
        **options_for(PermissionKey.USER_MANAGEMENT).as_payload(),
        "permissions": {key.value: label for key, label in PERMISSION_LABELS.items()},
    }


@router.get("/")
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    office: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filters = {"search": search, "role": role, "office": office, "status": status}
    result = user_service.list(db, user, filters, page, page_size)
    return {**result, "options": _options(), "context": build_context(db, user)}


@router.get("/{user_id}")
async def get_user(user_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    target = user_service.get(db, user, user_id)
    return {"data": auth_service.to_out(target), "options": _options(), "context": build_context(db, user)}


@router.post("/", status_code=201)
async def create_user(
    request: Request,
    body: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    target = user_service.create(db, user, body, ip_address=client_ip(request))
    return {
        "message": "User created successfully.",
        "data": auth_service.to_out(target),
        "context": build_context(db, user),
    }


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    request: Request,
    body: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    target = user_service.update(db, user, user_id, body, ip_address=client_ip(request))
    return {
        "message": "User updated successfully.",
        "data": auth_service.to_out(target),
        "context": build_context(db, user),
    }


@router.delete("/{user_id}")
async def delete_user(
    user_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user),
):
    user_service.delete(db, user, user_id, ip_address=client_ip(request))
    return {"message": "User deleted successfully.", "context": build_context(db, user)}


@router.patch("/{user_id}/status", response_model=ToggleResponse)
async def toggle_user_status(
    user_id: int, request: Request, db: Session = Depends(get_db), user: User = Depends(get_current_user),
):
    return user_service.toggle_status(db, user, user_id, ip_address=client_ip(request))
