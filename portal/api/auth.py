"""Auth API router: login and current user."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from portal.api.common import client_ip
from portal.core.config import settings
from portal.core.rate_limiter import limiter
from portal.core.security import get_current_user
from portal.db.session import get_db
from portal.models.user import User
from portal.schemas.schemas import LoginRequest, TokenResponse
from portal.services.auth_service import auth_service
from portal.services.context_service import build_context

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a JWT access token."""
    return auth_service.authenticate(db, body.email, body.password, ip_address=client_ip(request))


@router.get("/me")
async def get_me(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Current user profile with the presentation context."""
    return {"user": auth_service.to_out(user), "context": build_context(db, user)}
