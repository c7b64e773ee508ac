"""JWT authentication and permission-gate dependencies."""

import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.session import get_db
from portal.models.user import User

# JWT bearer scheme
security_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Load the authenticated user from the Bearer token.

    Role and permissions are always read from the database, never from the
    token, so revoking access takes effect on the next request.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found or deactivated",
        )
    request.state.user_id = user.id
    return user


class RequirePermission:
    """Dependency that runs the authorization gate for a permission key.

    Resolves to the current user. A denied check raises
    :class:`AuthorizationError` before the request body is validated.
    """

    def __init__(self, *keys: PermissionKey):
        self.keys = keys

    async def __call__(self, user: User = Depends(get_current_user)) -> User:
        for key in self.keys:
            ensure_authorized(user, key)
        return user


require_news = RequirePermission(PermissionKey.NEWS)
require_bids_awards = RequirePermission(PermissionKey.BIDS_AWARDS)
require_full_disclosure = RequirePermission(PermissionKey.FULL_DISCLOSURE)
require_tourism = RequirePermission(PermissionKey.TOURISM)
require_awards_recognition = RequirePermission(PermissionKey.AWARDS_RECOGNITION)
require_sangguniang_bayan = RequirePermission(PermissionKey.SANGGUNIANG_BAYAN)
require_ordinance_resolutions = RequirePermission(PermissionKey.ORDINANCE_RESOLUTIONS)
require_activity_logs = RequirePermission(PermissionKey.ACTIVITY_LOGS)
