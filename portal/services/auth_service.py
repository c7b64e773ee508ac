"""Auth service: login and token issuance."""

from datetime import datetime, timezone
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from portal.core.exceptions import AuthenticationError, ResourceNotFoundError
from portal.core.permissions import resolve_role, user_permissions
from portal.core.security import create_access_token, verify_password
from portal.db.transaction import unit_of_work
from portal.models.user import User
from portal.schemas.schemas import UserOut
from portal.services.activity_service import activity_service


class AuthService:
    """Handles authentication and the user payload returned to clients."""

    @staticmethod
    def authenticate(db: Session, email: str, password: str, ip_address: Optional[str] = None) -> Dict[str, Any]:
        """Authenticate user and return a JWT access token.

        Raises:
            AuthenticationError: If credentials are invalid or the account is
                deactivated.
        """
        user = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        with unit_of_work(db):
            user.last_login_at = datetime.now(timezone.utc)
            user.last_login_ip = ip_address
            user.login_count = (user.login_count or 0) + 1
            activity_service.record(
                db, user,
                description=f"{user.name} logged in",
                type="auth",
                action="login",
                subject_id=user.id,
                ip_address=ip_address,
            )

        access_token = create_access_token({"sub": str(user.id)})
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": AuthService.to_out(user).model_dump(mode="json"),
        }

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        """Get a user by id."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError(f"User {user_id} not found")
        return user

    @staticmethod
    def to_out(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            name=user.name,
            email=user.email,
            role=resolve_role(user.role).value,
            office=user.office,
            position=user.position,
            phone=user.phone,
            avatar=user.avatar,
            is_active=user.is_active,
            permissions=sorted(user_permissions(user)),
            last_login_at=user.last_login_at,
            login_count=user.login_count or 0,
            created_at=user.created_at,
        )


auth_service = AuthService()
