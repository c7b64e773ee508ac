"""User management service: staff accounts, roles and permissions."""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.exceptions import AuthorizationError, ResourceConflictError, ValidationError
from portal.core.permissions import (
    ALL_PERMISSIONS, PermissionKey, Role, ensure_authorized, resolve_role,
)
from portal.core.security import hash_password
from portal.db.transaction import unit_of_work
from portal.models.user import User
from portal.schemas.schemas import UserCreate, UserUpdate
from portal.services.activity_service import activity_service
from portal.services.auth_service import auth_service
from portal.services.pagination import paginate
from portal.services.resource_service import field_errors, merge_errors

logger = logging.getLogger("municipal_portal")

# Permissions granted to new staff accounts by office.
OFFICE_PERMISSIONS = {
    "Public Information Office": ["news", "full_disclosure", "awards_recognition"],
    "Municipal Tourism Office": ["tourism"],
    "Bids and Awards Committee": ["bids_awards", "full_disclosure"],
    "Sangguniang Bayan": ["sangguniang_bayan", "ordinance_resolutions"],
    "Municipal Budget Office": ["full_disclosure"],
    "Municipal Planning and Development Office": ["full_disclosure"],
}


def default_permissions(role: str, office: Optional[str] = None) -> List[str]:
    if resolve_role(role) is Role.ADMIN:
        return list(ALL_PERMISSIONS)
    return list(OFFICE_PERMISSIONS.get(office or "", ["news"]))


class UserService:
    """Manages accounts on behalf of a user holding ``user_management``.

    Every user may view and edit their own account. Nobody may delete,
    deactivate, or change the role or permissions of their own account.
    """

    base_path = "/api/users/"

    def _gate_for(self, actor, target_id: int) -> None:
        if getattr(actor, "id", None) != target_id:
            ensure_authorized(actor, PermissionKey.USER_MANAGEMENT)

    def _validate(self, schema, data: Dict[str, Any]):
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(field_errors(e), self._echo(data))

    @staticmethod
    def _echo(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if "password" not in k}

    @staticmethod
    def _email_errors(db: Session, email: str, exclude_id: Optional[int] = None) -> Dict[str, List[str]]:
        query = db.query(User.id).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            return {"email": ["The email has already been taken."]}
        return {}

    def _log(self, db: Session, actor, target: User, action: str, ip_address: Optional[str], **extra) -> None:
        verbs = {
            "created": "Created user",
            "updated": "Updated user",
            "deleted": "Deleted user",
            "status_toggled": "Toggled status of user",
        }
        activity_service.record(
            db, actor,
            description=f"{verbs[action]}: {target.name}",
            type=PermissionKey.USER_MANAGEMENT.value,
            action=action,
            subject_id=target.id,
            ip_address=ip_address,
            email=target.email,
            **extra,
        )

    def list(
        self,
        db: Session,
        actor,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        ensure_authorized(actor, PermissionKey.USER_MANAGEMENT)
        filters = filters or {}
        query = db.query(User)

        search = filters.get("search")
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        if filters.get("role"):
            query = query.filter(User.role == filters["role"])
        if filters.get("office"):
            query = query.filter(User.office == filters["office"])
        if filters.get("status") in ("active", "inactive"):
            query = query.filter(User.is_active.is_(filters["status"] == "active"))

        query = query.order_by(User.created_at.desc(), User.id.desc())
        return paginate(
            query, page, page_size or settings.DEFAULT_PAGE_SIZE, filters, self.base_path,
            transform=auth_service.to_out,
        )

    def get(self, db: Session, actor, user_id: int) -> User:
        self._gate_for(actor, user_id)
        return auth_service.get_user(db, user_id)

    def create(self, db: Session, actor, data: Dict[str, Any], ip_address: Optional[str] = None) -> User:
        ensure_authorized(actor, PermissionKey.USER_MANAGEMENT)
        values = self._validate(UserCreate, data)

        errors = self._email_errors(db, values.email)
        if values.password != values.password_confirmation:
            merge_errors(errors, {"password": ["The password confirmation does not match."]})
        if errors:
            raise ValidationError(errors, self._echo(data))

        permissions = values.permissions
        if resolve_role(values.role) is Role.ADMIN:
            permissions = list(ALL_PERMISSIONS)
        elif permissions is None:
            permissions = default_permissions(values.role, values.office)

        user = User(
            name=values.name,
            email=values.email,
            hashed_password=hash_password(values.password),
            role=values.role,
            office=values.office,
            position=values.position,
            phone=values.phone,
            is_active=values.is_active,
            permissions_json=json.dumps(sorted(set(permissions))),
        )
        with unit_of_work(db):
            db.add(user)
            db.flush()
            self._log(db, actor, user, "created", ip_address)
        db.refresh(user)
        logger.info("User %s created by user %s", user.id, getattr(actor, "id", None))
        return user

    def update(self, db: Session, actor, user_id: int, data: Dict[str, Any], ip_address: Optional[str] = None) -> User:
        """Update an account.

        Changing your own role, status or permissions is refused.
        An admin role always carries the full permission catalog.
        """
        self._gate_for(actor, user_id)
        user = auth_service.get_user(db, user_id)
        current = {
            "name": user.name,
            "email": user.email,
            "role": resolve_role(user.role).value,
            "office": user.office,
            "position": user.position,
            "phone": user.phone,
            "is_active": user.is_active,
        }
        values = self._validate(UserUpdate, {**current, **data})

        errors = self._email_errors(db, values.email, exclude_id=user.id)
        if values.password and values.password != values.password_confirmation:
            merge_errors(errors, {"password": ["The password confirmation does not match."]})
        if errors:
            raise ValidationError(errors, self._echo(data))

        is_self = user.id == getattr(actor, "id", None)
        if is_self and (
            values.role != current["role"]
            or values.is_active != user.is_active
            or (values.permissions is not None and set(values.permissions) != set(auth_service.to_out(user).permissions))
        ):
            raise AuthorizationError("You cannot change your own role, status or permissions.")

        with unit_of_work(db):
            user.name = values.name
            user.email = values.email
            user.office = values.office
            user.position = values.position
            user.phone = values.phone
            if values.password:
                user.hashed_password = hash_password(values.password)
            if not is_self:
                user.role = values.role
                user.is_active = values.is_active
                if resolve_role(values.role) is Role.ADMIN:
                    user.permissions_json = json.dumps(list(ALL_PERMISSIONS))
                elif values.permissions is not None:
                    user.permissions_json = json.dumps(sorted(set(values.permissions)))
            self._log(db, actor, user, "updated", ip_address)
        db.refresh(user)
        return user

    def delete(self, db: Session, actor, user_id: int, ip_address: Optional[str] = None) -> None:
        ensure_authorized(actor, PermissionKey.USER_MANAGEMENT)
        if user_id == getattr(actor, "id", None):
            raise ResourceConflictError("You cannot delete your own account.")
        user = auth_service.get_user(db, user_id)
        with unit_of_work(db):
            self._log(db, actor, user, "deleted", ip_address)
            db.delete(user)
        logger.info("User %s deleted by user %s", user_id, getattr(actor, "id", None))

    def toggle_status(self, db: Session, actor, user_id: int, ip_address: Optional[str] = None) -> Dict[str, Any]:
        ensure_authorized(actor, PermissionKey.USER_MANAGEMENT)
        if user_id == getattr(actor, "id", None):
            raise ResourceConflictError("You cannot deactivate your own account.")
        user = auth_service.get_user(db, user_id)
        with unit_of_work(db):
            user.is_active = not user.is_active
            value = user.is_active
            self._log(db, actor, user, "status_toggled", ip_address, value=value)
        return {
            "id": user_id,
            "field": "is_active",
            "value": value,
            "message": f"User {'activated' if value else 'deactivated'} successfully.",
        }


user_service = UserService()
