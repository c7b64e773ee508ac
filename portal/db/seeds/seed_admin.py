"""Seed the administrator account from env vars."""

import json
from typing import Optional

from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.permissions import ALL_PERMISSIONS, Role
from portal.core.security import hash_password
from portal.models.user import User


def seed_admin(db: Session, email: Optional[str] = None, password: Optional[str] = None, name: str = "Administrator") -> User:
    """Create the admin user if not already present."""
    email = email or settings.ADMIN_EMAIL
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        print(f"Admin '{email}' already exists, skipping.")
        return existing

    admin = User(
        name=name,
        email=email,
        hashed_password=hash_password(password or settings.ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        office="Office of the Mayor",
        permissions_json=json.dumps(ALL_PERMISSIONS),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    print(f"Created admin: {email}")
    return admin
