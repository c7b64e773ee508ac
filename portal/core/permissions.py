"""Role resolution, permission normalization and the authorization gate.

Every access decision in the portal goes through :func:`authorize`. Routes
use :class:`portal.core.security.RequirePermission`, services call
:func:`ensure_authorized`; nothing else compares role strings.
"""

import enum
import json
import logging
from typing import Any, FrozenSet, Iterable

from portal.core.exceptions import AuthorizationError

logger = logging.getLogger("municipal_portal")


class Role(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"


# Role strings written by older versions of the portal.
LEGACY_ROLES = {
    "superadmin": Role.ADMIN,
    "PIO Officer": Role.STAFF,
    "PIO Staff": Role.STAFF,
    "user": Role.STAFF,
}


class PermissionKey(str, enum.Enum):
    NEWS = "news"
    BIDS_AWARDS = "bids_awards"
    FULL_DISCLOSURE = "full_disclosure"
    TOURISM = "tourism"
    AWARDS_RECOGNITION = "awards_recognition"
    SANGGUNIANG_BAYAN = "sangguniang_bayan"
    ORDINANCE_RESOLUTIONS = "ordinance_resolutions"
    USER_MANAGEMENT = "user_management"
    ACTIVITY_LOGS = "activity_logs"
    TRASH = "trash"


PERMISSION_LABELS = {
    PermissionKey.NEWS: "News Management",
    PermissionKey.BIDS_AWARDS: "Bids & Awards",
    PermissionKey.FULL_DISCLOSURE: "Full Disclosure",
    PermissionKey.TOURISM: "Tourism",
    PermissionKey.AWARDS_RECOGNITION: "Awards & Recognition",
    PermissionKey.SANGGUNIANG_BAYAN: "Sangguniang Bayan",
    PermissionKey.ORDINANCE_RESOLUTIONS: "Ordinances & Resolutions",
    PermissionKey.USER_MANAGEMENT: "User Management",
    PermissionKey.ACTIVITY_LOGS: "Activity Logs",
    PermissionKey.TRASH: "Trash",
}

ALL_PERMISSIONS = [key.value for key in PermissionKey]


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    def __bool__(self) -> bool:
        return self is Decision.ALLOW


def resolve_role(value: Any) -> Role:
    """Map a stored role string onto :class:`Role`.

    Unknown or missing values resolve to ``Role.STAFF`` so they never
    receive the admin override.
    """
    if isinstance(value, Role):
        return value
    if value in LEGACY_ROLES:
        return LEGACY_ROLES[value]
    try:
        return Role(value)
    except ValueError:
        return Role.STAFF


def is_admin(user) -> bool:
    return resolve_role(getattr(user, "role", None)) is Role.ADMIN


def normalize_permissions(raw: Any) -> FrozenSet[str]:
    """Decode stored permissions into a set of keys.

    Accepts JSON text (double-encoded strings included), lists, tuples and
    sets. Anything that cannot be decoded yields an empty set.
    """
    value = raw
    # Older rows hold a JSON string that itself contains JSON.
    for _ in range(2):
        if not isinstance(value, (str, bytes)):
            break
        try:
            value = json.loads(value)
        except ValueError:
            logger.debug("Unreadable permissions value %r", raw)
            return frozenset()

    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(_key_value(item) for item in value if isinstance(item, (str, enum.Enum)) and item)
    return frozenset()


def _key_value(key: Any) -> str:
    return key.value if isinstance(key, enum.Enum) else str(key)


def user_permissions(user) -> FrozenSet[str]:
    return normalize_permissions(getattr(user, "permissions_json", None))


def authorize(user, key: Any) -> Decision:
    """Decide whether ``user`` may act on ``key``. Pure, never raises."""
    if is_admin(user):
        return Decision.ALLOW
    if _key_value(key) in user_permissions(user):
        return Decision.ALLOW
    return Decision.DENY


def authorize_any(user, keys: Iterable[Any]) -> Decision:
    for key in keys:
        if authorize(user, key):
            return Decision.ALLOW
    return Decision.DENY


def ensure_authorized(user, key: Any) -> None:
    """Raise :class:`AuthorizationError` unless ``user`` may act on ``key``."""
    if not authorize(user, key):
        raise AuthorizationError(
            f"You do not have permission to access {PERMISSION_LABELS.get(key, _key_value(key))}."
        )


def permission_flags(user) -> dict:
    """Boolean ``can_manage_*`` flags for every catalog key."""
    flags = {f"can_manage_{key.value}": bool(authorize(user, key)) for key in PermissionKey}
    # Trash follows news access.
    flags["can_manage_trash"] = bool(authorize_any(user, [PermissionKey.TRASH, PermissionKey.NEWS]))
    flags["is_admin"] = is_admin(user)
    return flags
