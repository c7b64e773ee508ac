"""Badge service: per-category counts for the navigation sidebar."""

import logging
from typing import Callable, Dict

from sqlalchemy.orm import Session

from portal.core.permissions import PermissionKey, authorize, is_admin
from portal.models.activity import Activity
from portal.models.awards_recognition import AwardsRecognition
from portal.models.bids_award import BidsAward
from portal.models.full_disclosure import FullDisclosure
from portal.models.news import News
from portal.models.ordinance_resolution import OrdinanceResolution
from portal.models.sangguniang_bayan_member import SangguniangBayanMember
from portal.models.tourism_package import TourismPackage
from portal.models.user import User

logger = logging.getLogger("municipal_portal")


def _live(db: Session, model):
    return db.query(model).filter(model.deleted_at.is_(None))


class BadgeService:
    """Computes badge counts gated by the requesting user's permissions.

    ``counters`` maps a badge key to a single count query. A query that
    fails is logged and its badge reads zero; the remaining badges are
    still computed.
    """

    def __init__(self):
        self.counters: Dict[str, Callable[[Session], int]] = {
            "news": lambda db: _live(db, News).filter(News.status == "published").count(),
            "bids_awards": lambda db: _live(db, BidsAward).count(),
            "full_disclosure": lambda db: db.query(FullDisclosure).count(),
            "tourism": lambda db: _live(db, TourismPackage).count(),
            "awards_recognition": lambda db: _live(db, AwardsRecognition).count(),
            "sangguniang_bayan": lambda db: db.query(SangguniangBayanMember).count(),
            "ordinance_resolutions": lambda db: db.query(OrdinanceResolution).count(),
            "trash": lambda db: db.query(News).filter(News.deleted_at.isnot(None)).count(),
            "users": lambda db: db.query(User).count(),
            "activity_logs": lambda db: db.query(Activity).count(),
        }

    def visible_keys(self, user) -> list:
        keys = [
            key.value for key in (
                PermissionKey.NEWS,
                PermissionKey.BIDS_AWARDS,
                PermissionKey.FULL_DISCLOSURE,
                PermissionKey.TOURISM,
                PermissionKey.AWARDS_RECOGNITION,
                PermissionKey.SANGGUNIANG_BAYAN,
                PermissionKey.ORDINANCE_RESOLUTIONS,
            )
            if authorize(user, key)
        ]
        if authorize(user, PermissionKey.NEWS):
            keys.append("trash")
        if is_admin(user):
            keys.extend(["users", "activity_logs"])
        return keys

    def _count(self, db: Session, key: str) -> int:
        try:
            return int(self.counters[key](db))
        except Exception as e:
            logger.warning("Badge count for %s failed, showing 0: %s", key, e)
            db.rollback()
            return 0

    def compute(self, db: Session, user) -> Dict[str, int]:
        """Badge counts for every key the user may see. Never raises."""
        return {key: self._count(db, key) for key in self.visible_keys(user)}


badge_service = BadgeService()
