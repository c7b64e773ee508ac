"""Dashboard service: totals and recent records per visible category."""

from typing import Any, Dict

from sqlalchemy.orm import Session

from portal.core.permissions import PermissionKey, authorize
from portal.services.activity_service import activity_service
from portal.services.awards_service import awards_service
from portal.services.bids_award_service import bids_award_service
from portal.services.full_disclosure_service import full_disclosure_service
from portal.services.news_service import news_service
from portal.services.ordinance_service import ordinance_service
from portal.services.sangguniang_bayan_service import sangguniang_bayan_service
from portal.services.tourism_service import tourism_service

RESOURCE_SERVICES = (
    news_service,
    bids_award_service,
    full_disclosure_service,
    tourism_service,
    awards_service,
    sangguniang_bayan_service,
    ordinance_service,
)

RECENT_LIMIT = 5


class DashboardService:

    @staticmethod
    def summary(db: Session, user) -> Dict[str, Any]:
        stats: Dict[str, Any] = {}
        recent: Dict[str, Any] = {}
        for service in RESOURCE_SERVICES:
            key = service.permission.value
            if not authorize(user, service.permission):
                continue
            query = service.base_query(db)
            stats[key] = {"total": query.count()}
            if "is_featured" in service.toggles:
                stats[key]["featured"] = query.filter(service.model.is_featured.is_(True)).count()
            rows = service.order(service.base_query(db)).limit(RECENT_LIMIT).all()
            recent[key] = [service.to_out(row) for row in rows]

        result: Dict[str, Any] = {"stats": stats, "recent": recent}
        if authorize(user, PermissionKey.ACTIVITY_LOGS):
            result["recent_activity"] = activity_service.recent(db)
        return result


dashboard_service = DashboardService()
