"""Activity service: append-only log of every mutation."""

import json
from typing import Optional, Any, Dict

from sqlalchemy.orm import Session

from portal.core.middleware import current_request_id
from portal.models.activity import Activity
from portal.schemas.schemas import ActivityOut
from portal.services.pagination import paginate


class ActivityService:
    """Records and queries activity log entries."""

    @staticmethod
    def record(
        db: Session,
        user,
        description: str,
        type: str,
        action: str,
        subject_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        **extra: Any,
    ) -> Activity:
        """Add an activity entry to the current transaction.

        The entry is flushed, not committed; it lands together with the
        mutation it describes. Inside an HTTP request the metadata also
        records the request id.
        """
        metadata: Dict[str, Any] = {"action": action}
        if subject_id is not None:
            metadata["id"] = subject_id
        metadata.update(extra)
        request_id = current_request_id()
        if request_id is not None:
            metadata["request_id"] = request_id

        entry = Activity(
            description=description,
            type=type,
            user_id=getattr(user, "id", None),
            metadata_json=json.dumps(metadata, default=str),
            ip_address=ip_address,
        )
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def query_logs(
        db: Session,
        type: Optional[str] = None,
        user_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
        base_path: str = "/api/activity-logs/",
    ) -> Dict[str, Any]:
        """Query activity logs with filters and pagination, newest first."""
        query = db.query(Activity)

        if type:
            query = query.filter(Activity.type == type)
        if user_id:
            query = query.filter(Activity.user_id == user_id)
        if search:
            query = query.filter(Activity.description.ilike(f"%{search}%"))

        query = query.order_by(Activity.created_at.desc(), Activity.id.desc())
        return paginate(
            query, page, page_size,
            {"type": type, "user_id": user_id, "search": search},
            base_path,
            transform=ActivityService.to_out,
        )

    @staticmethod
    def recent(db: Session, limit: int = 10):
        logs = db.query(Activity).order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit).all()
        return [ActivityService.to_out(log) for log in logs]

    @staticmethod
    def to_out(entry: Activity) -> ActivityOut:
        try:
            metadata = json.loads(entry.metadata_json) if entry.metadata_json else {}
        except ValueError:
            metadata = {}
        return ActivityOut(
            id=entry.id,
            description=entry.description,
            type=entry.type,
            user_id=entry.user_id,
            user_name=entry.user.name if entry.user else None,
            metadata=metadata,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
        )


activity_service = ActivityService()
