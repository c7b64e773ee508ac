"""Trash service: soft-deleted news articles."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.exceptions import AuthorizationError, ResourceNotFoundError
from portal.core.permissions import PermissionKey, authorize_any
from portal.db.transaction import unit_of_work
from portal.models.news import News
from portal.services.news_service import news_service
from portal.services.pagination import paginate

logger = logging.getLogger("municipal_portal")


class TrashService:
    """Lists, restores and purges trashed articles."""

    base_path = "/api/trash/"

    @staticmethod
    def _gate(user) -> None:
        if not authorize_any(user, [PermissionKey.TRASH, PermissionKey.NEWS]):
            raise AuthorizationError("You do not have permission to access Trash.")

    @staticmethod
    def _find(db: Session, record_id: int) -> News:
        record = db.query(News).filter(News.id == record_id, News.deleted_at.isnot(None)).first()
        if record is None:
            raise ResourceNotFoundError(f"Trashed article {record_id} not found")
        return record

    def list(
        self,
        db: Session,
        user,
        search: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        self._gate(user)
        query = db.query(News).filter(News.deleted_at.isnot(None))
        if search:
            query = query.filter(News.title.ilike(f"%{search}%"))
        query = query.order_by(News.deleted_at.desc(), News.id.desc())
        return paginate(
            query, page, page_size or settings.DEFAULT_PAGE_SIZE,
            {"search": search}, self.base_path,
            transform=news_service.to_out,
        )

    def restore(self, db: Session, user, record_id: int, ip_address: Optional[str] = None) -> News:
        self._gate(user)
        record = self._find(db, record_id)
        with unit_of_work(db):
            record.deleted_at = None
            news_service.log(db, user, record, "restored", ip_address)
        db.refresh(record)
        return record

    def purge(self, db: Session, user, record_id: int, ip_address: Optional[str] = None) -> None:
        """Permanently delete a trashed article."""
        self._gate(user)
        record = self._find(db, record_id)
        with unit_of_work(db) as uow:
            uow.discard(*news_service.file_paths(record))
            news_service.log(db, user, record, "purged", ip_address)
            db.delete(record)
        logger.info("Article %s purged by user %s", record_id, getattr(user, "id", None))


trash_service = TrashService()
