"""News service: articles with a cover image, slug and publication status."""

import re
from datetime import datetime
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from portal.core.exceptions import ValidationError
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.transaction import unit_of_work
from portal.models.news import News
from portal.schemas.schemas import NewsInput, NewsOut, NewsStatusUpdate
from portal.services.resource_service import FileField, IMAGE_TYPES, ResourceService, field_errors


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "article"


def unique_slug(db: Session, title: str, exclude_id: Optional[int] = None) -> str:
    """Slug for ``title`` that no other article (trashed included) uses."""
    base = slugify(title)
    candidate, n = base, 1
    while True:
        query = db.query(News.id).filter(News.slug == candidate)
        if exclude_id is not None:
            query = query.filter(News.id != exclude_id)
        if query.first() is None:
            return candidate
        n += 1
        candidate = f"{base}-{n}"


class NewsService(ResourceService):
    model = News
    permission = PermissionKey.NEWS
    input_schema = NewsInput
    output_schema = NewsOut
    base_path = "/api/news/"
    search_fields = ("title", "content", "excerpt")
    filter_fields = {"status": "status", "category": "category"}
    file_fields = (FileField("image_path", "news-images", IMAGE_TYPES, max_kb=10240),)
    soft_delete = True
    owner_attr = "author_id"

    def assign(self, db, record, values, user, creating):
        title_changed = creating or record.title != values.title
        super().assign(db, record, values, user, creating)
        if title_changed:
            record.slug = unique_slug(db, values.title, exclude_id=record.id)
        if record.status == "published" and record.published_at is None:
            record.published_at = datetime.utcnow()

    def update_status(self, db: Session, user, record_id: int, status: str, ip_address: Optional[str] = None):
        """Move an article between draft, published and archived."""
        ensure_authorized(user, self.permission)
        try:
            NewsStatusUpdate(status=status)
        except PydanticValidationError as e:
            raise ValidationError(field_errors(e), {"status": status})
        record = self.find(db, record_id)

        with unit_of_work(db):
            previous = record.status
            record.status = status
            if status == "published" and record.published_at is None:
                record.published_at = datetime.utcnow()
            self.log(db, user, record, "status_updated", ip_address, previous=previous, status=status)

        db.refresh(record)
        return record


news_service = NewsService()
