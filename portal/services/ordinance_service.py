"""Ordinances and resolutions service."""

import time
import uuid
from typing import Iterator, Optional, Tuple

from sqlalchemy import String, cast, false
from sqlalchemy.orm import Session

from portal.core.exceptions import ResourceNotFoundError
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.transaction import unit_of_work
from portal.models.ordinance_resolution import OrdinanceResolution
from portal.schemas.schemas import OrdinanceResolutionInput, OrdinanceResolutionOut
from portal.services.news_service import slugify
from portal.services.resource_service import FileField, ResourceService
from portal.services.storage_service import storage_service


class OrdinanceService(ResourceService):
    """Legislative measures.

    ``status`` may move between any of its values through update.
    """

    model = OrdinanceResolution
    permission = PermissionKey.ORDINANCE_RESOLUTIONS
    input_schema = OrdinanceResolutionInput
    output_schema = OrdinanceResolutionOut
    base_path = "/api/ordinance-resolutions/"
    search_fields = ("title", "number", "description", "sponsor")
    filter_fields = {"type": "type", "status": "status"}
    file_fields = (
        FileField("file_path", "ordinance-resolutions", ("pdf", "doc", "docx"), max_kb=10240),
    )
    unique_fields = ("number",)
    toggles = ("is_featured", "is_active")

    def apply_filter(self, query, name, value):
        if name == "category":
            if value not in self.options.values("category"):
                return query.filter(false())
            # categories is a JSON list; match the quoted element.
            return query.filter(cast(OrdinanceResolution.categories, String).like(f'%"{value}"%'))
        return super().apply_filter(query, name, value)

    def order(self, query):
        return query.order_by(OrdinanceResolution.date_approved.desc(), OrdinanceResolution.id.desc())

    def store_file(self, uow, spec, item, record):
        name = f"{slugify(record.title)}-{int(time.time())}-{uuid.uuid4().hex[:8]}"
        if item.extension:
            name = f"{name}.{item.extension}"
        return uow.store(item, spec.directory, name=name)

    def on_file_stored(self, record, spec, item):
        record.file_size = item.size
        record.file_type = item.extension

    def on_file_cleared(self, record, spec):
        record.file_size = None
        record.file_type = None

    def download(
        self, db: Session, user, record_id: int, ip_address: Optional[str] = None
    ) -> Tuple[OrdinanceResolution, Iterator[bytes], str]:
        """Open the stored file as ``<number>.<ext>`` and log the download."""
        ensure_authorized(user, self.permission)
        record = self.find(db, record_id)
        if not record.file_path:
            raise ResourceNotFoundError(f"{self.label} {record_id} has no file")
        stream = storage_service.stream(record.file_path)

        with unit_of_work(db):
            self.log(db, user, record, "downloaded", ip_address)

        extension = record.file_type or record.file_path.rsplit(".", 1)[-1]
        return record, stream, f"{record.number}.{extension}"


ordinance_service = OrdinanceService()
