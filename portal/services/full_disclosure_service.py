"""Full disclosure service: downloadable public documents."""

from collections import OrderedDict
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session

from portal.core.exceptions import ResourceNotFoundError
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.transaction import unit_of_work
from portal.models.full_disclosure import FullDisclosure
from portal.schemas.schemas import FullDisclosureInput, FullDisclosureOut
from portal.services.resource_service import DOCUMENT_TYPES, FileField, ResourceService
from portal.services.storage_service import storage_service


def human_size(num_bytes: int) -> str:
    """Format a byte count as ``"1.5 MB"``."""
    size = float(max(num_bytes, 0))
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{round(size, 2):g} {unit}"
        size /= 1024
    return f"{num_bytes} B"


class FullDisclosureService(ResourceService):
    model = FullDisclosure
    permission = PermissionKey.FULL_DISCLOSURE
    input_schema = FullDisclosureInput
    output_schema = FullDisclosureOut
    base_path = "/api/full-disclosure/"
    search_fields = ("title", "description")
    filter_fields = {"category": "category"}
    file_fields = (
        FileField("file_path", "full-disclosure", DOCUMENT_TYPES, max_kb=10240, required_on_create=True),
    )
    toggles = ()
    page_size = 20

    def apply_filter(self, query, name, value):
        if name == "status":
            if value in ("published", "unpublished"):
                return query.filter(FullDisclosure.is_published.is_(value == "published"))
            return query
        return super().apply_filter(query, name, value)

    def on_file_stored(self, record, spec, item):
        record.file_name = item.filename
        record.file_size = human_size(item.size)
        record.file_type = item.extension

    def grouped(self, db: Session, user) -> Dict[str, List[FullDisclosureOut]]:
        """Published documents grouped by category, in option-table order."""
        ensure_authorized(user, self.permission)
        rows = (
            self.base_query(db)
            .filter(FullDisclosure.is_published.is_(True))
            .order_by(FullDisclosure.created_at.desc(), FullDisclosure.id.desc())
            .all()
        )
        groups: Dict[str, List[FullDisclosureOut]] = OrderedDict(
            (category, []) for category in self.options.values("category")
        )
        for row in rows:
            groups.setdefault(row.category, []).append(self.to_out(row))
        return groups

    def download(
        self, db: Session, user, record_id: int, ip_address: Optional[str] = None
    ) -> Tuple[FullDisclosure, Iterator[bytes], str]:
        """Open the stored file and log the download."""
        ensure_authorized(user, self.permission)
        record = self.find(db, record_id)
        if not record.file_path:
            raise ResourceNotFoundError(f"{self.label} {record_id} has no file")
        stream = storage_service.stream(record.file_path)

        with unit_of_work(db):
            self.log(db, user, record, "downloaded", ip_address)

        filename = record.file_name or record.file_path.rsplit("/", 1)[-1]
        return record, stream, filename


full_disclosure_service = FullDisclosureService()
