"""Resource service: shared CRUD flow for every content category.

A category subclasses :class:`ResourceService` and declares its model,
input/output schemas, searchable columns, equality filters and file fields.
The base class runs every operation the same way:

1. authorization gate for the category's permission key
2. validation of fields, uploaded files and business rules
3. one unit of work: store new files, write the row, log the activity
4. after commit, delete files the row no longer references
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from portal.core.config import settings
from portal.core.exceptions import ResourceNotFoundError, ValidationError
from portal.core.options import CATEGORY_OPTIONS, CategoryOptions
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.transaction import UnitOfWork, unit_of_work
from portal.services.activity_service import activity_service
from portal.services.pagination import paginate
from portal.services.storage_service import PendingFile

logger = logging.getLogger("municipal_portal")

IMAGE_TYPES = ("jpeg", "jpg", "png", "gif", "webp")
DOCUMENT_TYPES = ("pdf", "doc", "docx", "xls", "xlsx")

ACTION_VERBS = {
    "created": "Created",
    "updated": "Updated",
    "deleted": "Deleted",
    "featured_toggled": "Toggled featured status of",
    "status_toggled": "Toggled active status of",
    "status_updated": "Updated status of",
    "order_updated": "Updated display order of",
    "downloaded": "Downloaded",
    "restored": "Restored",
    "purged": "Permanently deleted",
}

TOGGLE_WORDS = {
    "is_featured": ("featured", "unfeatured", "featured_toggled"),
    "is_active": ("activated", "deactivated", "status_toggled"),
}


@dataclass(frozen=True)
class FileField:
    """A model column that holds one stored path, or a list of them."""

    attribute: str
    directory: str
    extensions: Tuple[str, ...] = IMAGE_TYPES
    max_kb: int = 5120
    multiple: bool = False
    required_on_create: bool = False


def field_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    """Flatten pydantic errors into ``{field: [messages]}``."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "non_field_errors"
        errors.setdefault(field, []).append(err["msg"])
    return errors


def merge_errors(target: Dict[str, List[str]], extra: Dict[str, List[str]]) -> None:
    for field, messages in extra.items():
        target.setdefault(field, []).extend(messages)


class ResourceService:
    """Base class for the per-category content services."""

    model = None
    permission: PermissionKey = None
    input_schema = None
    output_schema = None
    base_path = "/api"
    search_fields: Tuple[str, ...] = ()
    filter_fields: Dict[str, str] = {}
    file_fields: Tuple[FileField, ...] = ()
    unique_fields: Tuple[str, ...] = ()
    toggles: Tuple[str, ...] = ("is_featured",)
    soft_delete = False
    owner_attr: Optional[str] = "user_id"
    title_attr = "title"
    page_size: Optional[int] = None

    # ---- metadata ----

    @property
    def options(self) -> CategoryOptions:
        return CATEGORY_OPTIONS[self.permission]

    @property
    def label(self) -> str:
        return self.options.label

    def title_of(self, record) -> str:
        return str(getattr(record, self.title_attr, "") or f"#{record.id}")

    def to_out(self, record) -> BaseModel:
        return self.output_schema.model_validate(record)

    # ---- queries ----

    def base_query(self, db: Session) -> Query:
        query = db.query(self.model)
        if self.soft_delete:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def apply_search(self, query: Query, term: str) -> Query:
        pattern = f"%{term}%"
        return query.filter(or_(*[getattr(self.model, f).ilike(pattern) for f in self.search_fields]))

    def apply_filter(self, query: Query, name: str, value: Any) -> Query:
        """Equality filter for ``name``; unknown names are ignored."""
        column = self.filter_fields.get(name)
        if column is None:
            return query
        return query.filter(getattr(self.model, column) == value)

    def order(self, query: Query) -> Query:
        return query.order_by(self.model.created_at.desc(), self.model.id.desc())

    def find(self, db: Session, record_id: int):
        record = self.base_query(db).filter(self.model.id == record_id).first()
        if record is None:
            raise ResourceNotFoundError(f"{self.label} {record_id} not found")
        return record

    def list(
        self,
        db: Session,
        user,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Filtered, paginated listing. Missing or empty filters are no-ops."""
        ensure_authorized(user, self.permission)
        filters = filters or {}
        page_size = page_size or self.page_size or settings.DEFAULT_PAGE_SIZE

        query = self.base_query(db)
        search = filters.get("search")
        if search and self.search_fields:
            query = self.apply_search(query, search)
        for name, value in filters.items():
            if name != "search" and value not in (None, ""):
                query = self.apply_filter(query, name, value)

        return paginate(
            self.order(query), page, page_size, filters, self.base_path,
            transform=self.to_out,
        )

    def get(self, db: Session, user, record_id: int):
        ensure_authorized(user, self.permission)
        return self.find(db, record_id)

    # ---- validation ----

    def current_values(self, record) -> Dict[str, Any]:
        return {
            name: getattr(record, name)
            for name in self.input_schema.model_fields
            if hasattr(record, name)
        }

    def read_files(self, files: Dict[str, Iterable], record=None):
        pending: Dict[str, List[PendingFile]] = {}
        errors: Dict[str, List[str]] = {}
        for spec in self.file_fields:
            uploads = [u for u in files.get(spec.attribute) or [] if u is not None and u.filename]
            if len(uploads) > 1 and not spec.multiple:
                errors.setdefault(spec.attribute, []).append("Only one file may be uploaded.")
                uploads = uploads[:1]
            if not uploads and spec.required_on_create and record is None:
                errors.setdefault(spec.attribute, []).append("A file is required.")

            items = []
            for upload in uploads:
                item = PendingFile.from_upload(upload)
                if item.extension not in spec.extensions:
                    errors.setdefault(spec.attribute, []).append(
                        f"{item.filename} must be a file of type: {', '.join(spec.extensions)}."
                    )
                elif item.size > spec.max_kb * 1024:
                    errors.setdefault(spec.attribute, []).append(
                        f"{item.filename} may not be greater than {spec.max_kb} kilobytes."
                    )
                else:
                    items.append(item)
            pending[spec.attribute] = items
        return pending, errors

    def check_unique(self, db: Session, values: BaseModel, record=None) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        for name in self.unique_fields:
            # Trashed rows still hold the unique value.
            query = db.query(self.model.id).filter(getattr(self.model, name) == getattr(values, name))
            if record is not None:
                query = query.filter(self.model.id != record.id)
            if query.first() is not None:
                label = name.replace("_", " ")
                errors[name] = [f"The {label} has already been taken."]
        return errors

    def check_rules(self, db: Session, values: BaseModel, record=None) -> Dict[str, List[str]]:
        """Cross-field and business rules. Returns field errors."""
        return self.check_unique(db, values, record)

    def prepare(self, db: Session, data: Dict[str, Any], files, record=None, echo=None):
        """Validate fields, files and rules together; raise one ValidationError."""
        errors: Dict[str, List[str]] = {}
        values = None
        try:
            values = self.input_schema.model_validate(data)
        except PydanticValidationError as e:
            merge_errors(errors, field_errors(e))

        pending, file_errors = self.read_files(files or {}, record)
        merge_errors(errors, file_errors)

        if values is not None:
            merge_errors(errors, self.check_rules(db, values, record))

        if errors:
            raise ValidationError(errors, echo if echo is not None else data)
        return values, pending

    # ---- persistence hooks ----

    def assign(self, db: Session, record, values: BaseModel, user, creating: bool) -> None:
        for name, value in values.model_dump().items():
            if hasattr(record, name):
                setattr(record, name, value)
        if creating and self.owner_attr:
            setattr(record, self.owner_attr, getattr(user, "id", None))

    def store_file(self, uow: UnitOfWork, spec: FileField, item: PendingFile, record) -> str:
        return uow.store(item, spec.directory)

    def on_file_stored(self, record, spec: FileField, item: PendingFile) -> None:
        pass

    def on_file_cleared(self, record, spec: FileField) -> None:
        pass

    def attach_files(self, uow: UnitOfWork, record, pending, clear: Iterable[str] = ()) -> None:
        clear = set(clear)
        for spec in self.file_fields:
            items = pending.get(spec.attribute) or []
            current = getattr(record, spec.attribute)
            if items:
                paths = [self.store_file(uow, spec, item, record) for item in items]
                if spec.multiple:
                    uow.discard_all(current)
                    setattr(record, spec.attribute, paths)
                else:
                    uow.discard(current)
                    setattr(record, spec.attribute, paths[0])
                self.on_file_stored(record, spec, items[0])
            elif spec.attribute in clear and current:
                if spec.multiple:
                    uow.discard_all(current)
                else:
                    uow.discard(current)
                setattr(record, spec.attribute, None)
                self.on_file_cleared(record, spec)

    def file_paths(self, record) -> List[str]:
        paths: List[str] = []
        for spec in self.file_fields:
            current = getattr(record, spec.attribute)
            if spec.multiple:
                paths.extend(current or [])
            elif current:
                paths.append(current)
        return paths

    def log(self, db: Session, user, record, action: str, ip_address: Optional[str] = None, **extra) -> None:
        title = self.title_of(record)
        verb = ACTION_VERBS.get(action, action.replace("_", " ").capitalize())
        activity_service.record(
            db, user,
            description=f"{verb} {self.label.lower()}: {title}",
            type=self.permission.value,
            action=action,
            subject_id=record.id,
            ip_address=ip_address,
            title=title,
            **extra,
        )

    def integrity_error(self, exc: IntegrityError, data: Dict[str, Any]) -> ValidationError:
        logger.warning("Integrity error saving %s: %s", self.label, exc.orig)
        errors = {name: ["The value conflicts with an existing record."] for name in self.unique_fields}
        return ValidationError(errors or {"non_field_errors": ["The record conflicts with an existing record."]}, data)

    # ---- mutations ----

    def create(self, db: Session, user, data: Dict[str, Any], files=None, ip_address: Optional[str] = None):
        """Validate and persist a new record with its files in one unit of work."""
        ensure_authorized(user, self.permission)
        values, pending = self.prepare(db, data, files)

        record = self.model()
        try:
            with unit_of_work(db) as uow:
                self.assign(db, record, values, user, creating=True)
                self.attach_files(uow, record, pending)
                db.add(record)
                db.flush()
                self.log(db, user, record, "created", ip_address)
        except IntegrityError as e:
            raise self.integrity_error(e, data)

        db.refresh(record)
        logger.info("%s %s created by user %s", self.label, record.id, getattr(user, "id", None))
        return record

    def update(
        self,
        db: Session,
        user,
        record_id: int,
        data: Dict[str, Any],
        files=None,
        remove: Iterable[str] = (),
        ip_address: Optional[str] = None,
    ):
        """Apply ``data`` over the stored values.

        Fields absent from ``data`` keep their current value. A new upload
        for a file field replaces the stored file; names in ``remove`` clear
        their file field. Replaced files are deleted only after commit.
        """
        ensure_authorized(user, self.permission)
        record = self.find(db, record_id)
        merged = {**self.current_values(record), **data}
        values, pending = self.prepare(db, merged, files, record=record, echo=data)

        try:
            with unit_of_work(db) as uow:
                self.assign(db, record, values, user, creating=False)
                self.attach_files(uow, record, pending, clear=remove)
                db.flush()
                self.log(db, user, record, "updated", ip_address)
        except IntegrityError as e:
            raise self.integrity_error(e, data)

        db.refresh(record)
        return record

    def delete(self, db: Session, user, record_id: int, ip_address: Optional[str] = None) -> None:
        """Remove the record, then its files.

        Soft-deleted rows go to the trash with their file references cleared.
        """
        ensure_authorized(user, self.permission)
        record = self.find(db, record_id)

        with unit_of_work(db) as uow:
            uow.discard(*self.file_paths(record))
            self.log(db, user, record, "deleted", ip_address)
            if self.soft_delete:
                for spec in self.file_fields:
                    setattr(record, spec.attribute, None)
                record.deleted_at = datetime.utcnow()
            else:
                db.delete(record)

        logger.info("%s %s deleted by user %s", self.label, record_id, getattr(user, "id", None))

    def toggle(self, db: Session, user, record_id: int, field: str, ip_address: Optional[str] = None) -> Dict[str, Any]:
        """Flip one boolean flag and describe the new state."""
        ensure_authorized(user, self.permission)
        if field not in self.toggles:
            raise ResourceNotFoundError(f"{self.label} has no '{field}' toggle")
        record = self.find(db, record_id)

        on_word, off_word, action = TOGGLE_WORDS[field]
        with unit_of_work(db):
            value = not getattr(record, field)
            setattr(record, field, value)
            self.log(db, user, record, action, ip_address, value=value)

        return {
            "id": record.id,
            "field": field,
            "value": value,
            "message": f"{self.label} {on_word if value else off_word} successfully.",
        }

    def toggle_featured(self, db: Session, user, record_id: int, ip_address: Optional[str] = None):
        return self.toggle(db, user, record_id, "is_featured", ip_address)

    def toggle_status(self, db: Session, user, record_id: int, ip_address: Optional[str] = None):
        return self.toggle(db, user, record_id, "is_active", ip_address)
