"""Sangguniang Bayan member directory service."""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from portal.core.exceptions import ValidationError
from portal.core.permissions import PermissionKey, ensure_authorized
from portal.db.transaction import unit_of_work
from portal.models.sangguniang_bayan_member import SangguniangBayanMember
from portal.schemas.schemas import SangguniangBayanMemberInput, SangguniangBayanMemberOut
from portal.services.resource_service import FileField, IMAGE_TYPES, ResourceService

Member = SangguniangBayanMember


class SangguniangBayanService(ResourceService):
    model = SangguniangBayanMember
    permission = PermissionKey.SANGGUNIANG_BAYAN
    input_schema = SangguniangBayanMemberInput
    output_schema = SangguniangBayanMemberOut
    base_path = "/api/sangguniang-bayan/"
    search_fields = ("name", "position", "bio", "district")
    filter_fields = {"position_type": "position_type"}
    file_fields = (FileField("photo", "sangguniang-bayan", IMAGE_TYPES, max_kb=2048),)
    toggles = ("is_featured", "is_active")
    owner_attr = None
    title_attr = "name"

    def apply_filter(self, query, name, value):
        if name == "status":
            if value in ("active", "inactive"):
                return query.filter(Member.is_active.is_(value == "active"))
            return query
        return super().apply_filter(query, name, value)

    def order(self, query):
        return query.order_by(Member.order.asc(), Member.name.asc())

    def assign(self, db, record, values, user, creating):
        super().assign(db, record, values, user, creating)
        if record.order is None:
            highest = db.query(func.max(Member.order)).scalar()
            record.order = 0 if highest is None else highest + 1

    def update_order(self, db: Session, user, record_id: int, new_order: int, ip_address: Optional[str] = None):
        """Move a member to ``new_order`` and shift the members in between."""
        ensure_authorized(user, self.permission)
        if new_order < 0:
            raise ValidationError.for_field("order", "The order must be at least 0.", {"order": new_order})
        record = self.find(db, record_id)
        old_order = record.order

        with unit_of_work(db):
            if new_order < old_order:
                db.query(Member).filter(
                    Member.id != record.id,
                    Member.order >= new_order,
                    Member.order < old_order,
                ).update({Member.order: Member.order + 1}, synchronize_session=False)
            elif new_order > old_order:
                db.query(Member).filter(
                    Member.id != record.id,
                    Member.order > old_order,
                    Member.order <= new_order,
                ).update({Member.order: Member.order - 1}, synchronize_session=False)
            record.order = new_order
            self.log(db, user, record, "order_updated", ip_address, previous=old_order, order=new_order)

        db.refresh(record)
        return record


sangguniang_bayan_service = SangguniangBayanService()
