"""Tests for the bids, tourism, awards, full disclosure, ordinance and council services."""

from datetime import date
from unittest import mock

import pytest

from portal.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from portal.models.awards_recognition import AwardsRecognition
from portal.models.ordinance_resolution import OrdinanceResolution
from portal.services.awards_service import awards_service
from portal.services.bids_award_service import bids_award_service
from portal.services.full_disclosure_service import full_disclosure_service, human_size
from portal.services.ordinance_service import ordinance_service
from portal.services.sangguniang_bayan_service import sangguniang_bayan_service
from portal.services.tourism_service import tourism_service


@pytest.fixture
def editor(make_user):
    return make_user(permissions=[
        "bids_awards", "tourism", "awards_recognition", "full_disclosure",
        "ordinance_resolutions", "sangguniang_bayan",
    ])


def pdf(upload, name="doc.pdf"):
    return upload(name, b"%PDF-1.4 test document", "application/pdf")


def bid(**overrides):
    data = {
        "title": "Supply of Office Equipment",
        "description": "Procurement of computers for the municipal hall.",
        "reference_number": "BAC-2025-001",
        "bid_type": "open_tender",
        "bid_closing_date": "2025-03-01",
    }
    data.update(overrides)
    return data


def award(**overrides):
    data = {
        "title": "Seal of Good Local Governance",
        "description": "Awarded for excellence in governance.",
        "awarding_body": "DILG",
        "category": "good_governance",
        "award_date": "2024-11-20",
        "award_type": "national",
        "scope": "national",
        "recipient_type": "organization",
    }
    data.update(overrides)
    return data


def ordinance(**overrides):
    data = {
        "title": "Revenue Code of 2025",
        "number": "ORD-2025-001",
        "type": "ordinance",
        "date_approved": "2025-01-15",
        "categories": ["revenue"],
    }
    data.update(overrides)
    return data


def member(name, **overrides):
    data = {"name": name, "position": "SB Member"}
    data.update(overrides)
    return data


class TestBidsAwards:

    def test_create_with_documents(self, db, storage, editor, upload):
        record = bids_award_service.create(
            db, editor, bid(), {"documents": [pdf(upload, "a.pdf"), pdf(upload, "b.pdf")]},
        )
        assert len(record.documents) == 2
        assert all(storage.exists(path) for path in record.documents)

    def test_award_date_required_when_awarded(self, db, storage, editor):
        with pytest.raises(ValidationError) as exc:
            bids_award_service.create(db, editor, bid(status="awarded"))
        assert list(exc.value.errors) == ["award_date"]

    def test_duplicate_reference_number(self, db, storage, editor):
        bids_award_service.create(db, editor, bid())
        with pytest.raises(ValidationError) as exc:
            bids_award_service.create(db, editor, bid(title="Another"))
        assert "reference_number" in exc.value.errors

    def test_status_accepts_any_option(self, db, storage, editor):
        """There is no enforced status order."""
        record = bids_award_service.create(db, editor, bid(status="cancelled"))
        updated = bids_award_service.update(db, editor, record.id, {"status": "draft"})
        assert updated.status == "draft"

    def test_new_documents_replace_old(self, db, storage, editor, upload):
        record = bids_award_service.create(db, editor, bid(), {"documents": [pdf(upload)]})
        old = list(record.documents)
        updated = bids_award_service.update(db, editor, record.id, {}, {"documents": [pdf(upload, "new.pdf")]})
        assert updated.documents != old
        assert not storage.exists(old[0])


class TestTourism:

    def test_status_filters(self, db, storage, editor):
        base = {"description": "Trek", "location": "Mt. Apo", "category": "mountain"}
        tourism_service.create(db, editor, {**base, "title": "Active"})
        tourism_service.create(db, editor, {**base, "title": "Featured", "is_featured": True})
        tourism_service.create(db, editor, {**base, "title": "Hidden", "is_active": False})

        featured = tourism_service.list(db, editor, {"status": "featured"})
        active = tourism_service.list(db, editor, {"status": "active"})

        assert [p.title for p in featured["items"]] == ["Featured"]
        assert {p.title for p in active["items"]} == {"Active", "Featured"}

    def test_toggle_status_message(self, db, storage, editor):
        record = tourism_service.create(
            db, editor, {"title": "Beach", "description": "Sun", "location": "Coast", "category": "beach"},
        )
        result = tourism_service.toggle_status(db, editor, record.id)
        assert result == {
            "id": record.id,
            "field": "is_active",
            "value": False,
            "message": "Tourism package deactivated successfully.",
        }


class TestAwards:

    def test_delete_removes_every_file(self, db, storage, editor, upload):
        """All files of a multi-file record are gone after delete."""
        record = awards_service.create(
            db, editor, award(),
            {
                "featured_image": [upload("cover.jpg")],
                "gallery_images": [upload("g1.jpg"), upload("g2.png", b"png", "image/png")],
                "supporting_documents": [pdf(upload)],
            },
        )
        paths = [record.featured_image] + record.gallery_images + record.supporting_documents
        assert len(paths) == 4
        assert all(storage.exists(p) for p in paths)

        awards_service.delete(db, editor, record.id)

        assert not any(storage.exists(p) for p in paths)
        with pytest.raises(ResourceNotFoundError):
            awards_service.get(db, editor, record.id)
        trashed = db.query(AwardsRecognition).one()
        assert trashed.deleted_at is not None
        assert trashed.gallery_images is None

    def test_single_file_field_rejects_many(self, db, storage, editor, upload):
        with pytest.raises(ValidationError) as exc:
            awards_service.create(
                db, editor, award(), {"featured_image": [upload("a.jpg"), upload("b.jpg")]},
            )
        assert "featured_image" in exc.value.errors


class TestFullDisclosure:

    def test_file_required_on_create(self, db, storage, editor):
        with pytest.raises(ValidationError) as exc:
            full_disclosure_service.create(db, editor, {"title": "Budget", "category": "approved_budget"})
        assert exc.value.errors["file_path"] == ["A file is required."]

    def test_create_records_file_metadata(self, db, storage, editor, upload):
        record = full_disclosure_service.create(
            db, editor, {"title": "Budget", "category": "approved_budget"},
            {"file_path": [pdf(upload, "budget-2025.pdf")]},
        )
        assert record.file_name == "budget-2025.pdf"
        assert record.file_type == "pdf"
        assert record.file_size.endswith("B")

    def test_update_without_file_keeps_file(self, db, storage, editor, upload):
        record = full_disclosure_service.create(
            db, editor, {"title": "Budget", "category": "approved_budget"}, {"file_path": [pdf(upload)]},
        )
        updated = full_disclosure_service.update(db, editor, record.id, {"title": "Budget 2025"})
        assert updated.file_path == record.file_path
        assert storage.exists(updated.file_path)

    def test_download(self, db, storage, editor, upload):
        record = full_disclosure_service.create(
            db, editor, {"title": "Audit", "category": "audit_report"}, {"file_path": [pdf(upload, "audit.pdf")]},
        )
        _, stream, filename = full_disclosure_service.download(db, editor, record.id)
        assert filename == "audit.pdf"
        assert b"".join(stream).startswith(b"%PDF")

    def test_grouped_by_category(self, db, storage, editor, upload):
        full_disclosure_service.create(
            db, editor, {"title": "Audit", "category": "audit_report"}, {"file_path": [pdf(upload)]},
        )
        full_disclosure_service.create(
            db, editor, {"title": "Draft", "category": "audit_report", "is_published": False},
            {"file_path": [pdf(upload)]},
        )
        groups = full_disclosure_service.grouped(db, editor)
        assert list(groups)[0] == "approved_budget"
        assert [d.title for d in groups["audit_report"]] == ["Audit"]

    def test_human_size(self):
        assert human_size(512) == "512 B"
        assert human_size(1536) == "1.5 KB"


class TestOrdinances:

    def test_duplicate_number(self, db, storage, editor):
        ordinance_service.create(db, editor, ordinance())
        with pytest.raises(ValidationError) as exc:
            ordinance_service.create(db, editor, ordinance(title="Other"))
        assert "number" in exc.value.errors
        assert db.query(OrdinanceResolution).count() == 1

    def test_category_filter(self, db, storage, editor):
        ordinance_service.create(db, editor, ordinance())
        ordinance_service.create(db, editor, ordinance(number="ORD-2025-002", categories=["traffic"]))
        page = ordinance_service.list(db, editor, {"category": "traffic"})
        assert [o.number for o in page["items"]] == ["ORD-2025-002"]

    @pytest.mark.parametrize("value", ["%", "_", "astrology"])
    def test_category_filter_outside_options_matches_nothing(self, db, storage, editor, value):
        """Wildcards and unknown categories are not treated as patterns."""
        ordinance_service.create(db, editor, ordinance())
        assert ordinance_service.list(db, editor, {"category": value})["total"] == 0

    def test_unknown_category_rejected(self, db, storage, editor):
        with pytest.raises(ValidationError) as exc:
            ordinance_service.create(db, editor, ordinance(categories=["astrology"]))
        assert "categories" in exc.value.errors

    def test_download_named_after_number(self, db, storage, editor, upload):
        record = ordinance_service.create(db, editor, ordinance(), {"file_path": [pdf(upload)]})
        assert record.file_path.startswith("ordinance-resolutions/revenue-code-of-2025-")
        assert record.file_type == "pdf"
        _, stream, filename = ordinance_service.download(db, editor, record.id)
        assert filename == "ORD-2025-001.pdf"
        assert b"".join(stream)

    def test_file_replaced_within_the_same_second(self, db, storage, editor, upload):
        """A replacement stored under an unchanged title and clock keeps its own file."""
        with mock.patch("portal.services.ordinance_service.time.time", return_value=1700000000):
            record = ordinance_service.create(db, editor, ordinance(), {"file_path": [pdf(upload, "a.pdf")]})
            old = record.file_path
            updated = ordinance_service.update(
                db, editor, record.id, {}, {"file_path": [upload("b.pdf", b"%PDF-1.4 second", "application/pdf")]},
            )

        assert updated.file_path != old
        assert not storage.exists(old)
        assert storage.exists(updated.file_path)
        _, stream, _ = ordinance_service.download(db, editor, record.id)
        assert b"".join(stream) == b"%PDF-1.4 second"

    def test_download_without_file(self, db, storage, editor):
        record = ordinance_service.create(db, editor, ordinance())
        with pytest.raises(ResourceNotFoundError):
            ordinance_service.download(db, editor, record.id)

    def test_ordered_by_date_approved(self, db, storage, editor):
        ordinance_service.create(db, editor, ordinance(number="OLD", date_approved="2020-01-01"))
        ordinance_service.create(db, editor, ordinance(number="NEW", date_approved=date(2025, 6, 1).isoformat()))
        page = ordinance_service.list(db, editor)
        assert [o.number for o in page["items"]] == ["NEW", "OLD"]


class TestSangguniangBayan:

    def test_new_members_appended(self, db, storage, editor):
        first = sangguniang_bayan_service.create(db, editor, member("Hon. A"))
        second = sangguniang_bayan_service.create(db, editor, member("Hon. B"))
        assert (first.order, second.order) == (0, 1)

    def test_update_order_shifts_others(self, db, storage, editor):
        a, b, c = (sangguniang_bayan_service.create(db, editor, member(n)) for n in ("A", "B", "C"))

        sangguniang_bayan_service.update_order(db, editor, c.id, 0)

        page = sangguniang_bayan_service.list(db, editor)
        assert [m.name for m in page["items"]] == ["C", "A", "B"]
        assert [m.order for m in page["items"]] == [0, 1, 2]

    def test_negative_order_rejected(self, db, storage, editor):
        record = sangguniang_bayan_service.create(db, editor, member("A"))
        with pytest.raises(ValidationError):
            sangguniang_bayan_service.update_order(db, editor, record.id, -1)

    def test_hard_delete(self, db, storage, editor, upload):
        record = sangguniang_bayan_service.create(db, editor, member("A"), {"photo": [upload()]})
        path = record.photo
        sangguniang_bayan_service.delete(db, editor, record.id)
        assert not storage.exists(path)
        assert sangguniang_bayan_service.list(db, editor)["total"] == 0


class TestGate:

    @pytest.mark.parametrize("service", [
        bids_award_service, tourism_service, awards_service, full_disclosure_service,
        ordinance_service, sangguniang_bayan_service,
    ])
    def test_news_editor_denied(self, db, news_editor, service):
        with pytest.raises(AuthorizationError):
            service.list(db, news_editor)
        with pytest.raises(AuthorizationError):
            service.create(db, news_editor, {})
