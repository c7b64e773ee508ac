"""News service tests: create, update, delete, toggles, filters and trash."""

from unittest import mock

import pytest

from portal.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from portal.models.activity import Activity
from portal.models.news import News
from portal.services.news_service import news_service, slugify
from portal.services.trash_service import trash_service


def article(**overrides):
    data = {
        "title": "Town Fiesta 2025",
        "content": "Join the celebration at the plaza.",
        "category": "Event",
        "status": "published",
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_create_with_image(self, db, storage, news_editor, upload):
        """The stored image is retrievable at the path the record holds."""
        record = news_service.create(db, news_editor, article(), {"image_path": [upload()]})

        assert record.id is not None
        assert record.slug == "town-fiesta-2025"
        assert record.author_id == news_editor.id
        assert record.published_at is not None
        assert record.image_path.startswith("news-images/")
        assert storage.exists(record.image_path)

    def test_create_logs_activity(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article(), ip_address="10.0.0.5")
        entry = db.query(Activity).one()
        assert entry.type == "news"
        assert entry.user_id == news_editor.id
        assert entry.ip_address == "10.0.0.5"
        assert f'"id": {record.id}' in entry.metadata_json

    def test_invalid_fields_store_nothing(self, db, storage, news_editor, upload):
        """A validation failure leaves no row and no file behind."""
        with pytest.raises(ValidationError) as exc:
            news_service.create(db, news_editor, article(title="", category="Gossip"), {"image_path": [upload()]})

        assert set(exc.value.errors) == {"title", "category"}
        assert exc.value.input["category"] == "Gossip"
        assert db.query(News).count() == 0
        assert not any(storage.root.rglob("*.jpg"))

    def test_wrong_file_type_rejected(self, db, storage, news_editor, upload):
        with pytest.raises(ValidationError) as exc:
            news_service.create(
                db, news_editor, article(),
                {"image_path": [upload("notes.txt", b"hello", "text/plain")]},
            )
        assert "image_path" in exc.value.errors

    def test_failure_after_store_removes_file(self, db, storage, news_editor, upload):
        """A failure inside the unit of work rolls back the stored image."""
        with mock.patch.object(news_service, "log", side_effect=RuntimeError("log table down")):
            with pytest.raises(RuntimeError):
                news_service.create(db, news_editor, article(), {"image_path": [upload()]})

        assert db.query(News).count() == 0
        assert not any(storage.root.rglob("*.jpg"))

    def test_denied_before_validation(self, db, storage, outsider):
        """Users without the news permission get 403, not validation errors."""
        with pytest.raises(AuthorizationError):
            news_service.create(db, outsider, {"title": ""})

    def test_slug_is_unique(self, db, storage, news_editor):
        first = news_service.create(db, news_editor, article())
        second = news_service.create(db, news_editor, article())
        assert first.slug != second.slug
        assert second.slug == f"{slugify(first.title)}-2"


class TestUpdate:

    def test_replacing_image_removes_old_file(self, db, storage, news_editor, upload):
        record = news_service.create(db, news_editor, article(), {"image_path": [upload()]})
        old_path = record.image_path

        updated = news_service.update(
            db, news_editor, record.id, {}, {"image_path": [upload("new.png", b"\x89PNG new", "image/png")]},
        )

        assert updated.image_path != old_path
        assert updated.image_path.endswith(".png")
        assert storage.exists(updated.image_path)
        assert not storage.exists(old_path)

    def test_partial_update_keeps_other_fields(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article(excerpt="Short"))
        updated = news_service.update(db, news_editor, record.id, {"content": "New body"})
        assert updated.content == "New body"
        assert updated.excerpt == "Short"
        assert updated.title == "Town Fiesta 2025"

    def test_remove_image(self, db, storage, news_editor, upload):
        record = news_service.create(db, news_editor, article(), {"image_path": [upload()]})
        old_path = record.image_path
        updated = news_service.update(db, news_editor, record.id, {}, remove=["image_path"])
        assert updated.image_path is None
        assert not storage.exists(old_path)

    def test_invalid_update_keeps_old_file(self, db, storage, news_editor, upload):
        record = news_service.create(db, news_editor, article(), {"image_path": [upload()]})
        with pytest.raises(ValidationError):
            news_service.update(db, news_editor, record.id, {"status": "viral"}, {"image_path": [upload()]})
        db.refresh(record)
        assert storage.exists(record.image_path)
        assert len(list(storage.root.rglob("*.jpg"))) == 1

    def test_update_status(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article(status="draft"))
        assert record.published_at is None
        updated = news_service.update_status(db, news_editor, record.id, "published")
        assert updated.status == "published"
        assert updated.published_at is not None

    def test_update_status_rejects_unknown(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        with pytest.raises(ValidationError) as exc:
            news_service.update_status(db, news_editor, record.id, "viral")
        assert "status" in exc.value.errors


class TestToggleAndDelete:

    def test_toggle_featured_twice_restores_value(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        first = news_service.toggle_featured(db, news_editor, record.id)
        second = news_service.toggle_featured(db, news_editor, record.id)

        assert first["value"] is True
        assert first["message"] == "Article featured successfully."
        assert second["value"] is False
        assert second["message"] == "Article unfeatured successfully."

    def test_news_has_no_status_toggle(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        with pytest.raises(ResourceNotFoundError):
            news_service.toggle_status(db, news_editor, record.id)

    def test_delete_moves_to_trash_and_removes_image(self, db, storage, news_editor, upload):
        record = news_service.create(db, news_editor, article(), {"image_path": [upload()]})
        path = record.image_path

        news_service.delete(db, news_editor, record.id)

        assert not storage.exists(path)
        with pytest.raises(ResourceNotFoundError):
            news_service.get(db, news_editor, record.id)
        assert news_service.list(db, news_editor)["total"] == 0
        assert trash_service.list(db, news_editor)["total"] == 1


class TestListing:

    def test_category_filter_exact_subset(self, db, storage, news_editor):
        news_service.create(db, news_editor, article(title="A", category="Event"))
        news_service.create(db, news_editor, article(title="B", category="Finance"))
        news_service.create(db, news_editor, article(title="C", category="Event"))

        page = news_service.list(db, news_editor, {"category": "Event"})

        assert {item.title for item in page["items"]} == {"A", "C"}
        assert page["filters"] == {"category": "Event"}
        assert "category=Event" in page["links"]["first"]

    def test_search(self, db, storage, news_editor):
        news_service.create(db, news_editor, article(title="Road closure", content="Detour via bypass"))
        news_service.create(db, news_editor, article(title="Fiesta"))
        page = news_service.list(db, news_editor, {"search": "bypass"})
        assert [item.title for item in page["items"]] == ["Road closure"]

    def test_list_denied_for_outsider(self, db, outsider):
        with pytest.raises(AuthorizationError):
            news_service.list(db, outsider)


class TestTrash:

    def test_restore(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        news_service.delete(db, news_editor, record.id)
        restored = trash_service.restore(db, news_editor, record.id)
        assert restored.deleted_at is None
        assert news_service.get(db, news_editor, record.id).id == record.id

    def test_purge(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        news_service.delete(db, news_editor, record.id)
        trash_service.purge(db, news_editor, record.id)
        assert db.query(News).count() == 0

    def test_purge_live_article_not_found(self, db, storage, news_editor):
        record = news_service.create(db, news_editor, article())
        with pytest.raises(ResourceNotFoundError):
            trash_service.purge(db, news_editor, record.id)

    def test_trash_denied_without_news(self, db, outsider):
        with pytest.raises(AuthorizationError):
            trash_service.list(db, outsider)
