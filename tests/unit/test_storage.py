"""Storage backend and unit-of-work tests."""

import logging
from unittest import mock

import pytest

from portal.core.exceptions import ResourceNotFoundError, StorageError
from portal.db.transaction import unit_of_work
from portal.services.storage_service import LocalStorage, PendingFile, StorageService


@pytest.fixture
def service(tmp_path):
    return StorageService(LocalStorage(tmp_path))


def pending(name="report.pdf", data=b"%PDF-1.4 test"):
    return PendingFile(filename=name, content_type="application/pdf", data=data)


class TestLocalStorage:

    def test_store_keeps_extension(self, service):
        path = service.store(pending(), "documents")
        assert path.startswith("documents/")
        assert path.endswith(".pdf")
        assert service.exists(path)

    def test_store_with_explicit_name(self, service):
        path = service.store(pending(), "ordinances", name="ord-001.pdf")
        assert path == "ordinances/ord-001.pdf"

    def test_stream_returns_content(self, service):
        path = service.store(pending(data=b"x" * 100), "documents")
        assert b"".join(service.stream(path)) == b"x" * 100

    def test_stream_missing_raises_immediately(self, service):
        with pytest.raises(ResourceNotFoundError):
            service.stream("documents/missing.pdf")

    def test_delete_missing_is_noop(self, service):
        service.delete("documents/missing.pdf")

    def test_path_escape_rejected(self, service):
        with pytest.raises(StorageError):
            service.store(pending(), "../outside")

    def test_exists_empty_path(self, service):
        assert not service.exists(None)
        assert not service.exists("")


class TestUnitOfWork:

    def test_commit_then_release_superseded(self, db, service):
        """Superseded files are removed only after the commit succeeds."""
        old = service.store(pending(), "documents")
        with mock.patch.object(db, "commit", wraps=db.commit) as commit:
            with unit_of_work(db, service) as uow:
                new = uow.store(pending(), "documents")
                uow.discard(old)
                assert service.exists(old)
            commit.assert_called_once()
        assert not service.exists(old)
        assert service.exists(new)

    def test_failure_removes_new_files_and_keeps_old(self, db, service):
        old = service.store(pending(), "documents")
        with pytest.raises(RuntimeError):
            with unit_of_work(db, service) as uow:
                new = uow.store(pending(), "documents")
                uow.discard(old)
                raise RuntimeError("write failed")
        assert not service.exists(new)
        assert service.exists(old)

    def test_delete_failure_after_commit_is_logged(self, db, service, caplog):
        old = service.store(pending(), "documents")
        with mock.patch.object(service.backend, "delete", side_effect=StorageError("disk busy")):
            with caplog.at_level(logging.WARNING, logger="municipal_portal"):
                with unit_of_work(db, service) as uow:
                    uow.discard(old)
        assert "disk busy" in caplog.text
        assert service.exists(old)

    def test_discard_ignores_empty_paths(self, db, service):
        with unit_of_work(db, service) as uow:
            uow.discard(None, "")
            uow.discard_all(None)
            assert uow.superseded == []

    def test_overwritten_path_not_discarded(self, db, service):
        """Storing over the path being replaced leaves the new file in place."""
        old = service.store(pending(data=b"first"), "ordinances", name="ord-001.pdf")
        with unit_of_work(db, service) as uow:
            new = uow.store(pending(data=b"second"), "ordinances", name="ord-001.pdf")
            uow.discard(old)
            assert uow.superseded == []
        assert new == old
        assert b"".join(service.stream(new)) == b"second"
