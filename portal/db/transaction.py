"""Unit of work: one database transaction plus its file side effects.

Usage::

    with unit_of_work(db) as uow:
        record.image_path = uow.store(pending, "news-images")
        uow.discard(old_path)
        db.add(record)

On success the session is committed and only then are discarded files
removed. On any exception the session is rolled back, files stored inside
the block are removed, and the exception propagates.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from sqlalchemy.orm import Session

from portal.core.exceptions import StorageError
from portal.services.storage_service import PendingFile, StorageService, storage_service

logger = logging.getLogger("municipal_portal")


class UnitOfWork:
    """Tracks files written and superseded during one mutation."""

    def __init__(self, db: Session, storage: StorageService):
        self.db = db
        self.storage = storage
        self.stored: List[str] = []
        self.superseded: List[str] = []

    def store(self, file: PendingFile, directory: str, name: Optional[str] = None) -> str:
        path = self.storage.store(file, directory, name=name)
        self.stored.append(path)
        return path

    def discard(self, *paths: Optional[str]) -> None:
        """Schedule ``paths`` for deletion once the transaction commits.

        A path this unit of work has just stored is never scheduled.
        """
        self.superseded.extend(p for p in paths if p and p not in self.stored)

    def discard_all(self, paths: Optional[Iterable[str]]) -> None:
        self.discard(*(paths or []))

    def _remove(self, paths: List[str], reason: str) -> None:
        for path in paths:
            try:
                self.storage.delete(path)
            except StorageError as e:
                # The record change already stands; the file is left behind.
                logger.warning("Could not delete %s file %s: %s", reason, path, e.message)

    def rollback_files(self) -> None:
        self._remove(self.stored, "newly stored")
        self.stored = []

    def release_superseded(self) -> None:
        self._remove(self.superseded, "superseded")
        self.superseded = []


@contextmanager
def unit_of_work(db: Session, storage: Optional[StorageService] = None) -> Iterator[UnitOfWork]:
    uow = UnitOfWork(db, storage or storage_service)
    try:
        yield uow
        db.commit()
    except Exception:
        db.rollback()
        uow.rollback_files()
        raise
    uow.release_superseded()
