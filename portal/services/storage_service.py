"""Storage service: stores uploaded files on local disk or in MinIO.

Files are addressed by a relative path such as ``news-images/3f2a....jpg``.
The path is what content records keep in their file columns.
"""

import io
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from minio import Minio
from minio.error import S3Error

from portal.core.config import settings
from portal.core.exceptions import ResourceNotFoundError, StorageError

logger = logging.getLogger("municipal_portal")

CHUNK_SIZE = 64 * 1024


@dataclass
class PendingFile:
    """An upload read into memory and validated, waiting to be stored."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower().lstrip(".")

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_upload(cls, upload) -> "PendingFile":
        upload.file.seek(0)
        return cls(
            filename=os.path.basename(upload.filename or "untitled"),
            content_type=upload.content_type,
            data=upload.file.read(),
        )


class LocalStorage:
    """Public disk rooted at a local directory."""

    def __init__(self, root):
        self.root = Path(root)

    def _full_path(self, path: str) -> Path:
        full = (self.root / path).resolve()
        if self.root.resolve() not in full.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return full

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        full = self._full_path(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to store {path}: {e}")

    def delete(self, path: str) -> None:
        try:
            self._full_path(path).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def stream(self, path: str) -> Iterator[bytes]:
        full = self._full_path(path)
        if not full.is_file():
            raise ResourceNotFoundError(f"File {path} not found")
        return self._read_chunks(full)

    @staticmethod
    def _read_chunks(full: Path) -> Iterator[bytes]:
        with full.open("rb") as fh:
            while True:
                chunk = fh.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk


class MinioStorage:
    """Public disk backed by a MinIO bucket."""

    def __init__(self):
        self.client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
        )
        self.bucket = settings.MINIO_BUCKET

    def ensure_bucket(self) -> None:
        """Create the bucket if it doesn't exist."""
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        try:
            self.client.put_object(
                self.bucket,
                path,
                io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise StorageError(f"Failed to upload to MinIO: {e}")

    def delete(self, path: str) -> None:
        try:
            self.client.remove_object(self.bucket, path)
        except S3Error as e:
            raise StorageError(f"Failed to delete from MinIO: {e}")

    def exists(self, path: str) -> bool:
        try:
            self.client.stat_object(self.bucket, path)
            return True
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                return False
            raise StorageError(f"Failed to stat MinIO object: {e}")

    def stream(self, path: str) -> Iterator[bytes]:
        try:
            response = self.client.get_object(self.bucket, path)
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                raise ResourceNotFoundError(f"File {path} not found")
            raise StorageError(f"Failed to download from MinIO: {e}")
        return self._read_chunks(response)

    @staticmethod
    def _read_chunks(response) -> Iterator[bytes]:
        try:
            yield from response.stream(CHUNK_SIZE)
        finally:
            response.close()
            response.release_conn()


def build_backend():
    if settings.STORAGE_BACKEND == "minio":
        return MinioStorage()
    return LocalStorage(settings.STORAGE_ROOT)


class StorageService:
    """Stores, streams and removes files on the configured backend."""

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        if self._backend is None:
            self._backend = build_backend()
        return self._backend

    def use(self, backend) -> None:
        """Swap the active backend."""
        self._backend = backend

    def store(self, file: PendingFile, directory: str, name: Optional[str] = None) -> str:
        """Store ``file`` under ``directory`` and return its relative path.

        Without ``name`` a random hex name keeping the original extension is
        generated.
        """
        if name is None:
            name = uuid.uuid4().hex
            if file.extension:
                name = f"{name}.{file.extension}"
        path = f"{directory.strip('/')}/{name}"
        self.backend.put(path, file.data, file.content_type)
        logger.debug("Stored %s (%d bytes)", path, file.size)
        return path

    def delete(self, path: str) -> None:
        self.backend.delete(path)
        logger.debug("Deleted %s", path)

    def exists(self, path: Optional[str]) -> bool:
        return bool(path) and self.backend.exists(path)

    def stream(self, path: str) -> Iterator[bytes]:
        return self.backend.stream(path)


storage_service = StorageService()
