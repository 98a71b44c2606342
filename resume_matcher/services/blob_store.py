"""
Blob storage for raw uploaded resume files.

Every backend implements the same three operations:

    put(data, suggested_name, metadata) -> locator
    get(locator) -> readable binary stream
    delete(locator) -> True if removed, False if not found / not removable

Locators are opaque strings; only the store that issued one knows how to
resolve it. Callers (ingestion pipeline, download route, migration script)
only ever talk to the BlobStore interface and never branch on backend.
"""
import base64
import binascii
import io
import logging
import os
import re
import tempfile
import uuid
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Dict, Iterator, List, Optional

from sqlalchemy.orm import Session

from resume_matcher.core.config import Config
from resume_matcher.core.exceptions import BlobNotFoundError, StorageError
from resume_matcher.models.stored_blob import StoredBlob, StoredBlobChunk

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    """Strip directory components and unsafe characters from a client filename."""
    base = os.path.basename((name or "").replace("\\", "/"))
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "upload"


def iter_blob(stream: BinaryIO, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
    """Yield a blob stream in chunks and close it afterwards."""
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


class BlobStore(ABC):
    backend_name = "abstract"

    @abstractmethod
    def put(self, data: bytes, suggested_name: str, metadata: Optional[Dict] = None) -> str:
        """Durably store data. Raises StorageError on failure."""

    @abstractmethod
    def get(self, locator: str) -> BinaryIO:
        """Open a stored blob. Raises BlobNotFoundError if it cannot be resolved."""

    @abstractmethod
    def delete(self, locator: str) -> bool:
        """Best-effort removal. Never raises."""


class LocalBlobStore(BlobStore):
    """
    Files on the local filesystem. The locator is the absolute file path.

    Reads fall back to <root>/<basename(locator)> and then to each
    fallback root, so records written before the upload directory moved
    still resolve.
    """
    backend_name = "local"

    def __init__(self, root: str, fallback_roots: Optional[List[str]] = None):
        self.root = os.path.abspath(root)
        self.fallback_roots = [os.path.abspath(r) for r in (fallback_roots or [])]
        os.makedirs(self.root, exist_ok=True)

    def put(self, data: bytes, suggested_name: str, metadata: Optional[Dict] = None) -> str:
        filename = f"{uuid.uuid4().hex}_{safe_filename(suggested_name)}"
        path = os.path.join(self.root, filename)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=self.root, prefix=".upload-")
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write blob {filename}: {e}", exc_info=True)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError()
        logger.info(f"Stored blob on disk: {path} ({len(data)} bytes)")
        return path

    def _candidates(self, locator: str) -> List[str]:
        basename = os.path.basename(locator)
        paths = [locator]
        if basename:
            paths.extend(os.path.join(root, basename) for root in [self.root] + self.fallback_roots)
        return paths

    def _resolve(self, locator: str) -> Optional[str]:
        for candidate in self._candidates(locator):
            if os.path.isfile(candidate):
                if candidate != locator:
                    logger.info(f"Resolved blob {locator} via fallback path {candidate}")
                return candidate
        return None

    def get(self, locator: str) -> BinaryIO:
        path = self._resolve(locator)
        if path is None:
            raise BlobNotFoundError(locator)
        return open(path, "rb")

    def delete(self, locator: str) -> bool:
        path = self._resolve(locator)
        if path is None:
            return False
        try:
            os.remove(path)
            logger.info(f"Deleted blob {path}")
            return True
        except OSError as e:
            logger.error(f"Failed to delete blob {path}: {e}")
            return False


class DatabaseBlobStore(BlobStore):
    """
    Chunked bucket store inside the relational database (GridFS layout).
    The locator is the store-assigned blob id. Each put commits in its own
    session, so the blob is durable regardless of the caller's transaction.
    """
    backend_name = "database"

    def __init__(self, session_factory: Callable[[], Session], chunk_size: int = 255 * 1024):
        self.session_factory = session_factory
        self.chunk_size = chunk_size

    def put(self, data: bytes, suggested_name: str, metadata: Optional[Dict] = None) -> str:
        blob_id = uuid.uuid4().hex
        blob = StoredBlob(
            id=blob_id,
            filename=safe_filename(suggested_name),
            length=len(data),
            chunk_size=self.chunk_size,
            blob_metadata=metadata or {},
        )
        for n, offset in enumerate(range(0, len(data), self.chunk_size)):
            blob.chunks.append(StoredBlobChunk(n=n, data=data[offset:offset + self.chunk_size]))
        chunk_count = len(blob.chunks)

        with self.session_factory() as session:
            session.add(blob)
            try:
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to store blob {blob_id}: {e}", exc_info=True)
                raise StorageError()
        logger.info(f"Stored blob in database: {blob_id} ({len(data)} bytes, {chunk_count} chunks)")
        return blob_id

    def get(self, locator: str) -> BinaryIO:
        with self.session_factory() as session:
            blob = session.get(StoredBlob, locator)
            if blob is None:
                raise BlobNotFoundError(locator)
            expected = blob.length
            data = b"".join(chunk.data for chunk in blob.chunks)
        if len(data) != expected:
            logger.error(f"Blob {locator} is corrupt: expected {expected} bytes, found {len(data)}")
            raise BlobNotFoundError(locator)
        return io.BytesIO(data)

    def delete(self, locator: str) -> bool:
        try:
            with self.session_factory() as session:
                blob = session.get(StoredBlob, locator)
                if blob is None:
                    return False
                session.delete(blob)
                session.commit()
            logger.info(f"Deleted blob {locator}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete blob {locator}: {e}")
            return False


class InlineBlobStore(BlobStore):
    """
    Encodes the bytes into the locator itself, so the Resume record carries
    the file. Nothing exists outside the record; delete has nothing to remove
    and reports success, and get keeps decoding the same locator afterwards.
    Dropping the record is what discards the file.
    """
    backend_name = "inline"
    PREFIX = "inline:"

    def put(self, data: bytes, suggested_name: str, metadata: Optional[Dict] = None) -> str:
        return self.PREFIX + base64.b64encode(data).decode("ascii")

    def get(self, locator: str) -> BinaryIO:
        if not locator or not locator.startswith(self.PREFIX):
            raise BlobNotFoundError(locator)
        try:
            return io.BytesIO(base64.b64decode(locator[len(self.PREFIX):], validate=True))
        except (binascii.Error, ValueError):
            raise BlobNotFoundError(locator)

    def delete(self, locator: str) -> bool:
        return True


class FallbackBlobStore(BlobStore):
    """Writes go to the primary store; reads try each store in order."""

    def __init__(self, primary: BlobStore, *secondaries: BlobStore):
        self.primary = primary
        self.secondaries = list(secondaries)

    @property
    def backend_name(self) -> str:
        return self.primary.backend_name

    def put(self, data: bytes, suggested_name: str, metadata: Optional[Dict] = None) -> str:
        return self.primary.put(data, suggested_name, metadata)

    def get(self, locator: str) -> BinaryIO:
        for store in [self.primary] + self.secondaries:
            try:
                return store.get(locator)
            except BlobNotFoundError:
                continue
        logger.warning(f"Blob not found in any store: {locator[:80]}")
        raise BlobNotFoundError(locator)

    def delete(self, locator: str) -> bool:
        return self.primary.delete(locator)


def build_blob_store(config: Config, session_factory: Optional[Callable[[], Session]] = None) -> BlobStore:
    """Select the primary backend from configuration; legacy local roots stay readable."""
    backend = config.storage_backend.lower()
    if backend == "local":
        primary: BlobStore = LocalBlobStore(config.upload_dir, config.legacy_upload_dirs)
    elif backend == "database":
        if session_factory is None:
            from resume_matcher.database import SessionLocal
            session_factory = SessionLocal
        primary = DatabaseBlobStore(session_factory, chunk_size=config.blob_chunk_size)
    elif backend == "inline":
        primary = InlineBlobStore()
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {config.storage_backend}")

    secondaries: List[BlobStore] = [InlineBlobStore()] if backend != "inline" else []
    if backend != "local":
        secondaries.append(LocalBlobStore(config.upload_dir, config.legacy_upload_dirs))
    return FallbackBlobStore(primary, *secondaries)
