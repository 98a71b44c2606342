"""
Resume ingestion pipeline.

    UPLOADED -> BLOB_STORED -> TEXT_EXTRACTED -> CLASSIFIED -> PERSISTED
       |            |               |                |
       +------------+----> ABORTED <-+----------------+

Size and content-type checks run before anything is written. From
BLOB_STORED onwards every failure deletes the stored blob before the error
propagates, so a failed ingestion never leaves an orphaned file and a Resume
row exists only when the pipeline reached PERSISTED. Once the row is
committed it owns the blob, and nothing after that point deletes it.
"""
import enum
import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_matcher.core.config import Config, settings as default_settings
from resume_matcher.core.exceptions import AppException, StorageError, ValidationError
from resume_matcher.models.resume import Resume
from resume_matcher.services.blob_store import BlobStore, safe_filename
from resume_matcher.services.resume_classifier import ResumeContentClassifier, get_classifier
from resume_matcher.services.text_extractor import ExtractedText, extract_text

logger = logging.getLogger(__name__)


class IngestionState(str, enum.Enum):
    UPLOADED = "UPLOADED"
    BLOB_STORED = "BLOB_STORED"
    TEXT_EXTRACTED = "TEXT_EXTRACTED"
    CLASSIFIED = "CLASSIFIED"
    PERSISTED = "PERSISTED"
    ABORTED = "ABORTED"


class ResumeIngestionPipeline:
    """Request-scoped: build one per upload."""

    def __init__(
        self,
        db: Session,
        blob_store: BlobStore,
        extractor: Callable[[bytes, str], ExtractedText] = extract_text,
        classifier: Optional[ResumeContentClassifier] = None,
        config: Config = default_settings,
    ):
        self.db = db
        self.blob_store = blob_store
        self.extractor = extractor
        self.classifier = classifier or get_classifier()
        self.config = config

        self.state = IngestionState.UPLOADED
        self.history: List[IngestionState] = [IngestionState.UPLOADED]
        self.locator: Optional[str] = None
        self.error: Optional[AppException] = None

    def _transition(self, state: IngestionState):
        logger.info(f"Ingestion: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _validate_upload(self, data: bytes, content_type: str):
        if not data:
            raise ValidationError("No file uploaded.")
        if len(data) > self.config.max_upload_bytes:
            limit_mb = self.config.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.")
        if content_type not in self.config.allowed_content_types:
            raise ValidationError("Only PDF, DOC, and DOCX files are allowed")

    def _discard_blob(self):
        """Best-effort cleanup; a failure here is logged, never raised."""
        if self.locator is None:
            return
        try:
            if not self.blob_store.delete(self.locator):
                logger.error("Cleanup: stored blob could not be deleted (not found or not removable)")
        except Exception as e:
            logger.error(f"Cleanup: blob deletion raised {e}", exc_info=True)
        self.locator = None

    def _abort(self, error: AppException):
        self._discard_blob()
        self.error = error
        self._transition(IngestionState.ABORTED)

    def ingest(self, user_id: int, data: bytes, original_name: str, content_type: str) -> Resume:
        """
        Run the full pipeline for one upload and return the persisted Resume.
        Raises an AppException subclass on any abort.
        """
        original_name = original_name or "resume"
        try:
            self._validate_upload(data, content_type)

            stored_name = f"{user_id}_{int(time.time() * 1000)}_{safe_filename(original_name)}"
            self.locator = self.blob_store.put(
                data,
                stored_name,
                {
                    "user_id": user_id,
                    "original_name": original_name,
                    "content_type": content_type,
                    "uploaded_at": datetime.now(timezone.utc).isoformat(),
                },
            )
            self._transition(IngestionState.BLOB_STORED)

            started = time.perf_counter()
            extracted = self.extractor(data, content_type)
            processing_time_ms = int((time.perf_counter() - started) * 1000)
            self._transition(IngestionState.TEXT_EXTRACTED)

            self.classifier.classify(extracted.text).raise_for_rejection()
            self._transition(IngestionState.CLASSIFIED)

            resume = Resume(
                user_id=user_id,
                blob_locator=self.locator,
                storage_backend=self.blob_store.backend_name,
                stored_name=stored_name,
                original_name=original_name,
                file_size=len(data),
                content_type=content_type,
                extracted_text=extracted.text,
                processing_time_ms=processing_time_ms,
                page_count=extracted.page_count,
                is_active=True,
            )
            self.db.add(resume)
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Failed to persist resume record: {e}", exc_info=True)
                raise StorageError() from e

        except AppException as e:
            logger.warning(f"Ingestion aborted in state {self.state.value}: {e.message}")
            self._abort(e)
            raise
        except BaseException:
            # Includes cancellation; cleanup still runs before propagating
            logger.exception(f"Ingestion failed unexpectedly in state {self.state.value}")
            self._abort(StorageError())
            raise

        # Committed: the record now owns the blob, so later failures must not delete it
        self.locator = None
        self._transition(IngestionState.PERSISTED)
        self.db.refresh(resume)
        logger.info(f"Resume {resume.id} ingested for user {user_id} ({len(data)} bytes)")
        return resume
