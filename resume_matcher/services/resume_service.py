import logging
from dataclasses import dataclass, field
from typing import BinaryIO, List, Tuple

from sqlalchemy.orm import Session

from resume_matcher.core.exceptions import BlobNotFoundError, NotFoundError, StorageError
from resume_matcher.models.resume import Resume
from resume_matcher.services.blob_store import BlobStore

logger = logging.getLogger(__name__)

RESUME_NOT_FOUND = "Resume not found"


def list_resumes(db: Session, user_id: int) -> List[Resume]:
    return db.query(Resume).filter(
        Resume.user_id == user_id,
        Resume.is_active == True  # noqa: E712
    ).order_by(Resume.created_at.desc(), Resume.id.desc()).all()


def get_active_resume(db: Session, user_id: int, resume_id: int) -> Resume:
    """Owned and active, or NotFoundError; missing and foreign ids look the same."""
    resume = db.query(Resume).filter(
        Resume.id == resume_id,
        Resume.user_id == user_id,
        Resume.is_active == True  # noqa: E712
    ).first()
    if not resume:
        raise NotFoundError(RESUME_NOT_FOUND)
    return resume


def soft_delete_resume(db: Session, user_id: int, resume_id: int) -> Resume:
    """Mark an owned resume inactive. Repeating the call is a no-op."""
    resume = db.query(Resume).filter(
        Resume.id == resume_id,
        Resume.user_id == user_id
    ).first()
    if not resume:
        raise NotFoundError(RESUME_NOT_FOUND)
    if resume.is_active:
        resume.is_active = False
        try:
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to soft-delete resume {resume_id}: {e}", exc_info=True)
            raise StorageError()
        logger.info(f"Resume {resume_id} soft-deleted by user {user_id}")
    return resume


def open_resume_file(db: Session, blob_store: BlobStore, user_id: int, resume_id: int) -> Tuple[Resume, BinaryIO]:
    resume = get_active_resume(db, user_id, resume_id)
    return resume, blob_store.get(resume.blob_locator)


@dataclass
class MigrationReport:
    migrated: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    missing: List[int] = field(default_factory=list)


def migrate_blobs(db: Session, source: BlobStore, target: BlobStore) -> MigrationReport:
    """
    Copy every resume blob not yet held by `target` into it and rewrite the
    locator. `source` must be able to resolve the old locators. Each resume
    commits on its own; unresolvable blobs are reported and left untouched.
    """
    report = MigrationReport()
    for resume in db.query(Resume).order_by(Resume.id).all():
        if resume.storage_backend == target.backend_name:
            report.skipped.append(resume.id)
            continue
        try:
            with source.get(resume.blob_locator) as stream:
                data = stream.read()
        except BlobNotFoundError:
            logger.warning(f"Could not find file for resume {resume.id} ({resume.original_name})")
            report.missing.append(resume.id)
            continue

        new_locator = target.put(data, resume.stored_name, {"resume_id": resume.id, "migrated": True})
        resume.blob_locator = new_locator
        resume.storage_backend = target.backend_name
        try:
            db.commit()
        except Exception as e:
            db.rollback()
            target.delete(new_locator)
            logger.error(f"Failed to update resume {resume.id} after copying its blob: {e}", exc_info=True)
            raise StorageError()
        logger.info(f"Migrated resume {resume.id} to {target.backend_name}")
        report.migrated.append(resume.id)
    return report
