import logging
import time
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from resume_matcher.core.config import settings
from resume_matcher.core.limiter import limiter
from resume_matcher.database import get_db
from resume_matcher.dependencies import get_blob_store, get_resume_classifier
from resume_matcher.models.user import User
from resume_matcher.routers.auth_deps import get_current_user
from resume_matcher.schemas.resume import (
    MessageResponse, ResumeDetail, ResumeListResponse, ResumeSummary, ResumeText, ResumeUploadResponse
)
from resume_matcher.services import resume_service
from resume_matcher.services.blob_store import BlobStore, iter_blob, safe_filename
from resume_matcher.services.resume_classifier import ResumeContentClassifier
from resume_matcher.services.resume_ingestion import ResumeIngestionPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["resume"])


@router.post("/upload", response_model=ResumeUploadResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.upload_rate_limit)
async def upload_resume(
    request: Request,
    resume: UploadFile = File(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    classifier: ResumeContentClassifier = Depends(get_resume_classifier),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a resume (PDF, DOC, DOCX) and run the ingestion pipeline.
    """
    upload_start = time.perf_counter()
    logger.info(f"Resume upload received: {resume.filename} ({resume.content_type}) from user {current_user.id}")

    # One byte past the limit is enough to detect an oversized file
    data = await resume.read(settings.max_upload_bytes + 1)

    pipeline = ResumeIngestionPipeline(db, blob_store, classifier=classifier)
    db_resume = await run_in_threadpool(
        pipeline.ingest,
        current_user.id,
        data,
        resume.filename,
        resume.content_type,
    )

    logger.info(f"Resume upload finished in {time.perf_counter() - upload_start:.2f}s (id={db_resume.id})")
    return ResumeUploadResponse(resume=ResumeSummary.from_resume(db_resume))


@router.get("", response_model=ResumeListResponse)
def list_resumes(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resumes = resume_service.list_resumes(db, current_user.id)
    return ResumeListResponse(resumes=[ResumeSummary.from_resume(r) for r in resumes])


@router.get("/{resume_id}", response_model=ResumeDetail)
def get_resume(resume_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume = resume_service.get_active_resume(db, current_user.id, resume_id)
    return ResumeDetail.from_resume(resume)


@router.get("/{resume_id}/text", response_model=ResumeText)
def get_resume_text(resume_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume = resume_service.get_active_resume(db, current_user.id, resume_id)
    return ResumeText(id=resume.id, original_name=resume.original_name, extracted_text=resume.extracted_text)


@router.get("/{resume_id}/download")
def download_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user),
):
    """Stream the original file back with its name and declared content type."""
    resume, stream = resume_service.open_resume_file(db, blob_store, current_user.id, resume_id)
    ascii_name = safe_filename(resume.original_name)
    disposition = f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(resume.original_name)}"
    return StreamingResponse(
        iter_blob(stream),
        media_type=resume.content_type,
        headers={"Content-Disposition": disposition},
    )


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(resume_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    resume_service.soft_delete_resume(db, current_user.id, resume_id)
    return MessageResponse(message="Resume deleted successfully")
