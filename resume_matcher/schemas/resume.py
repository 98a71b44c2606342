from datetime import datetime
from typing import List, Optional

from resume_matcher.models.resume import Resume
from resume_matcher.schemas.auth import CamelModel

PREVIEW_LENGTH = 200


class ResumeSummary(CamelModel):
    id: int
    original_name: str
    file_size: int
    processing_time: Optional[int] = None
    upload_date: Optional[datetime] = None

    @classmethod
    def from_resume(cls, resume: Resume) -> "ResumeSummary":
        return cls(
            id=resume.id,
            original_name=resume.original_name,
            file_size=resume.file_size,
            processing_time=resume.processing_time_ms,
            upload_date=resume.created_at,
        )


class ResumeUploadResponse(CamelModel):
    message: str = "Resume uploaded and processed successfully"
    resume: ResumeSummary


class ResumeListResponse(CamelModel):
    resumes: List[ResumeSummary]


class ResumeDetail(ResumeSummary):
    content_type: str
    page_count: Optional[int] = None
    text_length: int
    preview: str

    @classmethod
    def from_resume(cls, resume: Resume) -> "ResumeDetail":
        text = resume.extracted_text
        return cls(
            id=resume.id,
            original_name=resume.original_name,
            file_size=resume.file_size,
            processing_time=resume.processing_time_ms,
            upload_date=resume.created_at,
            content_type=resume.content_type,
            page_count=resume.page_count,
            text_length=len(text),
            preview=text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else ""),
        )


class ResumeText(CamelModel):
    id: int
    original_name: str
    extracted_text: str


class MessageResponse(CamelModel):
    message: str
