from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from resume_matcher.database import Base


class Resume(Base):
    """
    One uploaded resume document.

    A row only exists once the ingestion pipeline has fully succeeded, so
    extracted_text is always populated. Deletion is soft (is_active=False).
    """
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Blob reference, opaque to everything except the BlobStore that issued it
    blob_locator = Column(Text, nullable=False)
    storage_backend = Column(String, nullable=False)
    stored_name = Column(String, nullable=False)

    original_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    content_type = Column(String, nullable=False)
    extracted_text = Column(Text, nullable=False)

    # Extraction metadata
    processing_time_ms = Column(Integer, nullable=True)
    page_count = Column(Integer, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="resumes")
    matches = relationship("Match", back_populates="resume")

    def __repr__(self):
        return f"<Resume {self.id} {self.original_name!r} active={self.is_active}>"
