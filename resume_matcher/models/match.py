from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, JSON, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from resume_matcher.database import Base


class Match(Base):
    """A single scoring of a resume against a job description. Immutable once written."""
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    resume_id = Column(Integer, ForeignKey("resumes.id"), nullable=False, index=True)

    job_description = Column(Text, nullable=False)

    # Analysis result
    score = Column(Float, nullable=False)  # always within [0, 100]
    summary = Column(Text, nullable=False)
    strengths = Column(JSON, nullable=False, default=list)
    improvements = Column(JSON, nullable=False, default=list)
    missing_skills = Column(JSON, nullable=False, default=list)

    # Processing metadata
    processing_time_ms = Column(Integer, nullable=True)
    estimated_cost = Column(Float, nullable=True)  # USD
    input_tokens = Column(Integer, nullable=True)
    output_tokens = Column(Integer, nullable=True)
    model_name = Column(String, nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="matches")
    resume = relationship("Resume", back_populates="matches")

    __table_args__ = (
        Index("ix_matches_user_created", "user_id", "created_at"),
    )

    @property
    def tokens_used(self) -> int:
        return (self.input_tokens or 0) + (self.output_tokens or 0)
