from datetime import datetime
from typing import List, Optional

from pydantic import Field

from resume_matcher.models.match import Match
from resume_matcher.schemas.auth import CamelModel

JOB_DESCRIPTION_PREVIEW_LENGTH = 150


class MatchCreate(CamelModel):
    resume_id: int
    job_description: str


class MatchResumeRef(CamelModel):
    id: int
    original_name: str


class MatchMetadata(CamelModel):
    processing_time: str
    estimated_cost: str
    tokens_used: int

    @classmethod
    def from_match(cls, match: Match) -> "MatchMetadata":
        return cls(
            processing_time=f"{match.processing_time_ms or 0}ms",
            estimated_cost=f"${(match.estimated_cost or 0):.6f}",
            tokens_used=match.tokens_used,
        )


class MatchResult(CamelModel):
    """Public projection of a stored match; never the raw analyzer payload."""
    id: int
    score: float
    summary: str
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    resume: MatchResumeRef

    @classmethod
    def from_match(cls, match: Match) -> "MatchResult":
        return cls(
            id=match.id,
            score=match.score,
            summary=match.summary,
            strengths=match.strengths or [],
            improvements=match.improvements or [],
            missing_skills=match.missing_skills or [],
            created_at=match.created_at,
            resume=MatchResumeRef(id=match.resume.id, original_name=match.resume.original_name),
        )


class MatchCreateResponse(CamelModel):
    message: str = "Resume match analysis completed successfully"
    match: MatchResult
    metadata: MatchMetadata


class MatchListItem(CamelModel):
    id: int
    score: float
    summary: str
    job_description: str
    created_at: Optional[datetime] = None
    resume: MatchResumeRef

    @classmethod
    def from_match(cls, match: Match) -> "MatchListItem":
        text = match.job_description
        if len(text) > JOB_DESCRIPTION_PREVIEW_LENGTH:
            text = text[:JOB_DESCRIPTION_PREVIEW_LENGTH] + "..."
        return cls(
            id=match.id,
            score=match.score,
            summary=match.summary,
            job_description=text,
            created_at=match.created_at,
            resume=MatchResumeRef(id=match.resume.id, original_name=match.resume.original_name),
        )


class MatchListResponse(CamelModel):
    matches: List[MatchListItem]


class MatchDetail(MatchResult):
    job_description: str
    metadata: MatchMetadata

    @classmethod
    def from_match(cls, match: Match) -> "MatchDetail":
        base = MatchResult.from_match(match)
        return cls(
            **base.model_dump(),
            job_description=match.job_description,
            metadata=MatchMetadata.from_match(match),
        )
