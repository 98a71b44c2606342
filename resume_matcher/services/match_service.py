import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resume_matcher.core.config import Config, settings as default_settings
from resume_matcher.core.exceptions import AnalysisError, NotFoundError, StorageError, ValidationError
from resume_matcher.models.match import Match
from resume_matcher.services.analyzer import AnalyzerResponse
from resume_matcher.services.resume_service import get_active_resume

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0


@dataclass
class AnalysisResult:
    score: float
    summary: str
    strengths: List[str]
    improvements: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)


def clamp_score(value: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, value))


def _coerce_score(raw: Any) -> Optional[float]:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _string_list(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    return [str(item).strip() for item in raw if item is not None and str(item).strip()]


def validate_analysis(payload: Dict[str, Any]) -> AnalysisResult:
    """
    Check the analyzer's JSON against the required shape.

    score (0 allowed), summary and a non-empty strengths list are required;
    improvements and missingSkills fall back to empty lists.
    """
    raw_score = payload.get("matchScore", payload.get("score"))
    score = _coerce_score(raw_score)
    if score is None:
        raise AnalysisError("AI response missing or invalid matchScore field")

    summary = payload.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise AnalysisError("AI response missing summary field")

    strengths = _string_list(payload.get("strengths"))
    if not strengths:
        raise AnalysisError("AI response missing or invalid strengths array")

    return AnalysisResult(
        score=clamp_score(score),
        summary=summary.strip(),
        strengths=strengths,
        improvements=_string_list(payload.get("improvements")),
        missing_skills=_string_list(payload.get("missingSkills", payload.get("missing_skills"))),
    )


class MatchService:
    """Scores a stored resume against a job description and records the result."""

    def __init__(self, db: Session, analyzer, config: Config = default_settings):
        self.db = db
        self.analyzer = analyzer
        self.config = config

    def validate_job_description(self, job_description: str) -> str:
        if not job_description or not job_description.strip():
            raise ValidationError("Both resumeId and jobDescription are required")
        if len(job_description) < self.config.job_description_min_length:
            raise ValidationError(
                "Job description too short. Please provide a detailed job description "
                f"(at least {self.config.job_description_min_length} characters)."
            )
        if len(job_description) > self.config.job_description_max_length:
            raise ValidationError(
                "Job description too long. Please keep it under "
                f"{self.config.job_description_max_length:,} characters."
            )
        return job_description

    def create_match(self, user_id: int, resume_id: int, job_description: str) -> Match:
        job_description = self.validate_job_description(job_description)
        resume = get_active_resume(self.db, user_id, resume_id)

        logger.info(f"Creating match for user {user_id}, resume {resume_id}")
        started = time.perf_counter()
        try:
            response: AnalyzerResponse = self.analyzer.analyze(resume.extracted_text, job_description)
        except AnalysisError as e:
            logger.error(f"AI analysis failed: {e.reason}")
            raise
        except Exception as e:
            logger.exception("Analyzer raised an unexpected error")
            raise AnalysisError(f"Unexpected analyzer error: {e}") from e
        processing_time_ms = int((time.perf_counter() - started) * 1000)

        try:
            result = validate_analysis(response.payload)
        except AnalysisError as e:
            logger.error(f"AI analysis rejected: {e.reason}")
            raise

        match = Match(
            user_id=user_id,
            resume_id=resume.id,
            job_description=job_description,
            score=result.score,
            summary=result.summary,
            strengths=result.strengths,
            improvements=result.improvements,
            missing_skills=result.missing_skills,
            processing_time_ms=processing_time_ms,
            estimated_cost=response.usage.estimated_cost,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model_name=response.model,
            retry_count=0,
        )
        self.db.add(match)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to persist match: {e}", exc_info=True)
            raise StorageError() from e
        self.db.refresh(match)
        logger.info(f"Match {match.id} saved (score={match.score}, {processing_time_ms}ms)")
        return match

    def list_matches(self, user_id: int) -> List[Match]:
        return self.db.query(Match).filter(
            Match.user_id == user_id
        ).order_by(Match.created_at.desc(), Match.id.desc()).all()

    def get_match(self, user_id: int, match_id: int) -> Match:
        match = self.db.query(Match).filter(
            Match.id == match_id,
            Match.user_id == user_id
        ).first()
        if not match:
            raise NotFoundError("Match not found")
        return match

    def stats(self, user_id: int) -> Dict[str, Any]:
        total, average = self.db.query(func.count(Match.id), func.avg(Match.score)).filter(
            Match.user_id == user_id
        ).one()
        latest = self.list_matches(user_id)[:1]
        return {
            "total_matches": total or 0,
            "average_score": round(average) if average is not None else 0,
            "last_match_score": latest[0].score if latest else 0,
        }
