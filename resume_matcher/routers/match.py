import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from resume_matcher.core.config import settings
from resume_matcher.core.limiter import limiter
from resume_matcher.database import get_db
from resume_matcher.dependencies import get_analyzer
from resume_matcher.models.user import User
from resume_matcher.routers.auth_deps import get_current_user
from resume_matcher.schemas.match import (
    MatchCreate, MatchCreateResponse, MatchDetail, MatchListItem, MatchListResponse, MatchMetadata, MatchResult
)
from resume_matcher.services.match_service import MatchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/match", tags=["match"])


@router.post("/create", response_model=MatchCreateResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.match_rate_limit)
def create_match(
    request: Request,
    body: MatchCreate,
    db: Session = Depends(get_db),
    analyzer=Depends(get_analyzer),
    current_user: User = Depends(get_current_user),
):
    """
    Flow: validate input -> load owned resume -> AI analysis -> persist -> respond.
    """
    match = MatchService(db, analyzer).create_match(current_user.id, body.resume_id, body.job_description)
    return MatchCreateResponse(
        match=MatchResult.from_match(match),
        metadata=MatchMetadata.from_match(match),
    )


@router.get("", response_model=MatchListResponse)
def list_matches(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    matches = MatchService(db, analyzer=None).list_matches(current_user.id)
    return MatchListResponse(matches=[MatchListItem.from_match(m) for m in matches])


@router.get("/{match_id}", response_model=MatchDetail)
def get_match(match_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    match = MatchService(db, analyzer=None).get_match(current_user.id, match_id)
    return MatchDetail.from_match(match)
