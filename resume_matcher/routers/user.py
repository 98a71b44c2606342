import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from resume_matcher.database import get_db
from resume_matcher.models.user import User
from resume_matcher.routers.auth_deps import get_current_user
from resume_matcher.schemas.auth import LoginRequest, MatchStats, RegisterRequest, Token, UserResponse
from resume_matcher.services import auth as auth_service
from resume_matcher.services.match_service import MatchService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user",
    tags=["user"]
)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return Token(token=auth_service.create_access_token(user.id))


@router.post("/login", response_model=Token)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, data.email, data.password)
    logger.info(f"User {user.id} logged in")
    return Token(token=auth_service.create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
def get_me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    stats = MatchService(db, analyzer=None).stats(current_user.id)
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        created_at=current_user.created_at,
        stats=MatchStats(**stats),
    )
