from fastapi import APIRouter
from resume_matcher.routers import user, resume, match

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(user.router, tags=["Users"])
api_router.include_router(resume.router, tags=["Resumes"])
api_router.include_router(match.router, tags=["Matches"])
