"""
Shared FastAPI dependencies.

Blob store and analyzer are resolved here so tests can swap them through
app.dependency_overrides without touching the services.
"""
from functools import lru_cache

from resume_matcher.core.config import settings
from resume_matcher.services.analyzer import OpenRouterAnalyzer
from resume_matcher.services.blob_store import BlobStore, build_blob_store
from resume_matcher.services.resume_classifier import ResumeContentClassifier, get_classifier


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    return build_blob_store(settings)


@lru_cache(maxsize=1)
def get_analyzer() -> OpenRouterAnalyzer:
    return OpenRouterAnalyzer()


def get_resume_classifier() -> ResumeContentClassifier:
    return get_classifier()


__all__ = [
    "get_blob_store",
    "get_analyzer",
    "get_resume_classifier",
]
