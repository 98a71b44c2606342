# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, resume, match, stored_blob

# Explicit class exports for cleaner imports
from .user import User
from .resume import Resume
from .match import Match
from .stored_blob import StoredBlob, StoredBlobChunk

__all__ = [
    "User",
    "Resume",
    "Match",
    "StoredBlob",
    "StoredBlobChunk",
]
