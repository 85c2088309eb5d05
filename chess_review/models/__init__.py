"""SQLAlchemy ORM models for the chess review pipeline.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

from chess_review.database import Base

from .analysis_jobs import ALLOWED_TRANSITIONS, AnalysisJob, AnalysisStatus
from .puzzles import Puzzle

__all__ = [
    "Base",
    "AnalysisJob",
    "AnalysisStatus",
    "ALLOWED_TRANSITIONS",
    "Puzzle",
]
