"""Puzzle model for training positions derived from analysed games."""

from sqlalchemy import Column, Index, String, Text

from .analysis_jobs import new_id
from .base import BaseModel


class Puzzle(BaseModel):
    """
    A training puzzle generated alongside a game analysis.

    Created once and never modified. ``source_job_id`` points back at the
    analysis that produced it; jobs only hold the puzzle id.
    """

    __tablename__ = "puzzles"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String(64), nullable=False)
    source_job_id = Column(String(32), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    fen = Column(String(120), nullable=False)
    solution = Column(Text, nullable=False)
    hint = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=False)  # easy, medium, hard
    theme = Column(String(100), nullable=False)

    __table_args__ = (
        Index("idx_puzzles_owner", "owner_id"),
        Index("idx_puzzles_source_job", "source_job_id"),
    )

    def __repr__(self) -> str:
        return f"<Puzzle(id={self.id}, theme={self.theme})>"
