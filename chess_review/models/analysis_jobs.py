"""Analysis job model: one record per submitted game."""

import json
import uuid
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Column, DateTime, Index, String, Text

from .base import BaseModel


class AnalysisStatus(str, Enum):
    """Job lifecycle: PENDING -> PROCESSING -> COMPLETED | FAILED."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED)


# Allowed forward moves of the state machine
ALLOWED_TRANSITIONS = {
    AnalysisStatus.PENDING: {AnalysisStatus.PROCESSING},
    AnalysisStatus.PROCESSING: {AnalysisStatus.COMPLETED, AnalysisStatus.FAILED},
    AnalysisStatus.COMPLETED: set(),
    AnalysisStatus.FAILED: set(),
}


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


class AnalysisJob(BaseModel):
    """
    One analysis request/response lifecycle for a single submitted game.

    The game fields are written at creation and never change. ``result`` is
    set only on COMPLETED, ``error`` only on FAILED.
    """

    __tablename__ = "analysis_jobs"

    id = Column(String(32), primary_key=True, default=new_id)

    # Submitting principal (the guest sentinel for unauthenticated users)
    owner_id = Column(String(64), nullable=False)
    batch_id = Column(String(32), nullable=True)

    # PENDING, PROCESSING, COMPLETED, FAILED
    status = Column(String(20), nullable=False, default=AnalysisStatus.PENDING.value)

    # Game record
    pgn = Column(Text, nullable=False)
    player_name = Column(String(255), nullable=False)
    player_color = Column(String(10), nullable=True)  # white | black
    game_metadata = Column(Text, nullable=False, default="{}")  # JSON

    # Outcome
    result = Column(Text, nullable=True)  # JSON, includes puzzle_ids
    error = Column(Text, nullable=True)

    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_analysis_jobs_owner_status", "owner_id", "status"),
        Index("idx_analysis_jobs_batch", "batch_id"),
    )

    @property
    def metadata_dict(self) -> dict[str, Any]:
        return json.loads(self.game_metadata) if self.game_metadata else {}

    @property
    def result_dict(self) -> Optional[dict[str, Any]]:
        return json.loads(self.result) if self.result else None

    @property
    def status_enum(self) -> AnalysisStatus:
        return AnalysisStatus(self.status)

    def __repr__(self) -> str:
        return f"<AnalysisJob(id={self.id}, status={self.status})>"
