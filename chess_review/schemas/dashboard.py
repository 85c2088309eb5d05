"""Pydantic schemas for the owner dashboard."""

from datetime import datetime
from typing import Optional

from .base import CamelModel


class RecentAnalysis(CamelModel):
    """A row of the recent-analyses list."""

    analysis_id: str
    status: str
    player_name: str
    player_color: str
    opponent: str
    result: str
    created_at: datetime
    completed_at: Optional[datetime] = None


class OpeningStat(CamelModel):
    """How often an opening was played and how it went."""

    opening: str
    eco: Optional[str] = None
    count: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0


class ColorRecord(CamelModel):
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws


class PerformanceByColor(CamelModel):
    white: ColorRecord = ColorRecord()
    black: ColorRecord = ColorRecord()


class DashboardStats(CamelModel):
    """Status counts and headline numbers for one owner."""

    total_analyses: int
    completed: int
    pending: int
    processing: int
    failed: int
    win_rate: Optional[int] = None  # Percentage over completed games with a known result
    recent_analyses: list[RecentAnalysis] = []


class DashboardSummary(CamelModel):
    """Everything the dashboard shows, recomputed on every read."""

    stats: DashboardStats
    most_played_openings: list[OpeningStat] = []
    performance_by_color: Optional[PerformanceByColor] = None
