"""Pydantic schemas for payloads and read views."""

from .analysis import (
    AnalysisPayload,
    GameMetadata,
    KeyMoment,
    Phase,
    PlayerColor,
    PuzzleCandidate,
)
from .base import CamelModel
from .dashboard import (
    ColorRecord,
    DashboardStats,
    DashboardSummary,
    OpeningStat,
    PerformanceByColor,
    RecentAnalysis,
)

__all__ = [
    "AnalysisPayload",
    "CamelModel",
    "ColorRecord",
    "DashboardStats",
    "DashboardSummary",
    "GameMetadata",
    "KeyMoment",
    "OpeningStat",
    "PerformanceByColor",
    "Phase",
    "PlayerColor",
    "PuzzleCandidate",
    "RecentAnalysis",
]
