"""Dashboard statistics derived from an owner's analysis jobs.

Read-only: everything is recomputed from committed jobs on each call.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from chess_review.config import settings
from chess_review.models import AnalysisJob, AnalysisStatus
from chess_review.schemas import (
    ColorRecord,
    DashboardStats,
    DashboardSummary,
    GameMetadata,
    OpeningStat,
    PerformanceByColor,
    RecentAnalysis,
)
from chess_review.store import JobStore

logger = structlog.get_logger()

DRAW = "1/2-1/2"
UNKNOWN_RESULT = "*"


def game_outcome(result: str, player_color: Optional[str]) -> str:
    """Classify a game result as win, loss or draw for the analysed player."""
    if result == DRAW:
        return "draw"
    if (result == "1-0" and player_color == "white") or (
        result == "0-1" and player_color == "black"
    ):
        return "win"
    return "loss"


def _recorded_games(jobs: Iterable[AnalysisJob]) -> List[Tuple[AnalysisJob, GameMetadata]]:
    """Completed jobs whose game has a known result."""
    games = []
    for job in jobs:
        if job.status != AnalysisStatus.COMPLETED.value:
            continue
        metadata = GameMetadata.model_validate(job.metadata_dict)
        if not metadata.result or metadata.result == UNKNOWN_RESULT:
            continue
        games.append((job, metadata))
    return games


def calculate_win_rate(jobs: Iterable[AnalysisJob]) -> Optional[int]:
    """Percentage of won games, draws included in the denominator."""
    games = _recorded_games(jobs)
    if not games:
        return None

    wins = sum(
        1 for job, metadata in games
        if game_outcome(metadata.result, job.player_color) == "win"
    )
    return round(wins / len(games) * 100)


def most_played_openings(jobs: Iterable[AnalysisJob], limit: int = 5) -> List[OpeningStat]:
    """Openings grouped by name and ECO code, most frequent first.

    Every completed game counts towards the ranking; only games with a known
    result add to the win/loss/draw tally.
    """
    openings: Dict[Tuple[str, str], OpeningStat] = {}

    for job in jobs:
        if job.status != AnalysisStatus.COMPLETED.value:
            continue
        metadata = GameMetadata.model_validate(job.metadata_dict)
        opening = metadata.opening or "Unknown"
        eco = metadata.eco or ""
        stat = openings.get((opening, eco))
        if stat is None:
            stat = OpeningStat(opening=opening, eco=eco or None)
            openings[(opening, eco)] = stat

        stat.count += 1
        if not metadata.result or metadata.result == UNKNOWN_RESULT:
            continue
        outcome = game_outcome(metadata.result, job.player_color)
        if outcome == "win":
            stat.wins += 1
        elif outcome == "draw":
            stat.draws += 1
        else:
            stat.losses += 1

    return sorted(openings.values(), key=lambda s: s.count, reverse=True)[:limit]


def performance_by_color(jobs: Iterable[AnalysisJob]) -> PerformanceByColor:
    """Wins, losses and draws split by the side the player had."""
    performance = PerformanceByColor(white=ColorRecord(), black=ColorRecord())

    for job, metadata in _recorded_games(jobs):
        if job.player_color not in ("white", "black"):
            continue
        record = getattr(performance, job.player_color)
        outcome = game_outcome(metadata.result, job.player_color)
        if outcome == "win":
            record.wins += 1
        elif outcome == "draw":
            record.draws += 1
        else:
            record.losses += 1

    return performance


def recent_analysis(job: AnalysisJob) -> RecentAnalysis:
    metadata = GameMetadata.model_validate(job.metadata_dict)
    return RecentAnalysis(
        analysis_id=job.id,
        status=job.status,
        player_name=job.player_name,
        player_color=job.player_color or "white",
        opponent=metadata.white if job.player_color == "black" else metadata.black,
        result=metadata.result,
        created_at=job.created_at,
        completed_at=job.completed_at,
    )


class DashboardAggregator:
    """Computes an owner's dashboard from the job store."""

    def __init__(
        self,
        job_store: JobStore,
        recent_limit: Optional[int] = None,
        top_openings: Optional[int] = None,
        completed_scan_limit: Optional[int] = None,
    ):
        self.job_store = job_store
        self.recent_limit = settings.DASHBOARD_RECENT_LIMIT if recent_limit is None else recent_limit
        self.top_openings = settings.DASHBOARD_TOP_OPENINGS if top_openings is None else top_openings
        self.completed_scan_limit = (
            settings.DASHBOARD_COMPLETED_SCAN_LIMIT
            if completed_scan_limit is None
            else completed_scan_limit
        )

    def summary(self, owner_id: str) -> DashboardSummary:
        """Build the dashboard summary for one owner."""
        counts = self.job_store.count_by_status(owner_id)
        recent = self.job_store.list_for_owner(owner_id, limit=self.recent_limit)
        completed = self.job_store.list_for_owner(
            owner_id,
            status=AnalysisStatus.COMPLETED,
            limit=self.completed_scan_limit,
        )

        stats = DashboardStats(
            total_analyses=sum(counts.values()),
            completed=counts[AnalysisStatus.COMPLETED.value],
            pending=counts[AnalysisStatus.PENDING.value],
            processing=counts[AnalysisStatus.PROCESSING.value],
            failed=counts[AnalysisStatus.FAILED.value],
            win_rate=calculate_win_rate(completed),
            recent_analyses=[recent_analysis(job) for job in recent],
        )

        performance = performance_by_color(completed)
        has_performance = performance.white.total + performance.black.total > 0

        logger.debug(
            "Dashboard computed",
            owner_id=owner_id,
            total=stats.total_analyses,
            completed=stats.completed,
        )

        return DashboardSummary(
            stats=stats,
            most_played_openings=most_played_openings(completed, limit=self.top_openings),
            performance_by_color=performance if has_performance else None,
        )
