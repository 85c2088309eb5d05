"""Entry points used by collaborators: submit, process, poll, dashboard."""

import json
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog
from pydantic import ValidationError

from chess_review.database import SessionLocal
from chess_review.errors import InvalidSubmissionError, NotFoundError
from chess_review.integrations.claude import ClaudeGenerator, TextGenerator
from chess_review.integrations.reasoning import ReasoningClient
from chess_review.models import AnalysisJob, AnalysisStatus, Puzzle
from chess_review.models.analysis_jobs import new_id
from chess_review.owners import GuestOwner, Owner
from chess_review.processors.analyze import AnalyzeProcessor
from chess_review.schemas import DashboardSummary, GameMetadata
from chess_review.services.dashboard import DashboardAggregator
from chess_review.services.puzzle_linker import PuzzleLinker
from chess_review.store import JobStore, PuzzleStore

logger = structlog.get_logger()

PLAYER_COLORS = ("white", "black")


class AnalysisService:
    """Facade over the job pipeline.

    Collaborators are passed in; ``build`` wires the production defaults.
    """

    def __init__(
        self,
        job_store: JobStore,
        puzzle_store: PuzzleStore,
        processor: AnalyzeProcessor,
        dashboard: DashboardAggregator,
    ):
        self.job_store = job_store
        self.puzzle_store = puzzle_store
        self.processor = processor
        self.dashboard = dashboard

    @classmethod
    def build(
        cls,
        session_factory=SessionLocal,
        generator: Optional[TextGenerator] = None,
        **processor_options,
    ) -> "AnalysisService":
        """Wire stores, reasoning client, linker and processor together.

        Args:
            session_factory: Factory for database sessions
            generator: Reasoning service (defaults to Claude)
            **processor_options: Timeouts forwarded to AnalyzeProcessor
        """
        job_store = JobStore(session_factory)
        puzzle_store = PuzzleStore(session_factory)
        processor = AnalyzeProcessor(
            job_store,
            ReasoningClient(generator or ClaudeGenerator()),
            PuzzleLinker(puzzle_store),
            **processor_options,
        )
        return cls(job_store, puzzle_store, processor, DashboardAggregator(job_store))

    def submit_job(
        self,
        pgn: str,
        metadata: Union[GameMetadata, Dict[str, Any], None],
        player_name: str,
        player_color: str,
        owner: Owner,
        batch_id: Optional[str] = None,
    ) -> str:
        """Create a PENDING analysis job and return its id.

        Raises:
            InvalidSubmissionError: If the game record is unusable
        """
        if not pgn or not pgn.strip():
            raise InvalidSubmissionError("PGN is required", field="pgn")
        if player_color not in PLAYER_COLORS:
            raise InvalidSubmissionError(
                "Player color must be 'white' or 'black'", field="player_color"
            )

        if not isinstance(metadata, GameMetadata):
            try:
                metadata = GameMetadata.model_validate(metadata or {})
            except ValidationError as e:
                raise InvalidSubmissionError(
                    f"Invalid game metadata: {e.error_count()} validation error(s)",
                    field="metadata",
                ) from e

        job = AnalysisJob(
            id=new_id(),
            owner_id=owner.storage_id,
            batch_id=batch_id,
            status=AnalysisStatus.PENDING.value,
            pgn=pgn,
            player_name=(player_name or "").strip() or "Player",
            player_color=player_color,
            game_metadata=json.dumps(metadata.model_dump()),
        )
        self.job_store.create(job)

        logger.info(
            "Analysis job submitted",
            job_id=job.id,
            owner_id=job.owner_id,
            batch_id=batch_id,
        )
        return job.id

    async def process_job(self, job_id: str) -> Optional[AnalysisStatus]:
        """Run the state machine for one job. Safe to call more than once."""
        return await self.processor.process(job_id)

    def get_dashboard(self, owner_id: str) -> DashboardSummary:
        return self.dashboard.summary(owner_id)

    def get_job(self, job_id: str) -> AnalysisJob:
        job = self.job_store.get(job_id)
        if job is None:
            raise NotFoundError("Analysis", job_id)
        return job

    def get_statuses(self, job_ids: Iterable[str]) -> Dict[str, str]:
        """Current status of each known job id, for client polling."""
        return self.job_store.get_statuses(job_ids)

    def get_user_puzzles(self, owner: Owner) -> List[Puzzle]:
        if isinstance(owner, GuestOwner):
            return []
        return self.puzzle_store.list_for_owner(owner.storage_id)
