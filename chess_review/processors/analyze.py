"""Analyze processor: drives one game through the review state machine."""

import asyncio
import json
import time
from typing import Any, Dict, List, Optional

from chess_review.config import settings
from chess_review.errors import PersistenceError, ReasoningError
from chess_review.integrations.reasoning import ReasoningClient
from chess_review.models import AnalysisJob, AnalysisStatus
from chess_review.models.base import utcnow
from chess_review.owners import owner_from_id
from chess_review.processors.base import BaseProcessor
from chess_review.schemas import GameMetadata
from chess_review.services.puzzle_linker import PuzzleLinker
from chess_review.store import JobStore


class AnalyzeProcessor(BaseProcessor):
    """Analyzes submitted games and links the generated puzzles.

    PENDING -> PROCESSING -> COMPLETED | FAILED. The claim is an atomic
    conditional write, so duplicate invocations for one job are no-ops.
    Puzzles are best effort: losing them never fails the job.
    """

    job_type = "analyze"

    def __init__(
        self,
        job_store: JobStore,
        reasoning: ReasoningClient,
        puzzle_linker: PuzzleLinker,
        reasoning_timeout: Optional[float] = None,
        puzzle_link_timeout: Optional[float] = None,
    ):
        super().__init__(job_store)
        self.reasoning = reasoning
        self.puzzle_linker = puzzle_linker
        self.reasoning_timeout = (
            settings.REASONING_TIMEOUT if reasoning_timeout is None else reasoning_timeout
        )
        self.puzzle_link_timeout = (
            settings.PUZZLE_LINK_TIMEOUT if puzzle_link_timeout is None else puzzle_link_timeout
        )

    async def process(self, job_id: str) -> Optional[AnalysisStatus]:
        """Process an analysis job.

        Args:
            job_id: Analysis job to run
        """
        job = await asyncio.to_thread(self.job_store.get, job_id)

        if job is None:
            # Late or duplicate delivery for a job that no longer exists
            self.logger.warning("Analysis job not found, skipping", job_id=job_id)
            return None

        if job.status != AnalysisStatus.PENDING.value:
            self.logger.info(
                "Analysis job already claimed, skipping",
                job_id=job_id,
                status=job.status,
            )
            return None

        claimed = await asyncio.to_thread(
            self.job_store.compare_and_set_status,
            job_id,
            AnalysisStatus.PENDING,
            AnalysisStatus.PROCESSING,
        )
        if not claimed:
            self.logger.info("Analysis job claimed by another worker", job_id=job_id)
            return None

        job.status = AnalysisStatus.PROCESSING.value

        self.logger.info(
            "Starting game analysis",
            job_id=job_id,
            owner_id=job.owner_id,
            player_name=job.player_name,
            player_color=job.player_color,
        )

        try:
            partial_result, candidates = await asyncio.wait_for(
                self.reasoning.analyze(
                    pgn=job.pgn,
                    metadata=GameMetadata.model_validate(job.metadata_dict),
                    player_name=job.player_name,
                    player_color=job.player_color,
                ),
                timeout=self.reasoning_timeout,
            )
        except ReasoningError as e:
            self.logger.error("Game analysis failed", job_id=job_id, error=e.message)
            return await self._fail(job, e.message)
        except asyncio.TimeoutError:
            message = f"Analysis timed out after {self.reasoning_timeout:g} seconds"
            self.logger.error("Game analysis timed out", job_id=job_id, timeout=self.reasoning_timeout)
            return await self._fail(job, message)
        except Exception as e:
            self.logger.error(
                "Unexpected error during game analysis",
                job_id=job_id,
                error=str(e),
                exc_info=True,
            )
            return await self._fail(job, f"Unexpected analysis error: {e}")

        puzzle_ids = await self._link_puzzles(job, candidates)
        return await self._complete(job, partial_result, puzzle_ids)

    async def _link_puzzles(
        self,
        job: AnalysisJob,
        candidates: List[Dict[str, Any]],
    ) -> List[str]:
        """Save puzzles for the job; any failure yields an empty reference list.

        The store gets the same deadline as the wait, so a batch still running
        when the wait expires rolls back instead of committing.
        """
        deadline = time.monotonic() + self.puzzle_link_timeout
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    self.puzzle_linker.link,
                    candidates,
                    owner_from_id(job.owner_id),
                    job.id,
                    deadline,
                ),
                timeout=self.puzzle_link_timeout,
            )
        except PersistenceError as e:
            self.logger.error(
                "Failed to save puzzles, completing without them",
                job_id=job.id,
                error=e.message,
            )
        except asyncio.TimeoutError:
            self.logger.error(
                "Saving puzzles timed out, completing without them",
                job_id=job.id,
                timeout=self.puzzle_link_timeout,
            )
        except Exception as e:
            self.logger.error(
                "Unexpected error saving puzzles, completing without them",
                job_id=job.id,
                error=str(e),
                exc_info=True,
            )
        return []

    async def _complete(
        self,
        job: AnalysisJob,
        partial_result: Dict[str, Any],
        puzzle_ids: List[str],
    ) -> AnalysisStatus:
        job.result = json.dumps({**partial_result, "puzzle_ids": puzzle_ids})
        job.error = None
        job.status = AnalysisStatus.COMPLETED.value
        job.completed_at = utcnow()
        await asyncio.to_thread(self.job_store.update, job)

        self.logger.info(
            "Game analysis complete",
            job_id=job.id,
            puzzle_count=len(puzzle_ids),
            puzzle_ids=puzzle_ids,
        )
        return AnalysisStatus.COMPLETED

    async def _fail(self, job: AnalysisJob, message: str) -> AnalysisStatus:
        job.error = message
        job.result = None
        job.status = AnalysisStatus.FAILED.value
        await asyncio.to_thread(self.job_store.update, job)

        self.logger.warning("Analysis job failed", job_id=job.id, error=message)
        return AnalysisStatus.FAILED
