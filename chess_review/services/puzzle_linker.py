"""Turns puzzle candidates into stored puzzles and returns their ids."""

from typing import Any, Dict, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from chess_review.errors import PersistenceError
from chess_review.models import Puzzle
from chess_review.models.analysis_jobs import new_id
from chess_review.owners import GuestOwner, Owner
from chess_review.schemas import PuzzleCandidate
from chess_review.store import PuzzleStore

logger = structlog.get_logger()


class PuzzleLinker:
    """Persists puzzle candidates as independent records.

    Guests never get a puzzle library, so their candidates are dropped. A
    batch is saved all-or-nothing.
    """

    def __init__(self, puzzle_store: PuzzleStore):
        self.puzzle_store = puzzle_store

    def link(
        self,
        candidates: Sequence[Dict[str, Any]],
        owner: Owner,
        source_job_id: str,
        deadline: Optional[float] = None,
    ) -> List[str]:
        """Persist candidates and return the new puzzle ids in candidate order.

        A ``deadline`` (``time.monotonic()`` value) is handed to the store so a
        batch that outlives its caller is rolled back rather than committed.

        Raises:
            PersistenceError: If a candidate is malformed or the batch could
                not be written; nothing is saved in that case
        """
        if not candidates:
            return []

        if isinstance(owner, GuestOwner):
            logger.info(
                "Skipping puzzle save for guest owner",
                job_id=source_job_id,
                candidates=len(candidates),
            )
            return []

        try:
            validated = [PuzzleCandidate.model_validate(c) for c in candidates]
        except ValidationError as e:
            logger.warning(
                "Rejected puzzle batch",
                job_id=source_job_id,
                error_count=e.error_count(),
            )
            raise PersistenceError(
                f"Puzzle candidate rejected: {e.error_count()} validation error(s)",
                details={"job_id": source_job_id},
            ) from e

        puzzles = [
            Puzzle(
                id=new_id(),
                owner_id=owner.storage_id,
                source_job_id=source_job_id,
                title=candidate.title,
                description=candidate.description,
                fen=candidate.fen,
                solution=candidate.solution,
                hint=candidate.hint,
                difficulty=candidate.difficulty,
                theme=candidate.theme,
            )
            for candidate in validated
        ]
        puzzle_ids = [puzzle.id for puzzle in puzzles]

        self.puzzle_store.create_many(puzzles, deadline=deadline)

        logger.info(
            "Puzzles saved",
            job_id=source_job_id,
            owner_id=owner.storage_id,
            puzzle_ids=puzzle_ids,
        )
        return puzzle_ids
