"""Record stores for analysis jobs and puzzles.

Each call opens its own session from the injected factory, so the stores are
safe to use from worker threads. Driver errors surface as PersistenceError.
"""

import time
from contextlib import contextmanager
from typing import Callable, Dict, Generator, Iterable, List, Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chess_review.database import SessionLocal
from chess_review.errors import PersistenceError
from chess_review.models import ALLOWED_TRANSITIONS, AnalysisJob, AnalysisStatus, Puzzle
from chess_review.models.base import utcnow

logger = structlog.get_logger()


@contextmanager
def session_scope(
    session_factory: Callable[[], Session],
    action: str,
    **context,
) -> Generator[Session, None, None]:
    """Open a session, roll back and wrap driver errors on failure."""
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store operation failed", action=action, error=str(e), **context)
        raise PersistenceError(f"{action} failed: {e}", details=context) from e
    finally:
        db.close()


class JobStore:
    """Durable home of AnalysisJob records; the source of truth for status."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def create(self, job: AnalysisJob) -> AnalysisJob:
        with session_scope(self.session_factory, "create job", job_id=job.id) as db:
            db.add(job)
            db.commit()
            db.refresh(job)
            db.expunge(job)
        return job

    def get(self, job_id: str) -> Optional[AnalysisJob]:
        with session_scope(self.session_factory, "get job", job_id=job_id) as db:
            job = db.get(AnalysisJob, job_id)
            if job is not None:
                db.expunge(job)
            return job

    def update(self, job: AnalysisJob) -> AnalysisJob:
        """Replace the stored row with the given record."""
        job.updated_at = utcnow()
        with session_scope(self.session_factory, "update job", job_id=job.id) as db:
            merged = db.merge(job)
            db.commit()
            db.expunge(merged)
        return merged

    def compare_and_set_status(
        self,
        job_id: str,
        expected: AnalysisStatus,
        new: AnalysisStatus,
    ) -> bool:
        """Move a job from ``expected`` to ``new`` in a single conditional write.

        Returns:
            True if this call made the transition, False if the job was not
            in ``expected`` (or does not exist)

        Raises:
            ValueError: If the transition is not part of the state machine
        """
        if new not in ALLOWED_TRANSITIONS[expected]:
            raise ValueError(f"Illegal status transition {expected.value} -> {new.value}")

        with session_scope(
            self.session_factory, "claim job", job_id=job_id, status=new.value
        ) as db:
            result = db.execute(
                update(AnalysisJob)
                .where(AnalysisJob.id == job_id, AnalysisJob.status == expected.value)
                .values(status=new.value, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            db.commit()
            return result.rowcount == 1

    def list_for_owner(
        self,
        owner_id: str,
        status: Optional[AnalysisStatus] = None,
        limit: Optional[int] = None,
    ) -> List[AnalysisJob]:
        """Jobs of one owner, newest first."""
        query = select(AnalysisJob).where(AnalysisJob.owner_id == owner_id)
        if status is not None:
            query = query.where(AnalysisJob.status == status.value)
        query = query.order_by(AnalysisJob.created_at.desc())
        if limit is not None:
            query = query.limit(limit)

        with session_scope(self.session_factory, "list jobs", owner_id=owner_id) as db:
            jobs = list(db.scalars(query))
            for job in jobs:
                db.expunge(job)
            return jobs

    def count_by_status(self, owner_id: str) -> Dict[str, int]:
        """Job counts per status for one owner; every status is present."""
        query = (
            select(AnalysisJob.status, func.count())
            .where(AnalysisJob.owner_id == owner_id)
            .group_by(AnalysisJob.status)
        )
        counts = {status.value: 0 for status in AnalysisStatus}
        with session_scope(self.session_factory, "count jobs", owner_id=owner_id) as db:
            for status, count in db.execute(query):
                counts[status] = count
        return counts

    def get_statuses(self, job_ids: Iterable[str]) -> Dict[str, str]:
        """Status per job id; unknown ids are left out."""
        ids = list(job_ids)
        if not ids:
            return {}
        query = select(AnalysisJob.id, AnalysisJob.status).where(AnalysisJob.id.in_(ids))
        with session_scope(self.session_factory, "get statuses", count=len(ids)) as db:
            return {job_id: status for job_id, status in db.execute(query)}

    def list_pending_ids(self, limit: int) -> List[str]:
        """Oldest pending job ids first."""
        query = (
            select(AnalysisJob.id)
            .where(AnalysisJob.status == AnalysisStatus.PENDING.value)
            .order_by(AnalysisJob.created_at.asc())
            .limit(limit)
        )
        with session_scope(self.session_factory, "list pending jobs") as db:
            return list(db.scalars(query))


class PuzzleStore:
    """Storage for Puzzle records. Puzzles are insert-only."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def create_many(
        self,
        puzzles: List[Puzzle],
        deadline: Optional[float] = None,
    ) -> List[Puzzle]:
        """Insert a batch in one transaction: either all rows land or none do.

        Args:
            puzzles: Rows to insert
            deadline: ``time.monotonic()`` value after which the batch is
                rolled back instead of committed
        """
        with session_scope(self.session_factory, "create puzzles", count=len(puzzles)) as db:
            db.add_all(puzzles)
            db.flush()
            if deadline is not None and time.monotonic() > deadline:
                db.rollback()
                logger.warning("Puzzle batch past its deadline, rolled back", count=len(puzzles))
                raise PersistenceError(
                    "create puzzles failed: deadline exceeded",
                    details={"count": len(puzzles)},
                )
            db.commit()
            for puzzle in puzzles:
                db.refresh(puzzle)
                db.expunge(puzzle)
        return puzzles

    def get(self, puzzle_id: str) -> Optional[Puzzle]:
        with session_scope(self.session_factory, "get puzzle", puzzle_id=puzzle_id) as db:
            puzzle = db.get(Puzzle, puzzle_id)
            if puzzle is not None:
                db.expunge(puzzle)
            return puzzle

    def list_for_owner(self, owner_id: str) -> List[Puzzle]:
        """Puzzles of one owner, newest first."""
        query = (
            select(Puzzle)
            .where(Puzzle.owner_id == owner_id)
            .order_by(Puzzle.created_at.desc())
        )
        with session_scope(self.session_factory, "list puzzles", owner_id=owner_id) as db:
            puzzles = list(db.scalars(query))
            for puzzle in puzzles:
                db.expunge(puzzle)
            return puzzles

    def list_for_job(self, job_id: str) -> List[Puzzle]:
        query = select(Puzzle).where(Puzzle.source_job_id == job_id)
        with session_scope(self.session_factory, "list job puzzles", job_id=job_id) as db:
            puzzles = list(db.scalars(query))
            for puzzle in puzzles:
                db.expunge(puzzle)
            return puzzles
