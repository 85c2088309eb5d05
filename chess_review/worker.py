"""Worker that feeds pending analysis jobs to the processor."""

import asyncio
from typing import Dict, Optional

import structlog

from chess_review.config import settings
from chess_review.errors import PersistenceError
from chess_review.services.analysis_service import AnalysisService

logger = structlog.get_logger()


class Worker:
    """Polls for PENDING jobs and processes them with a concurrency cap.

    A job may be dispatched more than once (by this worker or another
    process); the processor's atomic claim makes the extra runs no-ops.
    Jobs left in PROCESSING by a crash are not re-queued here.
    """

    def __init__(
        self,
        service: AnalysisService,
        max_concurrency: Optional[int] = None,
        poll_interval: Optional[float] = None,
        batch_size: Optional[int] = None,
    ):
        """Initialize worker.

        Args:
            service: Analysis service whose processor runs the jobs
            max_concurrency: Parallel job limit (defaults to QUEUE_MAX_CONCURRENCY)
            poll_interval: Idle sleep between polls (defaults to QUEUE_POLL_INTERVAL)
            batch_size: Pending ids fetched per poll (defaults to QUEUE_BATCH_SIZE)
        """
        self.service = service
        self.running = False
        self.active_jobs: Dict[str, asyncio.Task] = {}
        self.max_concurrency = (
            settings.QUEUE_MAX_CONCURRENCY if max_concurrency is None else max_concurrency
        )
        self.poll_interval = settings.QUEUE_POLL_INTERVAL if poll_interval is None else poll_interval
        self.batch_size = settings.QUEUE_BATCH_SIZE if batch_size is None else batch_size

    async def process_job(self, job_id: str) -> None:
        """Process a single job, logging instead of raising."""
        try:
            status = await self.service.process_job(job_id)
            if status is not None:
                logger.info("Job finished", job_id=job_id, status=status.value)
        except PersistenceError as e:
            # Terminal state not written; the job stays PROCESSING
            logger.error("Job result could not be saved", job_id=job_id, error=e.message)
        except Exception as e:
            logger.error("Job failed", job_id=job_id, error=str(e), exc_info=True)
        finally:
            self.active_jobs.pop(job_id, None)

    async def poll_once(self) -> int:
        """Dispatch pending jobs up to the free concurrency slots.

        Returns:
            Number of jobs started
        """
        free_slots = self.max_concurrency - len(self.active_jobs)
        if free_slots <= 0:
            return 0

        try:
            pending = await asyncio.to_thread(
                self.service.job_store.list_pending_ids, self.batch_size
            )
        except PersistenceError as e:
            logger.error("Failed to poll pending jobs", error=e.message)
            return 0

        started = 0
        for job_id in pending:
            if job_id in self.active_jobs:
                continue
            if started >= free_slots:
                break
            self.active_jobs[job_id] = asyncio.create_task(self.process_job(job_id))
            started += 1

        return started

    async def run(self) -> None:
        """Main worker loop."""
        self.running = True

        logger.info(
            "Worker started",
            max_concurrency=self.max_concurrency,
            poll_interval=self.poll_interval,
        )

        while self.running:
            started = await self.poll_once()
            if started == 0:
                await asyncio.sleep(self.poll_interval)
            else:
                # Let the new tasks claim their jobs before polling again
                await asyncio.sleep(0)

        logger.info("Worker stopped")

    async def stop(self) -> None:
        """Stop the worker gracefully."""
        self.running = False

        # Wait for active jobs to complete
        if self.active_jobs:
            logger.info("Waiting for active jobs to complete", count=len(self.active_jobs))
            await asyncio.gather(*self.active_jobs.values(), return_exceptions=True)

        logger.info("Worker shutdown complete")

    def get_status(self) -> dict:
        """Get worker status."""
        return {
            "running": self.running,
            "active_jobs": len(self.active_jobs),
            "max_concurrency": self.max_concurrency,
        }
