"""Base processor class for job processors."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from chess_review.models import AnalysisStatus
from chess_review.store import JobStore


class BaseProcessor(ABC):
    """Abstract base class for job processors."""

    # Override in subclasses
    job_type: str = "base"

    def __init__(self, job_store: JobStore):
        """Initialize processor with the job store.

        Args:
            job_store: Store holding the jobs this processor transitions
        """
        self.job_store = job_store
        self.logger = structlog.get_logger().bind(processor=self.job_type)

    @abstractmethod
    async def process(self, job_id: str) -> Optional[AnalysisStatus]:
        """Process a job.

        Args:
            job_id: ID of the job to process

        Returns:
            The terminal status committed, or None if the call was a no-op

        Raises:
            PersistenceError: If the final state could not be written
                (the caller is expected to retry)
        """
        pass
