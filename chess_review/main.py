"""Main entry point for the analysis worker service."""

import asyncio
import logging
import signal
import sys

import structlog

from chess_review.config import settings
from chess_review.database import SessionLocal, init_db
from chess_review.services.analysis_service import AnalysisService
from chess_review.worker import Worker


def configure_logging() -> None:
    """Route structlog through stdlib logging with JSON or console output."""
    # Configure stdlib logging level (required for structlog.stdlib.filter_by_level)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.LOG_FORMAT == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


async def main() -> None:
    """Main entry point."""
    configure_logging()
    init_db()

    service = AnalysisService.build(SessionLocal)
    worker = Worker(service)

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()

    def shutdown_handler():
        logger.info("Shutdown signal received")
        asyncio.create_task(worker.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_handler)

    try:
        await worker.run()
    except Exception as e:
        logger.error("Worker service error", error=str(e), exc_info=True)
        await worker.stop()
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
