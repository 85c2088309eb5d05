"""Error taxonomy for the analysis pipeline."""

from typing import Optional


class ChessReviewError(Exception):
    """Base exception for pipeline errors."""

    def __init__(
        self,
        message: str,
        code: str = "CHESS_REVIEW_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ReasoningError(ChessReviewError):
    """Base for failures of the analysis call."""


class ExternalServiceError(ReasoningError):
    """The reasoning service call itself failed (network, auth, quota, timeout)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", details=details)


class ResponseParseError(ReasoningError):
    """The reasoning service answered, but not with a usable JSON payload."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code="RESPONSE_PARSE_ERROR", details=details)


class PersistenceError(ChessReviewError):
    """The store was unavailable or rejected a write."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, code="PERSISTENCE_ERROR", details=details)


class NotFoundError(ChessReviewError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            details={"resource": resource, "id": identifier},
        )


class InvalidSubmissionError(ChessReviewError):
    """A submitted game record failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )
