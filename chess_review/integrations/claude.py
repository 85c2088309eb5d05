"""Claude AI integration used as the reasoning service."""

import asyncio
from typing import Optional, Protocol

import structlog
from anthropic import Anthropic, APIError

from chess_review.config import settings
from chess_review.errors import ExternalServiceError

logger = structlog.get_logger()


class TextGenerator(Protocol):
    """A stateless text generation service: one prompt in, free-form text out."""

    async def generate(self, prompt: str) -> str:
        ...


class ClaudeGenerator:
    """Text generation through the Anthropic Messages API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY)
            model: Model name (defaults to CLAUDE_MODEL)
            max_tokens: Response token cap (defaults to CLAUDE_MAX_TOKENS)
            timeout: Per-request timeout in seconds (defaults to REASONING_TIMEOUT)
        """
        api_key = api_key or settings.ANTHROPIC_API_KEY
        self.model = model or settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS if max_tokens is None else max_tokens
        self.timeout = settings.REASONING_TIMEOUT if timeout is None else timeout
        self.client = (
            Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)
            if api_key
            else None
        )

    async def generate(self, prompt: str) -> str:
        """Send a single user message and return the text of the reply.

        Raises:
            ExternalServiceError: If the client is not configured, the API call
                fails, or the reply carries no text
        """
        if self.client is None:
            raise ExternalServiceError("ANTHROPIC_API_KEY is not set")

        try:
            response = await asyncio.to_thread(
                self.client.messages.create,
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": prompt,
                    }
                ],
            )
        except APIError as e:
            logger.error("Claude API error during game analysis", error=str(e))
            raise ExternalServiceError(f"Reasoning service call failed: {str(e)}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise ExternalServiceError("Reasoning service returned an empty response")

        logger.debug(
            "Claude response received",
            model=self.model,
            stop_reason=getattr(response, "stop_reason", None),
            length=len(text),
        )
        return text
