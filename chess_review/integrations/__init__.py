"""External service integrations."""

from .claude import ClaudeGenerator, TextGenerator
from .reasoning import ReasoningClient

__all__ = ["ClaudeGenerator", "ReasoningClient", "TextGenerator"]
