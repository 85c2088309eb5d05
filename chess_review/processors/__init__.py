"""Job processors for the analysis pipeline.

1. AnalyzeProcessor - Reviews a submitted game via Claude and links puzzles
"""

from .base import BaseProcessor
from .analyze import AnalyzeProcessor

__all__ = [
    "BaseProcessor",
    "AnalyzeProcessor",
]
