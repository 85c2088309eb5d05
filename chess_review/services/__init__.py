"""Services built on top of the stores."""

from .dashboard import DashboardAggregator
from .puzzle_linker import PuzzleLinker

__all__ = ["DashboardAggregator", "PuzzleLinker"]
