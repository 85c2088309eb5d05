"""Chess game review pipeline: analysis jobs, puzzles and dashboards."""

__version__ = "0.1.0"
