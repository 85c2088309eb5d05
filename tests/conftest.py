"""Pytest fixtures: file-backed SQLite per test, fake reasoning service."""

import asyncio
import json
import os

import pytest

# Keep the module-level engine away from a real database (set before import)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "console")

from chess_review.database import build_engine, build_session_factory, init_db
from chess_review.owners import AuthenticatedOwner
from chess_review.services.analysis_service import AnalysisService
from chess_review.store import JobStore, PuzzleStore

SAMPLE_PGN = """[Event "Club Championship"]
[White "Alice"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 4. Ba4 Nf6 5. O-O Be7 6. Re1 b5 7. Bb3 d6 1-0"""

SAMPLE_METADATA = {
    "white": "Alice",
    "black": "Bob",
    "result": "1-0",
    "event": "Club Championship",
    "date": "2026.03.14",
    "eco": "C84",
    "opening": "Ruy Lopez",
}


def sample_puzzle(index: int = 1, **overrides) -> dict:
    puzzle = {
        "title": f"Puzzle {index}",
        "description": "Find the winning continuation",
        "fen": "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3",
        "solution": "Bb5",
        "hint": "Pin the knight",
        "difficulty": "medium",
        "theme": "Pin",
    }
    puzzle.update(overrides)
    return puzzle


def sample_payload(puzzles=None) -> dict:
    payload = {
        "summary": "Alice played a solid Ruy Lopez and converted the extra space.",
        "phases": [
            {"name": "Opening", "moves": "1-7", "evaluation": "Accurate", "key_ideas": ["Develop fast"]},
            {"name": "Middlegame", "moves": "8-25", "evaluation": "Strong", "key_ideas": ["Kingside pressure"]},
            {"name": "Endgame", "moves": "26-40", "evaluation": "Clean", "key_ideas": ["Activate the king"]},
        ],
        "key_moments": [
            {"move_number": 5, "move": "O-O", "fen": "", "evaluation": "+0.3", "comment": "Safe king", "is_mistake": False},
            {"move_number": 12, "move": "Nxe5", "fen": "", "evaluation": -0.8, "comment": "Premature", "is_mistake": True},
            {"move_number": 20, "move": "Qh5", "fen": "", "evaluation": "+2.1", "comment": "Decisive", "is_mistake": False},
        ],
        "recommendations": ["Check opponent threats", "Study rook endgames", "Castle earlier"],
    }
    if puzzles is not None:
        payload["puzzles"] = puzzles
    return payload


def wrap_response(payload: dict) -> str:
    """Prose-wrapped JSON, the way the model tends to answer."""
    return f"Here is the analysis you asked for:\n```json\n{json.dumps(payload)}\n```\nGood luck!"


class FakeGenerator:
    """Stands in for the reasoning service."""

    def __init__(self, response=None, error=None, delay=0.0, on_call=None):
        self.response = response
        self.error = error
        self.delay = delay
        self.on_call = on_call
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.on_call is not None:
            self.on_call()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'chess_review.db'}")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def job_store(session_factory):
    return JobStore(session_factory)


@pytest.fixture
def puzzle_store(session_factory):
    return PuzzleStore(session_factory)


@pytest.fixture
def owner():
    return AuthenticatedOwner("user-1")


@pytest.fixture
def two_puzzle_generator():
    return FakeGenerator(response=wrap_response(sample_payload([sample_puzzle(1), sample_puzzle(2)])))


@pytest.fixture
def make_service(session_factory):
    """Build an AnalysisService over the test database."""

    def _make(generator, **options) -> AnalysisService:
        return AnalysisService.build(session_factory, generator=generator, **options)

    return _make


@pytest.fixture
def submit(owner):
    """Submit the sample game, with per-call overrides."""

    def _submit(service: AnalysisService, **overrides) -> str:
        params = {
            "pgn": SAMPLE_PGN,
            "metadata": dict(SAMPLE_METADATA),
            "player_name": "Alice",
            "player_color": "white",
            "owner": owner,
        }
        params.update(overrides)
        return service.submit_job(**params)

    return _submit
