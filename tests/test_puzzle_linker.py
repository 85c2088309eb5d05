"""Puzzle linking: guest skip, ordering and batch atomicity."""

import pytest

from chess_review.errors import PersistenceError
from chess_review.owners import AuthenticatedOwner, GuestOwner
from chess_review.services.puzzle_linker import PuzzleLinker

from conftest import sample_puzzle


def test_links_candidates_in_order(puzzle_store):
    linker = PuzzleLinker(puzzle_store)

    ids = linker.link([sample_puzzle(1), sample_puzzle(2)], AuthenticatedOwner("user-1"), "job-1")

    assert len(ids) == 2
    assert len(set(ids)) == 2
    titles = [puzzle_store.get(puzzle_id).title for puzzle_id in ids]
    assert titles == ["Puzzle 1", "Puzzle 2"]
    for puzzle in puzzle_store.list_for_job("job-1"):
        assert puzzle.owner_id == "user-1"
        assert puzzle.source_job_id == "job-1"


def test_empty_candidates_is_a_noop(puzzle_store):
    assert PuzzleLinker(puzzle_store).link([], AuthenticatedOwner("user-1"), "job-1") == []


def test_guest_owner_gets_no_puzzles(puzzle_store):
    ids = PuzzleLinker(puzzle_store).link([sample_puzzle(1)], GuestOwner(), "job-1")

    assert ids == []
    assert puzzle_store.list_for_job("job-1") == []
    assert puzzle_store.list_for_owner("guest") == []


def test_difficulty_is_normalized(puzzle_store):
    ids = PuzzleLinker(puzzle_store).link(
        [sample_puzzle(1, difficulty=" Hard ")], AuthenticatedOwner("user-1"), "job-1"
    )
    assert puzzle_store.get(ids[0]).difficulty == "hard"


def test_invalid_candidate_rejects_whole_batch(puzzle_store):
    linker = PuzzleLinker(puzzle_store)
    bad = sample_puzzle(2)
    del bad["fen"]

    with pytest.raises(PersistenceError, match="rejected"):
        linker.link([sample_puzzle(1), bad], AuthenticatedOwner("user-1"), "job-1")

    assert puzzle_store.list_for_job("job-1") == []


def test_store_failure_surfaces_as_persistence_error(puzzle_store, monkeypatch):
    def broken(puzzles, deadline=None):
        raise PersistenceError("create puzzles failed: database is locked")

    monkeypatch.setattr(puzzle_store, "create_many", broken)

    with pytest.raises(PersistenceError):
        PuzzleLinker(puzzle_store).link([sample_puzzle(1)], AuthenticatedOwner("user-1"), "job-1")
