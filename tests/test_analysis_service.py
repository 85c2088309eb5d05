"""Submission, lookup and polling entry points."""

import pytest

from chess_review.errors import InvalidSubmissionError, NotFoundError
from chess_review.models import AnalysisStatus
from chess_review.owners import AuthenticatedOwner, GuestOwner

from conftest import SAMPLE_PGN


def test_submit_creates_pending_job(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)

    job_id = submit(service, batch_id="batch-1")
    job = service.get_job(job_id)

    assert job.status == "PENDING"
    assert job.pgn == SAMPLE_PGN
    assert job.owner_id == "user-1"
    assert job.batch_id == "batch-1"
    assert job.player_color == "white"
    assert job.metadata_dict["opening"] == "Ruy Lopez"
    assert job.result is None and job.error is None
    assert two_puzzle_generator.prompts == []


def test_submit_fills_metadata_defaults(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)

    job = service.get_job(submit(service, metadata=None, player_name="  "))

    assert job.player_name == "Player"
    assert job.metadata_dict["white"] == "Unknown"
    assert job.metadata_dict["result"] == "*"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"pgn": "   "}, "pgn"),
        ({"player_color": "green"}, "player_color"),
        ({"metadata": {"white": ["not", "a", "name"]}}, "metadata"),
    ],
)
def test_submit_rejects_invalid_games(make_service, submit, two_puzzle_generator, overrides, field):
    service = make_service(two_puzzle_generator)

    with pytest.raises(InvalidSubmissionError) as exc_info:
        submit(service, **overrides)

    assert exc_info.value.details == {"field": field}


def test_get_job_raises_not_found(make_service, two_puzzle_generator):
    with pytest.raises(NotFoundError):
        make_service(two_puzzle_generator).get_job("missing")


@pytest.mark.asyncio
async def test_get_statuses_for_polling(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)
    done = submit(service)
    waiting = submit(service)
    await service.process_job(done)

    assert service.get_statuses([done, waiting, "unknown"]) == {
        done: AnalysisStatus.COMPLETED.value,
        waiting: AnalysisStatus.PENDING.value,
    }


@pytest.mark.asyncio
async def test_user_puzzles(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)
    await service.process_job(submit(service))

    assert len(service.get_user_puzzles(AuthenticatedOwner("user-1"))) == 2
    assert service.get_user_puzzles(AuthenticatedOwner("user-2")) == []
    assert service.get_user_puzzles(GuestOwner()) == []
