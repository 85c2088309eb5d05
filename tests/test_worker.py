"""Polling worker dispatch."""

import asyncio

import pytest

from chess_review.worker import Worker

from conftest import FakeGenerator, sample_payload, wrap_response


@pytest.mark.asyncio
async def test_poll_once_processes_pending_jobs(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)
    job_ids = [submit(service) for _ in range(3)]
    worker = Worker(service, max_concurrency=5, poll_interval=0.01)

    started = await worker.poll_once()
    await asyncio.gather(*list(worker.active_jobs.values()))

    assert started == 3
    assert worker.active_jobs == {}
    assert set(service.get_statuses(job_ids).values()) == {"COMPLETED"}


@pytest.mark.asyncio
async def test_poll_once_respects_concurrency(make_service, submit):
    generator = FakeGenerator(response=wrap_response(sample_payload()), delay=0.05)
    service = make_service(generator)
    for _ in range(3):
        submit(service)
    worker = Worker(service, max_concurrency=2, poll_interval=0.01)

    assert await worker.poll_once() == 2
    assert await worker.poll_once() == 0

    await asyncio.gather(*list(worker.active_jobs.values()))
    assert await worker.poll_once() == 1
    await asyncio.gather(*list(worker.active_jobs.values()))

    assert len(generator.prompts) == 3


@pytest.mark.asyncio
async def test_run_and_stop(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)
    job_id = submit(service)
    worker = Worker(service, max_concurrency=2, poll_interval=0.01)

    task = asyncio.create_task(worker.run())
    for _ in range(200):
        if service.get_job(job_id).status == "COMPLETED":
            break
        await asyncio.sleep(0.01)
    await worker.stop()
    await asyncio.wait_for(task, timeout=1)

    assert service.get_job(job_id).status == "COMPLETED"
    assert worker.get_status()["running"] is False


@pytest.mark.asyncio
async def test_zero_concurrency_is_not_replaced_by_default(make_service, submit, two_puzzle_generator):
    service = make_service(two_puzzle_generator)
    job_id = submit(service)
    worker = Worker(service, max_concurrency=0, poll_interval=0.01)

    assert await worker.poll_once() == 0
    assert worker.get_status()["max_concurrency"] == 0
    assert service.get_job(job_id).status == "PENDING"
