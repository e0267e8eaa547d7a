"""SqlJobStore: claim order, atomic claims, transitions and attempt bounds."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from credit_pipeline.db.exceptions import AttemptsExhaustedError, InvalidTransitionError, NotFoundError
from credit_pipeline.queue.models import JobStatus


@pytest.mark.asyncio
async def test_claim_order_priority_then_fifo(store):
    # StepClock hands out increasing timestamps: C is oldest, then A, then B.
    c = await store.enqueue("subj-c", "owner", priority=5)
    a = await store.enqueue("subj-a", "owner", priority=5)
    b = await store.enqueue("subj-b", "owner", priority=10)
    order = []
    while (job := await store.claim_next()) is not None:
        order.append(job.id)
    assert order == [b, c, a]


@pytest.mark.asyncio
async def test_claim_sets_processing_and_started_at(store):
    job_id = await store.enqueue("subj", "owner", priority=0, max_attempts=2)
    job = await store.claim_next()
    assert job.id == job_id
    assert job.status is JobStatus.PROCESSING
    assert job.started_at is not None
    assert job.max_attempts == 2
    assert await store.claim_next() is None


def test_concurrent_claims_never_share_a_job(store):
    ids = {store.enqueue_sync(f"subj-{i}", "owner") for i in range(12)}

    def claim_all():
        got = []
        while (job := store.claim_next_sync()) is not None:
            got.append(job.id)
        return got

    with ThreadPoolExecutor(max_workers=6) as ex:
        results = list(ex.map(lambda _: claim_all(), range(6)))
    claimed = [job_id for batch in results for job_id in batch]
    assert sorted(claimed) == sorted(ids)
    assert len(claimed) == len(set(claimed))


@pytest.mark.asyncio
async def test_terminal_jobs_are_immutable(store):
    job_id = await store.enqueue("subj", "owner")
    await store.claim_next()
    await store.transition(job_id, JobStatus.ANALYZING)
    await store.transition(job_id, JobStatus.COMPLETED)
    job = await store.get(job_id)
    assert job.status is JobStatus.COMPLETED
    assert job.completed_at is not None
    with pytest.raises(InvalidTransitionError):
        await store.transition(job_id, JobStatus.QUEUED)
    with pytest.raises(InvalidTransitionError):
        await store.increment_attempts(job_id)


@pytest.mark.asyncio
async def test_disallowed_transition_rejected(store):
    job_id = await store.enqueue("subj", "owner")
    with pytest.raises(InvalidTransitionError):
        await store.transition(job_id, JobStatus.COMPLETED)
    with pytest.raises(NotFoundError):
        await store.transition("missing", JobStatus.FAILED)


@pytest.mark.asyncio
async def test_requeue_records_error_and_clears_started_at(store):
    job_id = await store.enqueue("subj", "owner")
    await store.claim_next()
    await store.transition(job_id, JobStatus.QUEUED, error="timeout: slow upstream")
    job = await store.get(job_id)
    assert job.status is JobStatus.QUEUED
    assert job.started_at is None
    assert job.last_error == "timeout: slow upstream"


@pytest.mark.asyncio
async def test_attempts_never_exceed_max(store):
    job_id = await store.enqueue("subj", "owner", max_attempts=2)
    await store.claim_next()
    assert await store.increment_attempts(job_id) == 1
    assert await store.increment_attempts(job_id) == 2
    with pytest.raises(AttemptsExhaustedError):
        await store.increment_attempts(job_id)
    assert (await store.get(job_id)).attempts == 2


@pytest.mark.asyncio
async def test_enqueue_rejects_zero_attempt_budget(store):
    with pytest.raises(ValueError):
        await store.enqueue("subj", "owner", max_attempts=0)


@pytest.mark.asyncio
async def test_count_by_status(store):
    first = await store.enqueue("s1", "owner")
    await store.enqueue("s2", "owner")
    await store.claim_next()
    await store.transition(first, JobStatus.FAILED, error="x")
    counts = await store.count_by_status()
    assert counts[JobStatus.QUEUED] == 1
    assert counts[JobStatus.FAILED] == 1
    assert counts[JobStatus.COMPLETED] == 0
    assert await store.get("missing") is None
