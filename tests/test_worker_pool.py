import asyncio

import pytest

from credit_pipeline.llm.types import LLMResponse
from credit_pipeline.queue.models import JobStatus
from credit_pipeline.queue.submit import submit_analysis


class GaugedClient:
    """Tracks how many completions run at once."""

    def __init__(self, reply: str, delay_s: float = 0.2) -> None:
        self.reply = reply
        self.delay_s = delay_s
        self.active = 0
        self.peak = 0
        self.calls = 0

    async def acompletion(self, model, req, *, timeout_s, api_base=None, api_key=None):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay_s)
        finally:
            self.active -= 1
        return LLMResponse(text=self.reply, model=model, latency_ms=1)


@pytest.mark.asyncio
async def test_drain_never_exceeds_max_concurrent_jobs(store, make_pipeline, make_result):
    client = GaugedClient(make_result())
    pipeline = make_pipeline(client)
    job_ids = [(await submit_analysis(store, f"owner-{i}", f"report {i}"))[1] for i in range(5)]

    finished = await pipeline.pool.drain()

    assert client.peak == 2
    assert client.calls == 5
    assert {finished[j] for j in job_ids} == {JobStatus.COMPLETED}
    assert pipeline.pool.in_flight == 0


@pytest.mark.asyncio
async def test_drain_with_empty_queue_returns_immediately(store, make_pipeline, scripted_client):
    pipeline = make_pipeline(scripted_client())
    assert await pipeline.pool.drain() == {}


@pytest.mark.asyncio
async def test_run_picks_up_jobs_submitted_while_idle(store, make_pipeline, scripted_client, make_result):
    client = scripted_client(default=make_result())
    pipeline = make_pipeline(client)
    stop = asyncio.Event()
    runner = asyncio.create_task(pipeline.pool.run(stop))
    try:
        await asyncio.sleep(0.1)
        _, job_id = await submit_analysis(store, "owner-late", "report text")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + 3.0
        while (await store.get(job_id)).status is not JobStatus.COMPLETED and loop.time() < deadline:
            await asyncio.sleep(0.02)
    finally:
        stop.set()
        await asyncio.wait_for(runner, timeout=5.0)

    assert (await store.get(job_id)).status is JobStatus.COMPLETED
    assert pipeline.pool.processed == 1


@pytest.mark.asyncio
async def test_cancel_unknown_job_returns_false(store, make_pipeline, scripted_client):
    pipeline = make_pipeline(scripted_client())
    assert pipeline.pool.cancel("no-such-job") is False


@pytest.mark.asyncio
async def test_run_keeps_a_count_not_per_job_history(store, make_pipeline, scripted_client, make_result):
    client = scripted_client(default=make_result())
    pipeline = make_pipeline(client)
    job_ids = [(await submit_analysis(store, "owner-bulk", f"report {i}"))[1] for i in range(20)]

    stop = asyncio.Event()
    runner = asyncio.create_task(pipeline.pool.run(stop))
    try:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + 5.0
        while pipeline.pool.processed < 20 and loop.time() < deadline:
            await asyncio.sleep(0.02)
    finally:
        stop.set()
        await asyncio.wait_for(runner, timeout=5.0)

    assert pipeline.pool.processed == 20
    assert not hasattr(pipeline.pool, "finished")
    assert pipeline.pool._collector is None
    statuses = {(await store.get(j)).status for j in job_ids}
    assert statuses == {JobStatus.COMPLETED}


@pytest.mark.asyncio
async def test_each_drain_reports_only_its_own_jobs(store, make_pipeline, scripted_client, make_result):
    client = scripted_client(default=make_result())
    pipeline = make_pipeline(client)
    _, first = await submit_analysis(store, "owner-a", "report a")
    assert set(await pipeline.pool.drain()) == {first}

    _, second = await submit_analysis(store, "owner-b", "report b")
    assert await pipeline.pool.drain() == {second: JobStatus.COMPLETED}
