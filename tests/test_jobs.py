import asyncio
import logging

from chatbot_server.jobs.runner import JobRunner, JobStatus, job_counts


async def test_successful_job_is_recorded():
    runner = JobRunner()

    async def work():
        await asyncio.sleep(0)
        return 42

    job = runner.spawn("upsert", work)
    await runner.drain()

    assert job.status is JobStatus.SUCCEEDED
    assert job.started_at is not None and job.finished_at >= job.started_at
    assert job.error is None
    assert runner.get(job.id) is job
    assert runner.pending_count == 0


async def test_failure_is_logged_and_not_raised(caplog):
    caplog.set_level(logging.INFO, logger="chatbot.jobs")
    runner = JobRunner()

    async def work():
        raise RuntimeError("embedding service down")

    job = runner.spawn("upsert", work)
    await runner.drain()

    assert job.status is JobStatus.FAILED
    assert job.error == "RuntimeError: embedding service down"
    failures = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(failures) == 1
    assert failures[0].exc_info is not None


async def test_spawn_returns_before_work_runs():
    runner = JobRunner()
    release = asyncio.Event()

    async def work():
        await release.wait()

    job = runner.spawn("getanswer", work)
    assert job.status is JobStatus.PENDING

    await asyncio.sleep(0)
    assert job.status is JobStatus.RUNNING

    release.set()
    await runner.drain()
    assert job.status is JobStatus.SUCCEEDED


async def test_jobs_run_concurrently():
    runner = JobRunner()
    release = asyncio.Event()
    started = []

    async def work(n):
        started.append(n)
        await release.wait()

    runner.spawn("upsert", lambda: work(1))
    runner.spawn("upsert", lambda: work(2))
    await asyncio.sleep(0)

    assert sorted(started) == [1, 2]
    release.set()
    await runner.drain()


async def test_history_drops_oldest_finished_jobs():
    runner = JobRunner(max_history=2)

    async def work():
        return None

    first = runner.spawn("a", work)
    await runner.drain()
    second = runner.spawn("b", work)
    await runner.drain()
    third = runner.spawn("c", work)
    await runner.drain()

    assert runner.get(first.id) is None
    assert [j.id for j in runner.list_jobs()] == [second.id, third.id]


async def test_history_keeps_unfinished_jobs():
    runner = JobRunner(max_history=1)
    release = asyncio.Event()

    async def work():
        await release.wait()

    first = runner.spawn("a", work)
    second = runner.spawn("b", work)

    assert runner.get(first.id) is first
    assert runner.get(second.id) is second
    release.set()
    await runner.drain()


async def test_shutdown_cancels_unfinished_jobs():
    runner = JobRunner()

    async def work():
        await asyncio.sleep(3600)

    job = runner.spawn("upsert", work)
    await asyncio.sleep(0)
    await runner.shutdown()

    assert job.status is JobStatus.FAILED
    assert job.error == "cancelled"
    assert runner.pending_count == 0


def test_job_counts():
    runner = JobRunner()
    assert job_counts(runner.list_jobs()) == {
        "pending": 0,
        "running": 0,
        "succeeded": 0,
        "failed": 0,
    }
