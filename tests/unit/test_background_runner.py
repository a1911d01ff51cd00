"""BackgroundTaskRunner tests: detached work and its error channel."""

import asyncio

import pytest

from pastebin.core.background import BackgroundTaskRunner


@pytest.mark.asyncio
async def test_spawned_task_runs_after_caller_returns() -> None:
    runner = BackgroundTaskRunner()
    done = []

    async def work() -> None:
        await asyncio.sleep(0)
        done.append(True)

    runner.spawn(work(), name="work")
    assert runner.pending == 1
    await runner.drain()
    assert done == [True]
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_failure_is_recorded_not_raised() -> None:
    runner = BackgroundTaskRunner()

    async def boom() -> None:
        raise ValueError("nope")

    runner.spawn(boom(), name="boom")
    await runner.drain()

    assert len(runner.failures) == 1
    failure = runner.failures[0]
    assert failure.name == "boom"
    assert isinstance(failure.error, ValueError)


@pytest.mark.asyncio
async def test_failures_are_bounded() -> None:
    runner = BackgroundTaskRunner(max_failures=2)

    async def boom() -> None:
        raise ValueError("nope")

    for i in range(5):
        runner.spawn(boom(), name=f"boom-{i}")
    await runner.drain()

    assert [f.name for f in runner.failures] == ["boom-3", "boom-4"]


@pytest.mark.asyncio
async def test_drain_waits_for_tasks_spawned_meanwhile() -> None:
    runner = BackgroundTaskRunner()
    done = []

    async def child() -> None:
        done.append("child")

    async def parent() -> None:
        runner.spawn(child(), name="child")

    runner.spawn(parent(), name="parent")
    await runner.drain()
    assert done == ["child"]
