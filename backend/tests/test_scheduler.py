"""Tests for the task scheduler and collector wiring."""

import asyncio

import pytest

from bridge_collector.collector import build_scheduler, build_services
from bridge_collector.config import Settings
from bridge_collector.core.exceptions import IndexerUnavailable
from bridge_collector.core.scheduler import Scheduler, TaskState


class Recorder:
    """Async task body that counts calls and optionally fails or blocks."""

    def __init__(self, error=None):
        self.calls = 0
        self.error = error
        self.release = None

    async def __call__(self):
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        if self.error:
            raise self.error


@pytest.mark.asyncio
async def test_failing_task_runs_again():
    """Test an exception in one cycle does not stop the task from running next time."""
    scheduler = Scheduler()
    body = Recorder(error=RuntimeError("boom"))
    scheduler.add_task("deposits", body, interval=1)

    assert await scheduler.run_task("deposits") is True
    assert await scheduler.run_task("deposits") is True

    task = scheduler.tasks["deposits"]
    assert body.calls == 2
    assert task.failures == 2
    assert task.runs == 2
    assert task.last_error == "boom"
    assert task.state == TaskState.IDLE


@pytest.mark.asyncio
async def test_cycle_fatal_error_is_contained():
    scheduler = Scheduler()
    scheduler.add_task("withdrawals", Recorder(error=IndexerUnavailable("indexer down")), interval=1)

    assert await scheduler.run_task("withdrawals") is True
    assert scheduler.tasks["withdrawals"].failures == 1


@pytest.mark.asyncio
async def test_overlapping_tick_is_skipped():
    """Test a trigger during a run is skipped and the task runs again once idle."""
    scheduler = Scheduler()
    body = Recorder()
    body.release = asyncio.Event()
    scheduler.add_task("watcher", body, interval=1)

    first = asyncio.create_task(scheduler.run_task("watcher"))
    await asyncio.sleep(0)
    assert scheduler.tasks["watcher"].state == TaskState.RUNNING

    assert await scheduler.run_task("watcher") is False
    body.release.set()
    assert await first is True

    task = scheduler.tasks["watcher"]
    assert task.skipped == 1
    assert task.state == TaskState.IDLE
    assert await scheduler.run_task("watcher") is True
    assert body.calls == 2


@pytest.mark.asyncio
async def test_tasks_do_not_block_each_other():
    scheduler = Scheduler()
    slow = Recorder()
    slow.release = asyncio.Event()
    fast = Recorder()
    scheduler.add_task("deposits", slow, interval=1, group="reconciliation")
    scheduler.add_task("watcher", fast, interval=1)

    pending = asyncio.create_task(scheduler.run_task("deposits"))
    await asyncio.sleep(0)

    assert await scheduler.run_task("watcher") is True
    assert fast.calls == 1
    slow.release.set()
    await pending


@pytest.mark.asyncio
async def test_grouped_tasks_never_overlap():
    """Test a task is skipped while another task of its group is running."""
    scheduler = Scheduler()
    deposits = Recorder()
    deposits.release = asyncio.Event()
    withdrawals = Recorder()
    scheduler.add_task("deposits", deposits, interval=1, group="reconciliation")
    scheduler.add_task("withdrawals", withdrawals, interval=1, group="reconciliation")

    pending = asyncio.create_task(scheduler.run_task("deposits"))
    await asyncio.sleep(0)

    assert await scheduler.run_task("withdrawals") is False
    assert withdrawals.calls == 0
    assert scheduler.tasks["withdrawals"].skipped == 1

    deposits.release.set()
    await pending
    assert await scheduler.run_task("withdrawals") is True
    assert withdrawals.calls == 1


@pytest.mark.asyncio
async def test_cooldown_keeps_task_busy():
    scheduler = Scheduler(cooldown=0.05)
    scheduler.add_task("deposits", Recorder(), interval=1)

    first = asyncio.create_task(scheduler.run_task("deposits"))
    await asyncio.sleep(0.01)

    assert await scheduler.run_task("deposits") is False
    await first
    assert scheduler.tasks["deposits"].state == TaskState.IDLE


def test_add_task_validation():
    scheduler = Scheduler()
    scheduler.add_task("deposits", Recorder(), interval=1)

    with pytest.raises(ValueError):
        scheduler.add_task("deposits", Recorder(), interval=1)
    with pytest.raises(ValueError):
        scheduler.add_task("watcher", Recorder(), interval=0)


@pytest.mark.asyncio
async def test_start_registers_only_enabled_tasks():
    scheduler = Scheduler()
    scheduler.add_task("deposits", Recorder(), interval=60)
    scheduler.add_task("watcher", Recorder(), interval=60, enabled=False)

    scheduler.start()
    try:
        assert scheduler.running
        assert scheduler.job_ids() == ["deposits"]
    finally:
        scheduler.shutdown()


def test_build_scheduler_uses_flags_and_intervals():
    config = Settings(
        DATA_COLLECTOR_ENABLE_WATCHER=False,
        DATA_COLLECTOR_POLL_INTERVAL_SECONDS=30,
        DATA_COLLECTOR_DEPOSITS_INTERVAL_SECONDS=15,
        DATA_COLLECTOR_COOLDOWN_SECONDS=2,
    )
    reconciliation, watcher = build_services(config, session_factory=None)

    scheduler = build_scheduler(config, reconciliation, watcher)

    assert scheduler.cooldown == 2
    assert set(scheduler.tasks) == {"deposits", "withdrawals", "watcher"}
    assert scheduler.tasks["deposits"].interval == 15
    assert scheduler.tasks["withdrawals"].interval == 30
    assert scheduler.tasks["watcher"].enabled is False
    assert scheduler.tasks["deposits"].enabled is True
    assert scheduler.tasks["deposits"].group == "reconciliation"
    assert scheduler.tasks["withdrawals"].group == "reconciliation"
    assert scheduler.tasks["watcher"].group is None


def test_settings_task_interval_fallback():
    config = Settings(DATA_COLLECTOR_POLL_INTERVAL_SECONDS=45, DATA_COLLECTOR_WATCHER_INTERVAL_SECONDS=5)

    assert config.task_interval("watcher") == 5
    assert config.task_interval("deposits") == 45


def test_settings_strip_indexer_slash():
    config = Settings(INDEXER_API_URL="https://explorer.example/api/")

    assert config.INDEXER_API_URL == "https://explorer.example/api"
