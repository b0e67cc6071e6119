"""Interval scheduler for the collector tasks."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bridge_collector.core.exceptions import CycleFatalError

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class ScheduledTask:
    """A periodic task and its run bookkeeping."""
    name: str
    func: Callable[[], Awaitable[Any]]
    interval: float
    enabled: bool = True
    group: Optional[str] = None  # Tasks sharing a group never run at the same time
    state: TaskState = TaskState.IDLE
    runs: int = 0
    failures: int = 0
    skipped: int = 0
    last_error: Optional[str] = None


class Scheduler:
    """
    Runs each registered task on its own interval.

    A task never overlaps with itself, nor with another task of its group:
    a trigger that fires while such a run (or its cool-down) is still in
    progress is skipped, not queued. Every run has its own exception
    boundary, so a failing cycle is logged and the task simply runs again
    on the next trigger.
    """

    def __init__(self, cooldown: float = 0.0):
        self.cooldown = cooldown
        self.tasks: Dict[str, ScheduledTask] = {}
        self._scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Prevent job pileup
                "max_instances": 1,  # Single instance enforcement
                "misfire_grace_time": None,
            },
            timezone="UTC"
        )

    def add_task(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval: float,
        enabled: bool = True,
        group: Optional[str] = None
    ) -> ScheduledTask:
        if name in self.tasks:
            raise ValueError(f"Task {name} already registered")
        if interval <= 0:
            raise ValueError(f"Task {name} interval must be positive, got {interval}")
        task = ScheduledTask(name=name, func=func, interval=interval, enabled=enabled, group=group)
        self.tasks[name] = task
        return task

    async def run_task(self, name: str) -> bool:
        """
        Run one cycle of a task unless it or a task of its group is running.

        Returns:
            True if the cycle ran (successfully or not), False if it was skipped
        """
        task = self.tasks[name]
        busy = self._busy_peer(task)
        if busy is not None:
            task.skipped += 1
            logger.info(f"Task {busy.name} still running, skipping this tick of {name}")
            return False

        task.state = TaskState.RUNNING
        try:
            logger.info(f"{datetime.now(timezone.utc).isoformat()} - running task {name}")
            await task.func()
            task.last_error = None
        except CycleFatalError as e:
            task.failures += 1
            task.last_error = str(e)
            logger.error(f"Task {name} cycle aborted: {e}")
        except Exception as e:
            task.failures += 1
            task.last_error = str(e)
            logger.error(f"Task {name} failed with unexpected error: {e}", exc_info=True)
        finally:
            task.runs += 1
            try:
                if self.cooldown > 0:
                    await asyncio.sleep(self.cooldown)
            finally:
                task.state = TaskState.IDLE
        return True

    def _busy_peer(self, task: ScheduledTask) -> Optional[ScheduledTask]:
        """The running task that blocks ``task``: itself, or a member of its group."""
        if task.state == TaskState.RUNNING:
            return task
        if task.group is None:
            return None
        for other in self.tasks.values():
            if other.group == task.group and other.state == TaskState.RUNNING:
                return other
        return None

    def start(self) -> None:
        """Register enabled tasks with the interval scheduler and start it. Needs a running loop."""
        for task in self.tasks.values():
            if not task.enabled:
                logger.info(f"Task {task.name} disabled")
                continue
            self._scheduler.add_job(
                self.run_task,
                IntervalTrigger(seconds=task.interval),
                args=[task.name],
                id=task.name,
                name=task.name,
                next_run_time=datetime.now(timezone.utc),
                replace_existing=True,
            )
            logger.info(f"Task {task.name} scheduled every {task.interval}s")
        self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def job_ids(self) -> list:
        return [job.id for job in self._scheduler.get_jobs()]
