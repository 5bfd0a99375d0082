"""Overdue sweep: periodic system audit entries for overdue tasks.

`sweep_overdue_tasks()` is one pass: select tasks with due_date < today and
status != done, then record one `task_overdue` entry per task with a null
actor. Entries are committed one at a time; a failed write is counted and the
pass moves on. Nothing remembers earlier passes, so a task that stays overdue
is logged again on every run.

Usage:
    scheduler = OverdueScheduler(bind=engine, interval_minutes=1)
    await scheduler.start()
    # ... app runs ...
    scheduler.stop()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from taskhub.models.task import Task
from taskhub.services.activity_log import ActivityLogService, describe_task_overdue
from taskhub.services.result import commit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepReport:
    found: int
    logged: int
    failed: int


def sweep_overdue_tasks(bind: Engine, today: date | None = None) -> SweepReport:
    """Run one sweep against `bind`. Blocking; call from a worker thread in async code."""
    cutoff = today or date.today()
    with Session(bind) as session:
        task_ids = list(
            session.exec(
                select(Task.id)
                .where(col(Task.due_date) < cutoff, Task.status != "done")
                .order_by(col(Task.due_date))
            ).all()
        )
        audit = ActivityLogService(session)
        logged = failed = 0
        for task_id in task_ids:
            audit.record_system("task_overdue", describe_task_overdue(task_id))
            if commit(session, "task_overdue") is None:
                logged += 1
                logger.info("Logged overdue task: %s", task_id)
            else:
                failed += 1

    report = SweepReport(found=len(task_ids), logged=logged, failed=failed)
    if report.failed:
        logger.warning("Overdue sweep: %d found, %d logged, %d failed", report.found, report.logged, report.failed)
    return report


class OverdueScheduler:
    """Runs the overdue sweep on a fixed interval inside the app's event loop."""

    def __init__(
        self,
        bind: Engine,
        interval_minutes: float = 1.0,
        enabled: bool = True,
    ) -> None:
        self.bind = bind
        self.interval_seconds = interval_minutes * 60
        self.enabled = enabled
        self._task: asyncio.Task | None = None
        self._running = False
        self.last_run_at: datetime | None = None
        self.last_report: SweepReport | None = None

    async def start(self) -> None:
        """Start the sweep loop as a background task."""
        if not self.enabled:
            logger.info("Overdue scheduler disabled")
            return

        if self._running:
            logger.warning("Overdue scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Overdue scheduler started (interval: %.1f minutes)",
            self.interval_seconds / 60,
        )

    def stop(self) -> None:
        """Stop the sweep loop."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info("Overdue scheduler stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                if not self._running:
                    break
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Overdue scheduler error: %s", e, exc_info=True)
                await asyncio.sleep(self.interval_seconds)

    async def run_once(self) -> SweepReport:
        """Execute one sweep off the event loop."""
        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, sweep_overdue_tasks, self.bind)
        self.last_run_at = datetime.now(timezone.utc)
        self.last_report = report
        if report.found:
            logger.info("Processed %d overdue task(s)", report.found)
        return report

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    def get_status(self) -> dict:
        """Get scheduler status for health checks."""
        return {
            "enabled": self.enabled,
            "running": self.is_running,
            "interval_minutes": self.interval_seconds / 60,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_report": (
                {
                    "found": self.last_report.found,
                    "logged": self.last_report.logged,
                    "failed": self.last_report.failed,
                }
                if self.last_report
                else None
            ),
        }
