"""Periodic trigger for the reconciliation job."""

from __future__ import annotations

import asyncio
import contextlib
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from walletroles.domain.reconciliation import ReconciliationJob
    from walletroles.domain.retry import Sleep

log = getLogger(__name__)


class ReconciliationScheduler:
    """Runs ``job.run_all()`` once on start, then every ``interval_seconds``."""

    def __init__(
        self,
        job: ReconciliationJob,
        *,
        interval_seconds: float,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._job = job
        self._interval = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self.completed_runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop(), name="role-reconciliation")
        log.info("Reconciliation scheduler started (every %.0fs)", self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        log.info("Reconciliation scheduler stopped")

    async def wait(self) -> None:
        """Block until the loop ends (it only ends when stopped)."""

        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _run_loop(self) -> None:
        while True:
            try:
                report = await self._job.run_all()
            except Exception:  # noqa: BLE001
                log.exception("Scheduled reconciliation crashed")
            else:
                log.info("Scheduled reconciliation %s", report.status)
            self.completed_runs += 1
            await self._sleep(self._interval)
