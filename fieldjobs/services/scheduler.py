"""
Periodic re-evaluation of job statuses.

The scheduler owns the timer; each tick takes one reading of the clock and
re-evaluates the whole job collection against it.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from fieldjobs.core import Thresholds
from .jobs import JobService
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


class ReevaluationScheduler:
    """Re-evaluates every job on a fixed interval"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock,
        interval_seconds: float = 60,
        thresholds: Optional[Thresholds] = None,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.thresholds = thresholds
        self.last_result: Optional[Dict[str, int]] = None
        self._task: Optional[asyncio.Task] = None

    def run_once(self) -> Dict[str, int]:
        """One full pass over the job collection"""
        started = time.perf_counter()
        now = self.clock.now()
        db = self.session_factory()
        try:
            result = JobService.reevaluate_all(db, now, self.thresholds)
        finally:
            db.close()

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        prometheus_metrics.record_reevaluation_pass(result["changed"], result["skipped"], duration_ms)
        self.last_result = result
        logger.info("Re-evaluation pass complete", extra={
            "component": "scheduler",
            "latency_ms": duration_ms,
            **result,
        })
        return result

    async def _loop(self):
        while True:
            try:
                await asyncio.to_thread(self.run_once)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Re-evaluation pass failed")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
            logger.info(f"Re-evaluation scheduler started (every {self.interval_seconds}s)")
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Re-evaluation scheduler stopped")
