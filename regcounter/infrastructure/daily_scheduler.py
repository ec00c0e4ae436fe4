"""Daily Scheduler — fires the engine's update for "yesterday" once a day.

Invariants:
    - Exactly one job, at daily_update_time local time, on a private schedule.Scheduler
      (never the module-level default scheduler)
    - The day passed to update_day is always today() - 1; the engine itself never
      looks at the clock
    - A failing run is logged and the thread keeps going; nothing is retried

Design Decisions:
    - schedule + one daemon thread: a single daily job needs no job store or executor
    - today is injectable so tests pin the date without freezing time globally
"""

import logging
import threading
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Protocol

import schedule

logger = logging.getLogger(__name__)


class DailyUpdater(Protocol):
    def update_day(self, target_date: date) -> object: ...


class DailyUpdateScheduler:
    """Background thread running the daily incremental update."""

    def __init__(
        self,
        updater: DailyUpdater,
        at: str = "00:05",
        today: Callable[[], date] = date.today,
        poll_seconds: float = 30.0,
    ):
        self._updater = updater
        self._today = today
        self._poll_seconds = poll_seconds
        self._scheduler = schedule.Scheduler()
        self._job = self._scheduler.every().day.at(at).do(self.run_once)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def next_run(self) -> datetime | None:
        return self._job.next_run

    def run_once(self) -> None:
        """Update yesterday. Called by the scheduler; safe to call directly."""
        yesterday = self._today() - timedelta(days=1)
        logger.info(
            f"Running daily registration update for {yesterday.isoformat()}",
            extra={"date_key": yesterday.isoformat()},
        )
        try:
            self._updater.update_day(yesterday)
        except Exception as e:
            logger.error(
                f"Daily registration update for {yesterday.isoformat()} failed: {e}",
                exc_info=True,
                extra={"date_key": yesterday.isoformat()},
            )

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="regcounter-daily-update", daemon=True,
        )
        self._thread.start()
        logger.info(f"Daily registration update scheduled, next run {self.next_run}")

    def stop(self, timeout: float | None = 10.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self._poll_seconds):
            self._scheduler.run_pending()
