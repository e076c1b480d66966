import logging
from datetime import date
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from colors import SeverityBand
from config import get_settings
from database import session_scope
from periods import local_today, month_start
from progress import BudgetProgress
from services import ReportService

logger = logging.getLogger(__name__)


class SchedulerManager:
    """Periodically recomputes budget progress for the current month.

    The last successful snapshot is kept on the manager; a failed run logs
    and leaves it untouched.
    """

    def __init__(self, today: Callable[[], date] = local_today) -> None:
        settings = get_settings()
        self.settings = settings
        self.today = today
        self.scheduler = BackgroundScheduler(timezone=settings.timezone)
        self.last_progress: tuple[BudgetProgress, ...] = ()

    def _bands(self) -> dict[str, SeverityBand]:
        return {row.category: row.band for row in self.last_progress}

    def refresh_progress(
        self, source: str = "manual"
    ) -> Optional[tuple[BudgetProgress, ...]]:
        month = month_start(self.today())
        try:
            with session_scope() as session:
                rows = ReportService(session).progress(month)
        except Exception:
            logger.exception(
                f"progress_refresh_failed: source={source} month={month.isoformat()}"
            )
            return None

        previous = self._bands()
        for row in rows:
            before = previous.get(row.category)
            if before is not None and before != row.band:
                logger.info(
                    f"progress_band_changed: category={row.category} "
                    f"from={before.value} to={row.band.value} ratio={row.ratio}"
                )
        self.last_progress = rows
        logger.debug(f"progress_refresh: source={source} categories={len(rows)}")
        return rows

    def start(self) -> None:
        self.refresh_progress("startup")

        trigger = IntervalTrigger(seconds=self.settings.progress_refresh_secs)
        self.scheduler.add_job(
            self.refresh_progress,
            trigger,
            args=["interval"],
            id="budget_progress_refresh",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )

        self.scheduler.start()
        logger.info(
            f"Scheduler started with progress refresh every "
            f"{self.settings.progress_refresh_secs}s"
        )

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
