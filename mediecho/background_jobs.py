"""
Background job scheduler for periodic tasks.
Uses APScheduler to generate last week's briefs every Monday morning.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from mediecho.config import Settings, get_settings
from mediecho.database import SessionLocal
from mediecho.errors import DuplicateBriefError, NoLogsError
from mediecho.models import User
from mediecho.services.brief_service import BriefService
from mediecho.timeutils import previous_week_bounds

logger = logging.getLogger(__name__)


class BackgroundJobScheduler:
    """Manages background jobs for the application."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.scheduler = BackgroundScheduler(timezone=self.settings.app_timezone)

    def start(self):
        """Start the background job scheduler."""
        if self.scheduler.running:
            return

        if self.settings.weekly_briefs_enabled:
            self.scheduler.add_job(
                func=generate_weekly_briefs_job,
                kwargs={"settings": self.settings},
                trigger=CronTrigger(
                    day_of_week="mon",
                    hour=self.settings.weekly_briefs_hour,
                    timezone=self.settings.app_timezone,
                ),
                id="weekly_briefs_job",
                name="Generate last week's briefs",
                replace_existing=True,
            )
            logger.info(
                f"Weekly brief job scheduled for Mondays at "
                f"{self.settings.weekly_briefs_hour:02d}:00 {self.settings.app_timezone}"
            )

        self.scheduler.start()
        logger.info("Background job scheduler started")

    def stop(self):
        """Stop the background job scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Background job scheduler stopped")

    def run_weekly_briefs_now(self) -> Dict[str, int]:
        """Manually trigger the weekly brief job."""
        return generate_weekly_briefs_job(settings=self.settings)


def eligible_users(db: Session, settings: Settings):
    users = (
        db.query(User)
        .filter(
            User.subscription_plan.in_(sorted(settings.brief_plans)),
            User.subscription_status.in_(User.ENTITLED_STATUSES),
        )
        .order_by(User.id)
        .all()
    )
    return [user for user in users if user.wants_notifications()]


def generate_weekly_briefs_job(
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> Dict[str, int]:
    """
    Generate the previous calendar week's brief for every eligible user.

    One user's failure never stops the run.

    Returns:
        Counts of generated, skipped and failed briefs
    """
    settings = settings or get_settings()
    stats = {"generated": 0, "skipped": 0, "failed": 0}
    week_start, week_end = previous_week_bounds(settings.app_timezone, now)

    logger.info(
        f"Starting weekly brief job for {week_start:%Y-%m-%d}..{week_end:%Y-%m-%d}"
    )

    db = session_factory()
    try:
        service = BriefService(db, settings)
        for user in eligible_users(db, settings):
            try:
                service.generate_for_window(user, week_start, week_end)
                stats["generated"] += 1
            except (DuplicateBriefError, NoLogsError) as e:
                logger.info(f"Skipped weekly brief for user {user.id}: {e.message}")
                stats["skipped"] += 1
            except Exception as e:
                db.rollback()
                logger.error(f"Weekly brief failed for user {user.id}: {str(e)}")
                stats["failed"] += 1
    finally:
        db.close()

    logger.info(f"Weekly brief job completed: {stats}")
    return stats


# Global scheduler instance
scheduler = BackgroundJobScheduler()
