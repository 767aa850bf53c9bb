"""
Weekly Brief Service

Generates, lists and removes weekly briefs. Generation runs synchronously:
duplicate check, log fetch, summary, PDF, encryption, then a single insert.
A brief row is only ever written once everything before it has succeeded.
"""

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mediecho.config import Settings
from mediecho.errors import (
    DuplicateBriefError,
    NoLogsError,
    NotFoundError,
    ValidationError,
)
from mediecho.models import User, WeeklyBrief
from mediecho.services.brief_storage import BriefStorage
from mediecho.services.encryption import SummaryCipher
from mediecho.services.log_store import get_logs_in_window
from mediecho.services.pdf_renderer import render_brief_pdf
from mediecho.services.summarizer import summarize_logs
from mediecho.timeutils import (
    local_end_of_day,
    local_start_of_day,
    utc_now,
    week_bounds,
)

logger = logging.getLogger(__name__)

MAX_LISTED_BRIEFS = 20


@lru_cache(maxsize=8)
def get_summary_cipher(secret: str) -> SummaryCipher:
    """Cipher for a given secret; key derivation is slow so instances are reused."""
    return SummaryCipher(secret)


class BriefService:
    def __init__(
        self,
        db: Session,
        settings: Settings,
        cipher: Optional[SummaryCipher] = None,
        storage: Optional[BriefStorage] = None,
    ):
        self.db = db
        self.settings = settings
        self.cipher = cipher or get_summary_cipher(settings.secret_key)
        self.storage = storage or BriefStorage(settings.briefs_dir)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def resolve_window(
        self,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[datetime, datetime]:
        """Window bounds as naive UTC.

        Missing dates fall back to the current calendar week independently.
        An explicit end date covers that whole day.
        """
        tz_name = self.settings.app_timezone
        default_start, default_end = week_bounds(tz_name, now)

        start = (
            local_start_of_day(week_start_date, tz_name)
            if week_start_date
            else default_start
        )
        end = (
            local_end_of_day(week_end_date, tz_name) if week_end_date else default_end
        )

        if start > end:
            raise ValidationError("weekStartDate must be on or before weekEndDate")
        return start, end

    def find_existing(
        self, user_id: int, week_start: datetime, week_end: datetime
    ) -> Optional[WeeklyBrief]:
        return (
            self.db.query(WeeklyBrief)
            .filter(
                WeeklyBrief.user_id == user_id,
                WeeklyBrief.week_start == week_start,
                WeeklyBrief.week_end == week_end,
            )
            .first()
        )

    def generate(
        self,
        user: User,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> WeeklyBrief:
        """
        Generate the brief for one user and window.

        Raises:
            ValidationError: start after end
            DuplicateBriefError: a brief already exists for the exact window
            NoLogsError: too few logs in the window
        """
        week_start, week_end = self.resolve_window(week_start_date, week_end_date, now)
        return self.generate_for_window(user, week_start, week_end)

    def generate_for_window(
        self, user: User, week_start: datetime, week_end: datetime
    ) -> WeeklyBrief:
        existing = self.find_existing(user.id, week_start, week_end)
        if existing:
            raise DuplicateBriefError(existing.id)

        logs = get_logs_in_window(self.db, user.id, week_start, week_end)
        min_logs = self.settings.brief_min_logs
        if len(logs) < min_logs:
            if min_logs > 1:
                raise NoLogsError(
                    f"At least {min_logs} logs are needed to generate a brief"
                )
            raise NoLogsError()

        summary = summarize_logs(logs)
        generated_at = utc_now()

        pdf_bytes = render_brief_pdf(
            user.display_name,
            summary,
            week_start,
            week_end,
            generated_at,
            tz_name=self.settings.app_timezone,
        )
        pdf_path = self.storage.save(user.id, pdf_bytes)

        brief = WeeklyBrief(
            user_id=user.id,
            week_start=week_start,
            week_end=week_end,
            summary=self.cipher.encrypt_summary(summary),
            encrypted=True,
            pdf_path=pdf_path,
            status="completed",
            logs_count=len(logs),
            generated_at=generated_at,
        )
        self.db.add(brief)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with an identical request; the winner's row stands.
            self.db.rollback()
            self.storage.delete(pdf_path)
            winner = self.find_existing(user.id, week_start, week_end)
            if winner is None:
                raise
            raise DuplicateBriefError(winner.id)

        self.db.refresh(brief)
        logger.info(
            f"Generated weekly brief {brief.id} for user {user.id} "
            f"({brief.logs_count} logs, {week_start:%Y-%m-%d}..{week_end:%Y-%m-%d})"
        )
        return brief

    # ------------------------------------------------------------------
    # Reads and deletes
    # ------------------------------------------------------------------

    def list_briefs(self, user_id: int, limit: int = MAX_LISTED_BRIEFS) -> List[WeeklyBrief]:
        return (
            self.db.query(WeeklyBrief)
            .filter(WeeklyBrief.user_id == user_id)
            .order_by(WeeklyBrief.week_end.desc(), WeeklyBrief.id.desc())
            .limit(limit)
            .all()
        )

    def get_brief(self, user_id: int, brief_id: int) -> WeeklyBrief:
        """Owner-scoped lookup; another user's brief is simply not found."""
        brief = (
            self.db.query(WeeklyBrief)
            .filter(WeeklyBrief.id == brief_id, WeeklyBrief.user_id == user_id)
            .first()
        )
        if not brief:
            raise NotFoundError("Brief not found")
        return brief

    def get_pdf_path(self, user_id: int, brief_id: int) -> Tuple[WeeklyBrief, str]:
        brief = self.get_brief(user_id, brief_id)
        if not self.storage.exists(brief.pdf_path):
            raise NotFoundError("PDF file not found")
        return brief, brief.pdf_path

    def read_summary(self, brief: WeeklyBrief) -> Dict[str, Any]:
        if not brief.summary:
            return {}
        if not brief.encrypted:
            return brief.summary
        return self.cipher.decrypt_summary(brief.summary)

    def delete_brief(self, user_id: int, brief_id: int) -> None:
        brief = self.get_brief(user_id, brief_id)
        pdf_path = brief.pdf_path

        self.db.delete(brief)
        self.db.commit()

        self.storage.delete(pdf_path)
        logger.info(f"Deleted weekly brief {brief_id} for user {user_id}")
