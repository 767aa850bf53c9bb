"""Tests for the scheduled weekly brief job."""

from dataclasses import replace
from datetime import datetime

from apscheduler.triggers.cron import CronTrigger

from mediecho.background_jobs import (
    BackgroundJobScheduler,
    eligible_users,
    generate_weekly_briefs_job,
)
from mediecho.models import WeeklyBrief
from mediecho.services.brief_service import BriefService

# Monday Jan 15, 2024: the job covers Jan 8 - Jan 14
RUN_AT = datetime(2024, 1, 15, 6, 0)
LAST_WEEK = datetime(2024, 1, 9, 9, 0)


class TestEligibleUsers:
    """Tests for eligible_users."""

    def test_filters_plan_status_and_notifications(self, db, settings, make_user):
        pro = make_user(plan="pro", status="active")
        coach = make_user(plan="coach", status="trialing")
        make_user(plan="free", status="active")
        make_user(plan="pro", status="past_due")
        make_user(
            plan="pro",
            status="active",
            settings={"privacy_local_first": True, "notifications": False},
        )

        assert [u.id for u in eligible_users(db, settings)] == [pro.id, coach.id]


class TestGenerateWeeklyBriefsJob:
    """Tests for generate_weekly_briefs_job."""

    def test_generates_previous_week(self, db, settings, session_factory, make_user, make_log):
        with_logs = make_user(plan="pro", status="active")
        make_user(plan="coach", status="active")
        make_log(with_logs, LAST_WEEK, "symptom", "Headache", meta={"intensity": 8})
        make_log(with_logs, RUN_AT, "mood", "This week, not counted")

        stats = generate_weekly_briefs_job(settings, now=RUN_AT, session_factory=session_factory)

        assert stats == {"generated": 1, "skipped": 1, "failed": 0}
        brief = db.query(WeeklyBrief).one()
        assert brief.user_id == with_logs.id
        assert brief.week_start == datetime(2024, 1, 8)
        assert brief.week_end == datetime(2024, 1, 14, 23, 59, 59, 999999)
        assert brief.logs_count == 1

    def test_second_run_skips_existing(self, settings, session_factory, make_user, make_log):
        user = make_user(plan="pro", status="active")
        make_log(user, LAST_WEEK, "fitness", "Run")

        generate_weekly_briefs_job(settings, now=RUN_AT, session_factory=session_factory)
        stats = generate_weekly_briefs_job(settings, now=RUN_AT, session_factory=session_factory)

        assert stats == {"generated": 0, "skipped": 1, "failed": 0}

    def test_failure_does_not_stop_run(self, db, settings, session_factory, make_user, make_log, monkeypatch):
        first = make_user(plan="pro", status="active")
        second = make_user(plan="pro", status="active")
        make_log(first, LAST_WEEK, "fitness", "Run")
        make_log(second, LAST_WEEK, "fitness", "Swim")

        original = BriefService.generate_for_window

        def flaky(self, user, week_start, week_end):
            if user.id == first.id:
                raise RuntimeError("renderer crashed")
            return original(self, user, week_start, week_end)

        monkeypatch.setattr(BriefService, "generate_for_window", flaky)

        stats = generate_weekly_briefs_job(settings, now=RUN_AT, session_factory=session_factory)

        assert stats == {"generated": 1, "skipped": 0, "failed": 1}
        assert db.query(WeeklyBrief).one().user_id == second.id


class TestBackgroundJobScheduler:
    """Tests for job registration."""

    def test_job_registered_when_enabled(self, settings):
        scheduler = BackgroundJobScheduler(
            replace(settings, weekly_briefs_enabled=True, weekly_briefs_hour=7)
        )
        scheduler.start()
        try:
            job = scheduler.scheduler.get_job("weekly_briefs_job")
            assert job is not None
            assert isinstance(job.trigger, CronTrigger)
            assert str(job.trigger.fields[4]) == "mon"
            assert str(job.trigger.fields[5]) == "7"
        finally:
            scheduler.stop()

    def test_no_job_when_disabled(self, settings):
        scheduler = BackgroundJobScheduler(settings)
        scheduler.start()
        try:
            assert scheduler.scheduler.get_job("weekly_briefs_job") is None
        finally:
            scheduler.stop()

