"""
app/scheduler/jobs.py

APScheduler-based scheduler for the daily guardian attendance alert.

Schedule
--------
  daily_attendance_alerts: ALERT_JOB_HOUR:ALERT_JOB_MINUTE every day in
  ALERT_JOB_TIMEZONE (default 18:00 Asia/Kolkata). Holidays are skipped by
  the job itself.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import AlertJobSettings, get_alert_job_settings
from app.services.attendance_alert_service import get_attendance_alert_service

logger = logging.getLogger(__name__)

ATTENDANCE_ALERT_JOB_ID = "daily_attendance_alerts"


# ---------------------------------------------------------------------------
# Job: Daily guardian attendance alerts
# ---------------------------------------------------------------------------


def run_daily_attendance_alerts() -> None:
    """
    Email and SMS guardians of students marked absent or late today.
    Failures are logged; the scheduler keeps running.
    """
    logger.info("Scheduler: daily_attendance_alerts starting")
    try:
        summary = get_attendance_alert_service().run()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: daily_attendance_alerts failed")
        return
    logger.info(
        "Scheduler: daily_attendance_alerts complete skipped_holiday=%s students=%s",
        summary.skipped_holiday,
        summary.students,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(settings: AlertJobSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler and register the alert job when it is enabled.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = settings or get_alert_job_settings()
    scheduler = BackgroundScheduler(timezone=settings.timezone)

    if not settings.enabled:
        logger.info("Scheduler: daily_attendance_alerts disabled by ALERT_JOB_ENABLED")
        return scheduler

    scheduler.add_job(
        run_daily_attendance_alerts,
        trigger="cron",
        hour=settings.hour,
        minute=settings.minute,
        id=ATTENDANCE_ALERT_JOB_ID,
        name="Daily guardian attendance alerts",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    return scheduler
