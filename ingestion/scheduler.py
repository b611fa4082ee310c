import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import Settings, build_pipeline_config, settings, start_of_today
from ingestion.runner import run_pull_request_import, run_team_import

logger = logging.getLogger(__name__)


class ImportScheduler:
    def __init__(self, app_settings: Settings = settings):
        self.settings = app_settings
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    async def run_pull_request_job(self):
        """Job importing pull requests merged yesterday (UTC)"""
        end = start_of_today()
        config = build_pipeline_config(self.settings, start=end - timedelta(days=1), end=end)
        logger.info(f"Scheduler: Starting pull request import {config.start.isoformat()}〜{config.end.isoformat()}")
        try:
            result = await run_pull_request_import(config)
            logger.info(f"Scheduler: pull request import finished - {result}")
        except Exception as e:
            logger.error(f"Scheduler: pull request import failed - {e}")

    async def run_teams_job(self):
        """Job replacing the teams table"""
        config = build_pipeline_config(self.settings)
        logger.info("Scheduler: Starting teams import")
        try:
            result = await run_team_import(config)
            logger.info(f"Scheduler: teams import finished - {result}")
        except Exception as e:
            logger.error(f"Scheduler: teams import failed - {e}")

    def start(self):
        """Start the scheduler"""
        hour = self.settings.SCHEDULE_HOUR_UTC
        self.scheduler.add_job(
            self.run_pull_request_job,
            trigger=CronTrigger(hour=hour, minute=0, timezone="UTC"),
            id="pull_request_import",
            replace_existing=True
        )
        self.scheduler.add_job(
            self.run_teams_job,
            trigger=CronTrigger(hour=hour, minute=30, timezone="UTC"),
            id="teams_import",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Import Scheduler started (daily at {hour:02d}:00 UTC)")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Import Scheduler stopped")
