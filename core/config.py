"""
Application configuration using Pydantic Settings
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.base import DestinationTable


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # GitHub
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_ORG_NAME: str = "hatena"
    GITHUB_GRAPHQL_ENDPOINT: str = "https://api.github.com/graphql"

    # BigQuery
    GCP_PROJECT_ID: str = "pull-request-analysis-sample"
    BQ_DATASET: str = "source__github"

    # Import range (ISO 8601)
    START_DATE: Optional[str] = None
    END_DATE: Optional[str] = None
    USE_REINDEX_TABLE: bool = False

    # Environment
    LOG_LEVEL: str = "INFO"

    # Import tuning
    CONCURRENT_FETCH_COUNT: int = 10
    BATCH_DELAY_SECONDS: float = 6.0
    RATE_LIMIT_LOG_EVERY: int = 5
    MAX_ATTEMPTS: int = 3
    REQUEST_TIMEOUT_SECONDS: float = 3600.0
    COARSE_WINDOW_DAYS: int = 7
    FINE_WINDOW_HOURS: int = 1
    PAGE_SIZE: int = 100
    NESTED_PAGE_SIZE: int = 100
    TEAM_PAGE_SIZE: int = 10

    # Scheduler
    SCHEDULE_HOUR_UTC: int = 1

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class PipelineConfig(BaseModel):
    """
    Immutable configuration value threaded through every pipeline component.

    Built once at startup by build_pipeline_config(); nothing downstream of
    it reads the environment.
    """

    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = None
    org_name: str
    graphql_endpoint: str
    project_id: str
    dataset: str
    table_name: str

    start: datetime
    end: datetime

    concurrency: int = 10
    batch_delay_seconds: float = 6.0
    rate_limit_log_every: int = 5
    max_attempts: int = 3
    request_timeout_seconds: float = 3600.0
    coarse_window: timedelta = timedelta(days=7)
    fine_window: timedelta = timedelta(hours=1)
    page_size: int = 100
    nested_page_size: int = 100
    team_page_size: int = 10


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime, treating naive values as UTC"""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def start_of_today(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def build_pipeline_config(
    settings: Settings,
    now: Optional[datetime] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> PipelineConfig:
    """
    Resolve settings into a PipelineConfig.

    Range defaults: end is today 00:00 UTC and start is one day before end.
    Explicit start/end arguments take precedence over START_DATE/END_DATE.
    """
    if end is None:
        end = parse_timestamp(settings.END_DATE) if settings.END_DATE else start_of_today(now)
    if start is None:
        start = parse_timestamp(settings.START_DATE) if settings.START_DATE else end - timedelta(days=1)

    table = DestinationTable.PULL_REQUESTS_REINDEX if settings.USE_REINDEX_TABLE else DestinationTable.PULL_REQUESTS

    return PipelineConfig(
        github_token=settings.GITHUB_TOKEN,
        org_name=settings.GITHUB_ORG_NAME,
        graphql_endpoint=settings.GITHUB_GRAPHQL_ENDPOINT,
        project_id=settings.GCP_PROJECT_ID,
        dataset=settings.BQ_DATASET,
        table_name=table.value,
        start=start,
        end=end,
        concurrency=settings.CONCURRENT_FETCH_COUNT,
        batch_delay_seconds=settings.BATCH_DELAY_SECONDS,
        rate_limit_log_every=settings.RATE_LIMIT_LOG_EVERY,
        max_attempts=settings.MAX_ATTEMPTS,
        request_timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
        coarse_window=timedelta(days=settings.COARSE_WINDOW_DAYS),
        fine_window=timedelta(hours=settings.FINE_WINDOW_HOURS),
        page_size=settings.PAGE_SIZE,
        nested_page_size=settings.NESTED_PAGE_SIZE,
        team_page_size=settings.TEAM_PAGE_SIZE,
    )


settings = Settings()
