# ============================================================================
# File: ingestion/runner.py
# Description: Import orchestrators for pull requests and teams
# ============================================================================
"""
Import runners - orchestrate fetch, serialize, delete-then-load.

Pull request import:
1. Partition the range into coarse (weekly) windows, newest first
2. Partition each coarse window into fine (hourly) windows
3. Fetch fine windows in throttled concurrent batches
4. Replace the coarse window's slice of the destination table

Coarse windows run strictly one after another, so the destination table is
never written by two windows at once. Any unrecovered error ends the run;
reruns over the same range are safe because every window is replaced.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from core.config import PipelineConfig
from core.exceptions import ExtractionError, IngestionException, LoadError
from ingestion.extractors.github_client import GitHubGraphQLClient
from ingestion.extractors.pull_requests import PullRequestExtractor
from ingestion.extractors.teams import TeamExtractor
from ingestion.loaders.bigquery_loader import IdempotentLoader
from ingestion.loaders.warehouse import BigQueryWarehouse
from ingestion.partitioner import RangePartitioner
from ingestion.rate_limit import AsyncTokenBucket
from ingestion.retry import RetryingExecutor
from ingestion.throttler import ConcurrencyThrottler
from ingestion.transformers.serializer import RecordSerializer
from models.base import DestinationTable, ImportStatus, WindowOrder
from models.window import TimeWindow

logger = logging.getLogger(__name__)


class PullRequestImportRunner:
    """
    Pull request import orchestrator

    Responsibilities:
    - Window the requested range at two granularities
    - Drive throttled fetches for each coarse window
    - Replace each coarse window idempotently
    """

    def __init__(
        self,
        config: PipelineConfig,
        extractor: PullRequestExtractor,
        throttler: ConcurrencyThrottler,
        loader: IdempotentLoader,
        serializer: Optional[RecordSerializer] = None,
    ):
        self.config = config
        self.extractor = extractor
        self.throttler = throttler
        self.loader = loader
        self.serializer = serializer or RecordSerializer()
        self.coarse_partitioner = RangePartitioner(config.coarse_window, WindowOrder.DESCENDING)
        self.fine_partitioner = RangePartitioner(config.fine_window, WindowOrder.ASCENDING)

    @classmethod
    def from_config(cls, config: PipelineConfig, client, warehouse) -> "PullRequestImportRunner":
        retry = RetryingExecutor(max_attempts=config.max_attempts)
        throttler = ConcurrencyThrottler(
            concurrency=config.concurrency,
            limiter=AsyncTokenBucket(config.concurrency, config.batch_delay_seconds),
            quota_probe=client.fetch_rate_limit,
            telemetry_every=config.rate_limit_log_every,
        )
        return cls(
            config=config,
            extractor=PullRequestExtractor(client, config, retry),
            throttler=throttler,
            loader=IdempotentLoader(warehouse, config.table_name),
        )

    async def run(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Import pull requests merged in [start, end).

        Returns:
            Dictionary with run statistics:
            - status: "success" or "noop"
            - windows: Number of coarse windows imported
            - records_loaded: Rows loaded across all windows
            - table: Destination table

        Raises:
            ExtractionError: A window could not be fetched
            LoadError: A delete or load failed
            IngestionException: Any other error
        """
        start = start or self.config.start
        end = end or self.config.end

        windows = self.coarse_partitioner.split(start, end)
        if not windows:
            logger.warning(f"Empty import range {start.isoformat()}〜{end.isoformat()}, nothing to do")
            return {
                "status": ImportStatus.NOOP.value,
                "windows": 0,
                "records_loaded": 0,
                "table": self.loader.table_name,
            }

        records_loaded = 0
        try:
            for window in windows:
                records_loaded += await self.import_window(window)

        except (ExtractionError, LoadError) as e:
            logger.error(
                f"Import failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except IngestionException:
            raise

        except Exception as e:
            logger.exception("Unexpected error in import")
            raise IngestionException(
                "Unexpected error in import",
                context={
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                    "records_loaded": records_loaded
                },
                original_exception=e
            )

        result = {
            "status": ImportStatus.SUCCESS.value,
            "windows": len(windows),
            "records_loaded": records_loaded,
            "table": self.loader.table_name,
        }
        logger.info(
            f"Import completed: {result['windows']} windows, "
            f"{records_loaded} records loaded into {result['table']}"
        )
        return result

    async def import_window(self, window: TimeWindow) -> int:
        """Fetch one coarse window and replace its slice of the table"""
        logger.info(f"importing... {window}")

        fine_windows = self.fine_partitioner.split(window.start, window.end)
        nodes = await self.throttler.run(fine_windows, self.extractor.fetch_window)

        # fine windows share inclusive boundaries upstream
        rows = self.serializer.pull_request_rows(nodes)
        if len(rows) < len(nodes):
            logger.debug(f"Dropped {len(nodes) - len(rows)} duplicate pull requests")

        return await self.loader.replace_window(window, rows)


class TeamImportRunner:
    """Full replace of the teams table"""

    def __init__(
        self,
        extractor: TeamExtractor,
        loader: IdempotentLoader,
        serializer: Optional[RecordSerializer] = None,
    ):
        self.extractor = extractor
        self.loader = loader
        self.serializer = serializer or RecordSerializer()

    @classmethod
    def from_config(cls, config: PipelineConfig, client, warehouse) -> "TeamImportRunner":
        retry = RetryingExecutor(max_attempts=config.max_attempts)
        return cls(
            extractor=TeamExtractor(client, config, retry),
            loader=IdempotentLoader(warehouse, DestinationTable.TEAMS.value),
        )

    async def run(self) -> Dict[str, Any]:
        teams = await self.extractor.fetch_all()
        rows = self.serializer.team_rows(teams)
        records_loaded = await self.loader.replace_table(rows)
        return {
            "status": ImportStatus.SUCCESS.value,
            "records_loaded": records_loaded,
            "table": self.loader.table_name,
        }


async def run_pull_request_import(config: PipelineConfig) -> Dict[str, Any]:
    """Build clients from `config` and import its range"""
    warehouse = BigQueryWarehouse.from_config(config)
    try:
        async with GitHubGraphQLClient.from_config(config) as client:
            runner = PullRequestImportRunner.from_config(config, client, warehouse)
            return await runner.run()
    finally:
        warehouse.close()


async def run_team_import(config: PipelineConfig) -> Dict[str, Any]:
    """Build clients from `config` and replace the teams table"""
    warehouse = BigQueryWarehouse.from_config(config)
    try:
        async with GitHubGraphQLClient.from_config(config) as client:
            runner = TeamImportRunner.from_config(config, client, warehouse)
            return await runner.run()
    finally:
        warehouse.close()
