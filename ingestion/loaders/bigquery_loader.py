"""
Idempotent delete-then-load into BigQuery
"""

import logging
from typing import Sequence

from pydantic import BaseModel

from core.exceptions import LoadJobError
from ingestion.transformers.serializer import to_json_lines
from models.window import TimeWindow
from schemas.warehouse import PARTITION_COLUMN

logger = logging.getLogger(__name__)


class IdempotentLoader:
    """
    Replace a slice of a warehouse table with freshly fetched rows.

    Ensures:
    - Re-running the same window leaves exactly one copy of each row
    - An empty row set never creates or loads anything
    - Load job errors abort the run

    Delete and load are separate jobs: a crash between them leaves the
    window empty until the next successful run. BigQuery transactions
    cannot include load jobs, so the gap stays.
    """

    def __init__(self, warehouse, table_name: str, partition_column: str = PARTITION_COLUMN):
        self.warehouse = warehouse
        self.table_name = table_name
        self.partition_column = partition_column

    async def replace_window(self, window: TimeWindow, rows: Sequence[BaseModel]) -> int:
        """
        Delete rows whose partition column lies in [window.start, window.end]
        and append `rows`.

        Returns:
            Number of rows loaded
        """
        if await self.warehouse.table_exists(self.table_name):
            deleted = await self.warehouse.delete_rows_between(
                self.table_name,
                self.partition_column,
                window.start,
                window.end,
            )
            logger.info(f"Deleted {deleted} rows of {self.table_name} for {window}")
        else:
            logger.info(f"Table {self.table_name} does not exist yet, skipping delete")

        return await self._load(rows)

    async def replace_table(self, rows: Sequence[BaseModel]) -> int:
        """Drop the table and load `rows`; for data without a time key"""
        if await self.warehouse.table_exists(self.table_name):
            await self.warehouse.drop_table(self.table_name)
            logger.info(f"Dropped table {self.table_name}")

        return await self._load(rows)

    async def _load(self, rows: Sequence[BaseModel]) -> int:
        if not rows:
            logger.info(f"No rows to load into {self.table_name}")
            return 0

        result = await self.warehouse.load_json_rows(self.table_name, to_json_lines(rows))
        logger.info(f"Job {result.job_id} completed.")

        if result.errors:
            raise LoadJobError(
                f"Load job reported {len(result.errors)} errors",
                errors=result.errors,
                context={"table_name": self.table_name, "job_id": result.job_id}
            )

        logger.info(f"Loaded {len(rows)} rows into {self.table_name}")
        return len(rows)
