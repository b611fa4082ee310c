"""
BigQuery warehouse operations used by the loaders.

The google-cloud-bigquery client is blocking, so every call runs in a
worker thread via asyncio.to_thread and the event loop stays free.
"""

import asyncio
import logging
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import bigquery
from pydantic import BaseModel, Field

from core.config import PipelineConfig
from core.exceptions import WarehouseError

logger = logging.getLogger(__name__)


class LoadResult(BaseModel):
    """Outcome of a bulk load job"""
    job_id: Optional[str] = None
    output_rows: Optional[int] = None
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class BigQueryWarehouse:
    """
    Table-level operations on one BigQuery dataset.

    Methods:
        table_exists: Whether the table exists
        delete_rows_between: DELETE rows with start <= column <= end
        drop_table: Drop the table if present
        load_json_rows: Append newline-delimited JSON with additive schema evolution
    """

    def __init__(self, client: bigquery.Client, dataset: str):
        self.client = client
        self.dataset = dataset

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "BigQueryWarehouse":
        return cls(bigquery.Client(project=config.project_id), config.dataset)

    def table_ref(self, table: str) -> str:
        return f"{self.client.project}.{self.dataset}.{table}"

    def close(self) -> None:
        self.client.close()

    async def table_exists(self, table: str) -> bool:
        return await asyncio.to_thread(self._table_exists, table)

    async def delete_rows_between(
        self,
        table: str,
        column: str,
        start: datetime,
        end: datetime
    ) -> int:
        return await asyncio.to_thread(self._delete_rows_between, table, column, start, end)

    async def drop_table(self, table: str) -> None:
        await asyncio.to_thread(self._drop_table, table)

    async def load_json_rows(self, table: str, lines: Sequence[str]) -> LoadResult:
        return await asyncio.to_thread(self._load_json_rows, table, lines)

    def _table_exists(self, table: str) -> bool:
        try:
            self.client.get_table(self.table_ref(table))
            return True
        except NotFound:
            return False
        except GoogleAPIError as e:
            raise WarehouseError(
                "Failed to look up table",
                context={"operation": "EXISTS", "table_name": table},
                original_exception=e
            )

    def _delete_rows_between(self, table: str, column: str, start: datetime, end: datetime) -> int:
        sql = (
            f"DELETE FROM `{self.table_ref(table)}` "
            f"WHERE @start_date <= {column} AND {column} <= @end_date"
        )
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                bigquery.ScalarQueryParameter("start_date", "TIMESTAMP", start),
                bigquery.ScalarQueryParameter("end_date", "TIMESTAMP", end),
            ]
        )
        try:
            job = self.client.query(sql, job_config=job_config)
            job.result()
        except GoogleAPIError as e:
            raise WarehouseError(
                "Failed to delete rows",
                context={
                    "operation": "DELETE",
                    "table_name": table,
                    "start": start.isoformat(),
                    "end": end.isoformat()
                },
                original_exception=e
            )
        return job.num_dml_affected_rows or 0

    def _drop_table(self, table: str) -> None:
        try:
            self.client.delete_table(self.table_ref(table), not_found_ok=True)
        except GoogleAPIError as e:
            raise WarehouseError(
                "Failed to drop table",
                context={"operation": "DROP", "table_name": table},
                original_exception=e
            )

    def _load_json_rows(self, table: str, lines: Sequence[str]) -> LoadResult:
        job_config = bigquery.LoadJobConfig(
            source_format=bigquery.SourceFormat.NEWLINE_DELIMITED_JSON,
            encoding="UTF-8",
            autodetect=True,
            write_disposition=bigquery.WriteDisposition.WRITE_APPEND,
            # new fields from the API extend the table schema
            schema_update_options=[bigquery.SchemaUpdateOption.ALLOW_FIELD_ADDITION],
        )

        with tempfile.NamedTemporaryFile(mode="w+b", suffix=".json") as tmp:
            tmp.write("\n".join(lines).encode("utf-8"))
            tmp.flush()
            tmp.seek(0)

            try:
                job = self.client.load_table_from_file(tmp, self.table_ref(table), job_config=job_config)
            except GoogleAPIError as e:
                raise WarehouseError(
                    "Failed to submit load job",
                    context={"operation": "LOAD", "table_name": table},
                    original_exception=e
                )

            try:
                job.result()
            except GoogleAPIError as e:
                return LoadResult(
                    job_id=job.job_id,
                    errors=list(job.errors or [{"message": str(e)}]),
                )

        return LoadResult(
            job_id=job.job_id,
            output_rows=job.output_rows,
            errors=list(job.errors or []),
        )
