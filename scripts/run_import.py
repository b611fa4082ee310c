"""
Import merged pull requests of the organization into BigQuery.

Environment:
    GITHUB_TOKEN: GitHub token with the repo scope
    GOOGLE_APPLICATION_CREDENTIALS: Service account key with BigQuery Data Editor
        and BigQuery Job User roles
    START_DATE (optional): ISO 8601 start of the range, default yesterday 00:00 UTC
    END_DATE (optional): ISO 8601 end of the range, default today 00:00 UTC
    USE_REINDEX_TABLE (optional): 1 to write into pull_requests_reindex instead.
        Drop that table, import into it, check it, then copy it over the
        main table to re-index with minimal impact.

Example:
    GITHUB_TOKEN=... START_DATE=2020-10-05 END_DATE=2020-10-12 python scripts/run_import.py
"""

import asyncio
import logging
import os
import sys

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import build_pipeline_config, settings
from core.logging import setup_logging
from ingestion.runner import run_pull_request_import

logger = logging.getLogger(__name__)


async def main() -> int:
    setup_logging()
    config = build_pipeline_config(settings)

    logger.info(
        f"input parameters: startDate={config.start.isoformat()} "
        f"endDate={config.end.isoformat()} table={config.table_name}"
    )

    try:
        result = await run_pull_request_import(config)
    except Exception as e:
        logger.error(f"Import failed: {e}")
        return 1

    logger.info(f"Import finished: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
