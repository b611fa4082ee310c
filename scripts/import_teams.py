"""
Replace the teams table with the organization's teams and their repositories.

Environment:
    GITHUB_TOKEN: GitHub token with the repo and read:org scopes
    GOOGLE_APPLICATION_CREDENTIALS: Service account key with BigQuery Data Editor
        and BigQuery Job User roles

Example:
    GITHUB_TOKEN=... python scripts/import_teams.py
"""

import asyncio
import logging
import os
import sys

sys.path.append(os.getcwd())

from core.config import build_pipeline_config, settings
from core.logging import setup_logging
from ingestion.runner import run_team_import

logger = logging.getLogger(__name__)


async def main() -> int:
    setup_logging()
    config = build_pipeline_config(settings)
    logger.info(f"input parameters: org={config.org_name} dataset={config.dataset}")

    try:
        result = await run_team_import(config)
    except Exception as e:
        logger.error(f"Teams import failed: {e}")
        return 1

    logger.info(f"Teams import finished: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
