"""
Run the daily pull request and teams imports in-process.
"""

import asyncio
import logging
import os
import sys

sys.path.append(os.getcwd())

from core.logging import setup_logging
from ingestion.scheduler import ImportScheduler

logger = logging.getLogger(__name__)


async def main():
    setup_logging()
    scheduler = ImportScheduler()
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


if __name__ == "__main__":
    asyncio.run(main())
