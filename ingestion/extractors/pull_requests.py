"""
Merged pull request source.
"""

import logging
from datetime import datetime, timezone
from typing import List

from core.config import PipelineConfig
from core.exceptions import ExtractionError, RetryableError, WindowFetchError
from ingestion.extractors.paginated_fetcher import PaginatedFetcher
from ingestion.extractors.queries import PULL_REQUEST_SEARCH_QUERY
from ingestion.retry import RetryingExecutor
from models.window import TimeWindow
from schemas.github import PullRequestNode, SearchPage

logger = logging.getLogger(__name__)


def to_github_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class PullRequestExtractor:
    """
    Fetch pull requests of one organization merged within a window.

    Wide merge ranges make the search API time out, so callers pass fine
    (hourly) windows. The upstream `merged:a..b` qualifier is inclusive on
    both ends; duplicates across adjacent windows are removed by the runner.
    """

    def __init__(self, client, config: PipelineConfig, retry: RetryingExecutor):
        self.config = config
        self.fetcher = PaginatedFetcher(
            client,
            retry,
            PULL_REQUEST_SEARCH_QUERY,
            connection_path=("search",),
            node_model=PullRequestNode,
            page_model=SearchPage,
        )

    def search_query(self, window: TimeWindow) -> str:
        return (
            f"org:{self.config.org_name} is:pr is:merged "
            f"merged:{to_github_timestamp(window.start)}..{to_github_timestamp(window.end)}"
        )

    async def fetch_window(self, window: TimeWindow) -> List[PullRequestNode]:
        logger.info(f"fetching... {window}")
        try:
            return await self.fetcher.fetch_all({
                "searchQuery": self.search_query(window),
                "first": self.config.page_size,
                "labelsFirst": self.config.nested_page_size,
            })
        except ExtractionError as e:
            raise WindowFetchError(
                f"Failed to fetch pull requests merged {window}",
                context={
                    "window_start": window.start.isoformat(),
                    "window_end": window.end.isoformat(),
                    "attempts": self.fetcher.retry.max_attempts if isinstance(e, RetryableError) else 1,
                },
                original_exception=e
            )
