"""
Organization teams source.
"""

import logging
from typing import List

from core.config import PipelineConfig
from ingestion.extractors.paginated_fetcher import PaginatedFetcher
from ingestion.extractors.queries import TEAMS_QUERY
from ingestion.retry import RetryingExecutor
from schemas.github import TeamNode, TeamsPage

logger = logging.getLogger(__name__)


class TeamExtractor:
    """Fetch every team of the organization with its repositories"""

    def __init__(self, client, config: PipelineConfig, retry: RetryingExecutor):
        self.config = config
        self.fetcher = PaginatedFetcher(
            client,
            retry,
            TEAMS_QUERY,
            connection_path=("organization", "teams"),
            node_model=TeamNode,
            page_model=TeamsPage,
        )

    async def fetch_all(self) -> List[TeamNode]:
        teams = await self.fetcher.fetch_all({
            "org": self.config.org_name,
            "first": self.config.team_page_size,
            "repositoriesFirst": self.config.nested_page_size,
        })
        logger.info(f"Fetched {len(teams)} teams of {self.config.org_name}")
        return teams
