"""
Cursor pagination over a GraphQL connection.
"""

import logging
from functools import partial
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from core.exceptions import ResponseValidationError
from ingestion.retry import RetryingExecutor
from schemas.github import Connection, extract_connection, validate_payload

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class PaginatedFetcher(Generic[M]):
    """
    Walk a cursor-paginated query to exhaustion.

    Each page request goes through the RetryingExecutor; a page that still
    fails aborts the walk and nothing accumulated so far is returned. Pages
    are concatenated in the order the API returns them.

    Args:
        client: Object exposing `async request(query, variables) -> dict`
        retry: Executor applied to every page request
        query: GraphQL document taking an `$after` cursor variable
        connection_path: Keys leading from `data` to the connection
        node_model: Schema every node is validated against
        page_model: Schema of one connection page (default: Connection)
    """

    def __init__(
        self,
        client,
        retry: RetryingExecutor,
        query: str,
        connection_path: Sequence[str],
        node_model: Type[M],
        page_model: Type[Connection] = Connection,
    ):
        self.client = client
        self.retry = retry
        self.query = query
        self.connection_path = tuple(connection_path)
        self.node_model = node_model
        self.page_model = page_model

    async def fetch_all(self, variables: Optional[Dict[str, Any]] = None) -> List[M]:
        variables = dict(variables or {})
        cursor: Optional[str] = None
        records: List[M] = []
        # per call; one fetcher serves concurrent windows
        pages_fetched = 0

        while True:
            data = await self.retry.run(
                partial(self.client.request, self.query, {**variables, "after": cursor}),
                description=f"page {pages_fetched + 1} of {'.'.join(self.connection_path)}",
            )
            pages_fetched += 1

            connection = extract_connection(data, self.connection_path, self.page_model)
            records.extend(self._parse_nodes(connection.nodes))

            if not connection.page_info.has_next_page:
                break

            if connection.page_info.end_cursor is None:
                raise ResponseValidationError(
                    "hasNextPage is set but endCursor is missing",
                    context={"path": ".".join(self.connection_path), "page": pages_fetched}
                )
            cursor = connection.page_info.end_cursor
            logger.info(f"next: {cursor}")

        return records

    def _parse_nodes(self, nodes: List[Dict[str, Any]]) -> List[M]:
        parsed = []
        for node in nodes:
            # search(type: ISSUE) returns {} for hits that are not pull requests
            if not node:
                logger.debug("Skipping empty node")
                continue
            parsed.append(validate_payload(self.node_model, node))
        return parsed
