"""
Pytest configuration and fixtures
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from core.config import PipelineConfig
from ingestion.loaders.warehouse import LoadResult
from models.rate_limit import RateLimitStatus

UTC = timezone.utc


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def make_pull_request_node(number: int, merged_at: datetime, **overrides) -> Dict[str, Any]:
    """A search node shaped like the GitHub GraphQL response"""
    node = {
        "id": f"PR_{number}",
        "title": f"Pull request {number}",
        "author": {"__typename": "User", "login": "octocat"},
        "url": f"https://github.com/hatena/example/pull/{number}",
        "number": number,
        "repository": {"nameWithOwner": "hatena/example"},
        "createdAt": (merged_at - timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "mergedAt": merged_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "additions": 10,
        "deletions": 2,
        "commits": {"nodes": [{"commit": {"authoredDate": (merged_at - timedelta(days=2)).strftime("%Y-%m-%dT%H:%M:%SZ")}}]},
        "baseRefName": "main",
        "headRefName": f"feature-{number}",
        "reviews": {"totalCount": 1},
        "labels": {"totalCount": 1, "nodes": [{"name": "enhancement"}]},
    }
    node.update(overrides)
    return node


def search_page(nodes: List[Dict[str, Any]], end_cursor: Optional[str], has_next_page: bool) -> Dict[str, Any]:
    return {
        "search": {
            "nodes": nodes,
            "pageInfo": {"endCursor": end_cursor, "hasNextPage": has_next_page},
        }
    }


class FakeGitHubClient:
    """
    Simulated GitHub API answering merged-range searches from a fixed set of
    pull requests. Like the real search, `merged:a..b` is inclusive.
    """

    MERGED = re.compile(r"merged:(\S+)\.\.(\S+)")

    def __init__(self, nodes: List[Dict[str, Any]], page_size: int = 2):
        self.nodes = nodes
        self.page_size = page_size
        self.requests: List[Dict[str, Any]] = []
        self.fail_windows: Dict[str, Exception] = {}
        self.rate_limit_calls = 0

    async def request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        variables = variables or {}
        self.requests.append(variables)

        match = self.MERGED.search(variables["searchQuery"])
        start, end = parse_iso(match.group(1)), parse_iso(match.group(2))
        if match.group(1) in self.fail_windows:
            raise self.fail_windows[match.group(1)]

        hits = [n for n in self.nodes if start <= parse_iso(n["mergedAt"]) <= end]
        offset = int(variables.get("after") or 0)
        page = hits[offset:offset + self.page_size]
        next_offset = offset + self.page_size
        has_next = next_offset < len(hits)
        return search_page(page, str(next_offset) if has_next else None, has_next)

    async def fetch_rate_limit(self) -> RateLimitStatus:
        self.rate_limit_calls += 1
        return RateLimitStatus(remaining=4999, limit=5000, reset_at=utc(2024, 1, 1))


class FakeWarehouse:
    """In-memory stand-in for BigQueryWarehouse"""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.load_errors: List[Dict[str, Any]] = []
        self._jobs = 0

    async def table_exists(self, table: str) -> bool:
        self.calls.append(("exists", table))
        return table in self.tables

    async def delete_rows_between(self, table: str, column: str, start: datetime, end: datetime) -> int:
        self.calls.append(("delete", table, start, end))
        rows = self.tables[table]
        kept = [r for r in rows if not (start <= parse_iso(r[column]) <= end)]
        self.tables[table] = kept
        return len(rows) - len(kept)

    async def drop_table(self, table: str) -> None:
        self.calls.append(("drop", table))
        self.tables.pop(table, None)

    async def load_json_rows(self, table: str, lines: List[str]) -> LoadResult:
        self.calls.append(("load", table, len(lines)))
        self._jobs += 1
        if self.load_errors:
            return LoadResult(job_id=f"job_{self._jobs}", errors=self.load_errors)
        self.tables.setdefault(table, []).extend(json.loads(line) for line in lines)
        return LoadResult(job_id=f"job_{self._jobs}", output_rows=len(lines))


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Config for tests: no throttling delay, small windows"""
    return PipelineConfig(
        github_token="test-token",
        org_name="hatena",
        graphql_endpoint="https://api.github.test/graphql",
        project_id="test-project",
        dataset="source__github",
        table_name="pull_requests",
        start=utc(2024, 1, 1),
        end=utc(2024, 1, 15),
        concurrency=10,
        batch_delay_seconds=0,
        rate_limit_log_every=5,
        max_attempts=3,
        coarse_window=timedelta(days=7),
        fine_window=timedelta(hours=1),
        page_size=100,
    )


@pytest.fixture
def fake_warehouse() -> FakeWarehouse:
    return FakeWarehouse()


@pytest.fixture
def mock_pull_request_nodes() -> List[Dict[str, Any]]:
    """Pull requests spread over two weeks, one on an hour boundary"""
    return [
        make_pull_request_node(1, utc(2024, 1, 2, 10, 15)),
        make_pull_request_node(2, utc(2024, 1, 3, 11, 0)),  # exactly on an hour boundary
        make_pull_request_node(3, utc(2024, 1, 9, 8, 30)),
        make_pull_request_node(4, utc(2024, 1, 9, 8, 45)),
        make_pull_request_node(5, utc(2024, 1, 14, 23, 59)),
    ]
