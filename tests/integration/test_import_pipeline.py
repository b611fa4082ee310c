"""
End-to-end tests of the import runners against a simulated GitHub API and
an in-memory warehouse
"""

import pytest
from unittest.mock import AsyncMock
from core.exceptions import LoadJobError, NetworkError, WindowFetchError
from ingestion.runner import PullRequestImportRunner, TeamImportRunner
from conftest import FakeGitHubClient, make_pull_request_node, utc


def loaded_ids(warehouse, table="pull_requests"):
    return sorted(r["id"] for r in warehouse.tables.get(table, []))


@pytest.mark.asyncio
async def test_import_loads_every_pull_request_once(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    client = FakeGitHubClient(mock_pull_request_nodes)
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    result = await runner.run()

    assert result["status"] == "success"
    assert result["windows"] == 2
    assert result["records_loaded"] == 5
    assert loaded_ids(fake_warehouse) == ["PR_1", "PR_2", "PR_3", "PR_4", "PR_5"]


@pytest.mark.asyncio
async def test_newest_window_imported_first(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    client = FakeGitHubClient(mock_pull_request_nodes)
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    await runner.run()

    loads = [c for c in fake_warehouse.calls if c[0] == "load"]
    deletes = [c for c in fake_warehouse.calls if c[0] == "delete"]
    # week of Jan 8 loads first (3 rows), then week of Jan 1 (2 rows)
    assert [c[2] for c in loads] == [3, 2]
    # table only exists for the second window
    assert deletes == [("delete", "pull_requests", utc(2024, 1, 1), utc(2024, 1, 8))]


@pytest.mark.asyncio
async def test_rerun_does_not_duplicate(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    client = FakeGitHubClient(mock_pull_request_nodes)
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    await runner.run()
    await runner.run()

    assert loaded_ids(fake_warehouse) == ["PR_1", "PR_2", "PR_3", "PR_4", "PR_5"]


@pytest.mark.asyncio
async def test_pull_request_on_week_boundary_kept_once(pipeline_config, fake_warehouse):
    client = FakeGitHubClient([make_pull_request_node(9, utc(2024, 1, 8, 0, 0))])
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    await runner.run()
    await runner.run()

    assert loaded_ids(fake_warehouse) == ["PR_9"]


@pytest.mark.asyncio
async def test_fine_windows_are_hourly_and_paginated(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    nodes = [make_pull_request_node(n, utc(2024, 1, 9, 8, n)) for n in range(1, 6)]
    client = FakeGitHubClient(nodes, page_size=2)
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    await runner.run()

    searches = [r for r in client.requests if "merged:2024-01-09T08:00:00Z..2024-01-09T09:00:00Z" in r["searchQuery"]]
    assert [r["after"] for r in searches] == [None, "2", "4"]
    # two weeks of hourly windows, plus two extra pages for the busy hour
    assert len(client.requests) == 14 * 24 + 2
    assert loaded_ids(fake_warehouse) == [f"PR_{n}" for n in range(1, 6)]


@pytest.mark.asyncio
async def test_quota_reported_during_run(pipeline_config, fake_warehouse):
    client = FakeGitHubClient([])
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    await runner.run()

    # 17 batches per week -> after batches 5, 10 and 15
    assert client.rate_limit_calls == 6


@pytest.mark.asyncio
async def test_empty_window_loads_nothing(pipeline_config, fake_warehouse):
    client = FakeGitHubClient([])
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    result = await runner.run()

    assert result["records_loaded"] == 0
    assert not [c for c in fake_warehouse.calls if c[0] == "load"]
    assert "pull_requests" not in fake_warehouse.tables


@pytest.mark.asyncio
async def test_inverted_range_is_noop(pipeline_config, fake_warehouse):
    client = FakeGitHubClient([])
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    result = await runner.run(start=utc(2024, 1, 15), end=utc(2024, 1, 1))

    assert result["status"] == "noop"
    assert client.requests == []
    assert fake_warehouse.calls == []


@pytest.mark.asyncio
async def test_window_fetch_failure_aborts_run(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    client = FakeGitHubClient(mock_pull_request_nodes)
    client.fail_windows["2024-01-03T05:00:00Z"] = NetworkError("connection reset")
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    with pytest.raises(WindowFetchError):
        await runner.run()

    # the newer week was already replaced, the failing week was never touched
    assert loaded_ids(fake_warehouse) == ["PR_3", "PR_4", "PR_5"]
    failing = [r for r in client.requests if "merged:2024-01-03T05:00:00Z" in r["searchQuery"]]
    assert len(failing) == 3


@pytest.mark.asyncio
async def test_load_failure_after_delete_leaves_gap(pipeline_config, fake_warehouse, mock_pull_request_nodes):
    fake_warehouse.tables["pull_requests"] = [
        {"id": "PR_3", "mergedAt": "2024-01-09T08:30:00Z"},
        {"id": "PR_OLD", "mergedAt": "2023-12-20T00:00:00Z"},
    ]
    fake_warehouse.load_errors = [{"reason": "invalid", "message": "bad row"}]
    client = FakeGitHubClient(mock_pull_request_nodes)
    runner = PullRequestImportRunner.from_config(pipeline_config, client, fake_warehouse)

    with pytest.raises(LoadJobError):
        await runner.run()

    # week of Jan 8 was deleted before the failed load; rows outside it survive
    assert loaded_ids(fake_warehouse) == ["PR_OLD"]


@pytest.mark.asyncio
async def test_team_import_replaces_table(pipeline_config, fake_warehouse):
    fake_warehouse.tables["teams"] = [{"name": "disbanded", "repositories": {"nodes": []}}]
    client = AsyncMock()
    client.request = AsyncMock(return_value={"organization": {"teams": {
        "nodes": [
            {"name": "platform", "repositories": {"totalCount": 1, "nodes": [{"nameWithOwner": "hatena/infra"}]}},
            {"name": "mobile", "repositories": {"totalCount": 0, "nodes": []}},
        ],
        "pageInfo": {"endCursor": None, "hasNextPage": False},
    }}})
    runner = TeamImportRunner.from_config(pipeline_config, client, fake_warehouse)

    result = await runner.run()

    assert result["records_loaded"] == 2
    assert sorted(r["name"] for r in fake_warehouse.tables["teams"]) == ["mobile", "platform"]
    assert fake_warehouse.tables["teams"][0]["repositories"] == {"nodes": [{"nameWithOwner": "hatena/infra"}]}
