"""
Import pipeline from the GitHub GraphQL API into BigQuery.

Modules:
    partitioner: Split a time range into contiguous windows
    retry: Bounded retry of a single async operation
    rate_limit: Token bucket shared by throttled dispatches
    throttler: Batched concurrent fetches with quota telemetry
    runner: Pull request and teams import orchestrators
    scheduler: APScheduler integration for daily imports

Subpackages:
    extractors: GraphQL client, cursor pagination, pull request and team sources
    transformers: Node to row serialization
    loaders: BigQuery operations and idempotent delete-then-load

Architecture:
    The range is cut into weekly windows processed newest first. Each weekly
    window is cut into hourly windows fetched in throttled batches; the
    results replace the week's rows in the destination table.

    1. Extract - Paginated GraphQL fetches, each page retried up to 3 times
    2. Transform - Validated nodes become stable warehouse rows
    3. Load - Delete the window's rows, then append the new ones

Usage:
    from core.config import build_pipeline_config, settings
    from ingestion.runner import run_pull_request_import

Example:
    config = build_pipeline_config(settings)
    result = await run_pull_request_import(config)

    print(f"Loaded {result['records_loaded']} records")

Error Handling:
    Every unrecovered error ends the run. Reruns over the same range are
    safe because each window is deleted before it is loaded.
"""

__all__ = [
    "RangePartitioner",
    "RetryingExecutor",
    "AsyncTokenBucket",
    "ConcurrencyThrottler",
    "PullRequestImportRunner",
    "TeamImportRunner",
    "ImportScheduler",
]
