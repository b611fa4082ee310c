"""
Upstream extractors for the GitHub GraphQL API.

Modules:
    github_client: httpx-based GraphQL client
    paginated_fetcher: Cursor pagination with per-page retry
    pull_requests: Merged pull requests per time window
    teams: Organization teams with their repositories
    queries: GraphQL documents
"""

__all__ = [
    "GitHubGraphQLClient",
    "PaginatedFetcher",
    "PullRequestExtractor",
    "TeamExtractor",
]
