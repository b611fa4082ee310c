"""
GitHub GraphQL client.

This module wraps httpx.AsyncClient with:
- Bearer token authentication
- A long fixed per-request timeout
- Mapping of HTTP and GraphQL failures onto the exception hierarchy

It never retries on its own; callers wrap requests in RetryingExecutor.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config import PipelineConfig
from core.exceptions import (
    APIExtractionError,
    AuthenticationError,
    GraphQLQueryError,
    NetworkError,
    RateLimitError,
    ResponseValidationError,
)
from ingestion.extractors.queries import RATE_LIMIT_QUERY
from models.rate_limit import RateLimitStatus
from schemas.github import RateLimitPayload, validate_payload

logger = logging.getLogger(__name__)


class GitHubGraphQLClient:
    """
    Async GitHub GraphQL API client.

    Attributes:
        endpoint: GraphQL endpoint URL
        timeout: Per-request timeout in seconds (default: 3600)
    """

    def __init__(
        self,
        endpoint: str,
        token: Optional[str] = None,
        timeout: float = 3600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.endpoint = endpoint
        self.timeout = timeout

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: PipelineConfig, **kwargs: Any) -> "GitHubGraphQLClient":
        return cls(
            endpoint=config.graphql_endpoint,
            token=config.github_token,
            timeout=config.request_timeout_seconds,
            **kwargs
        )

    async def __aenter__(self) -> "GitHubGraphQLClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL document and return its `data` object.

        Raises:
            AuthenticationError: HTTP 401, or 403 without rate-limit signals
            RateLimitError: HTTP 429, or 403 with an exhausted quota
            NetworkError: Timeouts, transport failures and 5xx responses
            GraphQLQueryError: The response carries a GraphQL `errors` array
            APIExtractionError: Any other unsuccessful response
        """
        try:
            response = await self._client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
            )

        except httpx.TimeoutException as e:
            raise NetworkError(
                "Request timeout",
                context={"api_url": self.endpoint, "timeout": self.timeout},
                original_exception=e
            )

        except httpx.TransportError as e:
            raise NetworkError(
                "Network error",
                context={"api_url": self.endpoint},
                original_exception=e
            )

        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise APIExtractionError(
                "Failed to parse JSON response",
                context={
                    "api_url": self.endpoint,
                    "response_body": response.text[:500]
                },
                original_exception=e
            )

        if not isinstance(payload, dict):
            raise ResponseValidationError(
                "GraphQL response is not an object",
                context={"api_url": self.endpoint}
            )

        errors = payload.get("errors")
        if errors:
            first = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else str(errors[0])
            raise GraphQLQueryError(
                f"GraphQL error: {first}",
                errors=errors,
                context={"api_url": self.endpoint}
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise ResponseValidationError(
                "GraphQL response has no data",
                context={"api_url": self.endpoint}
            )

        return data

    async def fetch_rate_limit(self) -> RateLimitStatus:
        """Query the remaining API quota"""
        data = await self.request(RATE_LIMIT_QUERY)
        payload = validate_payload(RateLimitPayload, data.get("rateLimit"))
        return RateLimitStatus(
            remaining=payload.remaining,
            limit=payload.limit,
            cost=payload.cost,
            reset_at=payload.reset_at,
        )

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        context = {
            "status_code": status,
            "api_url": self.endpoint,
            "response_body": response.text[:500]
        }

        if status == 429 or (status == 403 and self._is_rate_limited(response)):
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Rate limit exceeded for {self.endpoint}",
                context=context,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if status in (401, 403):
            raise AuthenticationError(f"Authentication failed for {self.endpoint}", context=context)

        if status >= 500:
            raise NetworkError(f"Server error {status}", context=context)

        raise APIExtractionError(f"Unexpected status {status}", context=context)

    @staticmethod
    def _is_rate_limited(response: httpx.Response) -> bool:
        return (
            response.headers.get("X-RateLimit-Remaining") == "0"
            or "Retry-After" in response.headers
        )
