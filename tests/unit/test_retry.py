"""
Unit tests for the retry executor
"""

import httpx
import pytest
from functools import partial
from unittest.mock import AsyncMock
from core.exceptions import (
    APIExtractionError,
    AuthenticationError,
    GraphQLQueryError,
    NetworkError,
    RateLimitError,
)
from ingestion.extractors.github_client import GitHubGraphQLClient
from ingestion.retry import RetryingExecutor


class TestRetryingExecutor:
    """Test bounded retry behaviour"""

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt(self):
        operation = AsyncMock(side_effect=[
            NetworkError("reset"),
            GraphQLQueryError("timeout"),
            "ok",
        ])

        result = await RetryingExecutor(max_attempts=3).run(operation)

        assert result == "ok"
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_budget_propagates_last_error(self):
        errors = [NetworkError("first"), NetworkError("second"), NetworkError("third")]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(NetworkError) as exc_info:
            await RetryingExecutor(max_attempts=3).run(operation)

        assert exc_info.value is errors[2]
        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_first_success_short_circuits(self):
        operation = AsyncMock(return_value=[1, 2])

        result = await RetryingExecutor().run(operation)

        assert result == [1, 2]
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_retryable_error_raised_immediately(self):
        operation = AsyncMock(side_effect=AuthenticationError("bad credentials"))

        with pytest.raises(AuthenticationError):
            await RetryingExecutor(max_attempts=3).run(operation)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_client_error_raised_immediately(self):
        operation = AsyncMock(side_effect=APIExtractionError("Unexpected status 422"))

        with pytest.raises(APIExtractionError):
            await RetryingExecutor(max_attempts=3).run(operation)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_programming_error_raised_immediately(self):
        operation = AsyncMock(side_effect=KeyError("search"))

        with pytest.raises(KeyError):
            await RetryingExecutor(max_attempts=3).run(operation)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bad_request_sent_once(self):
        sent = []

        def handler(request):
            sent.append(request)
            return httpx.Response(400, text="Problems parsing JSON")

        client = GitHubGraphQLClient(
            "https://api.github.test/graphql",
            token="test-token",
            transport=httpx.MockTransport(handler),
        )
        async with client:
            with pytest.raises(APIExtractionError):
                await RetryingExecutor(max_attempts=3).run(
                    partial(client.request, "query { viewer { login } }")
                )

        assert len(sent) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_waits_for_retry_after(self):
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[
            RateLimitError("slow down", retry_after=30),
            "ok",
        ])

        result = await RetryingExecutor(max_attempts=3, retry_delay=1.0, sleep=sleep).run(operation)

        assert result == "ok"
        sleep.assert_awaited_once_with(30)

    @pytest.mark.asyncio
    async def test_retry_delay_is_a_floor(self):
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[
            RateLimitError("slow down", retry_after=1),
            NetworkError("reset"),
            "ok",
        ])

        await RetryingExecutor(max_attempts=3, retry_delay=5.0, sleep=sleep).run(operation)

        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_no_sleep_without_delay(self):
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[NetworkError("reset"), "ok"])

        await RetryingExecutor(max_attempts=3, sleep=sleep).run(operation)

        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_sleep_after_last_attempt(self):
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=RateLimitError("slow down", retry_after=10))

        with pytest.raises(RateLimitError):
            await RetryingExecutor(max_attempts=2, sleep=sleep).run(operation)

        sleep.assert_awaited_once_with(10)

    def test_invalid_budget_rejected(self):
        with pytest.raises(ValueError):
            RetryingExecutor(max_attempts=0)
