"""
Batched concurrent dispatch of window fetches under a shared rate limit.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Set, TypeVar

from ingestion.rate_limit import AsyncTokenBucket
from models.rate_limit import RateLimitStatus
from models.window import FetchBatch, TimeWindow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyThrottler:
    """
    Run a worker over windows in consecutive batches of `concurrency`.

    - All windows of a batch run concurrently; the next batch starts only
      after every window of the current one has resolved.
    - Before each batch the shared token bucket must grant one token per
      window, capping dispatch at `concurrency` windows per refill interval.
    - Every `telemetry_every` batches the remaining upstream quota is
      queried in the background and logged. It never delays a batch; probes
      still pending `telemetry_grace` seconds after the last batch are
      cancelled.
    - The first failing window aborts the run once its batch has resolved.
    """

    def __init__(
        self,
        concurrency: int,
        limiter: AsyncTokenBucket,
        quota_probe: Optional[Callable[[], Awaitable[RateLimitStatus]]] = None,
        telemetry_every: int = 5,
        telemetry_grace: float = 1.0,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.concurrency = concurrency
        self.limiter = limiter
        self.quota_probe = quota_probe
        self.telemetry_every = telemetry_every
        self.telemetry_grace = telemetry_grace
        self._telemetry_tasks: Set[asyncio.Task] = set()

    def make_batches(self, windows: Sequence[TimeWindow]) -> List[FetchBatch]:
        return [
            FetchBatch(index=i // self.concurrency, windows=tuple(windows[i:i + self.concurrency]))
            for i in range(0, len(windows), self.concurrency)
        ]

    async def run(
        self,
        windows: Sequence[TimeWindow],
        worker: Callable[[TimeWindow], Awaitable[List[T]]],
    ) -> List[T]:
        """
        Dispatch `worker` for every window and concatenate the results.

        Results keep window order. Raises the first failure of the earliest
        failing batch; later batches are never started.
        """
        results: List[T] = []

        try:
            for batch in self.make_batches(windows):
                await self.limiter.acquire(len(batch))

                outcomes = await asyncio.gather(
                    *(worker(window) for window in batch.windows),
                    return_exceptions=True,
                )
                for outcome in outcomes:
                    if isinstance(outcome, BaseException):
                        raise outcome
                    results.extend(outcome)

                logger.debug(f"Batch {batch.index + 1}: {len(batch)} windows done")

                if self.quota_probe and (batch.index + 1) % self.telemetry_every == 0:
                    self._report_quota()
        finally:
            await self._drain_telemetry()

        return results

    def _report_quota(self) -> None:
        task = asyncio.create_task(self._log_quota())
        self._telemetry_tasks.add(task)
        task.add_done_callback(self._telemetry_tasks.discard)

    async def _log_quota(self) -> None:
        try:
            status = await self.quota_probe()
        except Exception as e:
            logger.warning(f"rateLimit: quota check failed: {e}")
            return
        logger.info(f"rateLimit: {status}")

    async def _drain_telemetry(self) -> None:
        if not self._telemetry_tasks:
            return

        _, pending = await asyncio.wait(set(self._telemetry_tasks), timeout=self.telemetry_grace)
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"rateLimit: cancelled {len(pending)} pending quota checks")
            await asyncio.gather(*pending, return_exceptions=True)
