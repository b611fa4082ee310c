from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RateLimitStatus(BaseModel):
    """
    Remaining upstream quota.

    Advisory only: logged between batches, never used for scheduling.
    """

    model_config = ConfigDict(frozen=True)

    remaining: int
    limit: int
    reset_at: datetime
    cost: Optional[int] = None

    def __str__(self) -> str:
        return f"remaining {self.remaining} of {self.limit} (resetAt: {self.reset_at.isoformat()})"
