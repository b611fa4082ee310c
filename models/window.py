from datetime import datetime, timedelta
from typing import Tuple

from pydantic import BaseModel, ConfigDict, model_validator


class TimeWindow(BaseModel):
    """
    Half-open time interval [start, end).

    Used both as the unit of a single upstream search (fine windows) and as
    the unit of a delete-then-load (coarse windows).
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self):
        if self.start >= self.end:
            raise ValueError(f"window start {self.start} must be before end {self.end}")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()}〜{self.end.isoformat()}"


class FetchBatch(BaseModel):
    """A group of windows dispatched together"""

    model_config = ConfigDict(frozen=True)

    index: int
    windows: Tuple[TimeWindow, ...]

    def __len__(self) -> int:
        return len(self.windows)
