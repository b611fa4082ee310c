"""
Domain value types for the pull request import.

Models:
    base: Enums (destination tables, run status, window order)
    window: TimeWindow and FetchBatch
    rate_limit: RateLimitStatus telemetry

Usage:
    from models.window import TimeWindow
    from models.base import DestinationTable
"""

from models.base import DestinationTable, ImportStatus, WindowOrder
from models.window import TimeWindow, FetchBatch
from models.rate_limit import RateLimitStatus

__all__ = [
    "DestinationTable",
    "ImportStatus",
    "WindowOrder",
    "TimeWindow",
    "FetchBatch",
    "RateLimitStatus",
]
