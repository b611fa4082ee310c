import enum


# ============================================================================
# ENUMS
# ============================================================================

class DestinationTable(str, enum.Enum):
    """Warehouse tables written by the import"""
    PULL_REQUESTS = "pull_requests"
    PULL_REQUESTS_REINDEX = "pull_requests_reindex"
    TEAMS = "teams"


class ImportStatus(str, enum.Enum):
    """Outcome of an import run"""
    SUCCESS = "success"
    NOOP = "noop"
    FAILED = "failed"


class WindowOrder(str, enum.Enum):
    """Iteration order for partitioned windows"""
    ASCENDING = "ascending"
    DESCENDING = "descending"
