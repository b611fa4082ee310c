"""
Pydantic schemas for data validation and serialization.

Schemas:
    github: Upstream GraphQL response shapes, validated at the boundary
    warehouse: Row shapes written to the BigQuery tables

Usage:
    from schemas.github import PullRequestNode, validate_payload
    from schemas.warehouse import PullRequestRow

Validation:
    Upstream payloads that do not match the expected shape raise
    ResponseValidationError instead of propagating untyped dicts inward.
    Unknown fields are ignored so upstream additions never break a run.
"""

__all__ = [
    "PageInfo",
    "Connection",
    "SearchPage",
    "TeamsPage",
    "PullRequestNode",
    "TeamNode",
    "RateLimitPayload",
    "validate_payload",
    "extract_connection",
    "PullRequestRow",
    "TeamRow",
]
