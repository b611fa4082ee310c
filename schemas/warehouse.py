"""
Pydantic schemas for rows loaded into BigQuery.

Field names here are the column names of the destination tables and must
stay stable across runs: the delete predicate filters on `mergedAt`.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AuthorRow(BaseModel):
    login: str
    typename: str


class RepositoryRow(BaseModel):
    nameWithOwner: str


class ReviewsRow(BaseModel):
    totalCount: int


class PullRequestRow(BaseModel):
    """One row of the pull_requests table"""

    id: str
    title: str
    author: Optional[AuthorRow] = None
    url: str
    createdAt: datetime
    mergedAt: datetime
    additions: int
    deletions: int
    firstCommittedAt: Optional[datetime] = None
    number: int
    repository: RepositoryRow
    baseRefName: str
    headRefName: str
    reviews: ReviewsRow
    labelNames: List[str] = Field(default_factory=list)


class TeamRepositories(BaseModel):
    # nested as in the API response; views flatten it
    nodes: List[RepositoryRow] = Field(default_factory=list)


class TeamRow(BaseModel):
    """One row of the teams table"""

    name: str
    repositories: TeamRepositories


# Column used to select a window's rows for deletion
PARTITION_COLUMN = "mergedAt"
