"""
Pydantic schemas for GitHub GraphQL responses.

Every payload coming back from the API is validated here before it moves
further into the pipeline. Shapes that do not match raise
ResponseValidationError.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import ResponseValidationError

M = TypeVar("M", bound=BaseModel)


class GitHubModel(BaseModel):
    """Base for upstream shapes: unknown fields are ignored, aliases are camelCase"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# Pagination
# ============================================================================

class PageInfo(GitHubModel):
    end_cursor: Optional[str] = Field(None, alias="endCursor")
    has_next_page: bool = Field(..., alias="hasNextPage")


class Connection(GitHubModel):
    """A GraphQL connection page: raw nodes plus pagination info"""
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    page_info: PageInfo = Field(..., alias="pageInfo")


class SearchPage(Connection):
    """One page of `search(type: ISSUE)`; non pull request hits arrive as {}"""


class TeamsPage(Connection):
    """One page of `organization.teams`"""


# ============================================================================
# Pull requests
# ============================================================================

class Actor(GitHubModel):
    login: str
    typename: str = Field(..., alias="__typename")


class Repository(GitHubModel):
    name_with_owner: str = Field(..., alias="nameWithOwner")


class CommitDetail(GitHubModel):
    authored_date: datetime = Field(..., alias="authoredDate")


class CommitNode(GitHubModel):
    commit: CommitDetail


class CommitConnection(GitHubModel):
    nodes: List[CommitNode] = Field(default_factory=list)


class TotalCount(GitHubModel):
    total_count: int = Field(..., alias="totalCount")


class Label(GitHubModel):
    name: str


class LabelConnection(GitHubModel):
    total_count: int = Field(0, alias="totalCount")
    nodes: List[Label] = Field(default_factory=list)


class PullRequestNode(GitHubModel):
    """A merged pull request as returned by the search query"""

    id: str
    title: str
    # null when the author account was deleted
    author: Optional[Actor] = None
    url: str
    number: int
    repository: Repository
    created_at: datetime = Field(..., alias="createdAt")
    merged_at: datetime = Field(..., alias="mergedAt")
    additions: int
    deletions: int
    commits: CommitConnection
    base_ref_name: str = Field(..., alias="baseRefName")
    head_ref_name: str = Field(..., alias="headRefName")
    reviews: TotalCount
    labels: LabelConnection = Field(default_factory=LabelConnection)


# ============================================================================
# Teams
# ============================================================================

class RepositoryConnection(GitHubModel):
    total_count: int = Field(0, alias="totalCount")
    nodes: List[Repository] = Field(default_factory=list)


class TeamNode(GitHubModel):
    name: str
    repositories: RepositoryConnection = Field(default_factory=RepositoryConnection)


# ============================================================================
# Rate limit
# ============================================================================

class RateLimitPayload(GitHubModel):
    limit: int
    cost: Optional[int] = None
    remaining: int
    reset_at: datetime = Field(..., alias="resetAt")


# ============================================================================
# Validation helpers
# ============================================================================

def validate_payload(model: Type[M], payload: Any) -> M:
    """Validate a payload against a schema, raising ResponseValidationError"""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ResponseValidationError(
            f"Unexpected {model.__name__} payload",
            context={
                "model": model.__name__,
                "errors": e.errors(include_url=False),
            },
            original_exception=e
        )


def extract_connection(
    data: Dict[str, Any],
    path: Sequence[str],
    model: Type[Connection] = Connection,
) -> Connection:
    """Walk `path` into a GraphQL `data` object and validate the connection there as `model`"""
    node: Any = data
    for key in path:
        if not isinstance(node, dict) or node.get(key) is None:
            raise ResponseValidationError(
                f"Missing '{key}' in response",
                context={"path": ".".join(path)}
            )
        node = node[key]
    return validate_payload(model, node)
