"""
Transform validated GitHub nodes into warehouse rows.
"""

import logging
from typing import Iterable, List, Sequence

from pydantic import BaseModel

from schemas.github import PullRequestNode, TeamNode
from schemas.warehouse import (
    AuthorRow,
    PullRequestRow,
    RepositoryRow,
    ReviewsRow,
    TeamRepositories,
    TeamRow,
)

logger = logging.getLogger(__name__)


class RecordSerializer:
    """
    Map upstream nodes onto the stable row shapes of the destination tables.

    Nested lists are fetched with a fixed limit (labels per pull request,
    repositories per team). Rows are still emitted when a list is cut short,
    but the truncation is logged as a warning.
    """

    def pull_request_row(self, node: PullRequestNode) -> PullRequestRow:
        labels = node.labels
        if labels.total_count > len(labels.nodes):
            logger.warning(
                f"Labels of {node.url} truncated: "
                f"kept {len(labels.nodes)} of {labels.total_count}"
            )

        first_commit = node.commits.nodes[0].commit.authored_date if node.commits.nodes else None

        return PullRequestRow(
            id=node.id,
            title=node.title,
            author=AuthorRow(login=node.author.login, typename=node.author.typename) if node.author else None,
            url=node.url,
            createdAt=node.created_at,
            mergedAt=node.merged_at,
            additions=node.additions,
            deletions=node.deletions,
            firstCommittedAt=first_commit,
            number=node.number,
            repository=RepositoryRow(nameWithOwner=node.repository.name_with_owner),
            baseRefName=node.base_ref_name,
            headRefName=node.head_ref_name,
            reviews=ReviewsRow(totalCount=node.reviews.total_count),
            labelNames=[label.name for label in labels.nodes],
        )

    def team_row(self, node: TeamNode) -> TeamRow:
        repositories = node.repositories
        if repositories.total_count > len(repositories.nodes):
            logger.warning(
                f"Repositories of team {node.name} truncated: "
                f"kept {len(repositories.nodes)} of {repositories.total_count}"
            )

        return TeamRow(
            name=node.name,
            repositories=TeamRepositories(
                nodes=[RepositoryRow(nameWithOwner=r.name_with_owner) for r in repositories.nodes]
            ),
        )

    def pull_request_rows(self, nodes: Iterable[PullRequestNode]) -> List[PullRequestRow]:
        """Convert nodes to rows, keeping the first occurrence of each id"""
        rows = []
        seen = set()
        for node in nodes:
            if node.id in seen:
                continue
            seen.add(node.id)
            rows.append(self.pull_request_row(node))
        return rows

    def team_rows(self, nodes: Iterable[TeamNode]) -> List[TeamRow]:
        return [self.team_row(node) for node in nodes]


def to_json_lines(rows: Sequence[BaseModel]) -> List[str]:
    """Serialize rows as newline-delimited JSON lines"""
    return [row.model_dump_json() for row in rows]
