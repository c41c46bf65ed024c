"""Queries issues and moves them into sprints in batches Jira accepts."""

from typing import Sequence

import structlog

from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.schemas.jira import Issue
from sprint_ops_manager.utils.constants import ISSUE_SEARCH_MAX_RESULTS, MAX_ISSUES_PER_MOVE
from sprint_ops_manager.utils.helpers import chunked

logger = structlog.get_logger(__name__)


def build_unresolved_sprint_issues_jql(sprint_id: int) -> str:
    """Build the JQL selecting the unresolved issues of a sprint."""
    return f"sprint = {sprint_id} AND resolution = Unresolved ORDER BY Rank ASC"


def query_issues(client: JiraClientBase, jql: str, max_results: int = ISSUE_SEARCH_MAX_RESULTS) -> list[Issue]:
    """Return the issues matching a JQL query."""
    issues = client.search_issues(jql, max_results=max_results)
    logger.info("Queried issues", jql=jql, count=len(issues))
    return issues


def move_issues_to_sprint(
    client: JiraClientBase,
    sprint_id: int,
    issues: Sequence[Issue | str],
    batch_size: int = MAX_ISSUES_PER_MOVE,
) -> int:
    """Move issues into a sprint, one request per batch of at most `batch_size`.

    Batches are sent in order. The first failing batch aborts the remaining
    ones; batches already sent are neither retried nor rolled back.

    Args:
        client: Jira client used for the move requests.
        sprint_id: ID of the target sprint.
        issues: Issues (or bare issue IDs) to move, in the order to send them.
        batch_size: Issues per request, at most 50.

    Returns:
        The number of issues moved.

    Raises:
        ValueError: If `batch_size` is outside 1..50.
        TransportError: If a move request fails.
    """
    if not 1 <= batch_size <= MAX_ISSUES_PER_MOVE:
        raise ValueError(f"Batch size must be between 1 and {MAX_ISSUES_PER_MOVE}, got {batch_size}")

    issue_ids = [issue.id if isinstance(issue, Issue) else issue for issue in issues]
    moved = 0
    for batch_number, batch in enumerate(chunked(issue_ids, batch_size), start=1):
        client.move_issues_to_sprint(sprint_id, batch)
        moved += len(batch)
        logger.debug("Moved batch of issues", sprint_id=sprint_id, batch_number=batch_number, batch_size=len(batch))

    logger.info("Moved issues to sprint", sprint_id=sprint_id, count=moved)
    return moved
