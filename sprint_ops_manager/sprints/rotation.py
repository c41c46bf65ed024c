"""Rolls a board over from the active sprint to the next weekly sprint."""

from dataclasses import dataclass
from datetime import datetime

import structlog

from sprint_ops_manager.configuration.models import SprintConfig
from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.schemas.jira import Sprint, SprintState
from sprint_ops_manager.utils.helpers import ensure_aware, utc_now

from .issues import build_unresolved_sprint_issues_jql, move_issues_to_sprint, query_issues
from .lifecycle import create_next_sprint, find_sprint_by_name, next_sprint_name, update_sprint_state
from .selection import get_active_sprint

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RotationResult:
    """Contains the outcome of a sprint rotation."""

    closed_sprint: Sprint
    next_sprint_name: str
    next_sprint: Sprint | None
    issues_moved: int
    dry_run: bool = False


def rotate_sprint(
    client: JiraClientBase,
    config: SprintConfig,
    board_id: int,
    now: datetime | None = None,
    dry_run: bool = False,
) -> RotationResult:
    """Close the active sprint and start the next one, carrying over unresolved issues.

    Steps, each aborting the rotation on failure:

    1. Resolve the active sprint.
    2. Create (or reuse) the sprint starting when the active one ends.
    3. Move the active sprint's unresolved issues into it.
    4. Close the active sprint, then activate the next one.

    With `dry_run`, only the reads are performed and the planned outcome is
    returned; `next_sprint` is then the existing sprint, if any.
    """
    now = ensure_aware(now, name="now") if now is not None else utc_now()
    active = get_active_sprint(client, board_id, config.project)
    start = active.end_date or now
    name = next_sprint_name(config.project, start)
    unresolved = query_issues(client, build_unresolved_sprint_issues_jql(active.id))
    logger.info(
        "Planned sprint rotation",
        board_id=board_id,
        active_sprint_id=active.id,
        next_sprint_name=name,
        unresolved_issues=len(unresolved),
        dry_run=dry_run,
    )

    if dry_run:
        existing = find_sprint_by_name(client, board_id, name, state=SprintState.FUTURE)
        return RotationResult(
            closed_sprint=active,
            next_sprint_name=name,
            next_sprint=existing,
            issues_moved=len(unresolved),
            dry_run=True,
        )

    next_sprint = create_next_sprint(client, board_id, config.project, start)
    moved = move_issues_to_sprint(client, next_sprint.id, unresolved)
    closed = update_sprint_state(client, active.id, SprintState.CLOSED)
    started = update_sprint_state(client, next_sprint.id, SprintState.ACTIVE)
    logger.info("Rotated sprint", board_id=board_id, closed_sprint_id=closed.id, active_sprint_id=started.id, issues_moved=moved)
    return RotationResult(
        closed_sprint=closed,
        next_sprint_name=name,
        next_sprint=started,
        issues_moved=moved,
    )
