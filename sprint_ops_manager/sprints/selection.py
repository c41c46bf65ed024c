"""Selects the sprint relevant to a project at a point in time."""

from datetime import datetime, timedelta
from typing import Iterable

import structlog

from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.jira.exceptions import EmptyResultError
from sprint_ops_manager.schemas.jira import Sprint, SprintState
from sprint_ops_manager.utils.constants import SPRINT_DURATION
from sprint_ops_manager.utils.helpers import ensure_aware, utc_now

from .filters import belongs_to_project, filter_project_sprints
from .pager import fetch_all_sprints

logger = structlog.get_logger(__name__)


def get_active_sprint(client: JiraClientBase, board_id: int, project: str) -> Sprint:
    """Return the active sprint of a board, preferring the project's own sprint.

    When no active sprint carries the project key, the first active sprint
    on the board is returned instead.

    Raises:
        EmptyResultError: If the board has no active sprint at all.
        TransportError: If listing the sprints fails.
    """
    sprints = fetch_all_sprints(client, board_id, state=SprintState.ACTIVE)
    if not sprints:
        raise EmptyResultError(f"Board {board_id} has no active sprint", board_id=board_id, project=project)

    for sprint in sprints:
        if belongs_to_project(sprint, project):
            return sprint

    logger.warning(
        "No active sprint matches the project, falling back to the first active sprint",
        board_id=board_id,
        project=project,
        sprint_id=sprints[0].id,
        sprint_name=sprints[0].name,
    )
    return sprints[0]


def get_latest_passed_sprint(
    sprints: Iterable[Sprint],
    project: str,
    now: datetime | None = None,
    window: timedelta = SPRINT_DURATION,
) -> Sprint | None:
    """Return the project's sprint that ended most recently before `now`.

    Only sprints that started and ended at or before `now` qualify, and only
    if they ended strictly less than `window` ago. Sprints without dates are
    ignored.

    Returns:
        The selected sprint, or None if no sprint qualifies.
    """
    now = ensure_aware(now, name="now") if now is not None else utc_now()
    min_diff = window
    selected: Sprint | None = None
    for sprint in filter_project_sprints(sprints, project):
        if sprint.start_date is None or sprint.end_date is None:
            continue
        # 1. Sprint start date <= now
        # 2. Sprint end date <= now
        # 3. Min(now - sprint end date)
        if sprint.start_date > now:
            continue
        if sprint.end_date > now:
            continue
        diff = now - sprint.end_date
        if diff < min_diff:
            min_diff = diff
            selected = sprint

    logger.debug("Selected latest passed sprint", project=project, sprint_id=selected.id if selected else None)
    return selected


def get_nearest_future_sprint(
    sprints: Iterable[Sprint],
    project: str,
    now: datetime | None = None,
    window: timedelta = SPRINT_DURATION,
) -> Sprint | None:
    """Return the project's sprint that has not ended and starts soonest.

    A sprint already under way has a negative distance to its start and so
    wins over any sprint that has yet to start. Sprints starting `window` or
    more after `now` are never selected. Sprints without dates are ignored.

    Returns:
        The selected sprint, or None if no sprint qualifies.
    """
    now = ensure_aware(now, name="now") if now is not None else utc_now()
    min_diff = window
    selected: Sprint | None = None
    for sprint in filter_project_sprints(sprints, project):
        if sprint.start_date is None or sprint.end_date is None:
            continue
        # 1. Sprint end date >= now
        # 2. Min(sprint start date - now)
        if sprint.end_date < now:
            continue
        diff = sprint.start_date - now
        if diff < min_diff:
            min_diff = diff
            selected = sprint

    logger.debug("Selected nearest future sprint", project=project, sprint_id=selected.id if selected else None)
    return selected
