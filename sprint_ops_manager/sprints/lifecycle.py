"""Creates, updates and deletes sprints following the weekly naming convention."""

from datetime import datetime, timedelta

import structlog

from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.jira.exceptions import EmptyResultError
from sprint_ops_manager.schemas.jira import Sprint, SprintState
from sprint_ops_manager.utils.constants import SPRINT_DURATION, SPRINT_NAME_DAY_FORMAT
from sprint_ops_manager.utils.helpers import ensure_aware

from .pager import fetch_all_sprints

logger = structlog.get_logger(__name__)


def get_board_id(client: JiraClientBase, project: str, board_type: str) -> int:
    """Return the ID of the project's first board of the given type.

    Raises:
        EmptyResultError: If the project has no board of that type.
    """
    boards = client.list_boards(project, board_type=board_type)
    if not boards:
        raise EmptyResultError(f"Project {project} has no {board_type} board", project=project, board_type=board_type)
    logger.debug("Resolved board for project", project=project, board_type=board_type, board_id=boards[0].id)
    return boards[0].id


def next_sprint_window(start: datetime, duration: timedelta = SPRINT_DURATION) -> tuple[datetime, datetime]:
    """Return the (start, end) instants of the sprint beginning at `start`. The end is exclusive."""
    start = ensure_aware(start, name="start")
    return start, start + duration


def next_sprint_name(project: str, start: datetime, duration: timedelta = SPRINT_DURATION) -> str:
    """Return the canonical name of the sprint beginning at `start`.

    Sprints run from 00:00 to 00:00, so a sprint from 2018-10-05T00:00+08:00
    to 2018-10-12T00:00+08:00 is named "PROJ 2018-10-05 - 2018-10-11". The
    last day is taken one second before the exclusive end.
    """
    start, end = next_sprint_window(start, duration)
    last_day = end - timedelta(seconds=1)
    return f"{project} {start.strftime(SPRINT_NAME_DAY_FORMAT)} - {last_day.strftime(SPRINT_NAME_DAY_FORMAT)}"


def find_sprint_by_name(
    client: JiraClientBase,
    board_id: int,
    name: str,
    state: SprintState | None = SprintState.FUTURE,
) -> Sprint | None:
    """Return the first sprint of the board whose name equals `name` exactly, or None."""
    for sprint in fetch_all_sprints(client, board_id, state=state):
        if sprint.name == name:
            return sprint
    return None


def create_next_sprint(
    client: JiraClientBase,
    board_id: int,
    project: str,
    start: datetime,
    duration: timedelta = SPRINT_DURATION,
) -> Sprint:
    """Return the sprint beginning at `start`, creating it only if it does not exist yet.

    An existing future sprint with the canonical name is reused unchanged,
    which makes repeated calls for the same week safe.

    Raises:
        ValueError: If `start` is not timezone-aware.
        TransportError: If listing or creating sprints fails.
    """
    start, end = next_sprint_window(start, duration)
    name = next_sprint_name(project, start, duration)

    existing = find_sprint_by_name(client, board_id, name, state=SprintState.FUTURE)
    if existing is not None:
        logger.info("Next sprint already exists", board_id=board_id, sprint_id=existing.id, sprint_name=name)
        return existing

    sprint = client.create_sprint(board_id, name, start, end)
    logger.info("Created next sprint", board_id=board_id, sprint_id=sprint.id, sprint_name=name)
    return sprint


def delete_sprint(client: JiraClientBase, sprint_id: int) -> None:
    """Delete a sprint."""
    client.delete_sprint(sprint_id)
    logger.info("Deleted sprint", sprint_id=sprint_id)


def update_sprint_dates(client: JiraClientBase, sprint_id: int, start: datetime, end: datetime) -> Sprint:
    """Move a sprint to a new date window."""
    start = ensure_aware(start, name="start")
    end = ensure_aware(end, name="end")
    if end < start:
        raise ValueError(f"Sprint end {end.isoformat()} is before its start {start.isoformat()}")
    sprint = client.update_sprint(sprint_id, start_date=start, end_date=end)
    logger.info("Rescheduled sprint", sprint_id=sprint_id, start=start.isoformat(), end=end.isoformat())
    return sprint


def update_sprint_state(client: JiraClientBase, sprint_id: int, state: SprintState) -> Sprint:
    """Transition a sprint to a new state. Jira enforces which transitions are allowed."""
    sprint = client.update_sprint(sprint_id, state=SprintState(state))
    logger.info("Changed sprint state", sprint_id=sprint_id, state=SprintState(state).value)
    return sprint


def rename_sprint(client: JiraClientBase, sprint_id: int, name: str) -> Sprint:
    """Rename a sprint."""
    if not name.strip():
        raise ValueError("Sprint name must not be empty")
    sprint = client.update_sprint(sprint_id, name=name)
    logger.info("Renamed sprint", sprint_id=sprint_id, sprint_name=name)
    return sprint
