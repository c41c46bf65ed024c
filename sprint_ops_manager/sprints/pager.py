"""Pages through a board's sprints until Jira reports the last page."""

import structlog

from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.jira.exceptions import TransportError
from sprint_ops_manager.schemas.jira import Sprint, SprintState
from sprint_ops_manager.utils.constants import SPRINT_PAGE_SIZE

logger = structlog.get_logger(__name__)


def fetch_all_sprints(
    client: JiraClientBase,
    board_id: int,
    state: SprintState | None = None,
    page_size: int = SPRINT_PAGE_SIZE,
) -> list[Sprint]:
    """Fetch every sprint of a board in the given state, in server order.

    The cursor advances by the number of sprints actually returned, so a
    server that caps pages below `page_size` is still paged correctly. Any
    failed page aborts the whole listing.

    Args:
        client: Jira client used for the list requests.
        board_id: ID of the board whose sprints are listed.
        state: Only list sprints in this state. None lists all states.
        page_size: Number of sprints requested per page.

    Returns:
        All matching sprints. An empty list is a valid result.

    Raises:
        TransportError: If a page request fails, or Jira returns an empty page that is not the last one.
    """
    all_sprints: list[Sprint] = []
    start_at = 0
    while True:
        page = client.list_sprints(board_id, state=state, start_at=start_at, max_results=page_size)
        logger.debug(
            "Fetched page of sprints",
            board_id=board_id,
            state=SprintState(state).value if state is not None else None,
            start_at=start_at,
            count=len(page.values),
            is_last=page.is_last,
        )
        all_sprints.extend(page.values)
        if page.is_last:
            break
        if not page.values:
            raise TransportError(
                f"Jira returned an empty, non-final page of sprints for board {board_id} at offset {start_at}",
                operation="list_sprints",
            )
        start_at += len(page.values)

    logger.info(
        "Fetched all sprints for board",
        board_id=board_id,
        state=SprintState(state).value if state is not None else None,
        total=len(all_sprints),
    )
    return all_sprints
