"""Sprint pagination, selection, lifecycle and issue batching."""

from .filters import belongs_to_project, filter_project_sprints
from .issues import move_issues_to_sprint, query_issues
from .lifecycle import (
    create_next_sprint,
    delete_sprint,
    get_board_id,
    next_sprint_name,
    rename_sprint,
    update_sprint_dates,
    update_sprint_state,
)
from .pager import fetch_all_sprints
from .rotation import RotationResult, rotate_sprint
from .selection import get_active_sprint, get_latest_passed_sprint, get_nearest_future_sprint

__all__ = [
    "RotationResult",
    "belongs_to_project",
    "create_next_sprint",
    "delete_sprint",
    "fetch_all_sprints",
    "filter_project_sprints",
    "get_active_sprint",
    "get_board_id",
    "get_latest_passed_sprint",
    "get_nearest_future_sprint",
    "move_issues_to_sprint",
    "next_sprint_name",
    "query_issues",
    "rename_sprint",
    "rotate_sprint",
    "update_sprint_dates",
    "update_sprint_state",
]
