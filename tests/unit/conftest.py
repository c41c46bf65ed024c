"""Fixtures for unit tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator, Sequence

import pytest
import structlog

from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.jira.exceptions import TransportError
from sprint_ops_manager.schemas.jira import Board, Issue, Sprint, SprintPage, SprintState

NOW = datetime(2024, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeJiraClient(JiraClientBase):
    """In-memory Jira client that pages its sprints like the real API and records every call."""

    def __init__(
        self,
        sprints: Sequence[Sprint] | None = None,
        boards: Sequence[Board] | None = None,
        issues: Sequence[Issue] | None = None,
        fail_on_move_call: int | None = None,
    ) -> None:
        """Initialize the fake with its server-side data."""
        self.sprints: list[Sprint] = list(sprints or [])
        self.boards: list[Board] = list(boards or [])
        self.issues: list[Issue] = list(issues or [])
        self.fail_on_move_call = fail_on_move_call
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.next_id = 1000

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        """Return the recorded arguments of every call to `name`."""
        return [kwargs for call_name, kwargs in self.calls if call_name == name]

    def list_boards(self, project: str, board_type: str | None = None) -> list[Board]:
        """List boards."""
        self.calls.append(("list_boards", {"project": project, "board_type": board_type}))
        return list(self.boards)

    def list_sprints(self, board_id: int, state: SprintState | None = None, start_at: int = 0, max_results: int = 50) -> SprintPage:
        """List one page of sprints."""
        self.calls.append(("list_sprints", {"board_id": board_id, "state": state, "start_at": start_at, "max_results": max_results}))
        matching = [sprint for sprint in self.sprints if state is None or sprint.state == state]
        values = matching[start_at : start_at + max_results]
        return SprintPage(values=values, start_at=start_at, max_results=max_results, is_last=start_at + len(values) >= len(matching))

    def create_sprint(self, board_id: int, name: str, start_date: datetime, end_date: datetime) -> Sprint:
        """Create a future sprint."""
        self.calls.append(("create_sprint", {"board_id": board_id, "name": name, "start_date": start_date, "end_date": end_date}))
        self.next_id += 1
        sprint = Sprint(
            id=self.next_id,
            name=name,
            state=SprintState.FUTURE,
            start_date=start_date,
            end_date=end_date,
            origin_board_id=board_id,
        )
        self.sprints.append(sprint)
        return sprint

    def delete_sprint(self, sprint_id: int) -> None:
        """Delete a sprint."""
        self.calls.append(("delete_sprint", {"sprint_id": sprint_id}))
        self.sprints = [sprint for sprint in self.sprints if sprint.id != sprint_id]

    def update_sprint(
        self,
        sprint_id: int,
        state: SprintState | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        name: str | None = None,
    ) -> Sprint:
        """Partially update a sprint."""
        fields = {k: v for k, v in {"state": state, "start_date": start_date, "end_date": end_date, "name": name}.items() if v is not None}
        self.calls.append(("update_sprint", {"sprint_id": sprint_id, **fields}))
        for index, sprint in enumerate(self.sprints):
            if sprint.id == sprint_id:
                self.sprints[index] = sprint.model_copy(update=fields)
                return self.sprints[index]
        raise TransportError(f"Sprint {sprint_id} does not exist", operation="update_sprint", status_code=404)

    def move_issues_to_sprint(self, sprint_id: int, issue_ids: Sequence[str]) -> None:
        """Move issues, failing on the configured call number."""
        self.calls.append(("move_issues_to_sprint", {"sprint_id": sprint_id, "issue_ids": list(issue_ids)}))
        if self.fail_on_move_call == len(self.calls_to("move_issues_to_sprint")):
            raise TransportError("Move failed", operation="move_issues_to_sprint", status_code=500)

    def search_issues(self, jql: str, max_results: int = 1000) -> list[Issue]:
        """Search issues."""
        self.calls.append(("search_issues", {"jql": jql, "max_results": max_results}))
        return self.issues[:max_results]


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for date-based selection."""
    return NOW


@pytest.fixture
def make_sprint() -> Callable[..., Sprint]:
    """Factory for sprints, defaulting to a one-week project sprint."""
    counter = {"id": 0}

    def _make_sprint(
        name: str = "PROJ sprint",
        state: SprintState = SprintState.CLOSED,
        start: datetime | None = None,
        end: datetime | None = None,
        sprint_id: int | None = None,
    ) -> Sprint:
        counter["id"] += 1
        if end is not None and start is None:
            start = end - timedelta(days=7)
        return Sprint(
            id=sprint_id if sprint_id is not None else counter["id"],
            name=name,
            state=state,
            start_date=start,
            end_date=end,
        )

    return _make_sprint


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeJiraClient]:
    """Factory for in-memory Jira clients."""
    return FakeJiraClient
