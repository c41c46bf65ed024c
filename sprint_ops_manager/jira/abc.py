"""Base ABC for Jira clients."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from sprint_ops_manager.schemas.jira import Board, Issue, Sprint, SprintPage, SprintState


class JiraClientBase(ABC):
    """Base ABC for Jira clients.

    Every method blocks until Jira has answered and raises TransportError if
    the call cannot be completed. Only search_issues may span several requests.
    """

    # Board lookups
    @abstractmethod
    def list_boards(self, project: str, board_type: str | None = None) -> list[Board]:
        """List the boards of a project, optionally restricted to a board type."""
        pass

    # Sprint CRUD
    @abstractmethod
    def list_sprints(
        self,
        board_id: int,
        state: SprintState | None = None,
        start_at: int = 0,
        max_results: int = 50,
    ) -> SprintPage:
        """List one page of a board's sprints."""
        pass

    @abstractmethod
    def create_sprint(self, board_id: int, name: str, start_date: datetime, end_date: datetime) -> Sprint:
        """Create a sprint on a board."""
        pass

    @abstractmethod
    def delete_sprint(self, sprint_id: int) -> None:
        """Delete a sprint."""
        pass

    @abstractmethod
    def update_sprint(
        self,
        sprint_id: int,
        state: SprintState | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        name: str | None = None,
    ) -> Sprint:
        """Partially update a sprint. Fields left as None are not sent."""
        pass

    # Issue operations
    @abstractmethod
    def move_issues_to_sprint(self, sprint_id: int, issue_ids: Sequence[str]) -> None:
        """Move up to 50 issues into a sprint in a single request."""
        pass

    @abstractmethod
    def search_issues(self, jql: str, max_results: int = 1000) -> list[Issue]:
        """Search issues with a JQL query, returning at most `max_results` issues across all result pages."""
        pass
