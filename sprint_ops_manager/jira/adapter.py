"""Jira client adapter for the Jira Software REST API, built on requests."""

from datetime import datetime
from functools import wraps
from typing import Any, Callable, Self, Sequence, TypeVar

import requests
import structlog
from pydantic import ValidationError

from sprint_ops_manager.configuration.models import JiraConnectionConfig, JiraSearchApi
from sprint_ops_manager.schemas.jira import Board, Issue, Sprint, SprintPage, SprintState
from sprint_ops_manager.utils.constants import (
    AGILE_API_PATH,
    DEFAULT_JIRA_TIMEOUT,
    ENHANCED_ISSUE_SEARCH_PATH,
    ISSUE_SEARCH_PAGE_SIZE,
    ISSUE_SEARCH_PATH,
    MAX_ISSUES_PER_MOVE,
)
from sprint_ops_manager.utils.helpers import format_instant

from .abc import JiraClientBase
from .client import get_jira_session
from .exceptions import TransportError

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _extract_error_details(response: requests.Response | None) -> list[str]:
    """Collect Jira's errorMessages and field errors from a failed response."""
    if response is None:
        return []
    try:
        error_data = response.json()
    except ValueError:
        return [response.text] if response.text else []
    if not isinstance(error_data, dict):
        return [str(error_data)]
    details: list[str] = list(error_data.get("errorMessages") or [])
    details.extend(f"{field}: {message}" for field, message in (error_data.get("errors") or {}).items())
    return details


def handle_jira_errors(func: F) -> F:
    """Decorator to turn requests and payload validation failures into TransportError, logging the details."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except requests.HTTPError as exc:
            response = exc.response
            status_code = getattr(response, "status_code", None)
            method = getattr(response.request, "method", None) if response is not None else None
            url = getattr(response, "url", None)
            details = _extract_error_details(response)
            logger.error(
                "Jira request failed",
                function=func.__name__,
                method=method,
                url=url,
                status_code=status_code,
                details=details,
            )
            raise TransportError(
                f"Jira {func.__name__} failed with HTTP {status_code}: {method} {url} | {'; '.join(details) or 'no details'}",
                operation=func.__name__,
                method=method,
                url=url,
                status_code=status_code,
                details=details,
            ) from exc
        except requests.RequestException as exc:
            request = exc.request
            method = getattr(request, "method", None)
            url = getattr(request, "url", None)
            logger.error(
                "Jira request could not be completed",
                function=func.__name__,
                method=method,
                url=url,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise TransportError(
                f"Jira {func.__name__} could not be completed: {exc}",
                operation=func.__name__,
                method=method,
                url=url,
            ) from exc
        except ValidationError as exc:
            logger.error("Unexpected Jira response payload", function=func.__name__, error=str(exc))
            raise TransportError(
                f"Jira {func.__name__} returned an unexpected payload: {exc}",
                operation=func.__name__,
            ) from exc

    return wrapper  # type: ignore


class JiraRestAdapter(JiraClientBase):
    """Jira client adapter for the Jira Software REST API."""

    def __init__(
        self,
        session: requests.Session,
        jira_url: str,
        timeout: float = DEFAULT_JIRA_TIMEOUT,
        search_api: JiraSearchApi = JiraSearchApi.OFFSET,
    ) -> None:
        """Initialize the Jira client adapter with an already-authenticated session."""
        self.session = session
        self.jira_url = jira_url.rstrip("/")
        self.timeout = timeout
        self.search_api = JiraSearchApi(search_api)

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> requests.Response:
        """Send one request relative to the Jira base URL and raise on HTTP errors."""
        url = f"{self.jira_url}/{endpoint}"
        logger.debug("Sending Jira request", method=method, url=url, params=params)
        response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        response.raise_for_status()
        return response

    @classmethod
    def create(cls, connection: JiraConnectionConfig) -> Self:
        """Create a new Jira client adapter.

        Args:
            connection: Reconciled connection settings (URL, credentials, timeout)

        Returns:
            Configured JiraRestAdapter instance

        Raises:
            RuntimeError: If the credentials for the chosen authentication type are missing
        """
        logger.info(
            "Creating client for Jira instance",
            jira_url=connection.jira_url,
            authentication_type=connection.authentication_type.value,
            search_api=connection.search_api.value,
        )
        session = get_jira_session(
            authentication_type=connection.authentication_type,
            jira_email=connection.email,
            jira_api_token=connection.api_token,
            jira_pat_token=connection.pat_token,
        )
        return cls(session, connection.jira_url, timeout=connection.timeout, search_api=connection.search_api)

    # Board lookups
    @handle_jira_errors
    def list_boards(self, project: str, board_type: str | None = None) -> list[Board]:
        """List the boards of a project, optionally restricted to a board type."""
        params = self._omit_null_parameters(projectKeyOrId=project, type=board_type)
        response = self._request("GET", f"{AGILE_API_PATH}/board", params=params)
        return [Board.model_validate(board) for board in response.json().get("values", [])]

    # Sprint CRUD
    @handle_jira_errors
    def list_sprints(
        self,
        board_id: int,
        state: SprintState | None = None,
        start_at: int = 0,
        max_results: int = 50,
    ) -> SprintPage:
        """List one page of a board's sprints."""
        params = self._omit_null_parameters(
            state=SprintState(state).value if state is not None else None,
            startAt=start_at,
            maxResults=max_results,
        )
        response = self._request("GET", f"{AGILE_API_PATH}/board/{board_id}/sprint", params=params)
        return SprintPage.model_validate(response.json())

    @handle_jira_errors
    def create_sprint(self, board_id: int, name: str, start_date: datetime, end_date: datetime) -> Sprint:
        """Create a sprint on a board."""
        payload = {
            "name": name,
            "startDate": format_instant(start_date),
            "endDate": format_instant(end_date),
            "originBoardId": board_id,
        }
        response = self._request("POST", f"{AGILE_API_PATH}/sprint", json=payload)
        return Sprint.model_validate(response.json())

    @handle_jira_errors
    def delete_sprint(self, sprint_id: int) -> None:
        """Delete a sprint."""
        self._request("DELETE", f"{AGILE_API_PATH}/sprint/{sprint_id}")

    @handle_jira_errors
    def update_sprint(
        self,
        sprint_id: int,
        state: SprintState | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        name: str | None = None,
    ) -> Sprint:
        """Partially update a sprint. Fields left as None are not sent."""
        payload = self._omit_null_parameters(
            state=SprintState(state).value if state is not None else None,
            startDate=format_instant(start_date) if start_date is not None else None,
            endDate=format_instant(end_date) if end_date is not None else None,
            name=name,
        )
        if not payload:
            raise ValueError(f"No fields given to update on sprint {sprint_id}")
        response = self._request("POST", f"{AGILE_API_PATH}/sprint/{sprint_id}", json=payload)
        return Sprint.model_validate(response.json())

    # Issue operations
    @handle_jira_errors
    def move_issues_to_sprint(self, sprint_id: int, issue_ids: Sequence[str]) -> None:
        """Move up to 50 issues into a sprint in a single request."""
        if not 1 <= len(issue_ids) <= MAX_ISSUES_PER_MOVE:
            raise ValueError(f"Between 1 and {MAX_ISSUES_PER_MOVE} issues can be moved per request, got {len(issue_ids)}")
        self._request("POST", f"{AGILE_API_PATH}/sprint/{sprint_id}/issue", json={"issues": list(issue_ids)})

    @handle_jira_errors
    def search_issues(self, jql: str, max_results: int = 1000) -> list[Issue]:
        """Search issues with a JQL query, following pages until `max_results` issues or the last match."""
        if self.search_api == JiraSearchApi.TOKEN:
            return self._search_issues_by_token(jql, max_results)
        return self._search_issues_by_offset(jql, max_results)

    def _search_issues_by_offset(self, jql: str, max_results: int) -> list[Issue]:
        """Page through rest/api/2/search with startAt until `total` is reached."""
        issues: list[Issue] = []
        while len(issues) < max_results:
            params = {
                "jql": jql,
                "startAt": len(issues),
                "maxResults": min(ISSUE_SEARCH_PAGE_SIZE, max_results - len(issues)),
                "fields": "key",
            }
            data = self._request("GET", ISSUE_SEARCH_PATH, params=params).json()
            page = [Issue.model_validate(issue) for issue in data.get("issues", [])]
            issues.extend(page)
            logger.debug("Fetched page of issues", jql=jql, start_at=params["startAt"], count=len(page), total=data.get("total"))
            if not page or len(issues) >= data.get("total", 0):
                break
        return issues[:max_results]

    def _search_issues_by_token(self, jql: str, max_results: int) -> list[Issue]:
        """Page through rest/api/3/search/jql with nextPageToken until Jira reports the last page."""
        issues: list[Issue] = []
        next_page_token: str | None = None
        while len(issues) < max_results:
            params = self._omit_null_parameters(
                jql=jql,
                nextPageToken=next_page_token,
                maxResults=min(ISSUE_SEARCH_PAGE_SIZE, max_results - len(issues)),
                fields="key",
            )
            data = self._request("GET", ENHANCED_ISSUE_SEARCH_PATH, params=params).json()
            page = [Issue.model_validate(issue) for issue in data.get("issues", [])]
            issues.extend(page)
            next_page_token = data.get("nextPageToken")
            logger.debug("Fetched page of issues", jql=jql, count=len(page), is_last=next_page_token is None or bool(data.get("isLast")))
            if not page or data.get("isLast") or next_page_token is None:
                break
        return issues[:max_results]
