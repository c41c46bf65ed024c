"""Unit tests for the JiraRestAdapter class and related Jira operations."""

from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from requests.auth import HTTPBasicAuth

from sprint_ops_manager.configuration.models import JiraAuthenticationType, JiraConnectionConfig, JiraSearchApi
from sprint_ops_manager.jira.adapter import JiraRestAdapter
from sprint_ops_manager.jira.exceptions import TransportError
from sprint_ops_manager.schemas.jira import SprintState

JIRA_URL = "https://jira.example.com"
AGILE_URL = f"{JIRA_URL}/rest/agile/1.0"
CST = timezone(timedelta(hours=8))

SPRINT_PAYLOAD = {
    "id": 37,
    "self": f"{AGILE_URL}/sprint/37",
    "state": "future",
    "name": "PROJ 2018-10-05 - 2018-10-11",
    "startDate": "2018-10-05T00:00:00.000+08:00",
    "endDate": "2018-10-12T00:00:00.000+08:00",
    "originBoardId": 7,
}


@pytest.fixture
def adapter() -> JiraRestAdapter:
    """Adapter with an unauthenticated session."""
    return JiraRestAdapter(requests.Session(), f"{JIRA_URL}/", timeout=5)


def query_of(request: Any) -> dict[str, list[str]]:
    """Return the case-preserving query string of a recorded request."""
    return parse_qs(urlparse(request.url).query)


def test_list_boards(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that boards are looked up by project and type."""
    requests_mock.get(f"{AGILE_URL}/board", json={"isLast": True, "values": [{"id": 7, "name": "PROJ board", "type": "scrum"}]})

    # When
    boards = adapter.list_boards("PROJ", board_type="scrum")

    # Then
    assert [board.id for board in boards] == [7]
    assert query_of(requests_mock.last_request) == {"projectKeyOrId": ["PROJ"], "type": ["scrum"]}


def test_list_sprints(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a page of sprints is requested with state and offset and parsed."""
    requests_mock.get(
        f"{AGILE_URL}/board/7/sprint",
        json={"maxResults": 100, "startAt": 100, "isLast": True, "values": [SPRINT_PAYLOAD]},
    )

    # When
    page = adapter.list_sprints(7, state=SprintState.FUTURE, start_at=100, max_results=100)

    # Then
    assert query_of(requests_mock.last_request) == {"state": ["future"], "startAt": ["100"], "maxResults": ["100"]}
    assert page.is_last is True
    assert page.start_at == 100
    sprint = page.values[0]
    assert sprint.id == 37
    assert sprint.state == SprintState.FUTURE
    assert sprint.start_date == datetime(2018, 10, 5, tzinfo=CST)
    assert sprint.origin_board_id == 7


def test_list_sprints_without_state(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that no state filter is sent when listing all sprints."""
    requests_mock.get(f"{AGILE_URL}/board/7/sprint", json={"isLast": True, "values": []})

    # When
    page = adapter.list_sprints(7)

    # Then
    assert "state" not in query_of(requests_mock.last_request)
    assert page.values == []


def test_create_sprint(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a sprint is created with offset-qualified timestamps."""
    requests_mock.post(f"{AGILE_URL}/sprint", status_code=201, json=SPRINT_PAYLOAD)

    # When
    sprint = adapter.create_sprint(
        7,
        "PROJ 2018-10-05 - 2018-10-11",
        datetime(2018, 10, 5, tzinfo=CST),
        datetime(2018, 10, 12, tzinfo=CST),
    )

    # Then
    assert requests_mock.last_request.json() == {
        "name": "PROJ 2018-10-05 - 2018-10-11",
        "startDate": "2018-10-05T00:00:00+08:00",
        "endDate": "2018-10-12T00:00:00+08:00",
        "originBoardId": 7,
    }
    assert sprint.id == 37


def test_delete_sprint(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a sprint is deleted."""
    requests_mock.delete(f"{AGILE_URL}/sprint/37", status_code=204)

    # When
    adapter.delete_sprint(37)

    # Then
    assert requests_mock.last_request.method == "DELETE"


def test_update_sprint_sends_only_given_fields(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a partial update only carries the provided fields."""
    requests_mock.post(f"{AGILE_URL}/sprint/37", json={**SPRINT_PAYLOAD, "state": "active"})

    # When
    sprint = adapter.update_sprint(37, state=SprintState.ACTIVE)

    # Then
    assert requests_mock.last_request.json() == {"state": "active"}
    assert sprint.state == SprintState.ACTIVE


def test_update_sprint_requires_a_field(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that an empty update is rejected without a request."""
    with pytest.raises(ValueError):
        adapter.update_sprint(37)
    assert requests_mock.call_count == 0


def test_move_issues_to_sprint(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that issues are moved with a single request."""
    requests_mock.post(f"{AGILE_URL}/sprint/37/issue", status_code=204)

    # When
    adapter.move_issues_to_sprint(37, ["10001", "10002"])

    # Then
    assert requests_mock.last_request.json() == {"issues": ["10001", "10002"]}


@pytest.mark.parametrize("count", [0, 51])
def test_move_issues_to_sprint_enforces_batch_limit(adapter: JiraRestAdapter, requests_mock: Any, count: int) -> None:
    """Test that empty or oversized batches are rejected without a request."""
    with pytest.raises(ValueError):
        adapter.move_issues_to_sprint(37, [str(i) for i in range(count)])
    assert requests_mock.call_count == 0


def test_search_issues(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that issues are searched with JQL."""
    requests_mock.get(
        f"{JIRA_URL}/rest/api/2/search",
        json={"total": 2, "issues": [{"id": "10001", "key": "PROJ-1", "fields": {}}, {"id": "10002", "key": "PROJ-2"}]},
    )

    # When
    issues = adapter.search_issues("project = PROJ", max_results=1000)

    # Then
    assert [issue.id for issue in issues] == ["10001", "10002"]
    assert query_of(requests_mock.last_request)["jql"] == ["project = PROJ"]
    assert query_of(requests_mock.last_request)["startAt"] == ["0"]
    assert query_of(requests_mock.last_request)["maxResults"] == ["100"]
    assert requests_mock.call_count == 1


def issues_payload(start: int, count: int) -> list[dict[str, str]]:
    """Build a page of issue payloads with consecutive IDs."""
    return [{"id": str(10000 + i), "key": f"PROJ-{i}"} for i in range(start, start + count)]


def test_search_issues_follows_every_page(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that the search keeps requesting pages until all matching issues are returned."""
    requests_mock.get(
        f"{JIRA_URL}/rest/api/2/search",
        [
            {"json": {"startAt": 0, "total": 150, "issues": issues_payload(0, 100)}},
            {"json": {"startAt": 100, "total": 150, "issues": issues_payload(100, 50)}},
        ],
    )

    # When
    issues = adapter.search_issues("sprint = 1", max_results=1000)

    # Then
    assert len(issues) == 150
    assert [issue.id for issue in issues] == [str(10000 + i) for i in range(150)]
    assert [query_of(request)["startAt"] for request in requests_mock.request_history] == [["0"], ["100"]]


def test_search_issues_stops_at_max_results(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that no more than max_results issues are requested or returned."""
    requests_mock.get(
        f"{JIRA_URL}/rest/api/2/search",
        [
            {"json": {"startAt": 0, "total": 500, "issues": issues_payload(0, 100)}},
            {"json": {"startAt": 100, "total": 500, "issues": issues_payload(100, 20)}},
        ],
    )

    # When
    issues = adapter.search_issues("project = PROJ", max_results=120)

    # Then
    assert len(issues) == 120
    assert [query_of(request)["maxResults"] for request in requests_mock.request_history] == [["100"], ["20"]]


def test_search_issues_with_token_paging(requests_mock: Any) -> None:
    """Test that the Cloud search endpoint is paged with nextPageToken."""
    adapter = JiraRestAdapter(requests.Session(), JIRA_URL, search_api=JiraSearchApi.TOKEN)
    requests_mock.get(
        f"{JIRA_URL}/rest/api/3/search/jql",
        [
            {"json": {"issues": issues_payload(0, 100), "nextPageToken": "page-2", "isLast": False}},
            {"json": {"issues": issues_payload(100, 30), "isLast": True}},
        ],
    )

    # When
    issues = adapter.search_issues("sprint = 1")

    # Then
    assert len(issues) == 130
    first, second = requests_mock.request_history
    assert "nextPageToken" not in query_of(first)
    assert query_of(second)["nextPageToken"] == ["page-2"]
    assert query_of(second)["jql"] == ["sprint = 1"]


def test_sprint_date_without_offset_becomes_transport_error(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a sprint date without timezone offset is reported as an unexpected payload."""
    requests_mock.get(
        f"{AGILE_URL}/board/7/sprint",
        json={"isLast": True, "values": [{**SPRINT_PAYLOAD, "startDate": "2018-10-05T00:00:00.000"}]},
    )

    # When/Then
    with pytest.raises(TransportError) as exc_info:
        adapter.list_sprints(7)

    assert "no timezone offset" in str(exc_info.value)


def test_http_error_becomes_transport_error(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that HTTP errors are raised as TransportError with Jira's error details."""
    requests_mock.post(
        f"{AGILE_URL}/sprint/37",
        status_code=400,
        json={"errorMessages": ["Sprint cannot be started"], "errors": {"startDate": "required"}},
    )

    # When/Then
    with pytest.raises(TransportError) as exc_info:
        adapter.update_sprint(37, state=SprintState.ACTIVE)

    error = exc_info.value
    assert error.status_code == 400
    assert error.operation == "update_sprint"
    assert error.method == "POST"
    assert error.url == f"{AGILE_URL}/sprint/37"
    assert error.details == ["Sprint cannot be started", "startDate: required"]
    assert isinstance(error.__cause__, requests.HTTPError)


def test_http_error_with_text_body(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that non-JSON error bodies are kept as details."""
    requests_mock.delete(f"{AGILE_URL}/sprint/37", status_code=503, text="Service Unavailable")

    # When/Then
    with pytest.raises(TransportError) as exc_info:
        adapter.delete_sprint(37)

    assert exc_info.value.status_code == 503
    assert exc_info.value.details == ["Service Unavailable"]


def test_connection_error_becomes_transport_error(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that network failures are raised as TransportError without a status code."""
    requests_mock.get(f"{AGILE_URL}/board/7/sprint", exc=requests.exceptions.ConnectionError("connection refused"))

    # When/Then
    with pytest.raises(TransportError) as exc_info:
        adapter.list_sprints(7)

    assert exc_info.value.status_code is None
    assert exc_info.value.operation == "list_sprints"


def test_unexpected_payload_becomes_transport_error(adapter: JiraRestAdapter, requests_mock: Any) -> None:
    """Test that a payload that does not describe a sprint is raised as TransportError."""
    requests_mock.post(f"{AGILE_URL}/sprint", json={"unexpected": True})

    # When/Then
    with pytest.raises(TransportError) as exc_info:
        adapter.create_sprint(7, "PROJ", datetime(2018, 10, 5, tzinfo=CST), datetime(2018, 10, 12, tzinfo=CST))

    assert "unexpected payload" in str(exc_info.value)


def test_create_with_basic_authentication() -> None:
    """Test that basic authentication is configured on the session."""
    connection = JiraConnectionConfig(
        jira_url=JIRA_URL,
        authentication_type=JiraAuthenticationType.BASIC,
        email="user@example.com",
        api_token="api-token",
        timeout=10,
    )

    # When
    adapter = JiraRestAdapter.create(connection)

    # Then
    assert isinstance(adapter.session.auth, HTTPBasicAuth)
    assert adapter.session.auth.username == "user@example.com"
    assert adapter.session.headers["Accept"] == "application/json"
    assert adapter.timeout == 10


def test_create_with_pat_authentication(requests_mock: Any) -> None:
    """Test that personal access tokens are sent as bearer tokens."""
    connection = JiraConnectionConfig(jira_url=JIRA_URL, authentication_type=JiraAuthenticationType.PAT, pat_token="pat-token")
    requests_mock.get(f"{AGILE_URL}/board", json={"values": []})

    # When
    JiraRestAdapter.create(connection).list_boards("PROJ")

    # Then
    assert requests_mock.last_request.headers["Authorization"] == "Bearer pat-token"
