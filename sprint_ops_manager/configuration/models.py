"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass
from enum import Enum

from sprint_ops_manager.utils.constants import DEFAULT_BOARD_TYPE, DEFAULT_JIRA_TIMEOUT


class JiraAuthenticationType(str, Enum):
    """Enum for Jira authentication types."""

    BASIC = "basic"
    PAT = "pat"


class JiraSearchApi(str, Enum):
    """Enum for the JQL search endpoints.

    `offset` pages rest/api/2/search by startAt (Jira Server and Data Center).
    `token` pages rest/api/3/search/jql by nextPageToken (Jira Cloud).
    """

    OFFSET = "offset"
    TOKEN = "token"


@dataclass(frozen=True)
class JiraConnectionConfig:
    """Connection settings for a Jira instance."""

    jira_url: str
    authentication_type: JiraAuthenticationType
    email: str | None = None
    api_token: str | None = None
    pat_token: str | None = None
    timeout: float = DEFAULT_JIRA_TIMEOUT
    search_api: JiraSearchApi = JiraSearchApi.OFFSET


@dataclass(frozen=True)
class SprintConfig:
    """Project-level settings shared by the sprint operations."""

    project: str
    board_type: str = DEFAULT_BOARD_TYPE
    board_id: int | None = None
