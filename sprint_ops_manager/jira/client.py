"""Sets up the authenticated requests session used to talk to Jira."""

import requests
from requests.auth import HTTPBasicAuth

from sprint_ops_manager.configuration.models import JiraAuthenticationType


def get_jira_basic_session(jira_email: str, jira_api_token: str) -> requests.Session:
    """Returns a session authenticated with a Jira Cloud email and API token."""
    if not (jira_email and jira_api_token):
        raise RuntimeError("Jira basic authentication requires both an email and an API token.")
    session = requests.Session()
    session.auth = HTTPBasicAuth(jira_email, jira_api_token)
    return session


def get_jira_pat_session(jira_pat_token: str) -> requests.Session:
    """Returns a session authenticated with a Jira Data Center personal access token."""
    if not jira_pat_token:
        raise RuntimeError("Jira PAT authentication requires a personal access token.")
    session = requests.Session()
    session.headers["Authorization"] = f"Bearer {jira_pat_token}"
    return session


def get_jira_session(
    authentication_type: JiraAuthenticationType,
    jira_email: str | None = None,
    jira_api_token: str | None = None,
    jira_pat_token: str | None = None,
) -> requests.Session:
    """Returns an authenticated session for the chosen authentication type.

    The session always asks for and sends JSON.
    """
    if authentication_type == JiraAuthenticationType.PAT:
        session = get_jira_pat_session(jira_pat_token or "")
    else:
        session = get_jira_basic_session(jira_email or "", jira_api_token or "")
    session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
    return session
