"""Reconciles configuration between CLI arguments and environment variables."""

from sprint_ops_manager.configuration.env import settings
from sprint_ops_manager.configuration.exceptions import (
    JiraAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from sprint_ops_manager.configuration.models import (
    JiraAuthenticationType,
    JiraConnectionConfig,
    JiraSearchApi,
    SprintConfig,
)


def validate_jira_authentication_configuration(
    jira_email: str | None,
    jira_api_token: str | None,
    jira_pat_token: str | None,
) -> JiraAuthenticationType:
    """Validates the Jira authentication configuration.

    Args:
        jira_email (str | None): The Jira account email used for basic authentication.
        jira_api_token (str | None): The Jira API token used for basic authentication.
        jira_pat_token (str | None): The Jira personal access token (Data Center).

    Raises:
        JiraAuthenticationConfigurationUndefinedError: If no usable authentication configuration is defined.

    Returns:
        JiraAuthenticationType: The type of Jira authentication used.
    """
    if jira_pat_token and (jira_email or jira_api_token):
        raise JiraAuthenticationConfigurationUndefinedError(
            "Both personal access token and basic authentication configurations are defined. Please use one or the other."
        )

    if jira_pat_token:
        return JiraAuthenticationType.PAT

    if jira_email and jira_api_token:
        return JiraAuthenticationType.BASIC
    elif jira_email or jira_api_token:
        missing_settings: list[dict[str, str]] = []
        if not jira_email:
            missing_settings.append({"name": "Jira email", "cli_name": "--jira-email", "env_name": "JIRA_EMAIL"})
        if not jira_api_token:
            missing_settings.append({"name": "Jira API token", "cli_name": "--jira-api-token", "env_name": "JIRA_API_TOKEN"})
        msg = "Incomplete Jira basic authentication configuration - missing settings include " + ", ".join(
            f"{setting['name']} (command line option {setting['cli_name']}, environment variable {setting['env_name']})"
            for setting in missing_settings
        )
        raise JiraAuthenticationConfigurationUndefinedError(msg)
    else:
        raise JiraAuthenticationConfigurationUndefinedError(
            "No Jira authentication configuration provided. Please provide either an email and API token or a personal access token."
        )


def default_search_api(authentication_type: JiraAuthenticationType) -> JiraSearchApi:
    """Returns the search API matching the deployment implied by the authentication type."""
    if authentication_type == JiraAuthenticationType.BASIC:
        return JiraSearchApi.TOKEN
    return JiraSearchApi.OFFSET


def reconcile_connection_configuration(
    cli_jira_url: str | None,
    cli_jira_email: str | None,
    cli_jira_api_token: str | None,
    cli_jira_pat_token: str | None,
    cli_jira_timeout: float | None = None,
    cli_jira_search_api: JiraSearchApi | None = None,
) -> JiraConnectionConfig:
    """Reconciles the Jira connection configuration.

    Values passed on the command line take precedence over values read from
    the environment (or the .env file). When no search API is configured,
    email and API token credentials (Jira Cloud) use the token-paged search and personal access
    tokens (Server and Data Center) use the offset-paged search.

    Raises:
        RequiredConfigurationElementError: If the Jira URL is not provided.
        JiraAuthenticationConfigurationUndefinedError: If the credentials are unusable.
    """
    jira_url = cli_jira_url or settings.JIRA_URL
    if not jira_url:
        raise RequiredConfigurationElementError(name="Jira URL", cli_name="--jira-url", env_name="JIRA_URL")

    email = cli_jira_email or settings.JIRA_EMAIL
    api_token = cli_jira_api_token or settings.JIRA_API_TOKEN
    pat_token = cli_jira_pat_token or settings.JIRA_PAT_TOKEN
    authentication_type = validate_jira_authentication_configuration(
        jira_email=email,
        jira_api_token=api_token,
        jira_pat_token=pat_token,
    )

    return JiraConnectionConfig(
        jira_url=jira_url.rstrip("/"),
        authentication_type=authentication_type,
        email=email,
        api_token=api_token,
        pat_token=pat_token,
        timeout=cli_jira_timeout or settings.JIRA_TIMEOUT,
        search_api=cli_jira_search_api or settings.JIRA_SEARCH_API or default_search_api(authentication_type),
    )


def reconcile_sprint_configuration(
    cli_project: str | None,
    cli_board_type: str | None = None,
    cli_board_id: int | None = None,
) -> SprintConfig:
    """Reconciles the project-level sprint configuration.

    Raises:
        RequiredConfigurationElementError: If the project key is not provided.
    """
    project = cli_project or settings.JIRA_PROJECT
    if not project:
        raise RequiredConfigurationElementError(name="Jira project key", cli_name="--project", env_name="JIRA_PROJECT")

    return SprintConfig(
        project=project,
        board_type=cli_board_type or settings.JIRA_BOARD_TYPE,
        board_id=cli_board_id if cli_board_id is not None else settings.JIRA_BOARD_ID,
    )
