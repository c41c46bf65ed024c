"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from sprint_ops_manager.configuration.models import JiraSearchApi
from sprint_ops_manager.utils.constants import DEFAULT_BOARD_TYPE, DEFAULT_JIRA_TIMEOUT


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # Jira API settings
    JIRA_URL: str | None = None
    JIRA_TIMEOUT: float = DEFAULT_JIRA_TIMEOUT
    JIRA_SEARCH_API: JiraSearchApi | None = None

    # Jira Cloud basic authentication settings
    JIRA_EMAIL: str | None = None
    JIRA_API_TOKEN: str | None = None

    # Jira Data Center personal access token settings
    JIRA_PAT_TOKEN: str | None = None

    # Project settings
    JIRA_PROJECT: str | None = None
    JIRA_BOARD_TYPE: str = DEFAULT_BOARD_TYPE
    JIRA_BOARD_ID: int | None = None


settings = Settings()
