"""Contains exceptions raised when talking to the Jira REST API."""

from typing import Any


class JiraError(Exception):
    """Base class for errors raised by Jira operations."""

    pass


class TransportError(JiraError):
    """Raised when a remote call to Jira fails or returns an unusable response."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        method: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        details: list[str] | None = None,
    ) -> None:
        """Initializes the exception with the context of the failed call."""
        super().__init__(message)
        self.operation = operation
        self.method = method
        self.url = url
        self.status_code = status_code
        self.details = details or []


class EmptyResultError(JiraError):
    """Raised when an operation that needs at least one result finds none."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initializes the exception with the lookup context (board ID, project, ...)."""
        super().__init__(message)
        self.context = context
