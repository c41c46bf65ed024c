"""Shared constants used across the application."""

from datetime import timedelta

# Jira REST API Constants
# -----------------------

AGILE_API_PATH = "rest/agile/1.0"
"""Base path of the Jira Software (agile) REST API."""

ISSUE_SEARCH_PATH = "rest/api/2/search"
"""JQL search endpoint paged by offset (startAt). Available on Jira Server and Data Center."""

ENHANCED_ISSUE_SEARCH_PATH = "rest/api/3/search/jql"
"""JQL search endpoint paged by nextPageToken. Replaces rest/api/2/search on Jira Cloud."""

DEFAULT_JIRA_TIMEOUT = 30.0
"""Default per-request timeout in seconds."""

# Pagination and Batching Constants
# ---------------------------------

SPRINT_PAGE_SIZE = 100
"""Number of sprints requested per page when listing a board's sprints."""

MAX_ISSUES_PER_MOVE = 50
"""Jira's maximum number of issues accepted by one move-to-sprint request."""

ISSUE_SEARCH_MAX_RESULTS = 1000
"""Default maximum number of issues returned by a JQL search."""

ISSUE_SEARCH_PAGE_SIZE = 100
"""Number of issues requested per page of a JQL search. Jira Cloud caps pages at 100."""

# Sprint Convention Constants
# ---------------------------

SPRINT_DURATION = timedelta(days=7)
"""Length of one sprint, and the recency window used when selecting sprints."""

SPRINT_NAME_DAY_FORMAT = "%Y-%m-%d"
"""Calendar date format embedded in sprint names (e.g. PROJ 2018-10-05 - 2018-10-11)."""

DEFAULT_BOARD_TYPE = "scrum"
"""Board type looked up when none is configured."""
