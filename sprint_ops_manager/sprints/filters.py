"""Restricts sprints to the ones belonging to a project."""

from typing import Iterable

from sprint_ops_manager.schemas.jira import Sprint


def belongs_to_project(sprint: Sprint, project: str) -> bool:
    """Return True if the project key appears anywhere in the sprint name.

    This is a plain, case-sensitive substring check. Projects whose keys
    contain one another (e.g. "APP" and "APPS") will both match.
    """
    return project in sprint.name


def filter_project_sprints(sprints: Iterable[Sprint], project: str) -> list[Sprint]:
    """Return the sprints belonging to `project`, preserving their order."""
    return [sprint for sprint in sprints if belongs_to_project(sprint, project)]
