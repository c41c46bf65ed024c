"""Pydantic schemas for the Jira Software resources this tool reads and writes."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SprintState(str, Enum):
    """Lifecycle states of a Jira sprint."""

    FUTURE = "future"
    ACTIVE = "active"
    CLOSED = "closed"


class JiraModel(BaseModel):
    """Base model for Jira payloads: camelCase aliases, unknown fields ignored, immutable."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Board(JiraModel):
    """Pydantic model for a Jira agile board."""

    id: int
    name: str | None = None
    type: str | None = None


class Sprint(JiraModel):
    """Pydantic model for a Jira sprint."""

    id: int
    name: str
    state: SprintState
    start_date: datetime | None = Field(default=None, alias="startDate")
    end_date: datetime | None = Field(default=None, alias="endDate")
    complete_date: datetime | None = Field(default=None, alias="completeDate")
    origin_board_id: int | None = Field(default=None, alias="originBoardId")
    goal: str | None = None

    @field_validator("start_date", "end_date", "complete_date")
    @classmethod
    def require_offset(cls, value: datetime | None) -> datetime | None:
        """Reject dates without a timezone offset, which cannot be compared with aware instants."""
        if value is not None and value.utcoffset() is None:
            raise ValueError(f"Sprint date {value.isoformat()} has no timezone offset")
        return value


class SprintPage(JiraModel):
    """One page of a board's sprint listing."""

    values: list[Sprint] = Field(default_factory=list)
    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    is_last: bool = Field(default=False, alias="isLast")


class Issue(JiraModel):
    """Pydantic model for a Jira issue. Only the identifier is used."""

    id: str
    key: str | None = None
