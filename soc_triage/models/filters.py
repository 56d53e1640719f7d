"""
The analyst's current selection in a list view.

FilterState is owned by a single UI session and is immutable: every
operation in soc_triage.triage.filters returns a new instance.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Neutral value for the severity and status dimensions
ALL = "all"


class Tab(str, Enum):
    ALL = "all"
    NEW = "new"
    INVESTIGATION = "investigation"
    MITIGATED = "mitigated"
    CLOSED = "closed"


class DateRange(BaseModel):
    """Inclusive bounds; a missing bound leaves that side open."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.from_ is None and self.to is None


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: str = ALL
    status: str = ALL
    date_range: Optional[DateRange] = None
    search: str = ""
    active_tab: Tab = Tab.ALL

    @field_validator("severity", "status", mode="before")
    @classmethod
    def _enum_to_value(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    @field_validator("date_range")
    @classmethod
    def _open_range_to_none(cls, value: Optional[DateRange]) -> Optional[DateRange]:
        # An open range filters nothing, so it is stored as no range
        return None if value is not None and value.is_open else value


class IncidentQueryParams(BaseModel):
    """Query string for GET incidents. Neutral dimensions are omitted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    priority: Optional[str] = None
    status: Optional[str] = None
    from_: Optional[datetime] = Field(default=None, alias="from")
    to: Optional[datetime] = None
    search: Optional[str] = None

    @classmethod
    def from_filters(cls, state: FilterState) -> IncidentQueryParams:
        date_range = state.date_range or DateRange()
        return cls(
            priority=None if state.severity == ALL else state.severity,
            status=None if state.status == ALL else state.status,
            from_=date_range.from_,
            to=date_range.to,
            search=state.search or None,
        )

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        if self.priority:
            query["priority"] = self.priority
        if self.status:
            query["status"] = self.status
        if self.from_:
            query["from"] = self.from_.isoformat()
        if self.to:
            query["to"] = self.to.isoformat()
        if self.search:
            query["search"] = self.search
        return query
