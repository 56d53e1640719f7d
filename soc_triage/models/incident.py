"""
Incident models: tracked units of investigative work.

Lifecycle timestamps (created_at, first_response_at, resolved_at) drive the
SLA evaluator. The core only reads status; transition legality is enforced
by the remote service.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from soc_triage.models.alert import Severity


class IncidentStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    MITIGATED = "mitigated"
    CLOSED = "closed"


class AssignedUser(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None


class Incident(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Union[int, str]
    title: str
    description: str = ""
    status: Union[IncidentStatus, str] = Field(default=IncidentStatus.NEW, union_mode="left_to_right")
    priority: Union[Severity, str] = Field(default=Severity.MEDIUM, union_mode="left_to_right")
    created_at: Optional[datetime] = None
    first_response_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    assigned_to: Optional[Union[int, str]] = None
    assigned_to_user: Optional[AssignedUser] = None

    @property
    def owner_name(self) -> str:
        if self.assigned_to is None:
            return "Unassigned"
        if self.assigned_to_user and self.assigned_to_user.name:
            return self.assigned_to_user.name
        return "Unassigned"

    @property
    def owner_initials(self) -> str:
        name = self.assigned_to_user.name if self.assigned_to_user else None
        if not name:
            return "NA"
        return "".join(part[0] for part in name.split(" ") if part) or "NA"
