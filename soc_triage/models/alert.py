"""
Alert models — security alerts as served by the remote data service.

Alert is the persisted record (id and timestamp assigned server-side).
AlertDraft is the transient form buffer for a new alert; it is never
partially submitted.

Wire format is camelCase JSON; attributes are snake_case.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


DEFAULT_ALERT_SOURCE = "Manual Entry"

# Fields that must be non-blank before a draft may leave the client
REQUIRED_DRAFT_FIELDS = ("title", "description")


class Alert(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Union[int, str]
    title: str
    description: str = ""
    # Unknown server-side values are kept as plain strings
    severity: Union[Severity, str] = Field(union_mode="left_to_right")
    source: str = ""
    source_ip: Optional[str] = None
    destination_ip: Optional[str] = None
    status: Union[AlertStatus, str] = Field(default=AlertStatus.NEW, union_mode="left_to_right")
    timestamp: Optional[datetime] = None


class AlertDraft(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = ""
    description: str = ""
    severity: Severity = Severity.MEDIUM
    source: str = DEFAULT_ALERT_SOURCE
    source_ip: str = ""         # optional; omitted from the payload when blank
    destination_ip: str = ""

    def missing_fields(self) -> list[str]:
        """Return required fields that are empty or whitespace-only."""
        return [name for name in REQUIRED_DRAFT_FIELDS if not getattr(self, name).strip()]

    def to_payload(self) -> dict[str, Any]:
        """Build the create-alert request body."""
        exclude = {name for name in ("source_ip", "destination_ip") if not getattr(self, name).strip()}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
