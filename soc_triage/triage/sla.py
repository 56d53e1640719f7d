"""
SLA evaluator — incident lifecycle timestamps → SLA status and elapsed label.

Both derivations are first-match-wins rule lists. The rules overlap, so their
order is part of the contract:

  status                                   elapsed label
  1. closed               → COMPLETED      1. no created_at          → "N/A"
  2. no response, new     → RESPONSE_REQ.  2. response, no resolution → "Response: {h}h"
  3. response, unresolved → IN_PROGRESS    3. response and resolution → "Resolved: {h}h"
  4. otherwise            → UNKNOWN        4. otherwise               → "Open: {h}h"

The label rules look only at which timestamps are set, never at status.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel

from soc_triage.models.incident import Incident, IncidentStatus
from soc_triage.triage.classify import Badge, classify_sla
from soc_triage.triage.timefmt import as_utc

_HOUR = timedelta(hours=1)


class SlaStatus(str, Enum):
    COMPLETED = "completed"
    RESPONSE_REQUIRED = "response_required"
    IN_PROGRESS = "in_progress"
    UNKNOWN = "unknown"


class SlaEvaluation(BaseModel):
    status: SlaStatus
    elapsed_label: str

    @property
    def badge(self) -> Badge:
        return classify_sla(self.status)


def _hours_between(start: datetime, end: datetime) -> int:
    # Truncated toward zero: under an hour is 0h in either direction
    return int((as_utc(end) - as_utc(start)) / _HOUR)


def sla_status(incident: Incident) -> SlaStatus:
    if incident.status == IncidentStatus.CLOSED:
        return SlaStatus.COMPLETED
    if incident.first_response_at is None and incident.status == IncidentStatus.NEW:
        return SlaStatus.RESPONSE_REQUIRED
    if (
        incident.first_response_at is not None
        and incident.resolved_at is None
        and incident.status != IncidentStatus.CLOSED
    ):
        return SlaStatus.IN_PROGRESS
    return SlaStatus.UNKNOWN


def elapsed_label(incident: Incident, now: datetime) -> str:
    created = incident.created_at
    if created is None:
        return "N/A"

    responded = incident.first_response_at
    resolved = incident.resolved_at

    if responded is not None and resolved is None:
        return f"Response: {_hours_between(created, responded)}h"
    if responded is not None and resolved is not None:
        return f"Resolved: {_hours_between(created, resolved)}h"
    return f"Open: {_hours_between(created, now)}h"


def evaluate_sla(incident: Incident, now: datetime) -> SlaEvaluation:
    return SlaEvaluation(status=sla_status(incident), elapsed_label=elapsed_label(incident, now))
