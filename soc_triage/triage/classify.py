"""
Maps severity and status values to presentation badges.

Every function is total: values the server may add in the future fall back
to the neutral category with the raw string as label.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from soc_triage.models.alert import AlertStatus, Severity
from soc_triage.models.incident import IncidentStatus

NEUTRAL = "neutral"

_SEVERITIES = frozenset(s.value for s in Severity)
_STATUSES = frozenset(s.value for s in AlertStatus) | frozenset(s.value for s in IncidentStatus)

# SLA status value → (category, label)
_SLA_BADGES: dict[str, tuple[str, str]] = {
    "completed": ("sla-completed", "Completed"),
    "response_required": ("sla-response-required", "Response Required"),
    "in_progress": ("sla-in-progress", "In Progress"),
    "unknown": ("sla-unknown", "Unknown"),
}


class Badge(BaseModel):
    category: str
    label: str


def _raw(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return "" if value is None else str(value)


def classify_severity(value: Any) -> Badge:
    raw = _raw(value)
    if raw not in _SEVERITIES:
        return Badge(category=NEUTRAL, label=raw)
    return Badge(category=raw, label=raw[:1].upper() + raw[1:])


# Incident priority shares the severity scale
classify_priority = classify_severity


def classify_status(value: Any) -> Badge:
    """in_progress → category "status-in-progress", label "In Progress"."""
    raw = _raw(value)
    if raw not in _STATUSES:
        return Badge(category=NEUTRAL, label=raw)
    label = " ".join(word.capitalize() for word in raw.split("_"))
    return Badge(category="status-" + raw.replace("_", "-"), label=label)


def classify_sla(value: Any) -> Badge:
    raw = _raw(value)
    category, label = _SLA_BADGES.get(raw, (NEUTRAL, raw))
    return Badge(category=category, label=label)
