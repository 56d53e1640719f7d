"""
Filter composer — FilterState → one predicate over alerts or incidents.

Every active dimension is ANDed; ALL (or an empty search / open date range)
leaves a dimension unconstrained. Filtering is stable: the input order is
kept and nothing is re-sorted.

Tab synchronisation is one-directional. select_tab() rewrites status;
set_status() leaves the tab alone, so the two may disagree until the tab is
next selected. While they disagree both constraints apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, TypeVar

from soc_triage.models.filters import ALL, DateRange, FilterState, Tab
from soc_triage.triage.timefmt import as_utc

T = TypeVar("T")

# Identity except INVESTIGATION
_TAB_STATUS: dict[Tab, str] = {
    Tab.NEW: "new",
    Tab.INVESTIGATION: "in_progress",
    Tab.MITIGATED: "mitigated",
    Tab.CLOSED: "closed",
}


@dataclass(frozen=True)
class FilterFields:
    """Which record attributes each filter dimension reads."""

    severity: str = "severity"
    status: str = "status"
    timestamp: str = "timestamp"
    text: tuple[str, ...] = ("title", "description")


ALERT_FIELDS = FilterFields()
INCIDENT_FIELDS = FilterFields(severity="priority", timestamp="created_at")


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------

def tab_status(tab: Tab | str) -> str:
    """Status value a tab selects; ALL for the 'all' tab."""
    return _TAB_STATUS.get(Tab(tab), ALL)


def select_tab(state: FilterState, tab: Tab | str) -> FilterState:
    tab = Tab(tab)
    return state.model_copy(update={"active_tab": tab, "status": tab_status(tab)})


def set_status(state: FilterState, status: str) -> FilterState:
    return state.model_copy(update={"status": getattr(status, "value", status)})


def set_severity(state: FilterState, severity: str) -> FilterState:
    return state.model_copy(update={"severity": getattr(severity, "value", severity)})


def set_search(state: FilterState, search: str) -> FilterState:
    return state.model_copy(update={"search": search})


def set_date_range(state: FilterState, date_range: Optional[DateRange]) -> FilterState:
    if date_range is not None and date_range.is_open:
        date_range = None
    return state.model_copy(update={"date_range": date_range})


def clear_filters(state: Optional[FilterState] = None) -> FilterState:
    """Reset every dimension at once. There is no partial reset."""
    return FilterState()


def has_active_filters(state: FilterState) -> bool:
    return state != FilterState()


# ---------------------------------------------------------------------------
# Predicate
# ---------------------------------------------------------------------------

def _in_range(value: Optional[datetime], date_range: DateRange) -> bool:
    if value is None:
        return False
    value = as_utc(value)
    if date_range.from_ is not None and value < as_utc(date_range.from_):
        return False
    if date_range.to is not None and value > as_utc(date_range.to):
        return False
    return True


def build_predicate(state: FilterState, fields: FilterFields = ALERT_FIELDS) -> Callable[[Any], bool]:
    checks: list[Callable[[Any], bool]] = []

    if state.severity != ALL:
        checks.append(lambda r: getattr(r, fields.severity, None) == state.severity)

    if state.status != ALL:
        checks.append(lambda r: getattr(r, fields.status, None) == state.status)

    if state.active_tab != Tab.ALL:
        wanted = tab_status(state.active_tab)
        checks.append(lambda r: getattr(r, fields.status, None) == wanted)

    date_range = state.date_range
    if date_range is not None and not date_range.is_open:
        checks.append(lambda r: _in_range(getattr(r, fields.timestamp, None), date_range))

    if state.search:
        needle = state.search.casefold()
        checks.append(
            lambda r: any(needle in (getattr(r, name, None) or "").casefold() for name in fields.text)
        )

    return lambda record: all(check(record) for check in checks)


def apply_filters(
    records: Iterable[T],
    state: FilterState,
    fields: FilterFields = ALERT_FIELDS,
) -> list[T]:
    predicate = build_predicate(state, fields)
    return [record for record in records if predicate(record)]
