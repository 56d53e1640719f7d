"""
SOC Triage - View API Server

FastAPI application exposing the triage engine to the dashboard: filtered
alert and incident lists annotated with badges, relative times and SLA
state, plus alert creation through the submission workflow.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from soc_triage.config import Settings, get_settings
from soc_triage.integrations.triage_api import RemoteDataService, TriageApiClient
from soc_triage.interfaces.navigation import detail_path
from soc_triage.interfaces.notifications import NotificationSink, build_sink
from soc_triage.models.alert import Alert, AlertDraft
from soc_triage.models.filters import ALL, DateRange, FilterState, Tab
from soc_triage.models.incident import Incident
from soc_triage.triage.classify import Badge, classify_priority, classify_severity, classify_status
from soc_triage.triage.filters import (
    ALERT_FIELDS,
    INCIDENT_FIELDS,
    apply_filters,
    has_active_filters,
    select_tab,
    set_status,
)
from soc_triage.triage.queries import QueryOrchestrator, QueryResult, QueryStatus
from soc_triage.triage.sla import evaluate_sla
from soc_triage.triage.submission import AlertFormState, AlertSubmission, SubmissionErrorKind
from soc_triage.triage.timefmt import format_relative

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="SOC Triage API",
    description="Alert and incident triage views for the security operations dashboard",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One query cache and submission workflow per organisation
app.state.sessions = {}


# ============================================================================
# Response Models
# ============================================================================

class AlertRow(BaseModel):
    alert: Alert
    severity: Badge
    status: Badge
    time_ago: Optional[str] = None


class IncidentRow(BaseModel):
    incident: Incident
    status: Badge
    priority: Badge
    created: Optional[str] = None
    owner: str
    owner_initials: str
    sla: Badge
    sla_elapsed: str


class AlertListResponse(BaseModel):
    rows: list[AlertRow] = Field(default_factory=list)
    count: int = 0
    filters: FilterState
    filters_active: bool = False


class IncidentListResponse(BaseModel):
    rows: list[IncidentRow] = Field(default_factory=list)
    count: int = 0
    filters: FilterState
    filters_active: bool = False
    query_status: QueryStatus


class CreateAlertResponse(BaseModel):
    alert: Alert
    next_path: str


class RefetchResponse(BaseModel):
    query: str
    status: QueryStatus
    count: int = 0
    error: Optional[str] = None


# ============================================================================
# Dependencies
# ============================================================================

class TriageSession:
    def __init__(
        self,
        service: RemoteDataService,
        notifier: NotificationSink,
        organization_id: Optional[int],
        stale_seconds: float,
    ) -> None:
        self.queries = QueryOrchestrator(service, organization_id=organization_id, stale_seconds=stale_seconds)
        self.submission = AlertSubmission(service, self.queries, notifier)


def get_service(settings: Settings = Depends(get_settings)) -> RemoteDataService:
    if not hasattr(app.state, "service"):
        app.state.service = TriageApiClient.from_settings(settings)
    return app.state.service


def get_notifier(settings: Settings = Depends(get_settings)) -> NotificationSink:
    if not hasattr(app.state, "notifier"):
        app.state.notifier = build_sink(settings)
    return app.state.notifier


def get_session(
    x_organization_id: Optional[int] = Header(default=None),
    settings: Settings = Depends(get_settings),
    service: RemoteDataService = Depends(get_service),
    notifier: NotificationSink = Depends(get_notifier),
) -> TriageSession:
    organization_id = x_organization_id if x_organization_id is not None else settings.organization_id
    sessions: dict = app.state.sessions
    # Insertion order doubles as recency: the first key is the least recently used
    session = sessions.pop(organization_id, None)
    if session is None:
        session = TriageSession(service, notifier, organization_id, settings.query_stale_seconds)
        while len(sessions) >= max(settings.max_sessions, 1):
            evicted = next(iter(sessions))
            del sessions[evicted]
            logger.info("session.evicted", extra={"organization_id": evicted})
    sessions[organization_id] = session
    return session


# ============================================================================
# Helper Functions
# ============================================================================

def _date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> Optional[DateRange]:
    if date_from is None and date_to is None:
        return None
    return DateRange(from_=date_from, to=date_to)


def _raise_on_error(result: QueryResult) -> None:
    if result.status == QueryStatus.ERROR:
        raise HTTPException(status_code=502, detail=f"Failed to load {result.key.name}: {result.error}")


def alert_row(alert: Alert, now: datetime) -> AlertRow:
    return AlertRow(
        alert=alert,
        severity=classify_severity(alert.severity),
        status=classify_status(alert.status),
        time_ago=format_relative(alert.timestamp, now) if alert.timestamp else None,
    )


def incident_row(incident: Incident, now: datetime) -> IncidentRow:
    sla = evaluate_sla(incident, now)
    return IncidentRow(
        incident=incident,
        status=classify_status(incident.status),
        priority=classify_priority(incident.priority),
        created=format_relative(incident.created_at, now) if incident.created_at else None,
        owner=incident.owner_name,
        owner_initials=incident.owner_initials,
        sla=sla.badge,
        sla_elapsed=sla.elapsed_label,
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "healthy", "service": "SOC Triage API", "version": "1.0.0"}


@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Detailed health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "organization_configured": settings.organization_id is not None,
        "notification_sink": settings.notification_sink,
    }


@app.get("/api/v1/alerts", response_model=AlertListResponse)
async def list_alerts(
    severity: str = ALL,
    status: str = ALL,
    search: str = "",
    date_from: Optional[datetime] = Query(default=None, alias="from"),
    date_to: Optional[datetime] = Query(default=None, alias="to"),
    session: TriageSession = Depends(get_session),
):
    """
    List alerts matching the severity / status / date / search filters.

    The whole collection is fetched (and cached) once; filters are applied
    locally so changing them never costs a request.
    """
    filters = FilterState(
        severity=severity,
        status=status,
        search=search,
        date_range=_date_range(date_from, date_to),
    )
    result = await session.queries.fetch_alerts()
    _raise_on_error(result)

    now = datetime.now(timezone.utc)
    rows = [alert_row(alert, now) for alert in apply_filters(result.data, filters, ALERT_FIELDS)]
    return AlertListResponse(
        rows=rows,
        count=len(rows),
        filters=filters,
        filters_active=has_active_filters(filters),
    )


@app.get("/api/v1/incidents", response_model=IncidentListResponse)
async def list_incidents(
    priority: str = ALL,
    status: Optional[str] = None,
    tab: Optional[Tab] = None,
    search: str = "",
    date_from: Optional[datetime] = Query(default=None, alias="from"),
    date_to: Optional[datetime] = Query(default=None, alias="to"),
    session: TriageSession = Depends(get_session),
):
    """
    List incidents with SLA state.

    `tab` is applied first and rewrites the status filter; an explicit
    `status` is applied afterwards and leaves the tab as it is.
    """
    filters = FilterState(
        severity=priority,
        search=search,
        date_range=_date_range(date_from, date_to),
    )
    if tab is not None:
        filters = select_tab(filters, tab)
    if status is not None:
        filters = set_status(filters, status)

    result = await session.queries.fetch_incidents(filters)
    _raise_on_error(result)

    now = datetime.now(timezone.utc)
    rows = [incident_row(incident, now) for incident in apply_filters(result.data, filters, INCIDENT_FIELDS)]
    return IncidentListResponse(
        rows=rows,
        count=len(rows),
        filters=filters,
        filters_active=has_active_filters(filters),
        query_status=result.status,
    )


@app.post("/api/v1/queries/{name}/refetch", response_model=RefetchResponse)
async def refetch_query(name: str, session: TriageSession = Depends(get_session)):
    """Manual retry: re-issue the latest query for `name`."""
    try:
        result = await session.queries.refetch(name)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RefetchResponse(query=name, status=result.status, count=len(result.data), error=result.error)


@app.post("/api/v1/alerts", response_model=CreateAlertResponse, status_code=201)
async def create_alert(draft: AlertDraft, session: TriageSession = Depends(get_session)):
    """
    Create an alert from a draft and queue it for downstream AI analysis.

    Blank title / description → 422 with the missing fields; a failure from
    the remote service → 502 with its message.
    """
    if not session.submission.can_submit:
        raise HTTPException(status_code=409, detail="An alert submission is already in progress")

    outcome = await session.submission.submit(AlertFormState(draft=draft, dialog_open=True))

    if not outcome.ok:
        error = outcome.error
        if error.kind == SubmissionErrorKind.VALIDATION:
            raise HTTPException(status_code=422, detail={"message": error.message, "fields": error.fields})
        raise HTTPException(status_code=502, detail=error.message)

    logger.info(f"Alert {outcome.alert.id} created for organization {session.queries.organization_id}")
    return CreateAlertResponse(alert=outcome.alert, next_path=detail_path(outcome.alert.id))


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
