"""
Client for the SOC platform's alert and incident REST API.

RemoteDataService is the contract the triage core consumes. TriageApiClient
implements it over HTTP with requests; the blocking calls run in a worker
thread so the event loop only ever suspends on remote I/O.

Endpoints:
  GET  /api/alerts                 → Alert[]
  POST /api/alerts                 → Alert
  GET  /api/incidents?priority&status&from&to&search → Incident[]

Non-2xx responses raise; they are never parsed as success payloads.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import requests
from pydantic import BaseModel, ValidationError

from soc_triage.config import Settings
from soc_triage.errors import FetchError, RemoteError
from soc_triage.models.alert import Alert, AlertDraft
from soc_triage.models.filters import IncidentQueryParams
from soc_triage.models.incident import Incident

logger = logging.getLogger(__name__)


class RemoteDataService(Protocol):
    async def list_alerts(self, organization_id: Optional[int] = None) -> list[Alert]: ...

    async def create_alert(self, draft: AlertDraft, organization_id: Optional[int] = None) -> Alert: ...

    async def list_incidents(
        self, params: IncidentQueryParams, organization_id: Optional[int] = None
    ) -> list[Incident]: ...


def _parse(model: type[BaseModel], data: Any, error_cls: type[RemoteError], many: bool = False) -> Any:
    if many and not isinstance(data, list):
        raise error_cls(f"expected a JSON array, got {type(data).__name__}")
    try:
        if many:
            return [model.model_validate(item) for item in data]
        return model.model_validate(data)
    except ValidationError as e:
        raise error_cls(f"unexpected response shape: {e}") from e


def _error_text(response: requests.Response) -> str:
    """Best-effort error message: JSON error/message field, then body text, then reason."""
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            body = response.json()
            if isinstance(body, dict):
                return str(body.get("error") or body.get("message") or response.reason)
            return response.reason
        return response.text or response.reason
    except ValueError:
        return response.reason


class TriageApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> TriageApiClient:
        return cls(settings.soc_triage_api_url, timeout=settings.request_timeout_seconds)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        organization_id: Optional[int] = None,
        error_cls: type[RemoteError] = RemoteError,
        **kwargs: Any,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if organization_id is not None:
            headers["X-Organization-Id"] = str(organization_id)

        url = f"{self.base_url}{path}"
        logger.debug("triage_api.request", extra={"method": method, "url": url})

        try:
            response = self._session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("triage_api.transport_error", extra={"method": method, "url": url, "error": str(e)})
            raise error_cls(str(e)) from e

        if not response.ok:
            detail = _error_text(response)
            logger.warning(
                "triage_api.http_error",
                extra={"method": method, "url": url, "status": response.status_code, "detail": detail},
            )
            raise error_cls(detail, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"invalid JSON in response: {e}", status_code=response.status_code) from e

    # ------------------------------------------------------------------
    # Blocking API
    # ------------------------------------------------------------------

    def get_alerts(self, organization_id: Optional[int] = None) -> list[Alert]:
        data = self._request("GET", "/api/alerts", organization_id=organization_id, error_cls=FetchError)
        return _parse(Alert, data, FetchError, many=True)

    def post_alert(self, draft: AlertDraft, organization_id: Optional[int] = None) -> Alert:
        data = self._request("POST", "/api/alerts", organization_id=organization_id, json=draft.to_payload())
        return _parse(Alert, data, RemoteError)

    def get_incidents(
        self, params: IncidentQueryParams, organization_id: Optional[int] = None
    ) -> list[Incident]:
        data = self._request(
            "GET",
            "/api/incidents",
            organization_id=organization_id,
            error_cls=FetchError,
            params=params.to_query(),
        )
        return _parse(Incident, data, FetchError, many=True)

    # ------------------------------------------------------------------
    # RemoteDataService
    # ------------------------------------------------------------------

    async def list_alerts(self, organization_id: Optional[int] = None) -> list[Alert]:
        return await asyncio.to_thread(self.get_alerts, organization_id)

    async def create_alert(self, draft: AlertDraft, organization_id: Optional[int] = None) -> Alert:
        return await asyncio.to_thread(self.post_alert, draft, organization_id)

    async def list_incidents(
        self, params: IncidentQueryParams, organization_id: Optional[int] = None
    ) -> list[Incident]:
        return await asyncio.to_thread(self.get_incidents, params, organization_id)
