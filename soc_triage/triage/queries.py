"""
Query orchestration: which remote collections are needed, under which cache
key, and when they must be fetched again.

A QueryKey is the query name plus its filter parameters plus the tenant.
Changing any part of it addresses a different cache entry, so a filter or
tenant change always leads to a fresh fetch.

Ordering rules:
  - the latest key for a query is recorded before its fetch is issued;
  - a result is only ever stored under the key it was issued for, so a slow
    response for an old filter never lands on the current one;
  - a result whose query was invalidated while in flight is discarded.

Failures are returned as ERROR results and never retried automatically;
callers offer refetch() as the manual retry.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, NamedTuple, Optional

from pydantic import BaseModel, Field

from soc_triage.config import Settings
from soc_triage.errors import RemoteError
from soc_triage.integrations.triage_api import RemoteDataService
from soc_triage.models.filters import FilterState, IncidentQueryParams

logger = logging.getLogger(__name__)

ALERTS = "alerts"
INCIDENTS = "incidents"

# Queries that stay disabled until the organisation is known
_REQUIRES_ORGANIZATION = {INCIDENTS}


class QueryKey(NamedTuple):
    name: str
    params: tuple[tuple[str, str], ...]
    organization_id: Optional[int]


class QueryStatus(str, Enum):
    DISABLED = "disabled"
    SUCCESS = "success"
    ERROR = "error"


class QueryResult(BaseModel):
    key: QueryKey
    status: QueryStatus
    data: list[Any] = Field(default_factory=list)
    error: Optional[str] = None
    fetched_at: Optional[float] = None


def alerts_key(organization_id: Optional[int]) -> QueryKey:
    return QueryKey(ALERTS, (), organization_id)


def incidents_key(filters: FilterState, organization_id: Optional[int]) -> QueryKey:
    query = IncidentQueryParams.from_filters(filters).to_query()
    return QueryKey(INCIDENTS, tuple(sorted(query.items())), organization_id)


class QueryOrchestrator:
    def __init__(
        self,
        service: RemoteDataService,
        organization_id: Optional[int] = None,
        stale_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        self.organization_id = organization_id
        self._stale_seconds = stale_seconds
        self._clock = clock
        self._cache: dict[QueryKey, QueryResult] = {}
        self._latest: dict[str, QueryKey] = {}
        self._generation: dict[str, int] = {}
        # Fetcher for the latest key of each query, re-used by refetch()
        self._fetchers: dict[str, Callable[[], Awaitable[list[Any]]]] = {}

    @classmethod
    def from_settings(cls, service: RemoteDataService, settings: Settings) -> QueryOrchestrator:
        return cls(
            service,
            organization_id=settings.organization_id,
            stale_seconds=settings.query_stale_seconds,
        )

    def set_organization(self, organization_id: Optional[int]) -> None:
        """Switch tenant. Subsequent fetches use keys for the new tenant."""
        if organization_id != self.organization_id:
            logger.info(
                "queries.tenant_change",
                extra={"old": self.organization_id, "new": organization_id},
            )
        self.organization_id = organization_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def current(self, name: str) -> Optional[QueryResult]:
        """Cached result for the latest key of *name*, if any."""
        key = self._latest.get(name)
        return self._cache.get(key) if key is not None else None

    def is_current(self, result: QueryResult) -> bool:
        return self._latest.get(result.key.name) == result.key

    async def fetch_alerts(self, *, force: bool = False) -> QueryResult:
        org = self.organization_id
        return await self._run(alerts_key(org), lambda: self._service.list_alerts(org), force=force)

    async def fetch_incidents(self, filters: FilterState, *, force: bool = False) -> QueryResult:
        org = self.organization_id
        params = IncidentQueryParams.from_filters(filters)
        return await self._run(
            incidents_key(filters, org),
            lambda: self._service.list_incidents(params, org),
            force=force,
        )

    async def refetch(self, name: str) -> QueryResult:
        """Re-issue the latest query for *name* regardless of cache freshness.

        Raises:
            LookupError: If *name* has never been fetched.
        """
        key = self._latest.get(name)
        if key is None or name not in self._fetchers:
            raise LookupError(f"No '{name}' query has been issued yet")
        return await self._run(key, self._fetchers[name], force=True)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, name: str) -> None:
        """Drop every cached result for *name* and orphan in-flight fetches."""
        self._generation[name] = self._generation.get(name, 0) + 1
        dropped = [key for key in self._cache if key.name == name]
        for key in dropped:
            del self._cache[key]
        logger.info("queries.invalidate", extra={"query": name, "dropped": len(dropped)})

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_fresh(self, result: Optional[QueryResult]) -> bool:
        return (
            result is not None
            and result.status == QueryStatus.SUCCESS
            and result.fetched_at is not None
            and self._clock() - result.fetched_at < self._stale_seconds
        )

    def _evict_stale(self, name: str) -> None:
        """Drop cached results for superseded keys of *name* once they are no longer fresh."""
        latest = self._latest.get(name)
        stale = [
            key for key, result in self._cache.items()
            if key.name == name and key != latest and not self._is_fresh(result)
        ]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug("queries.evict", extra={"query": name, "evicted": len(stale)})

    async def _run(
        self,
        key: QueryKey,
        fetcher: Callable[[], Awaitable[list[Any]]],
        *,
        force: bool,
    ) -> QueryResult:
        self._latest[key.name] = key
        self._fetchers[key.name] = fetcher

        if key.name in _REQUIRES_ORGANIZATION and key.organization_id is None:
            logger.debug("queries.disabled", extra={"query": key.name})
            return QueryResult(key=key, status=QueryStatus.DISABLED)

        cached = self._cache.get(key)
        if not force and self._is_fresh(cached):
            return cached

        generation = self._generation.get(key.name, 0)
        logger.info("queries.fetch", extra={"query": key.name, "params": dict(key.params)})

        try:
            data = await fetcher()
            result = QueryResult(key=key, status=QueryStatus.SUCCESS, data=data, fetched_at=self._clock())
        except RemoteError as e:
            logger.warning("queries.fetch_error", extra={"query": key.name, "error": str(e)})
            result = QueryResult(key=key, status=QueryStatus.ERROR, error=str(e))

        if self._generation.get(key.name, 0) != generation:
            logger.info("queries.invalidated_discard", extra={"query": key.name})
            return result

        self._cache[key] = result
        self._evict_stale(key.name)
        if not self.is_current(result):
            logger.info("queries.stale_result", extra={"query": key.name, "params": dict(key.params)})
        return result
