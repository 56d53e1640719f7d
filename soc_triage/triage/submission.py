"""
Alert submission workflow — draft → validated → created alert.

  IDLE → VALIDATING → FAILED(validation)       draft kept, no remote call
                    → SUBMITTING → SUCCEEDED    cache invalidated, dialog closed,
                                                draft reset, success notification
                                 → FAILED(remote) dialog stays open, draft kept,
                                                failure notification

SUCCEEDED and FAILED end one attempt; every submit starts again at
VALIDATING. The create call is issued at most once per submit and is never
retried automatically.

Form state is an immutable AlertFormState passed in and returned; the
AlertSubmission object holds the collaborators and the phase of the
attempt in flight.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from soc_triage.errors import DraftValidationError, RemoteError
from soc_triage.integrations.triage_api import RemoteDataService
from soc_triage.interfaces.navigation import Navigator, detail_path
from soc_triage.interfaces.notifications import Notification, NotificationSeverity, NotificationSink
from soc_triage.models.alert import Alert, AlertDraft
from soc_triage.triage.queries import ALERTS, QueryOrchestrator
from soc_triage.utils.messages import build_notification

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionErrorKind(str, Enum):
    VALIDATION = "validation"
    REMOTE = "remote"


class SubmissionError(BaseModel):
    kind: SubmissionErrorKind
    message: str
    fields: list[str] = Field(default_factory=list)   # validation only


class AlertFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    draft: AlertDraft = Field(default_factory=AlertDraft)
    dialog_open: bool = False
    phase: SubmissionState = SubmissionState.IDLE
    error: Optional[SubmissionError] = None


class SubmissionResult(BaseModel):
    """Outcome of one submit: SUCCEEDED carries the alert, FAILED the error."""

    state: SubmissionState
    form: AlertFormState
    alert: Optional[Alert] = None
    error: Optional[SubmissionError] = None

    @property
    def ok(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED


# ---------------------------------------------------------------------------
# Form transitions
# ---------------------------------------------------------------------------

def open_dialog(form: AlertFormState) -> AlertFormState:
    return form.model_copy(update={"dialog_open": True, "phase": SubmissionState.IDLE, "error": None})


def edit_draft(form: AlertFormState, **changes: Any) -> AlertFormState:
    draft = AlertDraft.model_validate({**form.draft.model_dump(), **changes})
    return form.model_copy(update={"draft": draft})


def cancel(form: AlertFormState) -> AlertFormState:
    """Close the dialog and discard the draft."""
    return AlertFormState()


def validate_draft(draft: AlertDraft) -> None:
    """Raises DraftValidationError naming every blank required field."""
    missing = draft.missing_fields()
    if missing:
        raise DraftValidationError(missing)


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

class AlertSubmission:
    def __init__(
        self,
        service: RemoteDataService,
        queries: QueryOrchestrator,
        notifier: NotificationSink,
        navigator: Optional[Navigator] = None,
    ) -> None:
        self._service = service
        self._queries = queries
        self._notifier = notifier
        self._navigator = navigator
        self._phase = SubmissionState.IDLE

    @property
    def phase(self) -> SubmissionState:
        return self._phase

    @property
    def can_submit(self) -> bool:
        """False while a create call is outstanding."""
        return self._phase != SubmissionState.SUBMITTING

    async def submit(self, form: AlertFormState, *, navigate: bool = False) -> SubmissionResult:
        """Run one submission attempt for the draft in *form*.

        Args:
            form: Current form state; never mutated.
            navigate: Open the created alert's detail view on success.

        Returns:
            SubmissionResult in state SUCCEEDED or FAILED with the next form state.

        Raises:
            RuntimeError: If a previous submission is still in flight.
        """
        if not self.can_submit:
            raise RuntimeError("An alert submission is already in progress")

        self._phase = SubmissionState.VALIDATING
        logger.info("submission.start")
        try:
            return await self._attempt(form, navigate)
        finally:
            # Cancellation or an unexpected error must not leave the workflow locked
            if self._phase in (SubmissionState.VALIDATING, SubmissionState.SUBMITTING):
                self._phase = SubmissionState.FAILED

    async def _attempt(self, form: AlertFormState, navigate: bool) -> SubmissionResult:
        try:
            validate_draft(form.draft)
        except DraftValidationError as e:
            return self._fail(
                form,
                SubmissionError(kind=SubmissionErrorKind.VALIDATION, message=str(e), fields=e.fields),
                build_notification("alert_validation_failed", NotificationSeverity.ERROR, fields=e.fields),
            )

        self._phase = SubmissionState.SUBMITTING
        try:
            logger.info("submission.submitting")
            alert = await self._service.create_alert(
                form.draft, organization_id=self._queries.organization_id
            )
        except RemoteError as e:
            return self._fail(
                form,
                SubmissionError(kind=SubmissionErrorKind.REMOTE, message=str(e)),
                build_notification("alert_create_failed", NotificationSeverity.ERROR, error=str(e)),
            )

        # The alert exists from here on; the remaining effects cannot fail the attempt
        self._phase = SubmissionState.SUCCEEDED
        self._queries.invalidate(ALERTS)
        next_form = AlertFormState(phase=SubmissionState.SUCCEEDED)
        self._notify(build_notification("alert_created", NotificationSeverity.INFO, alert=alert))
        if navigate and self._navigator is not None:
            try:
                self._navigator.navigate_to(detail_path(alert.id))
            except Exception:
                logger.exception("submission.navigate_error", extra={"alert_id": alert.id})

        logger.info("submission.succeeded", extra={"alert_id": alert.id})
        return SubmissionResult(state=SubmissionState.SUCCEEDED, form=next_form, alert=alert)

    def _notify(self, notification: Notification) -> None:
        try:
            self._notifier.notify(notification)
        except Exception:
            logger.exception("submission.notify_error", extra={"title": notification.title})

    def _fail(self, form: AlertFormState, error: SubmissionError, notification: Notification) -> SubmissionResult:
        self._phase = SubmissionState.FAILED
        logger.warning("submission.failed", extra={"kind": error.kind.value, "error": error.message})
        self._notify(notification)
        next_form = form.model_copy(update={"phase": SubmissionState.FAILED, "error": error})
        return SubmissionResult(state=SubmissionState.FAILED, form=next_form, error=error)
