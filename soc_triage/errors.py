"""
Error taxonomy for the triage core.

  DraftValidationError — draft rejected locally; no remote call was made.
  RemoteError          — the remote service refused or failed a request.
  FetchError           — a collection read failed; callers render an error
                         state with a manual retry.

None of these is fatal: every failure path returns the caller to a
ready state.
"""

from __future__ import annotations

from typing import Optional


class TriageError(Exception):
    """Base class for all triage core errors."""


class DraftValidationError(TriageError):
    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            f"Missing required fields: {', '.join(self.fields)}"
        )


class RemoteError(TriageError):
    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        self.detail = detail
        self.status_code = status_code
        message = f"{status_code}: {detail}" if status_code is not None else detail
        super().__init__(message)


class FetchError(RemoteError):
    """A GET against a collection failed (transport error or non-2xx)."""
