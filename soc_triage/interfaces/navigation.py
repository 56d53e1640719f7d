"""Navigation contract. The core picks the destination; the router gets there."""

from __future__ import annotations

from typing import Protocol, Union


class Navigator(Protocol):
    def navigate_to(self, path: str) -> None: ...


def detail_path(record_id: Union[int, str]) -> str:
    """Detail view for an alert or incident id."""
    return f"/incident/{record_id}"
