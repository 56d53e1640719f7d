"""
Jinja2 template loader for user-facing notification text.

All notification bodies live in soc_triage/messages/ as .jinja2 files.
The core decides what to say and at which severity; sinks decide how it
is shown.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from soc_triage.interfaces.notifications import Notification, NotificationSeverity

# Resolve messages/ relative to this file: soc_triage/utils/messages.py → soc_triage/messages/
_MESSAGES_DIR = Path(__file__).parent.parent / "messages"

_env = Environment(
    loader=FileSystemLoader(str(_MESSAGES_DIR)),
    undefined=StrictUndefined,   # a missing variable is an error, never an empty string
    trim_blocks=True,
    lstrip_blocks=True,
)

_TITLES: dict[str, str] = {
    "alert_created": "Alert created",
    "alert_create_failed": "Error creating alert",
    "alert_validation_failed": "Validation error",
}


def render_template(name: str, **kwargs: object) -> str:
    """Render a template from the messages/ directory, stripped of surrounding whitespace.

    Raises:
        jinja2.TemplateNotFound: If the template file doesn't exist.
        jinja2.UndefinedError: If the template references a variable not in kwargs.
    """
    template = _env.get_template(name)
    return template.render(**kwargs).strip()


def build_notification(kind: str, severity: NotificationSeverity, **kwargs: object) -> Notification:
    """Render the *kind* message into a Notification ready for a sink."""
    return Notification(
        title=_TITLES[kind],
        description=render_template(f"{kind}.jinja2", **kwargs),
        severity=severity,
    )
