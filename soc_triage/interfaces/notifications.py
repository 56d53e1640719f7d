"""
Notification sinks, where user-visible success and failure messages go.

The triage core only produces Notification values. A sink renders them:
LoggingNotificationSink writes them to the application log,
SlackNotificationSink posts them to a channel as Block Kit messages.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import BaseModel
from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from soc_triage.config import Settings

logger = logging.getLogger(__name__)


class NotificationSeverity(str, Enum):
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    title: str
    description: str
    severity: NotificationSeverity = NotificationSeverity.INFO


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingNotificationSink:
    def notify(self, notification: Notification) -> None:
        level = logging.ERROR if notification.severity == NotificationSeverity.ERROR else logging.INFO
        logger.log(
            level,
            "notification.%s",
            notification.severity.value,
            extra={"title": notification.title, "description": notification.description},
        )


def format_notification_blocks(notification: Notification) -> list[dict[str, Any]]:
    """Format a notification as Slack blocks."""
    icon = "🚨" if notification.severity == NotificationSeverity.ERROR else "✅"
    return [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{icon} {notification.title[:100]}",
                "emoji": True,
            },
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": notification.description or "_No details_"},
        },
    ]


class SlackNotificationSink:
    def __init__(self, token: str, channel: str, client: Optional[WebClient] = None) -> None:
        self.channel = channel
        self._client = client or WebClient(token=token)

    def notify(self, notification: Notification) -> None:
        try:
            self._client.chat_postMessage(
                channel=self.channel,
                blocks=format_notification_blocks(notification),
                text=f"{notification.title}: {notification.description}",  # fallback for push notifications
            )
        except (SlackClientError, OSError) as e:
            logger.error(
                "notification.slack_error",
                extra={"channel": self.channel, "error": str(e)},
            )


def build_sink(settings: Settings) -> NotificationSink:
    """Build the sink named by settings.notification_sink.

    Raises:
        ValueError / RuntimeError: From Settings.validate_for_sink().
    """
    name = settings.notification_sink
    settings.validate_for_sink(name)
    if name == "slack":
        return SlackNotificationSink(
            token=settings.slack_bot_token,
            channel=settings.slack_notification_channel,
        )
    return LoggingNotificationSink()
