"""Tests for soc_triage/interfaces/notifications.py — notification sinks."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest
from slack_sdk.errors import SlackApiError

from soc_triage.config import Settings
from soc_triage.interfaces.notifications import (
    LoggingNotificationSink,
    Notification,
    NotificationSeverity,
    SlackNotificationSink,
    build_sink,
    format_notification_blocks,
)


def make_notification(severity: NotificationSeverity = NotificationSeverity.INFO) -> Notification:
    return Notification(
        title="Alert created",
        description='The alert "Phishing attempt" was created and will be sent for AI analysis.',
        severity=severity,
    )


def _settings(**overrides) -> Settings:
    return Settings(soc_triage_api_url="http://triage.test", _env_file=None, **overrides)


class TestLoggingSink:
    def test_info_logged_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="soc_triage.interfaces.notifications"):
            LoggingNotificationSink().notify(make_notification())
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "notification.info"
        assert record.title == "Alert created"

    def test_error_logged_at_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="soc_triage.interfaces.notifications"):
            LoggingNotificationSink().notify(make_notification(NotificationSeverity.ERROR))
        assert caplog.records[-1].levelno == logging.ERROR


class TestBlocks:
    def test_header_and_section(self):
        blocks = format_notification_blocks(make_notification())
        assert blocks[0]["type"] == "header"
        assert blocks[0]["text"]["text"].startswith("✅ Alert created")
        assert blocks[1]["text"]["text"].startswith('The alert "Phishing attempt"')

    def test_error_icon(self):
        blocks = format_notification_blocks(make_notification(NotificationSeverity.ERROR))
        assert blocks[0]["text"]["text"].startswith("🚨")

    def test_long_title_truncated(self):
        notification = Notification(title="x" * 300, description="")
        header = format_notification_blocks(notification)[0]["text"]["text"]
        assert len(header) <= 150
        assert format_notification_blocks(notification)[1]["text"]["text"] == "_No details_"


class TestSlackSink:
    def test_posts_to_channel(self):
        client = MagicMock()
        sink = SlackNotificationSink(token="xoxb-test", channel="#soc", client=client)
        sink.notify(make_notification())
        kwargs = client.chat_postMessage.call_args.kwargs
        assert kwargs["channel"] == "#soc"
        assert kwargs["blocks"][0]["type"] == "header"
        assert kwargs["text"].startswith("Alert created: ")

    def test_slack_error_is_logged_not_raised(self, caplog):
        client = MagicMock()
        client.chat_postMessage.side_effect = SlackApiError("channel_not_found", response={"ok": False})
        sink = SlackNotificationSink(token="xoxb-test", channel="#missing", client=client)
        with caplog.at_level(logging.ERROR, logger="soc_triage.interfaces.notifications"):
            sink.notify(make_notification())
        assert caplog.records[-1].getMessage() == "notification.slack_error"


class TestBuildSink:
    def test_default_is_logging(self):
        assert isinstance(build_sink(_settings()), LoggingNotificationSink)

    def test_slack_sink(self):
        settings = _settings(notification_sink="slack", slack_bot_token="xoxb-test")
        with patch("soc_triage.interfaces.notifications.WebClient") as web_client:
            sink = build_sink(settings)
        assert isinstance(sink, SlackNotificationSink)
        assert sink.channel == "#soc-alerts"
        web_client.assert_called_once_with(token="xoxb-test")

    def test_slack_sink_requires_token(self):
        with pytest.raises(RuntimeError):
            build_sink(_settings(notification_sink="slack"))

    def test_unknown_sink(self):
        with pytest.raises(ValueError):
            build_sink(_settings(notification_sink="pager"))


class TestSlackSinkTransport:
    def test_transport_error_is_logged_not_raised(self, caplog):
        client = MagicMock()
        client.chat_postMessage.side_effect = TimeoutError("read timed out")
        sink = SlackNotificationSink(token="xoxb-test", channel="#soc", client=client)
        with caplog.at_level(logging.ERROR, logger="soc_triage.interfaces.notifications"):
            sink.notify(make_notification())
        assert caplog.records[-1].getMessage() == "notification.slack_error"
