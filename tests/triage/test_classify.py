"""Tests for soc_triage/triage/classify.py."""

import pytest

from soc_triage.models.alert import AlertStatus, Severity
from soc_triage.models.incident import IncidentStatus
from soc_triage.triage.classify import (
    NEUTRAL,
    classify_priority,
    classify_severity,
    classify_sla,
    classify_status,
)
from soc_triage.triage.sla import SlaStatus


class TestClassifySeverity:
    @pytest.mark.parametrize(
        "value,label",
        [("critical", "Critical"), ("high", "High"), ("medium", "Medium"), ("low", "Low")],
    )
    def test_known_values(self, value, label):
        badge = classify_severity(value)
        assert badge.category == value
        assert badge.label == label

    def test_accepts_enum_members(self):
        assert classify_severity(Severity.CRITICAL).label == "Critical"

    def test_unknown_falls_back_to_neutral(self):
        badge = classify_severity("catastrophic")
        assert badge.category == NEUTRAL
        assert badge.label == "catastrophic"

    def test_none_is_neutral(self):
        badge = classify_severity(None)
        assert badge.category == NEUTRAL
        assert badge.label == ""

    def test_priority_uses_same_scale(self):
        assert classify_priority("high") == classify_severity("high")


class TestClassifyStatus:
    def test_in_progress(self):
        badge = classify_status("in_progress")
        assert badge.category == "status-in-progress"
        assert badge.label == "In Progress"

    @pytest.mark.parametrize("status", list(AlertStatus) + list(IncidentStatus))
    def test_every_known_status_has_a_category(self, status):
        badge = classify_status(status)
        assert badge.category.startswith("status-")
        assert badge.label

    def test_unknown_status(self):
        badge = classify_status("on_hold")
        assert badge.category == NEUTRAL
        assert badge.label == "on_hold"


class TestClassifySla:
    @pytest.mark.parametrize(
        "status,category,label",
        [
            (SlaStatus.COMPLETED, "sla-completed", "Completed"),
            (SlaStatus.RESPONSE_REQUIRED, "sla-response-required", "Response Required"),
            (SlaStatus.IN_PROGRESS, "sla-in-progress", "In Progress"),
            (SlaStatus.UNKNOWN, "sla-unknown", "Unknown"),
        ],
    )
    def test_every_sla_status(self, status, category, label):
        badge = classify_sla(status)
        assert badge.category == category
        assert badge.label == label

    def test_unknown_sla_value(self):
        assert classify_sla("breached").category == NEUTRAL
