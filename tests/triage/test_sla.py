"""Tests for soc_triage/triage/sla.py."""

from datetime import datetime, timedelta, timezone

from soc_triage.models.incident import Incident
from soc_triage.triage.sla import SlaStatus, elapsed_label, evaluate_sla, sla_status

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


def make_incident(**kwargs) -> Incident:
    defaults = {"id": 1, "title": "Suspicious login", "status": "new", "created_at": T0}
    defaults.update(kwargs)
    return Incident(**defaults)


class TestSlaStatus:
    def test_closed_is_completed(self):
        incident = make_incident(status="closed", first_response_at=T0 + timedelta(hours=1))
        assert sla_status(incident) == SlaStatus.COMPLETED

    def test_closed_wins_even_without_timestamps(self):
        incident = make_incident(status="closed", created_at=None)
        assert sla_status(incident) == SlaStatus.COMPLETED

    def test_new_without_response_requires_response(self):
        assert sla_status(make_incident()) == SlaStatus.RESPONSE_REQUIRED

    def test_responded_unresolved_is_in_progress(self):
        incident = make_incident(status="in_progress", first_response_at=T0 + timedelta(hours=2))
        assert sla_status(incident) == SlaStatus.IN_PROGRESS

    def test_new_with_response_is_in_progress(self):
        incident = make_incident(status="new", first_response_at=T0 + timedelta(minutes=5))
        assert sla_status(incident) == SlaStatus.IN_PROGRESS

    def test_in_progress_without_response_is_unknown(self):
        assert sla_status(make_incident(status="in_progress")) == SlaStatus.UNKNOWN

    def test_mitigated_and_resolved_is_unknown(self):
        incident = make_incident(
            status="mitigated",
            first_response_at=T0 + timedelta(hours=1),
            resolved_at=T0 + timedelta(hours=5),
        )
        assert sla_status(incident) == SlaStatus.UNKNOWN


class TestElapsedLabel:
    def test_no_created_at(self):
        assert elapsed_label(make_incident(created_at=None), T0) == "N/A"

    def test_response_hours(self):
        incident = make_incident(status="in_progress", first_response_at=T0 + timedelta(hours=2))
        assert elapsed_label(incident, T0 + timedelta(days=3)) == "Response: 2h"

    def test_resolved_hours(self):
        incident = make_incident(
            status="closed",
            first_response_at=T0 + timedelta(hours=1),
            resolved_at=T0 + timedelta(hours=26, minutes=59),
        )
        assert elapsed_label(incident, T0 + timedelta(days=5)) == "Resolved: 26h"

    def test_open_hours_floored(self):
        incident = make_incident()
        assert elapsed_label(incident, T0 + timedelta(hours=1, minutes=30)) == "Open: 1h"

    def test_under_an_hour_is_zero(self):
        incident = make_incident(first_response_at=T0 + timedelta(minutes=45))
        assert elapsed_label(incident, T0 + timedelta(days=1)) == "Response: 0h"

    def test_resolved_without_response_counts_as_open(self):
        incident = make_incident(resolved_at=T0 + timedelta(hours=3))
        assert elapsed_label(incident, T0 + timedelta(hours=10)) == "Open: 10h"

    def test_label_ignores_status(self):
        incident = make_incident(status="closed")
        assert elapsed_label(incident, T0 + timedelta(hours=4)) == "Open: 4h"


class TestEvaluateSla:
    def test_responded_incident(self):
        incident = make_incident(status="in_progress", first_response_at=T0 + timedelta(hours=2))
        evaluation = evaluate_sla(incident, T0 + timedelta(hours=6))
        assert evaluation.status == SlaStatus.IN_PROGRESS
        assert evaluation.elapsed_label == "Response: 2h"
        assert evaluation.badge.label == "In Progress"

    def test_closed_incident_badge(self):
        incident = make_incident(
            status="closed",
            first_response_at=T0 + timedelta(hours=1),
            resolved_at=T0 + timedelta(hours=8),
        )
        evaluation = evaluate_sla(incident, T0 + timedelta(days=1))
        assert evaluation.status == SlaStatus.COMPLETED
        assert evaluation.elapsed_label == "Resolved: 8h"
        assert evaluation.badge.category == "sla-completed"

    def test_response_before_creation_truncates_toward_zero(self):
        incident = make_incident(first_response_at=T0 - timedelta(minutes=30))
        assert elapsed_label(incident, T0) == "Response: 0h"

    def test_responded_at_five_hours(self):
        incident = make_incident(status="in_progress", first_response_at=T0 + timedelta(hours=2))
        evaluation = evaluate_sla(incident, T0 + timedelta(hours=5))
        assert evaluation.elapsed_label == "Response: 2h"
        assert evaluation.status == SlaStatus.IN_PROGRESS
