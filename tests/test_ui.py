"""Tests for console rendering (r53hc.ui, r53hc.workflow.run.report_result)."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from r53hc import ui
from r53hc.workflow.reconcile import ReconcileOutcome, ReconcileResult
from r53hc.workflow.run import report_result


@pytest.fixture
def output(monkeypatch):
    buf = io.StringIO()
    monkeypatch.setattr(ui, "console", Console(file=buf, width=200, color_system=None))
    return buf


class TestOutcomeLines:
    @pytest.mark.parametrize(
        "kind, marker",
        [
            ("CREATED", "+"),
            ("UPDATED", "~"),
            ("DELETED", "-"),
            ("UNCHANGED", "="),
            ("PLANNED", "?"),
            ("SKIPPED", "!"),
        ],
    )
    def test_marker_per_outcome(self, output, kind, marker):
        ui.outcome(kind, "web-check")
        assert output.getvalue().strip() == f"{marker} web-check"

    def test_brackets_in_messages_are_literal(self, output):
        ui.failure("bad regions ['eu-west-9']")
        assert "['eu-west-9']" in output.getvalue()

    def test_field_changes_empty_prints_nothing(self, output):
        ui.field_changes([])
        assert output.getvalue() == ""


class TestReportResult:
    def test_updated_lists_fields(self, output):
        report_result(
            ReconcileResult(
                name="web-check",
                action="create",
                outcome=ReconcileOutcome.UPDATED,
                remote_id="hc-1",
                changed_fields=["port", "fqdn"],
            )
        )
        text = output.getvalue()
        assert "~ web-check (hc-1)" in text
        assert "fields: port, fqdn" in text

    def test_planned_shows_intent(self, output):
        report_result(
            ReconcileResult(
                name="web-check",
                action="create",
                outcome=ReconcileOutcome.PLANNED,
                planned="add new health check web-check",
            )
        )
        assert "? web-check would add new health check web-check" in output.getvalue()

    def test_tag_error_warns(self, output):
        report_result(
            ReconcileResult(
                name="web-check",
                action="create",
                outcome=ReconcileOutcome.CREATED,
                remote_id="hc-1",
                tag_error="denied",
            )
        )
        text = output.getvalue()
        assert "+ web-check (hc-1)" in text
        assert "tagging failed: denied" in text
