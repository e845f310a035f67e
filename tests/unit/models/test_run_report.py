"""Tests for RunReport model."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from ec2_decom.models.run_report import RunMode, RunReport, RunStatus
from ec2_decom.models.step_result import StepResult
from ec2_decom.teardown.planner import DependencyPlanner
from tests.fixtures.inventories import create_inventory


@pytest.fixture
def report_factory():
    inventory = create_inventory()
    plan = DependencyPlanner().plan(inventory)

    def factory(mode: RunMode = RunMode.APPLY) -> RunReport:
        return RunReport(run_id="run_1", mode=mode, inventory=inventory, plan=plan)

    return factory


class TestRunReport:
    """Test suite for RunReport model."""

    def test_preview_status_is_planned(self, report_factory) -> None:
        report = report_factory(RunMode.PREVIEW)
        for step in report.plan:
            report.record(StepResult.skipped(step, "dry-run"))

        assert report.status == RunStatus.PLANNED
        assert report.skipped_count == 2
        assert report.validate() is True

    def test_all_succeeded_is_completed(self, report_factory) -> None:
        report = report_factory()
        for step in report.plan:
            report.record(StepResult.succeeded(step))

        assert report.status == RunStatus.COMPLETED
        assert report.succeeded_count == 2

    def test_some_failed_is_partial(self, report_factory) -> None:
        report = report_factory()
        stop, terminate = report.plan.steps
        report.record(StepResult.succeeded(stop))
        report.record(StepResult.failed(terminate, "UnauthorizedOperation: denied"))

        assert report.status == RunStatus.PARTIAL
        assert report.failed_results[0].step is terminate

    def test_all_failed_is_failed(self, report_factory) -> None:
        report = report_factory()
        for step in report.plan:
            report.record(StepResult.failed(step, "boom"))

        assert report.status == RunStatus.FAILED

    def test_cancelled_status(self, report_factory) -> None:
        report = report_factory()
        report.cancelled = True

        assert report.status == RunStatus.CANCELLED

    def test_validate_rejects_missing_results(self, report_factory) -> None:
        report = report_factory()
        report.record(StepResult.succeeded(report.plan.steps[0]))

        with pytest.raises(ValueError, match="planned steps"):
            report.validate()

    def test_duration(self, report_factory) -> None:
        report = report_factory()
        report.started_at = datetime(2026, 1, 1, 12, 0, 0)
        assert report.duration_seconds is None

        report.completed_at = report.started_at + timedelta(seconds=42)
        assert report.duration_seconds == 42.0
        assert report.to_dict()["duration_seconds"] == 42.0
