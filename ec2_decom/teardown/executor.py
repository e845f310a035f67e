"""Execution engine.

Walks a teardown plan one step at a time, in order, recording an immutable
result per step.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from datetime import datetime
from typing import Optional

from ..cli.config import DecomConfig
from ..exceptions import PrerequisiteNotMet
from ..models.inventory import Inventory
from ..models.plan import ActionVerb, TeardownPlan, TeardownStep
from ..models.resource import ResourceKind
from ..models.run_report import RunMode, RunReport
from ..models.step_result import (
    ALREADY_STOPPED,
    CANCELLED,
    DRY_RUN,
    PREREQUISITE_NOT_MET,
    StepResult,
    StepStatus,
)
from .mutator import ResourceMutator

logger = logging.getLogger(__name__)

# step (verb, target) -> step whose outcome must be acceptable before it is attempted
PREREQUISITES: dict[tuple[ActionVerb, ResourceKind], tuple[ActionVerb, ResourceKind]] = {
    (ActionVerb.TERMINATE, ResourceKind.INSTANCE): (ActionVerb.STOP, ResourceKind.INSTANCE),
}

ACCEPTABLE_SKIPS = {ALREADY_STOPPED}


class ExecutionEngine:
    """Teardown plan executor.

    Preview mode issues no mutation calls and records every step as skipped.
    Apply mode runs steps synchronously and keeps going after a failed step;
    only steps with an unmet prerequisite are not attempted.

    Attributes:
        config: Decommission configuration
        mutator: Mutation service adapter
    """

    def __init__(self, config: DecomConfig, mutator: Optional[ResourceMutator] = None) -> None:
        self.config = config
        self._mutator = mutator

    @property
    def mutator(self) -> ResourceMutator:
        # Built lazily so preview runs never create mutation clients
        if self._mutator is None:
            self._mutator = ResourceMutator(self.config)
        return self._mutator

    def execute(
        self,
        plan: TeardownPlan,
        inventory: Inventory,
        mode: RunMode,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunReport:
        """Execute (or preview) a teardown plan.

        Args:
            plan: Plan to execute
            inventory: Inventory the plan was derived from
            mode: preview or apply
            cancel_event: Set to stop before the next unexecuted step (optional)

        Returns:
            RunReport with exactly one result per planned step
        """
        report = RunReport(
            run_id=f"run_{uuid.uuid4()}",
            mode=mode,
            inventory=inventory,
            plan=plan,
            started_at=datetime.utcnow(),
        )

        if mode == RunMode.PREVIEW:
            for step in plan:
                logger.info(f"[DRY RUN] Would {step.description}")
                report.record(StepResult.skipped(step, DRY_RUN))
        else:
            self._apply(plan, report, cancel_event)

        report.completed_at = datetime.utcnow()
        logger.info(
            f"Run {report.run_id} {report.status.value}: "
            f"{report.succeeded_count} succeeded, {report.failed_count} failed, {report.skipped_count} skipped"
        )
        return report

    def _apply(self, plan: TeardownPlan, report: RunReport, cancel_event: Optional[threading.Event]) -> None:
        instance_id = plan.instance.instance_id

        for step in plan:
            if cancel_event is not None and cancel_event.is_set():
                if not report.cancelled:
                    logger.warning(f"Cancellation requested; not starting {step.description} or later steps")
                    report.cancelled = True
                report.record(StepResult.skipped(step, CANCELLED))
                continue

            if not self._prerequisite_met(step, report):
                failure = PrerequisiteNotMet(PREREQUISITE_NOT_MET)
                logger.error(f"Not attempting {step.description}: {failure.reason}")
                report.record(StepResult.failed(step, failure.reason, error_code=failure.error_code))
                continue

            started = time.monotonic()
            status, reason, error_code = self.mutator.apply(step, instance_id)
            duration = time.monotonic() - started

            if status == StepStatus.SUCCEEDED:
                result = StepResult.succeeded(step, duration_seconds=duration)
            elif status == StepStatus.SKIPPED:
                result = StepResult.skipped(step, reason or "skipped", duration_seconds=duration)
            else:
                result = StepResult.failed(
                    step, reason or "unknown error", error_code=error_code, duration_seconds=duration
                )
            report.record(result)

    def _prerequisite_met(self, step: TeardownStep, report: RunReport) -> bool:
        required = PREREQUISITES.get((step.verb, step.target_kind))
        if required is None:
            return True

        for result in report.results:
            if (result.step.verb, result.step.target_kind) != required:
                continue
            if result.status == StepStatus.SUCCEEDED:
                return True
            return result.status == StepStatus.SKIPPED and result.reason in ACCEPTABLE_SKIPS

        return False
