"""Run report model.

Aggregates every step result of one decommission run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .inventory import Inventory
from .plan import TeardownPlan
from .step_result import StepResult, StepStatus


class RunMode(Enum):
    """Run execution mode."""

    PREVIEW = "preview"
    APPLY = "apply"


class RunStatus(Enum):
    """Overall run status."""

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class RunReport:
    """Run report entity.

    State transitions:
        preview → planned
        apply → completed (no step failed)
        apply → partial (some steps failed, some succeeded)
        apply → failed (no step succeeded and at least one failed)
        apply → cancelled (operator interrupt before the plan finished)

    Attributes:
        run_id: Unique identifier for the run
        mode: preview or apply
        inventory: Inventory the plan was built from
        plan: The executed plan
        results: One result per plan step, in plan order
        started_at: When execution started
        completed_at: When execution completed
        cancelled: Whether an interrupt stopped the run early
    """

    run_id: str
    mode: RunMode
    inventory: Inventory
    plan: TeardownPlan
    results: list[StepResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    cancelled: bool = False

    def record(self, result: StepResult) -> None:
        self.results.append(result)

    def _count(self, status: StepStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded_count(self) -> int:
        return self._count(StepStatus.SUCCEEDED)

    @property
    def failed_count(self) -> int:
        return self._count(StepStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return self._count(StepStatus.SKIPPED)

    @property
    def failed_results(self) -> list[StepResult]:
        return [r for r in self.results if r.status == StepStatus.FAILED]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def status(self) -> RunStatus:
        if self.mode == RunMode.PREVIEW:
            return RunStatus.PLANNED
        if self.cancelled:
            return RunStatus.CANCELLED
        if self.failed_count > 0:
            return RunStatus.PARTIAL if self.succeeded_count > 0 else RunStatus.FAILED
        return RunStatus.COMPLETED

    def validate(self) -> bool:
        """Validate report invariants.

        Validation rules:
            - exactly one result per planned step, in plan order
            - preview runs contain only skipped results
            - completed_at must be after started_at

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if [r.step.index for r in self.results] != [s.index for s in self.plan.steps]:
            raise ValueError("Results don't match planned steps")

        if self.mode == RunMode.PREVIEW and self.skipped_count != len(self.results):
            raise ValueError("Preview runs must skip every step")

        if self.completed_at and self.completed_at < self.started_at:
            raise ValueError("Completion time before start time")

        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "instance_id": self.plan.instance.instance_id,
            "region": self.plan.instance.region,
            "mode": self.mode.value,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() + "Z",
            "completed_at": self.completed_at.isoformat() + "Z" if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "total_steps": len(self.plan),
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
            "skipped_count": self.skipped_count,
            "discovery_warnings": [str(w) for w in self.inventory.warnings],
        }
