"""Step result model.

Outcome of executing (or previewing) one teardown step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .plan import TeardownStep


class StepStatus(Enum):
    """Individual teardown step status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


# Skip reasons with special meaning to the executor
DRY_RUN = "dry-run"
CANCELLED = "cancelled"
ALREADY_STOPPED = "already stopped"
PREREQUISITE_NOT_MET = "prerequisite not met"


@dataclass(frozen=True)
class StepResult:
    """Step result entity.

    Created once per step during execution and never mutated afterwards.

    Validation rules:
        - status=succeeded: no reason or error_code
        - status=failed: requires reason
        - status=skipped: requires reason

    Attributes:
        step: The step this result belongs to
        status: Outcome (succeeded, failed, skipped)
        reason: Why the step failed or was skipped; the service's message is kept verbatim
        error_code: Service error code if failed (optional)
        timestamp: When the step finished
        duration_seconds: Time spent on the step, including waits
    """

    step: TeardownStep
    status: StepStatus
    reason: Optional[str] = None
    error_code: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    duration_seconds: float = 0.0

    @classmethod
    def succeeded(cls, step: TeardownStep, duration_seconds: float = 0.0) -> StepResult:
        return cls(step=step, status=StepStatus.SUCCEEDED, duration_seconds=duration_seconds)

    @classmethod
    def skipped(cls, step: TeardownStep, reason: str, duration_seconds: float = 0.0) -> StepResult:
        return cls(step=step, status=StepStatus.SKIPPED, reason=reason, duration_seconds=duration_seconds)

    @classmethod
    def failed(
        cls,
        step: TeardownStep,
        reason: str,
        error_code: Optional[str] = None,
        duration_seconds: float = 0.0,
    ) -> StepResult:
        return cls(
            step=step,
            status=StepStatus.FAILED,
            reason=reason,
            error_code=error_code,
            duration_seconds=duration_seconds,
        )

    def validate(self) -> bool:
        """Validate result invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == StepStatus.SUCCEEDED:
            if self.reason or self.error_code:
                raise ValueError("Succeeded status cannot have a reason or error code")
        elif not self.reason:
            raise ValueError(f"{self.status.value.capitalize()} status requires a reason")

        if self.duration_seconds < 0:
            raise ValueError("Duration cannot be negative")

        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.step.to_dict(),
            "status": self.status.value,
            "reason": self.reason,
            "error_code": self.error_code,
            "timestamp": self.timestamp.isoformat() + "Z",
            "duration_seconds": round(self.duration_seconds, 3),
        }
