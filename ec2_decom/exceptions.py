"""Exceptions raised during instance decommissioning."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.resource import ResourceKind


class DecommissionError(Exception):
    """Base exception for decommission errors."""

    pass


class InstanceNotFound(DecommissionError):
    """The directory service reports no matching instance. Fatal."""

    def __init__(self, instance_id: str, reason: Optional[str] = None) -> None:
        self.instance_id = instance_id
        self.reason = reason
        message = f"Instance {instance_id} not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PartialDiscoveryFailure(DecommissionError):
    """A single resource kind could not be discovered.

    Recorded on the inventory rather than raised to the caller.
    """

    def __init__(self, kind: ResourceKind, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"Discovery of {kind.value} skipped: {reason}")


class StepFailed(DecommissionError):
    """A mutation call for one teardown step returned an error."""

    def __init__(self, reason: str, error_code: Optional[str] = None) -> None:
        self.reason = reason
        self.error_code = error_code
        super().__init__(reason)


class WaitTimeout(StepFailed):
    """A blocking step did not reach its target state in time."""

    def __init__(self, waiter_name: str, resource_id: str, detail: str = "") -> None:
        reason = f"WaitTimeout: {resource_id} did not reach {waiter_name.replace('_', ' ')}"
        if detail:
            reason = f"{reason} ({detail})"
        super().__init__(reason, error_code="WaitTimeout")
        self.waiter_name = waiter_name
        self.resource_id = resource_id


class PrerequisiteNotMet(StepFailed):
    """A step was not attempted because an earlier required step did not succeed."""

    def __init__(self, reason: str = "prerequisite not met") -> None:
        super().__init__(reason, error_code="PrerequisiteNotMet")
