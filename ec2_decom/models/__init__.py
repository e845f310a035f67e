"""Data models for instances, inventories, teardown plans and run results."""

from __future__ import annotations

from .instance import InstanceDetails, InstanceHandle
from .inventory import Inventory
from .plan import ActionVerb, TeardownPlan, TeardownStep
from .resource import Relationship, ResourceKind, ResourceRecord
from .run_report import RunMode, RunReport, RunStatus
from .step_result import StepResult, StepStatus

__all__ = [
    "ActionVerb",
    "InstanceDetails",
    "InstanceHandle",
    "Inventory",
    "Relationship",
    "ResourceKind",
    "ResourceRecord",
    "RunMode",
    "RunReport",
    "RunStatus",
    "StepResult",
    "StepStatus",
    "TeardownPlan",
    "TeardownStep",
]
