"""Instance teardown.

This module plans and executes the dependency-ordered teardown of an EC2
instance and the resources attached to it.

Classes:
    Decommissioner: Main orchestrator for preview and apply runs
    DependencyPlanner: Fixed-priority teardown ordering
    ExecutionEngine: Step-by-step plan execution
    ResourceMutator: AWS mutation calls per step
    AuditStorage: Run log storage and retrieval
"""

from __future__ import annotations

from .audit import AuditStorage
from .decommissioner import Decommissioner
from .executor import ExecutionEngine
from .mutator import ResourceMutator
from .planner import DependencyPlanner

__all__ = [
    "Decommissioner",
    "DependencyPlanner",
    "ExecutionEngine",
    "ResourceMutator",
    "AuditStorage",
]
