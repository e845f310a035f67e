"""Decommission orchestrator.

Wires discovery, planning, execution and audit logging together for one
instance, in preview or apply mode.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import yaml

from ..cli.config import DecomConfig
from ..discovery.engine import DiscoveryEngine
from ..models.inventory import Inventory
from ..models.run_report import RunMode, RunReport
from .audit import AuditStorage
from .executor import ExecutionEngine
from .planner import DependencyPlanner

logger = logging.getLogger(__name__)


class Decommissioner:
    """Instance decommission orchestrator.

    Discovery always runs, in both modes, so the operator sees the full
    inventory. Only apply mode issues mutation calls.

    Attributes:
        config: Decommission configuration
        discovery: Discovery engine
        planner: Dependency planner
        executor: Execution engine
        audit_storage: Audit storage for run logs (None disables logging)
    """

    def __init__(
        self,
        config: DecomConfig,
        discovery: Optional[DiscoveryEngine] = None,
        planner: Optional[DependencyPlanner] = None,
        executor: Optional[ExecutionEngine] = None,
        audit_storage: Optional[AuditStorage] = None,
    ) -> None:
        self.config = config
        self.discovery = discovery or DiscoveryEngine(config)
        self.planner = planner or DependencyPlanner()
        self.executor = executor or ExecutionEngine(config)
        self.audit_storage = audit_storage

    def discover(self, instance_id: str) -> Inventory:
        """Build the inventory for an instance.

        Raises:
            InstanceNotFound: If the instance does not exist
        """
        return self.discovery.discover(instance_id)

    def run(
        self,
        inventory: Inventory,
        mode: RunMode,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunReport:
        """Plan and execute teardown for an already discovered inventory.

        A failed audit write is logged and does not fail the run.
        """
        plan = self.planner.plan(inventory)
        plan.validate()

        report = self.executor.execute(plan, inventory, mode, cancel_event=cancel_event)

        if self.audit_storage is not None:
            try:
                audit_file = self.audit_storage.log_run(report)
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Could not write audit log for run {report.run_id}: {e}")
            else:
                logger.info(f"Audit log written to {audit_file}")

        return report

