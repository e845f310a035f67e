"""Dependency planner.

Orders an inventory into a safe teardown sequence using a fixed stage table.
The resource-kind set is closed and small, so a priority table replaces a
general topological sort.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..models.inventory import Inventory
from ..models.plan import ActionVerb, TeardownPlan, TeardownStep
from ..models.resource import ResourceKind, ResourceRecord

logger = logging.getLogger(__name__)

# (verb, target kind, target id getter) emitted for each record of a stage
StepTemplate = tuple[ActionVerb, ResourceKind, Callable[[ResourceRecord], Optional[str]]]


def _identifier(record: ResourceRecord) -> str:
    return record.identifier


def _profile_name(record: ResourceRecord) -> str:
    return record.metadata.get("profile_name") or record.identifier


def _role_name(record: ResourceRecord) -> Optional[str]:
    return record.metadata.get("role_name")


# Stages between stopping and terminating the instance, in execution order.
# Kinds without a stage (DNS records) are reported but never deleted.
TEARDOWN_STAGES: list[tuple[ResourceKind, list[StepTemplate]]] = [
    (
        ResourceKind.TARGET_GROUP_REGISTRATION,
        [(ActionVerb.DEREGISTER, ResourceKind.TARGET_GROUP_REGISTRATION, _identifier)],
    ),
    (
        ResourceKind.ELASTIC_IP,
        [(ActionVerb.RELEASE, ResourceKind.ELASTIC_IP, _identifier)],
    ),
    (
        ResourceKind.VOLUME,
        [
            (ActionVerb.DETACH, ResourceKind.VOLUME, _identifier),
            (ActionVerb.DELETE, ResourceKind.VOLUME, _identifier),
        ],
    ),
    (
        ResourceKind.NETWORK_INTERFACE,
        [(ActionVerb.DELETE, ResourceKind.NETWORK_INTERFACE, _identifier)],
    ),
    (
        ResourceKind.SECURITY_GROUP,
        [(ActionVerb.DELETE, ResourceKind.SECURITY_GROUP, _identifier)],
    ),
    (
        ResourceKind.IAM_PROFILE,
        [
            (ActionVerb.REMOVE_ROLE_BINDING, ResourceKind.IAM_PROFILE, _profile_name),
            (ActionVerb.DELETE, ResourceKind.IAM_PROFILE, _profile_name),
            (ActionVerb.DELETE, ResourceKind.IAM_ROLE, _role_name),
        ],
    ),
    (
        ResourceKind.ALARM,
        [(ActionVerb.DELETE, ResourceKind.ALARM, _identifier)],
    ),
    (
        ResourceKind.ASSOCIATION,
        [(ActionVerb.DELETE, ResourceKind.ASSOCIATION, _identifier)],
    ),
]

NO_ROLE = "<none>"


class DependencyPlanner:
    """Builds a teardown plan from an inventory.

    Pure: no side effects and no AWS calls. The plan always starts by stopping
    the instance and ends by terminating it; every resource stage runs in between,
    and records within a stage keep discovery order.
    """

    def __init__(self, stages: Optional[list[tuple[ResourceKind, list[StepTemplate]]]] = None) -> None:
        self.stages = stages if stages is not None else TEARDOWN_STAGES

    def plan(self, inventory: Inventory) -> TeardownPlan:
        """Compute the teardown plan.

        Args:
            inventory: Inventory produced by discovery

        Returns:
            TeardownPlan honoring every ordering invariant
        """
        instance_id = inventory.instance.instance_id
        actions: list[tuple[ActionVerb, ResourceKind, str, Optional[ResourceRecord]]] = [
            (ActionVerb.STOP, ResourceKind.INSTANCE, instance_id, None)
        ]

        for kind, templates in self.stages:
            for record in inventory.by_kind(kind):
                for verb, target_kind, target_id in templates:
                    actions.append((verb, target_kind, target_id(record) or NO_ROLE, record))

        actions.append((ActionVerb.TERMINATE, ResourceKind.INSTANCE, instance_id, None))

        plan = TeardownPlan(
            instance=inventory.instance,
            steps=[
                TeardownStep(index=i, verb=verb, target_kind=target_kind, target_id=target_id, record=record)
                for i, (verb, target_kind, target_id, record) in enumerate(actions)
            ],
        )

        staged = {kind for kind, _ in self.stages}
        unplanned = [kind.value for kind in ResourceKind if kind not in staged and inventory.by_kind(kind)]
        if unplanned:
            logger.info(f"Not planned for deletion (manual follow-up): {', '.join(unplanned)}")

        logger.debug(f"Planned {len(plan)} steps for {instance_id}")
        return plan
