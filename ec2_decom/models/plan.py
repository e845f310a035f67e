"""Teardown plan model.

An ordered sequence of steps; each step applies one action verb to one
resource (or to the instance itself).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from .instance import InstanceHandle
from .resource import ResourceKind, ResourceRecord


class ActionVerb(Enum):
    """Action applied by a teardown step."""

    STOP = "stop"
    DEREGISTER = "deregister"
    RELEASE = "release"
    DETACH = "detach"
    DELETE = "delete"
    TERMINATE = "terminate"
    REMOVE_ROLE_BINDING = "remove-role-binding"


@dataclass(frozen=True)
class TeardownStep:
    """One step of a teardown plan.

    Attributes:
        index: Position in the plan (0-based)
        verb: Action to perform
        target_kind: What the action is applied to; differs from the record's kind
            for the IAM role deletion, which acts on the role named by the profile
        target_id: Identifier passed to the mutation service
        record: Inventory record the step was derived from (None for instance steps)
    """

    index: int
    verb: ActionVerb
    target_kind: ResourceKind
    target_id: str
    record: Optional[ResourceRecord] = None

    @property
    def description(self) -> str:
        """Human-readable action, e.g. 'detach volume vol-123'."""
        return f"{self.verb.value} {self.target_kind.value} {self.target_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "verb": self.verb.value,
            "target_kind": self.target_kind.value,
            "target_id": self.target_id,
        }


@dataclass
class TeardownPlan:
    """Ordered teardown steps for one instance.

    Every step's prerequisites appear strictly earlier in the sequence.
    """

    instance: InstanceHandle
    steps: list[TeardownStep] = field(default_factory=list)

    def __iter__(self) -> Iterator[TeardownStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def actions(self) -> list[tuple[ActionVerb, ResourceKind, str]]:
        return [(s.verb, s.target_kind, s.target_id) for s in self.steps]

    def find(self, verb: ActionVerb, target_kind: ResourceKind, target_id: Optional[str] = None) -> Optional[TeardownStep]:
        """First step matching verb and target kind (and id, if given)."""
        for step in self.steps:
            if step.verb == verb and step.target_kind == target_kind:
                if target_id is None or step.target_id == target_id:
                    return step
        return None

    def validate(self) -> bool:
        """Validate ordering invariants.

        Validation rules:
            - stop is the first step and terminate the last
            - each volume's detach precedes its delete
            - the IAM steps are consecutive: unbind, delete profile, delete role

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if not self.steps:
            return True

        first, last = self.steps[0], self.steps[-1]
        if (first.verb, first.target_kind) != (ActionVerb.STOP, ResourceKind.INSTANCE):
            raise ValueError("Plan must start by stopping the instance")
        if (last.verb, last.target_kind) != (ActionVerb.TERMINATE, ResourceKind.INSTANCE):
            raise ValueError("Plan must end by terminating the instance")

        detached: set[str] = set()
        for step in self.steps:
            if step.target_kind != ResourceKind.VOLUME:
                continue
            if step.verb == ActionVerb.DETACH:
                detached.add(step.target_id)
            elif step.verb == ActionVerb.DELETE and step.target_id not in detached:
                raise ValueError(f"Volume {step.target_id} deleted before it is detached")

        for i, step in enumerate(self.steps):
            if step.verb != ActionVerb.REMOVE_ROLE_BINDING:
                continue
            triple = [(s.verb, s.target_kind) for s in self.steps[i : i + 3]]
            expected = [
                (ActionVerb.REMOVE_ROLE_BINDING, ResourceKind.IAM_PROFILE),
                (ActionVerb.DELETE, ResourceKind.IAM_PROFILE),
                (ActionVerb.DELETE, ResourceKind.IAM_ROLE),
            ]
            if triple != expected:
                raise ValueError("IAM steps must be unbind, delete profile, delete role in sequence")

        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "instance_id": self.instance.instance_id,
            "region": self.instance.region,
            "steps": [step.to_dict() for step in self.steps],
        }
