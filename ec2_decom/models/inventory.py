"""Inventory model: everything discovered for one instance."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from ..exceptions import PartialDiscoveryFailure
from .instance import InstanceDetails, InstanceHandle
from .resource import ResourceKind, ResourceRecord


@dataclass
class Inventory:
    """Discovery-ordered, deduplicated set of resources for one instance.

    Invariants:
        - No two records share the same (kind, identifier) pair
        - Records keep the order in which they were discovered

    Attributes:
        instance: Instance handle this inventory belongs to
        details: Instance attributes captured at discovery time
        discovered_at: When discovery completed
        skipped_kinds: Resource kinds whose query failed, mapped to the reason
        warnings: Partial discovery failures, one per skipped kind
    """

    instance: InstanceHandle
    details: Optional[InstanceDetails] = None
    discovered_at: datetime = field(default_factory=datetime.utcnow)
    skipped_kinds: dict[ResourceKind, str] = field(default_factory=dict)
    warnings: list[PartialDiscoveryFailure] = field(default_factory=list)
    _records: list[ResourceRecord] = field(default_factory=list, repr=False)
    _keys: set[tuple[ResourceKind, str]] = field(default_factory=set, repr=False)

    def add(self, record: ResourceRecord) -> bool:
        """Add a record unless its (kind, identifier) pair is already present.

        Returns:
            True if the record was added
        """
        if record.key in self._keys:
            return False
        self._keys.add(record.key)
        self._records.append(record)
        return True

    def extend(self, records: Iterable[ResourceRecord]) -> None:
        for record in records:
            self.add(record)

    def mark_skipped(self, failure: PartialDiscoveryFailure) -> None:
        """Record that a resource kind could not be discovered."""
        self.skipped_kinds[failure.kind] = failure.reason
        self.warnings.append(failure)

    @property
    def records(self) -> list[ResourceRecord]:
        return list(self._records)

    @property
    def is_complete(self) -> bool:
        return not self.skipped_kinds

    def by_kind(self, kind: ResourceKind) -> list[ResourceRecord]:
        """Records of one kind, in discovery order."""
        return [r for r in self._records if r.kind == kind]

    def keys(self) -> set[tuple[ResourceKind, str]]:
        return set(self._keys)

    def kind_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for record in self._records:
            counts[record.kind.value] = counts.get(record.kind.value, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record: object) -> bool:
        return isinstance(record, ResourceRecord) and record.key in self._keys

    def to_dict(self) -> dict[str, Any]:
        """Convert inventory to dictionary for serialization."""
        return {
            "instance_id": self.instance.instance_id,
            "region": self.instance.region,
            "discovered_at": self.discovered_at.isoformat() + "Z",
            "resource_count": len(self._records),
            "kind_counts": self.kind_counts(),
            "skipped_kinds": {kind.value: reason for kind, reason in self.skipped_kinds.items()},
            "resources": [record.to_dict() for record in self._records],
        }
