"""Resource record model.

Typed description of every resource kind that can hang off an EC2 instance and
its relationship to that instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ResourceKind(Enum):
    """Kinds of resources discovered for an instance.

    INSTANCE and IAM_ROLE are step targets only: they never appear as
    inventory entries.
    """

    VOLUME = "volume"
    ELASTIC_IP = "elastic-ip"
    SECURITY_GROUP = "security-group"
    NETWORK_INTERFACE = "network-interface"
    IAM_PROFILE = "iam-profile"
    ALARM = "alarm"
    DNS_RECORD = "dns-record"
    TARGET_GROUP_REGISTRATION = "target-group-registration"
    ASSOCIATION = "association"

    INSTANCE = "instance"
    IAM_ROLE = "iam-role"


class Relationship(Enum):
    """How a resource is tied to the instance."""

    ATTACHED = "attached"
    ASSOCIATED = "associated"
    REGISTERED = "registered"
    REFERENCING_BY_IP = "referencing-by-ip"


@dataclass(frozen=True)
class ResourceRecord:
    """A single discovered resource.

    Attributes:
        kind: Resource kind
        identifier: Kind-specific identifier (volume id, allocation id, group id,
            interface id, profile ARN, alarm name, DNS record key, target group ARN,
            association id)
        relationship: Relationship to the instance
        metadata: Kind-specific data needed for safe deletion
    """

    kind: ResourceKind
    identifier: str
    relationship: Relationship
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> tuple[ResourceKind, str]:
        """Deduplication key: (kind, identifier)."""
        return (self.kind, self.identifier)

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "identifier": self.identifier,
            "relationship": self.relationship.value,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def volume(
        cls,
        volume_id: str,
        attachment_state: str = "attached",
        device: Optional[str] = None,
        delete_on_termination: bool = False,
    ) -> ResourceRecord:
        return cls(
            kind=ResourceKind.VOLUME,
            identifier=volume_id,
            relationship=Relationship.ATTACHED,
            metadata={
                "attachment_state": attachment_state,
                "device": device,
                "delete_on_termination": delete_on_termination,
            },
        )

    @classmethod
    def elastic_ip(
        cls,
        allocation_id: str,
        public_ip: Optional[str] = None,
        association_id: Optional[str] = None,
    ) -> ResourceRecord:
        return cls(
            kind=ResourceKind.ELASTIC_IP,
            identifier=allocation_id,
            relationship=Relationship.ASSOCIATED,
            metadata={"public_ip": public_ip, "association_id": association_id},
        )

    @classmethod
    def security_group(cls, group_id: str, group_name: Optional[str] = None) -> ResourceRecord:
        return cls(
            kind=ResourceKind.SECURITY_GROUP,
            identifier=group_id,
            relationship=Relationship.ASSOCIATED,
            metadata={"group_name": group_name},
        )

    @classmethod
    def network_interface(
        cls,
        interface_id: str,
        attachment_id: Optional[str] = None,
        device_index: Optional[int] = None,
    ) -> ResourceRecord:
        return cls(
            kind=ResourceKind.NETWORK_INTERFACE,
            identifier=interface_id,
            relationship=Relationship.ATTACHED,
            metadata={"attachment_id": attachment_id, "device_index": device_index},
        )

    @classmethod
    def iam_profile(cls, profile_arn: str, profile_name: str, role_name: Optional[str]) -> ResourceRecord:
        return cls(
            kind=ResourceKind.IAM_PROFILE,
            identifier=profile_arn,
            relationship=Relationship.ASSOCIATED,
            metadata={"profile_name": profile_name, "role_name": role_name},
        )

    @classmethod
    def alarm(cls, alarm_name: str) -> ResourceRecord:
        return cls(
            kind=ResourceKind.ALARM,
            identifier=alarm_name,
            relationship=Relationship.REGISTERED,
        )

    @classmethod
    def dns_record(cls, zone_id: str, name: str, record_type: str, value: str) -> ResourceRecord:
        # Record sets are keyed by zone, name and type; the tuple is kept in metadata
        return cls(
            kind=ResourceKind.DNS_RECORD,
            identifier=f"{zone_id}|{name}|{record_type}",
            relationship=Relationship.REFERENCING_BY_IP,
            metadata={"zone_id": zone_id, "name": name, "record_type": record_type, "value": value},
        )

    @classmethod
    def target_group_registration(cls, target_group_arn: str, port: Optional[int] = None) -> ResourceRecord:
        return cls(
            kind=ResourceKind.TARGET_GROUP_REGISTRATION,
            identifier=target_group_arn,
            relationship=Relationship.REGISTERED,
            metadata={"port": port},
        )

    @classmethod
    def association(cls, association_id: str, name: Optional[str] = None) -> ResourceRecord:
        return cls(
            kind=ResourceKind.ASSOCIATION,
            identifier=association_id,
            relationship=Relationship.REGISTERED,
            metadata={"name": name},
        )
