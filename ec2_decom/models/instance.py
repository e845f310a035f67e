"""Instance handle and details models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class InstanceHandle:
    """Root of the teardown graph: an instance id in a region."""

    instance_id: str
    region: str

    def __str__(self) -> str:
        return f"{self.instance_id} ({self.region})"


@dataclass
class InstanceDetails:
    """Instance attributes read from describe_instances.

    Attributes:
        instance_id: EC2 instance id
        state: Instance state name (running, stopped, ...)
        private_ip: Primary private IPv4 address
        public_ip: Public IPv4 address, if any
        iam_profile_arn: ARN of the attached instance profile, if any
        security_group_ids: Security groups attached to the instance
        volume_ids: EBS volumes from the block device mappings
        network_interface_ids: Network interfaces attached to the instance
    """

    instance_id: str
    state: str
    private_ip: Optional[str] = None
    public_ip: Optional[str] = None
    iam_profile_arn: Optional[str] = None
    security_group_ids: list[str] = field(default_factory=list)
    volume_ids: list[str] = field(default_factory=list)
    network_interface_ids: list[str] = field(default_factory=list)

    @property
    def ip_addresses(self) -> list[str]:
        """Addresses DNS records may point at."""
        return [ip for ip in (self.public_ip, self.private_ip) if ip]

    @classmethod
    def from_api(cls, instance: dict[str, Any]) -> InstanceDetails:
        """Build details from a describe_instances Instance structure."""
        return cls(
            instance_id=instance["InstanceId"],
            state=instance.get("State", {}).get("Name", "unknown"),
            private_ip=instance.get("PrivateIpAddress"),
            public_ip=instance.get("PublicIpAddress"),
            iam_profile_arn=instance.get("IamInstanceProfile", {}).get("Arn"),
            security_group_ids=[sg["GroupId"] for sg in instance.get("SecurityGroups", [])],
            volume_ids=[
                mapping["Ebs"]["VolumeId"] for mapping in instance.get("BlockDeviceMappings", []) if "Ebs" in mapping
            ],
            network_interface_ids=[eni["NetworkInterfaceId"] for eni in instance.get("NetworkInterfaces", [])],
        )
