"""EC2 discovery queries: volumes, elastic IPs, security groups, network interfaces."""

from __future__ import annotations

from typing import Any, List, Optional

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery

DEFAULT_GROUP_NAME = "default"


class VolumeQuery(BaseDiscoveryQuery):
    """EBS volumes attached to the instance."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.VOLUME

    @property
    def service_name(self) -> str:
        return "ec2"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        records = []
        paginator = client.get_paginator("describe_volumes")
        pages = paginator.paginate(Filters=[{"Name": "attachment.instance-id", "Values": [instance.instance_id]}])

        for page in pages:
            for volume in page.get("Volumes", []):
                attachment = next(
                    (a for a in volume.get("Attachments", []) if a.get("InstanceId") == instance.instance_id),
                    {},
                )
                records.append(
                    ResourceRecord.volume(
                        volume_id=volume["VolumeId"],
                        attachment_state=attachment.get("State", "detached"),
                        device=attachment.get("Device"),
                        delete_on_termination=attachment.get("DeleteOnTermination", False),
                    )
                )

        # Keep block device mapping order so the root volume comes first
        mapping_order = {vid: i for i, vid in enumerate(instance.volume_ids)}
        records.sort(key=lambda r: mapping_order.get(r.identifier, len(mapping_order)))
        return records


class ElasticIpQuery(BaseDiscoveryQuery):
    """Elastic IPs associated with the instance."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.ELASTIC_IP

    @property
    def service_name(self) -> str:
        return "ec2"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        response = client.describe_addresses(Filters=[{"Name": "instance-id", "Values": [instance.instance_id]}])
        return [
            ResourceRecord.elastic_ip(
                allocation_id=address["AllocationId"],
                public_ip=address.get("PublicIp"),
                association_id=address.get("AssociationId"),
            )
            for address in response.get("Addresses", [])
            if "AllocationId" in address
        ]


class SecurityGroupQuery(BaseDiscoveryQuery):
    """Security groups attached to the instance, minus the reserved default group."""

    def __init__(self, default_group_id: Optional[str] = None) -> None:
        super().__init__()
        self.default_group_id = default_group_id

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.SECURITY_GROUP

    @property
    def service_name(self) -> str:
        return "ec2"

    def is_default(self, group_id: str, group_name: Optional[str]) -> bool:
        return group_name == DEFAULT_GROUP_NAME or (
            self.default_group_id is not None and group_id == self.default_group_id
        )

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        if not instance.security_group_ids:
            return []

        response = client.describe_security_groups(GroupIds=instance.security_group_ids)
        names = {sg["GroupId"]: sg.get("GroupName") for sg in response.get("SecurityGroups", [])}

        records = []
        for group_id in instance.security_group_ids:
            group_name = names.get(group_id)
            if self.is_default(group_id, group_name):
                self.logger.debug(f"Excluding default security group {group_id}")
                continue
            records.append(ResourceRecord.security_group(group_id, group_name))
        return records


class NetworkInterfaceQuery(BaseDiscoveryQuery):
    """Network interfaces attached to the instance."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.NETWORK_INTERFACE

    @property
    def service_name(self) -> str:
        return "ec2"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        records = []
        paginator = client.get_paginator("describe_network_interfaces")
        pages = paginator.paginate(Filters=[{"Name": "attachment.instance-id", "Values": [instance.instance_id]}])

        for page in pages:
            for eni in page.get("NetworkInterfaces", []):
                attachment = eni.get("Attachment", {})
                records.append(
                    ResourceRecord.network_interface(
                        interface_id=eni["NetworkInterfaceId"],
                        attachment_id=attachment.get("AttachmentId"),
                        device_index=attachment.get("DeviceIndex"),
                    )
                )

        records.sort(key=lambda r: r.metadata.get("device_index") or 0)
        return records
