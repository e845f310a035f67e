"""Load balancer target group registration discovery."""

from __future__ import annotations

from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery


class TargetGroupRegistrationQuery(BaseDiscoveryQuery):
    """Target groups that have the instance registered as a target."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.TARGET_GROUP_REGISTRATION

    @property
    def service_name(self) -> str:
        return "elbv2"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        records = []
        paginator = client.get_paginator("describe_target_groups")

        for page in paginator.paginate():
            for group in page.get("TargetGroups", []):
                if group.get("TargetType", "instance") != "instance":
                    continue
                arn = group["TargetGroupArn"]
                health = client.describe_target_health(TargetGroupArn=arn)
                for description in health.get("TargetHealthDescriptions", []):
                    target = description.get("Target", {})
                    if target.get("Id") == instance.instance_id:
                        records.append(ResourceRecord.target_group_registration(arn, port=target.get("Port")))
                        break

        return records
