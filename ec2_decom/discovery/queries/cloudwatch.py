"""CloudWatch alarm discovery."""

from __future__ import annotations

from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery


class AlarmQuery(BaseDiscoveryQuery):
    """Metric alarms with an InstanceId dimension equal to the instance id."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.ALARM

    @property
    def service_name(self) -> str:
        return "cloudwatch"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        records = []
        paginator = client.get_paginator("describe_alarms")

        for page in paginator.paginate(AlarmTypes=["MetricAlarm"]):
            for alarm in page.get("MetricAlarms", []):
                dimensions = alarm.get("Dimensions", [])
                if any(d.get("Name") == "InstanceId" and d.get("Value") == instance.instance_id for d in dimensions):
                    records.append(ResourceRecord.alarm(alarm["AlarmName"]))

        return records
