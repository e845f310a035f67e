"""Route 53 record discovery."""

from __future__ import annotations

from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery


class DnsRecordQuery(BaseDiscoveryQuery):
    """Record sets in any hosted zone whose value is one of the instance's addresses."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.DNS_RECORD

    @property
    def service_name(self) -> str:
        return "route53"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        addresses = set(instance.ip_addresses)
        if not addresses:
            return []

        records = []
        zone_paginator = client.get_paginator("list_hosted_zones")
        record_paginator = client.get_paginator("list_resource_record_sets")

        for zone_page in zone_paginator.paginate():
            for zone in zone_page.get("HostedZones", []):
                zone_id = zone["Id"].rsplit("/", 1)[-1]
                for page in record_paginator.paginate(HostedZoneId=zone_id):
                    for record_set in page.get("ResourceRecordSets", []):
                        for value in (r.get("Value") for r in record_set.get("ResourceRecords", [])):
                            if value in addresses:
                                records.append(
                                    ResourceRecord.dns_record(
                                        zone_id=zone_id,
                                        name=record_set["Name"],
                                        record_type=record_set["Type"],
                                        value=value,
                                    )
                                )
                                break

        return records
