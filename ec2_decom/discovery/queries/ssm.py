"""SSM association discovery."""

from __future__ import annotations

from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery


class AssociationQuery(BaseDiscoveryQuery):
    """State Manager associations whose targets reference the instance id."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.ASSOCIATION

    @property
    def service_name(self) -> str:
        return "ssm"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        records = []
        paginator = client.get_paginator("list_associations")

        for page in paginator.paginate():
            for association in page.get("Associations", []):
                values = [v for target in association.get("Targets", []) for v in target.get("Values", [])]
                if any(instance.instance_id in value for value in values):
                    records.append(
                        ResourceRecord.association(association["AssociationId"], name=association.get("Name"))
                    )

        return records
