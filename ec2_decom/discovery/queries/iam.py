"""IAM instance profile discovery."""

from __future__ import annotations

from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord
from .base import BaseDiscoveryQuery


def profile_name_from_arn(profile_arn: str) -> str:
    """Instance profile name is the last path segment of its ARN."""
    return profile_arn.rsplit("/", 1)[-1]


class IamProfileQuery(BaseDiscoveryQuery):
    """Instance profile attached to the instance, with its role name resolved."""

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.IAM_PROFILE

    @property
    def service_name(self) -> str:
        return "iam"

    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        if not instance.iam_profile_arn:
            return []

        profile_name = profile_name_from_arn(instance.iam_profile_arn)
        response = client.get_instance_profile(InstanceProfileName=profile_name)
        roles = response.get("InstanceProfile", {}).get("Roles", [])
        role_name = roles[0]["RoleName"] if roles else None

        if role_name is None:
            self.logger.warning(f"Instance profile {profile_name} has no role bound")

        return [ResourceRecord.iam_profile(instance.iam_profile_arn, profile_name, role_name)]
