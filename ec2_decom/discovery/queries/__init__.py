"""Per-kind discovery queries.

Adding a resource kind means adding one query class here, one ResourceKind
variant and one planner stage.
"""

from __future__ import annotations

from typing import List, Optional

from .base import BaseDiscoveryQuery
from .cloudwatch import AlarmQuery
from .ec2 import ElasticIpQuery, NetworkInterfaceQuery, SecurityGroupQuery, VolumeQuery
from .elbv2 import TargetGroupRegistrationQuery
from .iam import IamProfileQuery
from .route53 import DnsRecordQuery
from .ssm import AssociationQuery


def default_queries(default_group_id: Optional[str] = None) -> List[BaseDiscoveryQuery]:
    """All queries, in the order their results enter the inventory."""
    return [
        VolumeQuery(),
        ElasticIpQuery(),
        SecurityGroupQuery(default_group_id=default_group_id),
        NetworkInterfaceQuery(),
        IamProfileQuery(),
        AlarmQuery(),
        DnsRecordQuery(),
        TargetGroupRegistrationQuery(),
        AssociationQuery(),
    ]


__all__ = [
    "AlarmQuery",
    "AssociationQuery",
    "BaseDiscoveryQuery",
    "DnsRecordQuery",
    "ElasticIpQuery",
    "IamProfileQuery",
    "NetworkInterfaceQuery",
    "SecurityGroupQuery",
    "TargetGroupRegistrationQuery",
    "VolumeQuery",
    "default_queries",
]
