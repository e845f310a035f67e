"""Tests for the per-kind discovery queries."""

from __future__ import annotations

from typing import Any, List
from unittest.mock import MagicMock

from ec2_decom.discovery.queries import (
    AlarmQuery,
    AssociationQuery,
    DnsRecordQuery,
    ElasticIpQuery,
    IamProfileQuery,
    NetworkInterfaceQuery,
    SecurityGroupQuery,
    TargetGroupRegistrationQuery,
    VolumeQuery,
    default_queries,
)
from ec2_decom.discovery.queries.iam import profile_name_from_arn
from ec2_decom.models.resource import ResourceKind
from tests.fixtures.inventories import INSTANCE_ID, create_details

PROFILE_ARN = "arn:aws:iam::123456789012:instance-profile/web/web-profile"


def paginated(client: MagicMock, *pages: dict) -> MagicMock:
    """Make client.get_paginator(...).paginate(...) yield the given pages."""
    client.get_paginator.return_value.paginate.return_value = list(pages)
    return client


def identifiers(records: List[Any]) -> List[str]:
    return [r.identifier for r in records]


class TestVolumeQuery:
    """EBS volume discovery."""

    def test_filters_by_attachment(self) -> None:
        client = paginated(MagicMock(), {"Volumes": []})

        VolumeQuery().discover(client, create_details())

        client.get_paginator.assert_called_once_with("describe_volumes")
        client.get_paginator.return_value.paginate.assert_called_once_with(
            Filters=[{"Name": "attachment.instance-id", "Values": [INSTANCE_ID]}]
        )

    def test_block_device_order_and_metadata(self) -> None:
        client = paginated(
            MagicMock(),
            {
                "Volumes": [
                    {
                        "VolumeId": "vol-data",
                        "Attachments": [{"InstanceId": INSTANCE_ID, "State": "attached", "Device": "/dev/sdf"}],
                    },
                ]
            },
            {
                "Volumes": [
                    {
                        "VolumeId": "vol-root",
                        "Attachments": [
                            {
                                "InstanceId": INSTANCE_ID,
                                "State": "attached",
                                "Device": "/dev/xvda",
                                "DeleteOnTermination": True,
                            }
                        ],
                    },
                ]
            },
        )

        records = VolumeQuery().discover(client, create_details(volume_ids=["vol-root", "vol-data"]))

        assert identifiers(records) == ["vol-root", "vol-data"]
        assert records[0].metadata["device"] == "/dev/xvda"
        assert records[0].metadata["delete_on_termination"] is True
        assert records[1].metadata["attachment_state"] == "attached"


class TestElasticIpQuery:
    """Elastic IP discovery."""

    def test_associated_addresses(self) -> None:
        client = MagicMock()
        client.describe_addresses.return_value = {
            "Addresses": [
                {"AllocationId": "eipalloc-1", "PublicIp": "54.1.2.3", "AssociationId": "eipassoc-1"},
                # EC2-Classic addresses have no allocation id
                {"PublicIp": "54.9.9.9"},
            ]
        }

        records = ElasticIpQuery().discover(client, create_details())

        assert identifiers(records) == ["eipalloc-1"]
        assert records[0].metadata == {"public_ip": "54.1.2.3", "association_id": "eipassoc-1"}
        client.describe_addresses.assert_called_once_with(
            Filters=[{"Name": "instance-id", "Values": [INSTANCE_ID]}]
        )


class TestSecurityGroupQuery:
    """Security group discovery."""

    def _client(self) -> MagicMock:
        client = MagicMock()
        client.describe_security_groups.return_value = {
            "SecurityGroups": [
                {"GroupId": "sg-web", "GroupName": "web"},
                {"GroupId": "sg-default", "GroupName": "default"},
                {"GroupId": "sg-shared", "GroupName": "shared"},
            ]
        }
        return client

    def test_default_group_by_name_is_excluded(self) -> None:
        details = create_details(security_group_ids=["sg-web", "sg-default", "sg-shared"])

        records = SecurityGroupQuery().discover(self._client(), details)

        assert identifiers(records) == ["sg-web", "sg-shared"]
        assert records[0].metadata["group_name"] == "web"

    def test_configured_default_group_id_is_excluded(self) -> None:
        details = create_details(security_group_ids=["sg-web", "sg-default", "sg-shared"])

        records = SecurityGroupQuery(default_group_id="sg-shared").discover(self._client(), details)

        assert identifiers(records) == ["sg-web"]

    def test_no_groups_skips_api_call(self) -> None:
        client = MagicMock()

        assert SecurityGroupQuery().discover(client, create_details()) == []
        client.describe_security_groups.assert_not_called()


class TestNetworkInterfaceQuery:
    """Network interface discovery."""

    def test_sorted_by_device_index(self) -> None:
        client = paginated(
            MagicMock(),
            {
                "NetworkInterfaces": [
                    {"NetworkInterfaceId": "eni-2", "Attachment": {"AttachmentId": "eni-attach-2", "DeviceIndex": 1}},
                    {"NetworkInterfaceId": "eni-1", "Attachment": {"AttachmentId": "eni-attach-1", "DeviceIndex": 0}},
                ]
            },
        )

        records = NetworkInterfaceQuery().discover(client, create_details())

        assert identifiers(records) == ["eni-1", "eni-2"]
        assert records[1].metadata == {"attachment_id": "eni-attach-2", "device_index": 1}


class TestIamProfileQuery:
    """Instance profile discovery."""

    def test_profile_name_from_arn(self) -> None:
        assert profile_name_from_arn(PROFILE_ARN) == "web-profile"
        assert profile_name_from_arn("web-profile") == "web-profile"

    def test_profile_with_role(self) -> None:
        client = MagicMock()
        client.get_instance_profile.return_value = {"InstanceProfile": {"Roles": [{"RoleName": "web-role"}]}}

        records = IamProfileQuery().discover(client, create_details(iam_profile_arn=PROFILE_ARN))

        assert identifiers(records) == [PROFILE_ARN]
        assert records[0].metadata == {"profile_name": "web-profile", "role_name": "web-role"}
        client.get_instance_profile.assert_called_once_with(InstanceProfileName="web-profile")

    def test_profile_without_role(self) -> None:
        client = MagicMock()
        client.get_instance_profile.return_value = {"InstanceProfile": {"Roles": []}}

        records = IamProfileQuery().discover(client, create_details(iam_profile_arn=PROFILE_ARN))

        assert records[0].metadata["role_name"] is None

    def test_no_profile(self) -> None:
        client = MagicMock()

        assert IamProfileQuery().discover(client, create_details()) == []
        client.get_instance_profile.assert_not_called()


class TestAlarmQuery:
    """CloudWatch alarm discovery."""

    def test_matches_instance_dimension(self) -> None:
        client = paginated(
            MagicMock(),
            {
                "MetricAlarms": [
                    {"AlarmName": "cpu-high", "Dimensions": [{"Name": "InstanceId", "Value": INSTANCE_ID}]},
                    {"AlarmName": "other", "Dimensions": [{"Name": "InstanceId", "Value": "i-other"}]},
                    {"AlarmName": "lb-5xx", "Dimensions": [{"Name": "LoadBalancer", "Value": INSTANCE_ID}]},
                ]
            },
        )

        records = AlarmQuery().discover(client, create_details())

        assert identifiers(records) == ["cpu-high"]


class TestDnsRecordQuery:
    """Route 53 record discovery."""

    def test_records_pointing_at_instance_addresses(self) -> None:
        client = MagicMock()
        zone_paginator = MagicMock()
        zone_paginator.paginate.return_value = [{"HostedZones": [{"Id": "/hostedzone/Z123"}]}]
        record_paginator = MagicMock()
        record_paginator.paginate.return_value = [
            {
                "ResourceRecordSets": [
                    {"Name": "web.example.com.", "Type": "A", "ResourceRecords": [{"Value": "54.1.2.3"}]},
                    {"Name": "db.example.com.", "Type": "A", "ResourceRecords": [{"Value": "10.9.9.9"}]},
                    {"Name": "internal.example.com.", "Type": "A", "ResourceRecords": [{"Value": "10.0.1.15"}]},
                ]
            }
        ]
        client.get_paginator.side_effect = lambda name: {
            "list_hosted_zones": zone_paginator,
            "list_resource_record_sets": record_paginator,
        }[name]

        records = DnsRecordQuery().discover(client, create_details())

        assert identifiers(records) == ["Z123|web.example.com.|A", "Z123|internal.example.com.|A"]
        assert records[0].metadata["value"] == "54.1.2.3"
        record_paginator.paginate.assert_called_once_with(HostedZoneId="Z123")

    def test_no_addresses_skips_api_calls(self) -> None:
        client = MagicMock()

        assert DnsRecordQuery().discover(client, create_details(private_ip=None, public_ip=None)) == []
        client.get_paginator.assert_not_called()


class TestTargetGroupRegistrationQuery:
    """Target group registration discovery."""

    def test_only_groups_with_instance_registered(self) -> None:
        client = paginated(
            MagicMock(),
            {
                "TargetGroups": [
                    {"TargetGroupArn": "arn:tg/web", "TargetType": "instance"},
                    {"TargetGroupArn": "arn:tg/api", "TargetType": "instance"},
                    {"TargetGroupArn": "arn:tg/ip", "TargetType": "ip"},
                ]
            },
        )
        health = {
            "arn:tg/web": [{"Target": {"Id": INSTANCE_ID, "Port": 80}}],
            "arn:tg/api": [{"Target": {"Id": "i-other", "Port": 8080}}],
        }
        client.describe_target_health.side_effect = lambda TargetGroupArn: {
            "TargetHealthDescriptions": health[TargetGroupArn]
        }

        records = TargetGroupRegistrationQuery().discover(client, create_details())

        assert identifiers(records) == ["arn:tg/web"]
        assert records[0].metadata["port"] == 80
        assert client.describe_target_health.call_count == 2


class TestAssociationQuery:
    """SSM association discovery."""

    def test_targets_referencing_instance(self) -> None:
        client = paginated(
            MagicMock(),
            {
                "Associations": [
                    {
                        "AssociationId": "assoc-1",
                        "Name": "AWS-RunPatchBaseline",
                        "Targets": [{"Key": "InstanceIds", "Values": [INSTANCE_ID]}],
                    },
                    {
                        "AssociationId": "assoc-2",
                        "Name": "AWS-UpdateSSMAgent",
                        "Targets": [{"Key": "tag:Env", "Values": ["prod"]}],
                    },
                ]
            },
        )

        records = AssociationQuery().discover(client, create_details())

        assert identifiers(records) == ["assoc-1"]
        assert records[0].metadata["name"] == "AWS-RunPatchBaseline"


class TestDefaultQueries:
    """Default query set."""

    def test_one_query_per_inventory_kind_in_order(self) -> None:
        kinds = [q.kind for q in default_queries()]

        assert kinds == [
            ResourceKind.VOLUME,
            ResourceKind.ELASTIC_IP,
            ResourceKind.SECURITY_GROUP,
            ResourceKind.NETWORK_INTERFACE,
            ResourceKind.IAM_PROFILE,
            ResourceKind.ALARM,
            ResourceKind.DNS_RECORD,
            ResourceKind.TARGET_GROUP_REGISTRATION,
            ResourceKind.ASSOCIATION,
        ]

    def test_default_group_id_is_passed_through(self) -> None:
        sg_query = next(q for q in default_queries("sg-reserved") if isinstance(q, SecurityGroupQuery))

        assert sg_query.default_group_id == "sg-reserved"
