"""Tests for ResourceRecord and InstanceDetails models."""

from __future__ import annotations

from ec2_decom.models.instance import InstanceDetails, InstanceHandle
from ec2_decom.models.resource import Relationship, ResourceKind, ResourceRecord


class TestResourceRecord:
    """Test suite for ResourceRecord model."""

    def test_volume_carries_attachment_state(self) -> None:
        """Test volume records keep attachment metadata."""
        record = ResourceRecord.volume("vol-1", attachment_state="detached", device="/dev/sdf")

        assert record.kind == ResourceKind.VOLUME
        assert record.relationship == Relationship.ATTACHED
        assert record.metadata["attachment_state"] == "detached"
        assert record.metadata["device"] == "/dev/sdf"

    def test_iam_profile_carries_role_name(self) -> None:
        """Test IAM profile records keep the resolved role name."""
        record = ResourceRecord.iam_profile("arn:aws:iam::1:instance-profile/web", "web", "web-role")

        assert record.identifier == "arn:aws:iam::1:instance-profile/web"
        assert record.metadata == {"profile_name": "web", "role_name": "web-role"}

    def test_dns_record_key_combines_zone_name_and_type(self) -> None:
        """Test DNS records are keyed by zone, name and type."""
        record = ResourceRecord.dns_record("Z1", "app.example.com.", "A", "10.0.0.1")

        assert record.identifier == "Z1|app.example.com.|A"
        assert record.relationship == Relationship.REFERENCING_BY_IP
        assert record.metadata["value"] == "10.0.0.1"

    def test_key_ignores_metadata(self) -> None:
        """Test records with same kind and id are equal regardless of metadata."""
        first = ResourceRecord.volume("vol-1", attachment_state="attached")
        second = ResourceRecord.volume("vol-1", attachment_state="detached")

        assert first.key == second.key == (ResourceKind.VOLUME, "vol-1")
        assert first == second
        assert hash(first) == hash(second)

    def test_to_dict(self) -> None:
        """Test serialization uses enum values."""
        data = ResourceRecord.alarm("cpu-high").to_dict()

        assert data == {"kind": "alarm", "identifier": "cpu-high", "relationship": "registered", "metadata": {}}


class TestInstanceDetails:
    """Test suite for InstanceDetails parsing."""

    def test_from_api_extracts_attached_resources(self) -> None:
        """Test parsing a describe_instances Instance structure."""
        details = InstanceDetails.from_api(
            {
                "InstanceId": "i-1",
                "State": {"Name": "running"},
                "PrivateIpAddress": "10.0.0.5",
                "PublicIpAddress": "3.3.3.3",
                "IamInstanceProfile": {"Arn": "arn:aws:iam::1:instance-profile/web"},
                "SecurityGroups": [{"GroupId": "sg-1", "GroupName": "web"}],
                "BlockDeviceMappings": [
                    {"DeviceName": "/dev/xvda", "Ebs": {"VolumeId": "vol-root"}},
                    {"DeviceName": "/dev/sdb", "VirtualName": "ephemeral0"},
                ],
                "NetworkInterfaces": [{"NetworkInterfaceId": "eni-1"}],
            }
        )

        assert details.state == "running"
        assert details.iam_profile_arn == "arn:aws:iam::1:instance-profile/web"
        assert details.security_group_ids == ["sg-1"]
        assert details.volume_ids == ["vol-root"]
        assert details.network_interface_ids == ["eni-1"]
        assert details.ip_addresses == ["3.3.3.3", "10.0.0.5"]

    def test_from_api_without_optional_fields(self) -> None:
        """Test a minimal instance has no profile and no public address."""
        details = InstanceDetails.from_api({"InstanceId": "i-1", "State": {"Name": "stopped"}})

        assert details.iam_profile_arn is None
        assert details.public_ip is None
        assert details.ip_addresses == []

    def test_handle_str(self) -> None:
        assert str(InstanceHandle("i-1", "us-east-1")) == "i-1 (us-east-1)"
