"""Tests for Inventory model."""

from __future__ import annotations

from ec2_decom.exceptions import PartialDiscoveryFailure
from ec2_decom.models.resource import ResourceKind, ResourceRecord
from tests.fixtures.inventories import create_full_inventory, create_inventory


class TestInventory:
    """Test suite for Inventory model."""

    def test_add_keeps_discovery_order(self) -> None:
        """Test records are returned in the order they were added."""
        inventory = create_inventory(
            [
                ResourceRecord.volume("vol-b"),
                ResourceRecord.alarm("cpu"),
                ResourceRecord.volume("vol-a"),
            ]
        )

        assert [r.identifier for r in inventory.records] == ["vol-b", "cpu", "vol-a"]
        assert [r.identifier for r in inventory.by_kind(ResourceKind.VOLUME)] == ["vol-b", "vol-a"]

    def test_add_ignores_duplicate_kind_and_identifier(self) -> None:
        """Test duplicate (kind, identifier) pairs are not added twice."""
        inventory = create_inventory()

        assert inventory.add(ResourceRecord.volume("vol-1")) is True
        assert inventory.add(ResourceRecord.volume("vol-1", attachment_state="detached")) is False
        assert len(inventory) == 1

    def test_same_identifier_different_kind_is_not_duplicate(self) -> None:
        """Test deduplication is per kind."""
        inventory = create_inventory([ResourceRecord.alarm("shared"), ResourceRecord.association("shared")])

        assert len(inventory) == 2

    def test_mark_skipped_records_warning(self) -> None:
        """Test skipped kinds make the inventory incomplete."""
        inventory = create_inventory()
        assert inventory.is_complete

        inventory.mark_skipped(PartialDiscoveryFailure(ResourceKind.ALARM, "Throttling: Rate exceeded"))

        assert not inventory.is_complete
        assert inventory.skipped_kinds == {ResourceKind.ALARM: "Throttling: Rate exceeded"}
        assert len(inventory.warnings) == 1

    def test_contains(self) -> None:
        inventory = create_inventory([ResourceRecord.volume("vol-1")])

        assert ResourceRecord.volume("vol-1") in inventory
        assert ResourceRecord.volume("vol-2") not in inventory

    def test_kind_counts_and_to_dict(self) -> None:
        """Test summary counts and serialization."""
        inventory = create_full_inventory()
        data = inventory.to_dict()

        assert inventory.kind_counts()["volume"] == 1
        assert data["resource_count"] == 9
        assert data["skipped_kinds"] == {}
        assert data["resources"][0]["identifier"] == "vol-1"
