"""
Pytest configuration and shared fixtures for all tests.
A fixed clock keeps every projection deterministic.
"""

from datetime import datetime, timedelta, timezone

import pytest

from replenishment.schemas import (
    InventorySnapshot,
    InventorySnapshotItem,
    LeadTimeSettings,
    SnapshotSources,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item():
    """Builds a snapshot record; any field can be overridden by keyword."""

    def _make(sku="SKU-A", **fields):
        return InventorySnapshotItem(sku=sku, **fields)

    return _make


@pytest.fixture
def make_snapshot(now):
    """Builds a snapshot captured `days_old` days before the fixed clock."""

    def _make(items, days_old=0, syncs=None):
        return InventorySnapshot(
            items=items,
            captured_at=now - timedelta(days=days_old),
            sources=SnapshotSources(last_sync_per_channel=syncs or {}),
        )

    return _make


@pytest.fixture
def default_settings():
    return LeadTimeSettings()


@pytest.fixture
def snapshot_json(now):
    """Raw snapshot as the sync subsystem writes it (camelCase keys)."""
    return {
        "capturedAt": (now - timedelta(days=7)).isoformat(),
        "sources": {"lastPackiyoSync": None, "lastAmazonSync": None},
        "items": [
            {
                "sku": "SKU-A",
                "name": "Kids Gummies 60ct",
                "amazonQty": 300,
                "threeplQty": 200,
                "weeklyVel": 70,
                "cost": 10,
            },
            {"sku": "ABC", "name": "Daily Vitamins", "amazonQty": 0, "weeklyVel": 5, "cost": 4},
            {"sku": "ABCShop", "name": "Daily Vitamins", "threeplQty": 120, "weeklyVel": 5, "cost": 4},
            {"sku": "", "name": "Orphan row", "amazonQty": 9},
        ],
    }
