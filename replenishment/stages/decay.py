"""
Temporal decay: projects snapshot quantities forward to "now".

Sales made between the snapshot (or the freshest channel sync) and now are
estimated from velocity and subtracted. This is an approximation, not a
ledger; no per-transaction deduction is modelled.
"""

import logging
from datetime import datetime
from typing import NamedTuple

from replenishment import utils
from replenishment.schemas import InventorySnapshot, InventorySnapshotItem

logger = logging.getLogger(__name__)


class DecayedQuantities(NamedTuple):
    effective_velocity: float
    total_qty: int
    amazon_qty: int
    threepl_qty: int
    awd_qty: int
    home_qty: int


def effective_data_date(snapshot: InventorySnapshot) -> datetime:
    """Snapshot capture time, or the latest channel sync if one is fresher."""
    latest = snapshot.captured_at
    for channel, synced_at in snapshot.sources.last_sync_per_channel.items():
        if synced_at > latest:
            logger.debug(f"Using {channel} sync ({synced_at.isoformat()}) as data date")
            latest = synced_at
    return latest


def days_elapsed(data_date: datetime, now: datetime) -> int:
    return max(0, utils.whole_days_between(data_date, now))


def effective_velocity(item: InventorySnapshotItem) -> float:
    """Learned velocity takes priority over the raw weekly figure."""
    return item.corrected_vel or item.weekly_vel or 0


def decay_item(item: InventorySnapshotItem, elapsed_days: int) -> DecayedQuantities:
    velocity = effective_velocity(item)
    original_total = max(0, item.on_hand_qty)

    if elapsed_days <= 0:
        return DecayedQuantities(
            effective_velocity=velocity,
            total_qty=original_total,
            amazon_qty=item.amazon_qty,
            threepl_qty=item.threepl_qty,
            awd_qty=item.awd_qty,
            home_qty=item.home_qty,
        )

    daily_velocity = max(0.0, velocity) / 7
    sold_since = utils.round_half_up(daily_velocity * elapsed_days)
    adjusted_total = max(0, original_total - sold_since)
    ratio = adjusted_total / original_total if original_total > 0 else 1

    return DecayedQuantities(
        effective_velocity=velocity,
        total_qty=adjusted_total,
        amazon_qty=utils.round_half_up(item.amazon_qty * ratio),
        threepl_qty=utils.round_half_up(item.threepl_qty * ratio),
        awd_qty=utils.round_half_up(item.awd_qty * ratio),
        home_qty=utils.round_half_up(item.home_qty * ratio),
    )
