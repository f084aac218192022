"""
Snapshot normalization.

The same product can show up once per sales channel, e.g. `ABC` (Amazon) and
`ABCShop` (Shopify). This stage folds those variants into one canonical record
per base SKU.
"""

import logging
import re
from functools import reduce
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple

from replenishment import settings
from replenishment.schemas import InventorySnapshotItem

logger = logging.getLogger(__name__)

_VARIANT_PATTERN = re.compile(
    rf"{re.escape(settings.CHANNEL_VARIANT_SUFFIX)}$", re.IGNORECASE
)


class CanonicalRecord(NamedTuple):
    base_sku: str
    is_variant: bool
    item: InventorySnapshotItem


def base_sku(sku: str) -> str:
    """SKU with the channel-variant suffix removed (original casing kept)."""
    return _VARIANT_PATTERN.sub("", sku.strip())


def canonical_key(sku: str) -> str:
    """Case-insensitive dedup key for a SKU written with or without its suffix."""
    return base_sku(sku).lower()


def is_channel_variant(sku: str) -> bool:
    return bool(_VARIANT_PATTERN.search(sku.strip()))


def _prefer(existing: CanonicalRecord, candidate: CanonicalRecord) -> CanonicalRecord:
    existing_qty = existing.item.on_hand_qty
    candidate_qty = candidate.item.on_hand_qty

    # 1. Stock on hand beats an empty record
    if (candidate_qty > 0) != (existing_qty > 0):
        return candidate if candidate_qty > 0 else existing

    # 2. The suffixed variant is the source of truth
    if candidate.is_variant and not existing.is_variant:
        return candidate

    # 3. More units wins; otherwise first seen stays
    if candidate_qty > existing_qty:
        return candidate
    return existing


def _fold(
    acc: dict[str, CanonicalRecord], item: InventorySnapshotItem
) -> dict[str, CanonicalRecord]:
    if not item.sku or not item.sku.strip():
        logger.debug("Dropping snapshot record without SKU: %r", item.name)
        return acc

    record = CanonicalRecord(
        base_sku=base_sku(item.sku),
        is_variant=is_channel_variant(item.sku),
        item=item,
    )
    key = record.base_sku.lower()
    existing = acc.get(key)
    acc[key] = record if existing is None else _prefer(existing, record)
    return acc


def normalize_snapshot(
    items: Iterable[InventorySnapshotItem],
) -> Mapping[str, CanonicalRecord]:
    """
    Deduplicates channel-variant records.
    Returns a read-only mapping of dedup key -> winning record, in first-seen order.
    """
    canonical = reduce(_fold, items, {})
    logger.debug("Normalized snapshot to %d canonical SKUs", len(canonical))
    return MappingProxyType(canonical)
