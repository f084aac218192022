"""
Lead-time resolution: per-SKU override -> category -> global setting -> library default.
"""

import logging
import re
from typing import Generic, Iterable, Mapping, NamedTuple, Optional, TypeVar

from replenishment import settings
from replenishment.schemas import (
    CategoryLeadTime,
    InventorySnapshotItem,
    LeadTimeSettings,
    ResolvedLeadTime,
    SkuSettings,
)
from replenishment.stages.normalizer import canonical_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _first_set(*values: Optional[int]) -> Optional[int]:
    # Zero means "not configured" in the settings store.
    for value in values:
        if value:
            return value
    return None


class SkuKeyIndex(Generic[T]):
    """
    Settings keyed by SKU, looked up by exact key first and then by any key
    that matches once suffix and case are ignored (first key seen wins).
    """

    def __init__(self, mapping: Mapping[str, T]):
        self._exact = mapping
        self._canonical: dict[str, T] = {}
        for key, value in mapping.items():
            self._canonical.setdefault(canonical_key(key), value)

    def get(self, sku: str) -> Optional[T]:
        if sku in self._exact:
            return self._exact[sku]
        return self._canonical.get(canonical_key(sku))


class SettingsIndex(NamedTuple):
    sku_settings: SkuKeyIndex[SkuSettings]
    sku_categories: SkuKeyIndex[str]


def build_settings_index(config: LeadTimeSettings) -> SettingsIndex:
    """Indexes the per-SKU maps once so each item lookup is constant time."""
    return SettingsIndex(
        sku_settings=SkuKeyIndex(config.sku_settings),
        sku_categories=SkuKeyIndex(config.sku_categories),
    )


def sku_settings_for(
    sku: str, config: LeadTimeSettings, index: Optional[SettingsIndex] = None
) -> SkuSettings:
    index = index or build_settings_index(config)
    return index.sku_settings.get(sku) or SkuSettings()


def category_for(
    sku: str, config: LeadTimeSettings, index: Optional[SettingsIndex] = None
) -> Optional[str]:
    index = index or build_settings_index(config)
    return index.sku_categories.get(sku) or None


def resolve_lead_time(
    sku: str,
    config: LeadTimeSettings,
    index: Optional[SettingsIndex] = None,
    sku_override: Optional[SkuSettings] = None,
) -> ResolvedLeadTime:
    index = index or build_settings_index(config)
    if sku_override is None:
        sku_override = sku_settings_for(sku, config, index)
    category_name = category_for(sku, config, index)
    category = config.category_lead_times.get(category_name) if category_name else None
    category = category or CategoryLeadTime()

    if sku_override.lead_time:
        source = "sku"
    elif category.lead_time_days:
        source = "category"
    else:
        source = "default"

    return ResolvedLeadTime(
        lead_time_days=_first_set(
            sku_override.lead_time,
            category.lead_time_days,
            config.default_lead_time_days,
            settings.DEFAULT_LEAD_TIME_DAYS,
        ),
        reorder_trigger_days=_first_set(
            category.reorder_trigger_days,
            config.reorder_trigger_days,
            settings.DEFAULT_REORDER_TRIGGER_DAYS,
        ),
        min_order_weeks=_first_set(
            category.min_order_weeks,
            config.min_order_weeks,
            settings.DEFAULT_MIN_ORDER_WEEKS,
        ),
        source=source,
    )


def auto_categorize(
    items: Iterable[InventorySnapshotItem], config: LeadTimeSettings
) -> dict[str, str]:
    """
    Suggests categories for SKUs that have none, by matching category-name
    keywords against the product name. Returns the full, updated
    sku -> category mapping; the input settings are left untouched.
    """
    assignments = dict(config.sku_categories)
    categories = list(config.category_lead_times)
    if not categories:
        return assignments

    assigned = 0
    for item in items:
        if not item.sku or item.sku in assignments:
            continue
        product_name = (item.name or item.sku).lower()
        for category in categories:
            keywords = [w for w in re.split(r"[\s&]+", category.lower()) if len(w) > 2]
            if any(keyword in product_name for keyword in keywords):
                assignments[item.sku] = category
                assigned += 1
                break

    logger.info(f"Auto-assigned {assigned} SKUs to categories")
    return assignments
