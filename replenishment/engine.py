"""
Inventory replenishment & health scoring.

`compute_inventory_view` is the single entry point: snapshot + settings + now
in, one `ComputedItem` per canonical SKU out. Nothing here reads the clock,
touches disk or keeps state between calls.
"""

import logging
from datetime import datetime
from typing import NamedTuple

from replenishment import utils
from replenishment.schemas import (
    AbcClass,
    ComputedItem,
    Health,
    HealthThresholds,
    InventoryReport,
    InventorySnapshot,
    LeadTimeSettings,
    ResolvedLeadTime,
    SkuSettings,
)
from replenishment.stages import abc, alerts, decay, health, kpis, lead_time, summary
from replenishment.stages.normalizer import CanonicalRecord, normalize_snapshot

logger = logging.getLogger(__name__)


class _Projection(NamedTuple):
    record: CanonicalRecord
    sku_settings: SkuSettings
    quantities: decay.DecayedQuantities
    resolved: ResolvedLeadTime
    thresholds: HealthThresholds
    timeline: health.Timeline
    status: Health


def _project(
    record: CanonicalRecord,
    config: LeadTimeSettings,
    index: lead_time.SettingsIndex,
    elapsed_days: int,
    now: datetime,
) -> _Projection:
    """Stages 2-4 for a single item."""
    item = record.item
    sku_settings = lead_time.sku_settings_for(item.sku, config, index)
    resolved = lead_time.resolve_lead_time(item.sku, config, index, sku_settings)
    quantities = decay.decay_item(item, elapsed_days)
    thresholds = health.health_thresholds(resolved)
    timeline = health.build_timeline(
        quantities.total_qty, quantities.effective_velocity, resolved, now
    )
    status = health.classify_health(
        quantities.total_qty, quantities.effective_velocity, timeline, thresholds
    )
    return _Projection(record, sku_settings, quantities, resolved, thresholds, timeline, status)


def _finalize(
    projection: _Projection,
    abc_class: AbcClass,
    config: LeadTimeSettings,
    elapsed_days: int,
) -> ComputedItem:
    """Stages 6-7 for a single item, then assembles the output record."""
    record, qty, resolved = projection.record, projection.quantities, projection.resolved
    item = record.item
    timeline = projection.timeline

    metrics = kpis.compute_kpis(
        total_qty=qty.total_qty,
        weekly_vel=item.weekly_vel,
        cost=item.cost,
        days_of_supply=timeline.days_of_supply,
        lead_time_days=resolved.lead_time_days,
        cv=item.cv,
        precomputed_stockout_risk=item.stockout_risk,
    )
    alert = alerts.evaluate_sku_alert(
        projection.sku_settings,
        total_qty=qty.total_qty,
        amazon_qty=qty.amazon_qty,
        threepl_qty=qty.threepl_qty,
        amz_weekly_vel=item.amz_weekly_vel,
    )
    channel_alerts = alerts.evaluate_channel_rules(
        config.channel_rules,
        amazon_qty=qty.amazon_qty,
        threepl_qty=qty.threepl_qty,
        amz_weekly_vel=item.amz_weekly_vel,
        has_activity=qty.total_qty > 0 or qty.effective_velocity > 0,
    )

    return ComputedItem(
        sku=item.sku,
        base_sku=record.base_sku,
        name=item.name,
        cost=max(0.0, item.cost or 0),
        total_qty=qty.total_qty,
        amazon_qty=qty.amazon_qty,
        threepl_qty=qty.threepl_qty,
        awd_qty=qty.awd_qty,
        home_qty=qty.home_qty,
        amazon_inbound=item.amazon_inbound,
        awd_inbound=item.awd_inbound,
        threepl_inbound=item.threepl_inbound,
        inbound_qty=item.inbound_qty,
        weekly_vel=item.weekly_vel,
        amz_weekly_vel=item.amz_weekly_vel,
        shop_weekly_vel=item.shop_weekly_vel,
        corrected_vel=item.corrected_vel,
        effective_velocity=qty.effective_velocity,
        cv=item.cv,
        safety_stock=item.safety_stock,
        seasonal_factor=item.seasonal_factor,
        demand_class=item.demand_class,
        days_of_supply=timeline.days_of_supply,
        stockout_date=timeline.stockout_date,
        reorder_by_date=timeline.reorder_by_date,
        days_until_must_order=timeline.days_until_must_order,
        health=projection.status,
        lead_time=resolved,
        thresholds=projection.thresholds,
        abc_class=abc_class,
        annual_revenue=abc.annual_revenue(item.weekly_vel, item.cost),
        total_value=metrics.total_value,
        turnover_rate=metrics.turnover_rate,
        annual_carrying_cost=metrics.annual_carrying_cost,
        eoq=metrics.eoq,
        sell_through_rate=metrics.sell_through_rate,
        weeks_of_supply=metrics.weeks_of_supply,
        stock_to_sales_ratio=metrics.stock_to_sales_ratio,
        stockout_risk=metrics.stockout_risk,
        alert=alert,
        channel_alerts=channel_alerts,
        snapshot_total_qty=item.on_hand_qty,
        snapshot_amazon_qty=item.amazon_qty,
        snapshot_threepl_qty=item.threepl_qty,
        original_days_of_supply=item.days_of_supply,
        days_elapsed=elapsed_days,
    )


def compute_inventory_view(
    snapshot: InventorySnapshot,
    lead_time_settings: LeadTimeSettings,
    now: datetime,
) -> list[ComputedItem]:
    """
    Runs the full pipeline: normalize -> resolve lead time -> decay -> health
    -> ABC (over all items) -> KPIs -> alerts.
    """
    now = utils.as_utc(now)

    # 1. Normalize
    canonical = normalize_snapshot(snapshot.items)

    # 2-4. Project every item forward
    index = lead_time.build_settings_index(lead_time_settings)
    data_date = decay.effective_data_date(snapshot)
    elapsed_days = decay.days_elapsed(data_date, now)
    projections = [
        _project(record, lead_time_settings, index, elapsed_days, now)
        for record in canonical.values()
    ]

    # 5. ABC needs the complete population
    abc_lookup = abc.classify_abc(
        (key, abc.annual_revenue(p.record.item.weekly_vel, p.record.item.cost))
        for key, p in zip(canonical.keys(), projections)
    )

    # 6-7. KPIs and alerts
    computed = [
        _finalize(
            projection,
            projection.record.item.abc_class or abc_lookup.get(key, AbcClass.C),
            lead_time_settings,
            elapsed_days,
        )
        for key, projection in zip(canonical.keys(), projections)
    ]

    logger.debug(
        f"Computed {len(computed)} items ({elapsed_days} days since {data_date.isoformat()})"
    )
    return computed


def build_inventory_report(
    snapshot: InventorySnapshot,
    lead_time_settings: LeadTimeSettings,
    now: datetime,
) -> InventoryReport:
    """Computed items plus the aggregate summary consumed by exports and alert banners."""
    items = compute_inventory_view(snapshot, lead_time_settings, now)
    data_date = decay.effective_data_date(snapshot)
    return InventoryReport(
        generated_at=utils.as_utc(now),
        effective_data_date=data_date,
        days_elapsed=decay.days_elapsed(data_date, utils.as_utc(now)),
        items=items,
        summary=summary.summarize(items),
    )
