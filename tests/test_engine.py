from datetime import date, timedelta

import pytest

from replenishment.engine import build_inventory_report, compute_inventory_view
from replenishment.schemas import AbcClass, Health, LeadTimeSettings


def test_reference_scenario(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [make_item("SKU-A", amazon_qty=300, threepl_qty=200, weekly_vel=70, cost=10)],
        days_old=7,
    )
    [item] = compute_inventory_view(snapshot, default_settings, now)

    assert item.days_elapsed == 7
    assert item.total_qty == 430
    assert item.amazon_qty == 258
    assert item.threepl_qty == 172
    assert item.days_of_supply == 43
    assert item.days_until_must_order == -31
    assert item.stockout_date == date(2026, 4, 27)
    assert item.reorder_by_date == date(2026, 2, 12)
    assert item.thresholds.critical == 14
    assert item.thresholds.low == 30
    # 43 days would be healthy; the passed reorder date makes it critical
    assert item.health == Health.CRITICAL
    # A lone SKU holds 100% of revenue, past both cut-offs
    assert item.abc_class == AbcClass.C
    assert item.eoq == 661
    # Snapshot values kept for audit
    assert item.snapshot_total_qty == 500
    assert item.snapshot_amazon_qty == 300
    assert item.snapshot_threepl_qty == 200


def test_no_velocity_and_no_stock(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot([make_item("DEAD", total_qty=0, weekly_vel=0)], days_old=3)
    [item] = compute_inventory_view(snapshot, default_settings, now)

    assert item.health == Health.CRITICAL
    assert item.days_of_supply == 999
    assert item.stockout_date is None
    assert item.reorder_by_date is None
    assert item.days_until_must_order is None


def test_channel_variants_collapse_to_one_item(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [make_item("ABC", amazon_qty=0), make_item("ABCShop", threepl_qty=120)]
    )
    items = compute_inventory_view(snapshot, default_settings, now)

    assert len(items) == 1
    assert items[0].sku == "ABCShop"
    assert items[0].base_sku == "ABC"
    assert items[0].total_qty == 120


def test_category_lead_time_flows_into_thresholds(make_item, make_snapshot, now):
    config = LeadTimeSettings.model_validate(
        {
            "categoryLeadTimes": {"Imports": {"leadTimeDays": 40, "reorderTriggerDays": 10}},
            "skuCategories": {"IMP": "Imports"},
        }
    )
    snapshot = make_snapshot([make_item("IMPShop", total_qty=700, weekly_vel=70)])
    [item] = compute_inventory_view(snapshot, config, now)

    assert item.lead_time.lead_time_days == 40
    assert item.lead_time.source == "category"
    assert item.thresholds.critical == 40
    assert item.days_of_supply == 70
    assert item.days_until_must_order == 20
    assert item.health == Health.HEALTHY


def test_fresher_sync_prevents_double_counting(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [make_item("SKU-A", total_qty=500, weekly_vel=70)],
        days_old=7,
        syncs={"packiyo": now - timedelta(hours=6)},
    )
    [item] = compute_inventory_view(snapshot, default_settings, now)
    assert item.days_elapsed == 0
    assert item.total_qty == 500


def test_abc_ranks_on_raw_weekly_velocity(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [
            # Learned velocity is high, raw velocity low
            make_item("LEARNED", total_qty=100, weekly_vel=1, corrected_vel=500, cost=10),
            make_item("RAW", total_qty=100, weekly_vel=40, cost=10),
            make_item("OTHER", total_qty=100, weekly_vel=10, cost=10),
        ]
    )
    items = {i.sku: i for i in compute_inventory_view(snapshot, default_settings, now)}

    assert items["RAW"].abc_class == AbcClass.A
    assert items["LEARNED"].abc_class == AbcClass.C
    assert items["RAW"].annual_revenue == 40 * 52 * 10
    assert items["LEARNED"].annual_revenue == 1 * 52 * 10
    assert items["LEARNED"].effective_velocity == 500


def test_precomputed_abc_class_is_honoured(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [
            make_item("TOP", total_qty=10, weekly_vel=100, cost=10, abc_class="B"),
            make_item("LOW", total_qty=10, weekly_vel=1, cost=1),
        ]
    )
    items = {i.sku: i for i in compute_inventory_view(snapshot, default_settings, now)}
    assert items["TOP"].abc_class == AbcClass.B
    assert items["LOW"].abc_class == AbcClass.C


def test_per_sku_alert_reaches_output(make_item, make_snapshot, now):
    config = LeadTimeSettings.model_validate(
        {"skuSettings": {"SKU-A": {"alertEnabled": True, "reorderPoint": 450}}}
    )
    snapshot = make_snapshot([make_item("SKU-A", total_qty=500, weekly_vel=70)], days_old=7)
    [item] = compute_inventory_view(snapshot, config, now)

    assert item.alert.triggered
    assert item.alert.reasons == ["Total stock 430 at or below reorder point 450"]


def test_blank_skus_never_reach_output(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot([make_item("", amazon_qty=5), make_item("OK", amazon_qty=5)])
    assert [i.sku for i in compute_inventory_view(snapshot, default_settings, now)] == ["OK"]


def test_negative_input_is_clamped(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot([make_item("NEG", total_qty=-20, weekly_vel=-5, cost=-3)], days_old=2)
    [item] = compute_inventory_view(snapshot, default_settings, now)
    assert item.total_qty == 0
    assert item.cost == 0
    assert item.health == Health.CRITICAL


@pytest.mark.parametrize("days_old", [0, 1, 7, 90, 3650])
def test_adjusted_quantities_never_negative(make_item, make_snapshot, default_settings, now, days_old):
    snapshot = make_snapshot(
        [make_item(f"S{v}", total_qty=v * 3, weekly_vel=v, corrected_vel=v * 2) for v in range(0, 200, 7)],
        days_old=days_old,
    )
    assert all(i.total_qty >= 0 for i in compute_inventory_view(snapshot, default_settings, now))


def test_pipeline_is_idempotent(make_item, make_snapshot, now):
    config = LeadTimeSettings.model_validate({"skuSettings": {"B": {"leadTime": 30}}})
    snapshot = make_snapshot(
        [
            make_item("A", total_qty=80, weekly_vel=10, cost=3, cv=0.4),
            make_item("B", total_qty=300, weekly_vel=2, cost=9),
            make_item("BShop", total_qty=0),
            make_item("C", total_qty=0, weekly_vel=4, cost=1),
        ],
        days_old=5,
    )
    first = compute_inventory_view(snapshot, config, now)
    second = compute_inventory_view(snapshot, config, now)
    assert first == second
    assert [i.model_dump() for i in first] == [i.model_dump() for i in second]


def test_report_bundles_items_and_summary(make_item, make_snapshot, default_settings, now):
    snapshot = make_snapshot(
        [make_item("A", amazon_qty=10, weekly_vel=7, cost=2), make_item("B", total_qty=0)],
        days_old=1,
    )
    report = build_inventory_report(snapshot, default_settings, now)

    assert report.days_elapsed == 1
    assert report.effective_data_date == snapshot.captured_at
    assert len(report.items) == 2
    assert report.summary.sku_count == 2
    assert report.summary.critical + report.summary.low + report.summary.healthy + report.summary.overstock == 2
