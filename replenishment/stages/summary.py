"""
Aggregate figures for the inventory overview, plus the dashboard's
filter/sort helpers for presenting computed items.
"""

from typing import Iterable

import pandas as pd

from replenishment import settings, utils
from replenishment.schemas import ComputedItem, Health, InventorySummary


def summarize(items: Iterable[ComputedItem]) -> InventorySummary:
    items = list(items)
    if not items:
        return InventorySummary()

    df = pd.DataFrame(
        [
            {
                "health": item.health.value,
                "abc_class": item.abc_class.value,
                "cost": item.cost,
                "amazon_qty": item.amazon_qty,
                "threepl_qty": item.threepl_qty,
                "awd_qty": item.awd_qty,
                "home_qty": item.home_qty,
                "inbound_qty": item.inbound_qty,
                "total_qty": item.total_qty,
                "weekly_vel": item.weekly_vel,
                "turnover_rate": item.turnover_rate,
                "sell_through_rate": item.sell_through_rate,
                "annual_carrying_cost": item.annual_carrying_cost,
                "safety_stock": item.safety_stock or 0,
                "alert": item.alert.triggered,
            }
            for item in items
        ]
    )

    units = {}
    values = {}
    for channel in ["amazon", "threepl", "awd", "home"]:
        units[channel] = int(df[f"{channel}_qty"].sum())
        values[channel] = float((df[f"{channel}_qty"] * df["cost"]).sum())
    inbound_units = int(df["inbound_qty"].sum())

    with_turnover = df.loc[df["turnover_rate"] > 0, "turnover_rate"]
    with_sell_through = df.loc[df["sell_through_rate"] > 0, "sell_through_rate"]
    with_velocity = df[df["weekly_vel"] > 0]

    health_counts = df["health"].value_counts().to_dict()

    return InventorySummary(
        sku_count=len(df),
        **{health.value: int(health_counts.get(health.value, 0)) for health in Health},
        total_units=sum(units.values()) + inbound_units,
        total_value=sum(values.values()),
        amazon_units=units["amazon"],
        amazon_value=values["amazon"],
        threepl_units=units["threepl"],
        threepl_value=values["threepl"],
        awd_units=units["awd"],
        awd_value=values["awd"],
        home_units=units["home"],
        home_value=values["home"],
        inbound_units=inbound_units,
        avg_turnover=(
            utils.round_half_up(with_turnover.mean(), 1) if not with_turnover.empty else 0
        ),
        total_carrying_cost=utils.round_half_up(df["annual_carrying_cost"].sum()),
        avg_sell_through=(
            utils.round_half_up(with_sell_through.mean(), 1)
            if not with_sell_through.empty
            else 0
        ),
        in_stock_rate=(
            utils.round_half_up((with_velocity["total_qty"] > 0).mean() * 100, 1)
            if not with_velocity.empty
            else 100
        ),
        total_safety_stock=float(df["safety_stock"].sum()),
        abc_counts={k: int(v) for k, v in df["abc_class"].value_counts().items()},
        alert_count=int(df["alert"].sum()),
    )


def filter_items(
    items: Iterable[ComputedItem], include_zero_stock: bool = False
) -> list[ComputedItem]:
    """By default only SKUs with projected stock are shown."""
    if include_zero_stock:
        return list(items)
    return [item for item in items if item.total_qty > 0]


def sort_items(
    items: Iterable[ComputedItem], column: str = "total_value", descending: bool = True
) -> list[ComputedItem]:
    """
    Orders items for display. Missing dates sort last in ascending order and
    health follows urgency (critical first).
    """
    if column == "health":
        rank = {name: i for i, name in enumerate(settings.HEALTH_ORDER)}
        key = lambda item: rank.get(item.health.value, len(rank))
    elif column in ("stockout_date", "reorder_by_date"):
        key = lambda item: str(getattr(item, column) or "9999")
    elif column == "name":
        key = lambda item: item.name or item.sku
    elif column == "days_of_supply":
        key = lambda item: item.days_of_supply or settings.UNBOUNDED_DAYS
    else:
        key = lambda item: getattr(item, column) or 0
    return sorted(items, key=key, reverse=descending)
