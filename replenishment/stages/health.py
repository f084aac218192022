"""
Days of supply, stockout / reorder timeline and health classification.
"""

from datetime import date, datetime
from typing import NamedTuple, Optional

from replenishment import settings, utils
from replenishment.schemas import Health, HealthThresholds, ResolvedLeadTime


class Timeline(NamedTuple):
    days_of_supply: int
    stockout_date: Optional[date]
    reorder_by_date: Optional[date]
    days_until_must_order: Optional[int]


def days_of_supply(total_qty: int, velocity: float) -> int:
    if velocity <= 0:
        return settings.UNBOUNDED_DAYS
    return utils.round_half_up((total_qty / velocity) * 7)


def health_thresholds(lead_time: ResolvedLeadTime) -> HealthThresholds:
    lt = lead_time.lead_time_days
    return HealthThresholds(
        critical=max(settings.CRITICAL_FLOOR_DAYS, lt),
        low=max(settings.LOW_FLOOR_DAYS, lt + settings.LOW_LEAD_TIME_MARGIN_DAYS),
        overstock=max(
            settings.OVERSTOCK_FLOOR_DAYS,
            lead_time.min_order_weeks * 7 + lead_time.reorder_trigger_days + lt,
        ),
    )


def build_timeline(
    total_qty: int, velocity: float, lead_time: ResolvedLeadTime, now: datetime
) -> Timeline:
    dos = days_of_supply(total_qty, velocity)
    if velocity <= 0 or dos >= settings.UNBOUNDED_DAYS:
        return Timeline(dos, None, None, None)

    must_order_in = dos - lead_time.reorder_trigger_days - lead_time.lead_time_days
    return Timeline(
        days_of_supply=dos,
        stockout_date=utils.add_days(now, dos),
        reorder_by_date=utils.add_days(now, must_order_in),
        days_until_must_order=must_order_in,
    )


def classify_health(
    total_qty: int,
    velocity: float,
    timeline: Timeline,
    thresholds: HealthThresholds,
) -> Health:
    """
    First matching rule wins. Without a sales signal only stock presence is
    judged: nothing on hand is critical, anything on hand is healthy.
    """
    if velocity <= 0:
        return Health.CRITICAL if total_qty <= 0 else Health.HEALTHY

    dos = timeline.days_of_supply
    must_order = timeline.days_until_must_order

    if must_order is not None and must_order < 0:
        return Health.CRITICAL
    if dos < thresholds.critical or (
        must_order is not None and must_order < settings.MUST_ORDER_CRITICAL_DAYS
    ):
        return Health.CRITICAL
    if dos < thresholds.low or (
        must_order is not None and must_order < settings.MUST_ORDER_LOW_DAYS
    ):
        return Health.LOW
    if dos <= thresholds.overstock:
        return Health.HEALTHY
    return Health.OVERSTOCK
