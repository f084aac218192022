"""
Supply-chain KPIs per item. Every ratio is guarded so a missing cost or
velocity yields 0 (or the 999 sentinel for day/week based metrics).
"""

import math
from typing import NamedTuple, Optional

from replenishment import settings, utils


class SupplyChainKpis(NamedTuple):
    total_value: float
    turnover_rate: float
    annual_carrying_cost: float
    eoq: int
    sell_through_rate: float
    weeks_of_supply: float
    stock_to_sales_ratio: float
    stockout_risk: float


def stockout_risk_score(
    days_of_supply: int, lead_time_days: int, cv: float
) -> int:
    """0-100 score from days-of-supply coverage of the lead time, inflated by demand variability."""
    ratio = days_of_supply / max(lead_time_days, 1)
    score = settings.STOCKOUT_RISK_FLOOR
    for upper_bound, band_score in settings.STOCKOUT_RISK_BANDS:
        if ratio < upper_bound:
            score = band_score
            break
    score = utils.round_half_up(score + max(0.0, cv or 0) * settings.STOCKOUT_RISK_CV_WEIGHT)
    return min(100, max(0, score))


def compute_kpis(
    total_qty: int,
    weekly_vel: float,
    cost: Optional[float],
    days_of_supply: int,
    lead_time_days: int,
    cv: float = 0,
    precomputed_stockout_risk: Optional[float] = None,
) -> SupplyChainKpis:
    cost = max(0.0, cost or 0)
    weekly_vel = max(0.0, weekly_vel or 0)

    item_value = total_qty * cost
    annual_demand_units = weekly_vel * settings.WEEKS_PER_YEAR
    annual_demand_cost = annual_demand_units * cost

    turnover_rate = (
        utils.round_half_up(annual_demand_cost / item_value, 1) if item_value > 0 else 0
    )
    annual_carrying_cost = utils.round_half_up(item_value * settings.CARRYING_COST_RATE, 2)

    # EOQ = sqrt(2 * D * S / H)
    holding_cost_per_unit = cost * settings.CARRYING_COST_RATE
    if holding_cost_per_unit > 0 and annual_demand_units > 0:
        eoq = math.ceil(
            math.sqrt(
                2 * annual_demand_units * settings.ORDER_FIXED_COST / holding_cost_per_unit
            )
        )
    else:
        eoq = 0

    monthly_units_sold = weekly_vel * settings.WEEKS_PER_MONTH
    sell_through_base = monthly_units_sold + total_qty
    sell_through_rate = (
        utils.round_half_up(monthly_units_sold / sell_through_base * 1000) / 10
        if sell_through_base > 0
        else 0
    )

    weeks_of_supply = (
        utils.round_half_up(total_qty / weekly_vel, 1)
        if weekly_vel > 0
        else settings.UNBOUNDED_DAYS
    )
    stock_to_sales_ratio = (
        utils.round_half_up(total_qty / monthly_units_sold, 1)
        if monthly_units_sold > 0
        else settings.UNBOUNDED_DAYS
    )

    if precomputed_stockout_risk is not None:
        stockout_risk = precomputed_stockout_risk
    elif weekly_vel > 0:
        stockout_risk = stockout_risk_score(days_of_supply, lead_time_days, cv)
    else:
        stockout_risk = 0

    return SupplyChainKpis(
        total_value=item_value,
        turnover_rate=turnover_rate,
        annual_carrying_cost=annual_carrying_cost,
        eoq=eoq,
        sell_through_rate=sell_through_rate,
        weeks_of_supply=weeks_of_supply,
        stock_to_sales_ratio=stock_to_sales_ratio,
        stockout_risk=stockout_risk,
    )
