"""
ABC (Pareto) classification by trailing annualized revenue.

This is the only stage that needs the whole population: an item's class
depends on every other item's revenue, so it runs as one bulk sort.
"""

import logging
from typing import Iterable, Optional

import pandas as pd

from replenishment import settings
from replenishment.schemas import AbcClass

logger = logging.getLogger(__name__)


def annual_revenue(weekly_vel: float, cost: Optional[float]) -> float:
    # Raw weekly velocity on purpose: ranking ignores learned corrections.
    return max(0.0, weekly_vel or 0) * settings.WEEKS_PER_YEAR * max(0.0, cost or 0)


def classify_abc(revenues: Iterable[tuple[str, float]]) -> dict[str, AbcClass]:
    """
    Assigns A/B/C from (key, annual_revenue) pairs.
    Equal revenues are ordered by key so the result never depends on input order.
    """
    df = pd.DataFrame(list(revenues), columns=["key", "revenue"])
    if df.empty:
        return {}

    df = df.sort_values(
        ["revenue", "key"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)

    total_revenue = df["revenue"].sum()
    if total_revenue > 0:
        df["cumulative_pct"] = df["revenue"].cumsum() / total_revenue * 100
    else:
        df["cumulative_pct"] = 100.0

    df["abc_class"] = AbcClass.C.value
    df.loc[df["cumulative_pct"] <= settings.ABC_B_CUTOFF, "abc_class"] = AbcClass.B.value
    df.loc[df["cumulative_pct"] <= settings.ABC_A_CUTOFF, "abc_class"] = AbcClass.A.value

    counts = df["abc_class"].value_counts().to_dict()
    logger.debug(f"ABC split: {counts}")

    return {row.key: AbcClass(row.abc_class) for row in df.itertuples(index=False)}
