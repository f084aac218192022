from replenishment import settings
from replenishment.schemas import AlertResult, ChannelRules, SkuSettings


def amazon_days_of_supply(amazon_qty: int, amz_weekly_vel: float) -> float:
    if not amz_weekly_vel or amz_weekly_vel <= 0:
        return settings.UNBOUNDED_DAYS
    return amazon_qty / (amz_weekly_vel / 7)


def evaluate_sku_alert(
    sku_settings: SkuSettings,
    total_qty: int,
    amazon_qty: int,
    threepl_qty: int,
    amz_weekly_vel: float,
) -> AlertResult:
    """
    Custom low-stock alerts for one SKU. Any configured threshold that is hit
    raises the alert; thresholds left unset (or 0) are skipped.
    """
    if not sku_settings.alert_enabled:
        return AlertResult()

    reasons = []
    if sku_settings.threepl_alert_qty and threepl_qty <= sku_settings.threepl_alert_qty:
        reasons.append(
            f"3PL stock {threepl_qty} at or below alert level {sku_settings.threepl_alert_qty}"
        )

    if sku_settings.amazon_alert_days:
        amz_days = amazon_days_of_supply(amazon_qty, amz_weekly_vel)
        if amz_days <= sku_settings.amazon_alert_days:
            reasons.append(
                f"Amazon supply {amz_days:.0f} days at or below {sku_settings.amazon_alert_days} days"
            )

    if sku_settings.reorder_point and total_qty <= sku_settings.reorder_point:
        reasons.append(
            f"Total stock {total_qty} at or below reorder point {sku_settings.reorder_point}"
        )

    return AlertResult(triggered=bool(reasons), reasons=reasons)


def evaluate_channel_rules(
    rules: ChannelRules,
    amazon_qty: int,
    threepl_qty: int,
    amz_weekly_vel: float,
    has_activity: bool,
) -> list[str]:
    """Store-wide channel floors; only checked for SKUs that have stock or sales."""
    if not has_activity:
        return []

    reasons = []
    amazon = rules.amazon
    if amazon.alert_enabled and amazon.min_days_of_supply and amz_weekly_vel > 0:
        amz_days = amazon_days_of_supply(amazon_qty, amz_weekly_vel)
        if amz_days < amazon.min_days_of_supply:
            reasons.append(
                f"Amazon supply {amz_days:.0f} days below channel minimum {amazon.min_days_of_supply}"
            )

    threepl = rules.threepl
    if threepl.alert_enabled and threepl.default_qty_threshold and threepl_qty > 0:
        if threepl_qty <= threepl.default_qty_threshold:
            reasons.append(
                f"3PL stock {threepl_qty} at or below channel threshold {threepl.default_qty_threshold}"
            )

    return reasons
