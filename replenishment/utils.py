import math
from datetime import date, datetime, timedelta, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def as_utc(value: datetime) -> datetime:
    """Treats naive datetimes as UTC so snapshot, sync and clock values compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of complete days from `start` to `end` (negative if `end` is earlier)."""
    elapsed = (as_utc(end) - as_utc(start)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


def add_days(moment: datetime, days: int) -> date:
    """Calendar date `days` after `moment` (before it, for negative values)."""
    return (as_utc(moment) + timedelta(days=days)).date()


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Rounds .5 away from zero on the positive side, like the dashboard does.
    Python's round() uses banker's rounding, which would make 42.5 -> 42.
    """
    factor = 10**digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def get_date_suffix_for_filename(moment: datetime) -> str:
    """Returns the run date as a YYYY-MM-DD string for filenames."""
    return moment.strftime("%Y-%m-%d")
