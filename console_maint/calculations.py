"""Helper functions for next-maintenance calculations."""

from typing import Optional

from dateutil.relativedelta import relativedelta

from .dates import format_date, parse_date


def check_interval(interval_months: Optional[int]) -> Optional[int]:
    """
    Validate a maintenance interval.

    None means no recurring maintenance. Anything else must be a positive
    whole number of months, otherwise ValueError is raised.
    """
    if interval_months is None:
        return None
    if (
        isinstance(interval_months, bool)
        or not isinstance(interval_months, (int, float))
        or int(interval_months) != interval_months
        or interval_months <= 0
    ):
        raise ValueError(
            f"Maintenance interval must be a positive whole number of months, "
            f"got {interval_months!r}"
        )
    return int(interval_months)


def calc_next_due(
    last_maintenance: Optional[str], interval_months: Optional[int]
) -> Optional[str]:
    """
    Calculate next due date: last + interval calendar months.

    The day is clamped to the end of the target month, so 31/01 + 1 month
    lands on 28/02 (or 29/02 in a leap year). Returns None when either
    input is missing; a malformed date raises InvalidDateFormat and a
    non-positive interval raises ValueError.
    """
    interval = check_interval(interval_months)
    if not last_maintenance or interval is None:
        return None
    last = parse_date(last_maintenance)
    return format_date(last + relativedelta(months=interval))
