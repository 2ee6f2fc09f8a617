"""
Date expansion for booking requests.

A request names its dates either explicitly or as a weekly recurrence
(start date, number of occurrences, interval in weeks). Both forms are turned
into one ordered list of calendar dates here; nothing in this module touches
the database or checks availability.
"""

from datetime import date, timedelta
from typing import Optional, Sequence


def weekly_dates(start_date: date, occurrences: int = 1, interval_weeks: int = 1) -> list[date]:
    """`occurrences` dates starting at `start_date`, `interval_weeks` apart."""
    return [start_date + timedelta(weeks=i * interval_weeks) for i in range(occurrences)]


def expand_dates(
    dates: Optional[Sequence[date]] = None,
    start_date: Optional[date] = None,
    occurrences: int = 1,
    interval_weeks: int = 1,
) -> list[date]:
    """
    Resolve a booking request into concrete dates.

    An explicit list is returned as given: order kept, duplicates kept.
    Otherwise the weekly series from `start_date` is generated.
    """
    if dates is not None:
        return list(dates)
    if start_date is None:
        raise ValueError("Either dates or start_date is required")
    return weekly_dates(start_date, occurrences, interval_weeks)
