"""Selection of the dates a run has to collect.

GitHub keeps per-day traffic for a trailing 14-day window. The newest days
are still accumulating, so a run targets dates old enough to be final but
young enough to still be inside the window.
"""

from collections.abc import Collection
from datetime import date, timedelta

WINDOW_DAYS = 14
BACKFILL_LAG_DAYS = 2

LOCAL_OFFSET_DAYS = 13
SCHEDULED_OFFSET_DAYS = 1


def offset_date(now: date, days: int) -> str:
    """ISO date ``days`` before ``now``."""
    return (now - timedelta(days=days)).isoformat()


def backfill_dates(
    now: date,
    window_days: int = WINDOW_DAYS,
    lag_days: int = BACKFILL_LAG_DAYS,
) -> list[str]:
    """Dates collected on a first run, ascending.

    With the defaults this is ``now - 15`` through ``now - 2``.

    Args:
        now: Current date.
        window_days: Number of days to collect.
        lag_days: Offset of the newest collected day.

    Returns:
        ISO dates, oldest first.
    """
    newest = lag_days
    oldest = lag_days + window_days - 1
    return [offset_date(now, days) for days in range(oldest, newest - 1, -1)]


def select_dates(
    existing_dates: Collection[str] | None,
    now: date,
    offset_days: int,
    backfill: bool = True,
    force: bool = False,
) -> list[str]:
    """Decide which dates this run collects.

    Args:
        existing_dates: Date columns of the prior dataset, or None when there
            is no prior dataset.
        now: Current date.
        offset_days: Fixed offset of the incremental target date.
        backfill: On a first run, collect the whole window instead of a
            single date.
        force: Re-collect the target date even when already stored.

    Returns:
        Ascending ISO dates; empty when the target date is already stored.
    """
    if existing_dates is None:
        if backfill:
            return backfill_dates(now)
        return [offset_date(now, offset_days)]

    target = offset_date(now, offset_days)
    if target in existing_dates and not force:
        return []
    return [target]
