"""Report period windows"""

from datetime import datetime, timedelta
from typing import Tuple

from dateutil.relativedelta import relativedelta

REPORT_PERIODS = {
    "reportDaily": "daily",
    "reportWeekly": "weekly",
    "reportMonthly": "monthly",
}


def report_window(period: str, now: datetime) -> Tuple[datetime, datetime]:
    """
    [start, end) window for a report.

    - daily: today 00:00 until tomorrow 00:00
    - weekly: from 7 days before now until tomorrow 00:00
    - monthly: 1st of this month 00:00 until 1st of next month 00:00
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "daily":
        return midnight, midnight + timedelta(days=1)
    if period == "weekly":
        return now - timedelta(days=7), midnight + timedelta(days=1)
    if period == "monthly":
        month_start = midnight.replace(day=1)
        return month_start, month_start + relativedelta(months=1)

    raise ValueError(f"Unknown report period: {period}")
