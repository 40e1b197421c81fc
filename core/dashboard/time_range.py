"""
Time window resolution for dashboard metrics
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

RANGE_MONTHS = {
    "3months": 3,
    "6months": 6,
}
DEFAULT_RANGE = "3months"


@dataclass(frozen=True)
class TimeRange:
    """Window of [start, end] used to filter pull requests.

    ``tz`` is the zone pull request timestamps are read in. None means the
    process's local zone, with the UTC offset in effect on each date.
    """
    start: datetime
    end: datetime
    tz: Optional[tzinfo] = None

    @property
    def start_date(self) -> str:
        """Calendar date of the start in UTC"""
        return self.start.astimezone(timezone.utc).date().isoformat()

    def localize(self, moment: datetime) -> datetime:
        return moment.astimezone(self.tz)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by a number of calendar months.

    Day and time-of-day are kept; a day past the end of the target month
    rolls over into the following month (May 31 minus 3 months is March 3,
    or March 2 in a leap year).
    """
    month_index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(month_index, 12)
    first_of_month = moment.replace(year=year, month=month + 1, day=1)
    return first_of_month + timedelta(days=moment.day - 1)


def resolve_time_range(selector: Optional[str], now: Optional[datetime] = None) -> TimeRange:
    """Resolve a range selector such as "6months" into a TimeRange.

    Unrecognized selectors fall back to three months. ``now`` defaults to
    the local wall-clock time of this process. A naive ``now`` is read as
    local time; an aware one fixes the zone of the whole window.
    """
    months = RANGE_MONTHS.get(selector, RANGE_MONTHS[DEFAULT_RANGE])

    if now is not None and now.tzinfo is not None:
        return TimeRange(start=shift_months(now, -months), end=now, tz=now.tzinfo)

    # month arithmetic on the local wall clock, then each end gets the
    # offset in effect on its own date
    local_now = now if now is not None else datetime.now()
    start = shift_months(local_now, -months).astimezone()
    return TimeRange(start=start, end=local_now.astimezone())
