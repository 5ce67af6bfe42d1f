"""
Time source and calendar-day helpers.

The server evaluates days at a fixed offset (JST, UTC+9). Clients evaluate
in their own local timezone, which is what ``offset_hours=None`` means here.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

JST_OFFSET_HOURS = 9

ONE_DAY = timedelta(days=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_local_date(moment: datetime, offset_hours: Optional[int] = None) -> date:
    """
    Calendar date of ``moment`` at the given UTC offset.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if offset_hours is None:
        return moment.astimezone().date()
    return moment.astimezone(timezone(timedelta(hours=offset_hours))).date()


def get_date_string(moment: Optional[datetime] = None, offset_hours: Optional[int] = None) -> str:
    """
    Date string at the given offset.

    Example:
        >>> get_date_string(datetime(2025, 1, 1, 15, 30, tzinfo=timezone.utc), 9)
        '2025-01-02'
    """
    return to_local_date(moment or _utcnow(), offset_hours).isoformat()


def get_yesterday_date_string(moment: Optional[datetime] = None, offset_hours: Optional[int] = None) -> str:
    """Date string 24 hours before ``moment`` at the given offset."""
    return get_date_string((moment or _utcnow()) - ONE_DAY, offset_hours)


class Clock:
    """Supplies "now" and the configured day-boundary offset."""

    def __init__(
        self,
        offset_hours: Optional[int] = JST_OFFSET_HOURS,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self.offset_hours = offset_hours
        self._now_fn = now_fn or _utcnow

    def now(self) -> datetime:
        moment = self._now_fn()
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)

    def to_local_date(self, moment: datetime) -> date:
        return to_local_date(moment, self.offset_hours)

    def today(self) -> date:
        return self.to_local_date(self.now())

    def yesterday(self) -> date:
        return self.to_local_date(self.now() - ONE_DAY)


class FrozenClock(Clock):
    """Clock pinned to a settable instant (tests, replays)."""

    def __init__(self, moment: datetime, offset_hours: Optional[int] = JST_OFFSET_HOURS):
        super().__init__(offset_hours=offset_hours, now_fn=lambda: self.moment)
        self.moment = moment

    def advance(self, delta: timedelta) -> datetime:
        self.moment = self.moment + delta
        return self.moment
