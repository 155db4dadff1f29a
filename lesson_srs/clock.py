"""
Clock providers.

Every operation reads "now" once from a clock and threads the resulting date
through its calculations, so one logical operation never straddles a day
boundary.
"""
from datetime import date, datetime, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from lesson_srs.config import get_settings


class Clock(Protocol):
    tz: ZoneInfo

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock in a fixed calendar timezone"""

    def __init__(self, tz: Optional[str] = None):
        self.tz = ZoneInfo(tz or get_settings().timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given moment (tests, backfills, replays)"""

    def __init__(self, moment, tz: Optional[str] = None):
        self.tz = ZoneInfo(tz or get_settings().timezone)
        if isinstance(moment, datetime):
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            self._moment = moment.astimezone(self.tz)
        else:
            self._moment = datetime(moment.year, moment.month, moment.day, 12, tzinfo=self.tz)

    def now(self) -> datetime:
        return self._moment

    def today(self) -> date:
        return self._moment.date()


def to_local_date(value, tz: ZoneInfo) -> date:
    """Reduce a timestamp to its calendar day in tz. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(tz).date()
    return value
