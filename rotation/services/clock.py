"""
Calendar and clock abstractions.

Every calculator takes its notion of "now" and of calendar days from these
protocols, so tests can pin both the instant and the time zone.
"""

from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime: ...


class Calendar(Protocol):
    """
    Calendar-day semantics in the user's local calendar.

    Day differences count calendar-day boundaries crossed, not elapsed
    24-hour periods: 23:00 to 01:00 the next morning is one day.
    """

    tz: tzinfo

    def local_date(self, instant: datetime) -> date: ...

    def start_of_day(self, instant: datetime) -> date: ...

    def start_of_week(self, day: date) -> date: ...

    def days_between(self, earlier: datetime, later: datetime) -> int: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock frozen at a given instant, advanced explicitly."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware instant")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware instant")
        self._instant = instant


class LocalCalendar:
    """Gregorian calendar in a fixed time zone, ISO weeks starting on Monday."""

    def __init__(self, tz: tzinfo | str = UTC) -> None:
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def local_date(self, instant: datetime) -> date:
        return instant.astimezone(self.tz).date()

    def start_of_day(self, instant: datetime) -> date:
        return self.local_date(instant)

    def start_of_week(self, day: date) -> date:
        return day - timedelta(days=day.isoweekday() - 1)

    def days_between(self, earlier: datetime, later: datetime) -> int:
        return (self.local_date(later) - self.local_date(earlier)).days

    def __repr__(self) -> str:
        return f"LocalCalendar({self.tz!s})"


DEFAULT_CALENDAR = LocalCalendar()
