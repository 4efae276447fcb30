"""Business-time clock.

All "today" windows are computed in the business time zone. MongoDB hands
back UTC datetimes, so every stored timestamp goes through ``as_local``
before it is compared against a window.
"""
from datetime import date, datetime, time
from typing import Optional, Tuple, Union

import pytz

from freshsip.core.exceptions import InvalidInputError


class Clock:
    """Wall clock bound to a time zone."""

    def __init__(self, tz_name: str = "UTC"):
        try:
            self.tz = pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown time zone: {tz_name}")

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def as_local(self, value: datetime) -> datetime:
        """Convert a datetime to the business zone; naive values are UTC."""
        if value.tzinfo is None:
            value = pytz.UTC.localize(value)
        return value.astimezone(self.tz)

    def localize(self, value: datetime) -> datetime:
        """Attach the business zone to a naive client-supplied timestamp."""
        if value.tzinfo is None:
            return self.tz.localize(value)
        return value

    def day_bounds(self, day: Optional[Union[date, datetime]] = None) -> Tuple[datetime, datetime]:
        """Start and end (inclusive) of a calendar day in the business zone."""
        if day is None:
            day = self.now().date()
        elif isinstance(day, datetime):
            day = self.as_local(day).date()
        start = self.tz.localize(datetime.combine(day, time.min))
        end = self.tz.localize(datetime.combine(day, time.max))
        return start, end

    def is_within(self, value: Optional[datetime], bounds: Tuple[datetime, datetime]) -> bool:
        if value is None:
            return False
        start, end = bounds
        return start <= self.as_local(value) <= end

    def parse_day(self, raw: Optional[str]) -> date:
        """
        Parse a ``?date=`` query value.

        Accepts ``YYYY-MM-DD`` or a full ISO timestamp (``Z`` suffix allowed);
        a missing value means today.
        """
        if not raw:
            return self.now().date()
        raw = raw.strip()
        try:
            if len(raw) == 10:
                return date.fromisoformat(raw)
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInputError(f"Invalid date: {raw}")
        return self.as_local(parsed).date() if parsed.tzinfo else parsed.date()
