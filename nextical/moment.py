# Nextical
# Copyright (C) 2022-2026 Jelmer Vernooĳ <jelmer@jelmer.uk>, et al.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; version 3
# of the License or (at your option) any later version of
# the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
# MA  02110-1301, USA.

"""Calendar moments: whole days and instants.

A moment is either a whole calendar day (DATE values in iCalendar) or a
specific instant, which is always kept in UTC. Arithmetic preserves the kind
of moment; comparisons project whole days to midnight UTC.
"""

import calendar
import enum
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

from dateutil import tz

from .byday import Delta, Weekday, WeekdaySet

DATE_FORMAT = "%Y%m%d"
DATETIME_FORMAT = "%Y%m%dT%H%M%S"

# Longest month; bounds the scan when resolving ordinal weekdays.
MAX_MONTH_SCAN = 31


class MomentParseError(ValueError):
    """Malformed DATE or DATE-TIME text."""

    def __init__(self, text: str, reason: Optional[str] = None) -> None:
        if reason:
            message = f"Unable to parse {text!r}: {reason}"
        else:
            message = f"Unable to parse {text!r}"
        super().__init__(message)
        self.text = text


class ConstructingTimedFromWholeDay(ValueError):
    def __init__(self) -> None:
        super().__init__(
            "Cannot construct a timed moment by substituting the time of a whole day"
        )


class IllegalInterval(ValueError):
    """Interval that starts at the reference but ends before it."""

    def __init__(self, start, end) -> None:
        super().__init__(f"Start {start!r} cannot be after end {end!r}")
        self.start = start
        self.end = end


class EventOverlap(enum.Enum):
    """How an interval relates to a reference moment."""

    FINISHES_PAST = "finishes-past"
    STARTS_PAST_ENDS_SAME_DAY = "starts-past-ends-same-day"
    STARTS_PAST_ENDS_FUTURE = "starts-past-ends-future"
    START_SAME_DAY_ENDS_SAME_DAY = "start-same-day-ends-same-day"
    STARTS_SAME_DAY_ENDS_FUTURE = "starts-same-day-ends-future"
    STARTS_FUTURE = "starts-future"


# Keyed by (start vs reference, end vs reference).
_OVERLAPS = {
    (-1, -1): EventOverlap.FINISHES_PAST,
    (-1, 0): EventOverlap.STARTS_PAST_ENDS_SAME_DAY,
    (-1, 1): EventOverlap.STARTS_PAST_ENDS_FUTURE,
    (0, 0): EventOverlap.START_SAME_DAY_ENDS_SAME_DAY,
    (0, 1): EventOverlap.STARTS_SAME_DAY_ENDS_FUTURE,
    (1, -1): EventOverlap.STARTS_FUTURE,
    (1, 0): EventOverlap.STARTS_FUTURE,
    (1, 1): EventOverlap.STARTS_FUTURE,
}


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


class CalendarMoment:
    """A whole calendar day or an instant in UTC.

    Instances are immutable; all operations return new moments.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[date, datetime]) -> None:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise ValueError(f"Timed moment needs an aware datetime: {value!r}")
            value = value.astimezone(timezone.utc)
        elif not isinstance(value, date):
            raise TypeError(value)
        self._value = value

    @classmethod
    def whole_day(cls, d: date) -> "CalendarMoment":
        if isinstance(d, datetime):
            d = d.date()
        return cls(d)

    @classmethod
    def timed(cls, dt: datetime) -> "CalendarMoment":
        if not isinstance(dt, datetime):
            raise TypeError(dt)
        return cls(dt)

    @property
    def value(self) -> Union[date, datetime]:
        return self._value

    @property
    def is_whole_day(self) -> bool:
        return not isinstance(self._value, datetime)

    @property
    def year(self) -> int:
        return self._value.year

    @property
    def month(self) -> int:
        return self._value.month

    @property
    def day(self) -> int:
        return self._value.day

    @property
    def hour(self) -> int:
        if self.is_whole_day:
            return 0
        return self._value.hour

    @property
    def minute(self) -> int:
        if self.is_whole_day:
            return 0
        return self._value.minute

    @property
    def second(self) -> int:
        if self.is_whole_day:
            return 0
        return self._value.second

    @property
    def weekday(self) -> Weekday:
        return Weekday(self._value.weekday())

    def as_date(self) -> date:
        if self.is_whole_day:
            return self._value
        return self._value.date()

    def as_datetime(self) -> datetime:
        """Project onto an instant; whole days map to midnight UTC."""
        if self.is_whole_day:
            return datetime.combine(self._value, time(), tzinfo=timezone.utc)
        return self._value

    def equals_date(self, d: date) -> bool:
        if self.is_whole_day:
            return self._value == d
        return self._value == datetime.combine(d, time(), tzinfo=timezone.utc)

    def equals_date_time(self, dt: datetime) -> bool:
        return self.as_datetime() == dt

    def substitute(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[int] = None,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        second: Optional[int] = None,
    ) -> "CalendarMoment":
        """Replace some of the fields of this moment.

        Fields that are not given are inherited. A whole day has no time of
        day, so asking for one raises ConstructingTimedFromWholeDay rather
        than inventing one.
        """
        new_date = dict(
            year=self.year if year is None else year,
            month=self.month if month is None else month,
            day=self.day if day is None else day,
        )
        if self.is_whole_day:
            if hour is not None or minute is not None or second is not None:
                raise ConstructingTimedFromWholeDay()
            return CalendarMoment(self._value.replace(**new_date))
        return CalendarMoment(
            self._value.replace(
                hour=self.hour if hour is None else hour,
                minute=self.minute if minute is None else minute,
                second=self.second if second is None else second,
                **new_date,
            )
        )

    def substitute_time_with(self, other: "CalendarMoment") -> "CalendarMoment":
        """Take the time of day from other, if it has one."""
        if other.is_whole_day:
            return self
        return CalendarMoment(
            datetime.combine(self.as_date(), other.as_datetime().timetz())
        )

    def _with_date(self, year: int, month: int, day: int) -> "CalendarMoment":
        return CalendarMoment(self._value.replace(year=year, month=month, day=day))

    def increment_month(self, increment: int) -> "CalendarMoment":
        """Move forward by a number of months, keeping the day of month.

        If the target month is too short for the day, the following months
        are tried until one contains it; the day is never clamped.
        """
        months = self.month - 1 + increment
        year = self.year + months // 12
        month = months % 12 + 1
        while self.day > calendar.monthrange(year, month)[1]:
            month += 1
            if month > 12:
                month = 1
                year += 1
        return self._with_date(year, month, self.day)

    def increment_year(self, increment: int) -> "CalendarMoment":
        year = self.year + increment
        if (self.month, self.day) == (2, 29) and not calendar.isleap(year):
            return self._with_date(year, 3, 1)
        return self._with_date(year, self.month, self.day)

    def succ_day(self) -> "CalendarMoment":
        return self + timedelta(days=1)

    def next_weekday(self, weekday: Weekday) -> "CalendarMoment":
        return self.next_weekdays([weekday])

    def next_weekdays(self, weekdays) -> "CalendarMoment":
        """Find the first later day that falls on one of weekdays."""
        wanted = set(weekdays)
        if not wanted:
            raise ValueError("No weekdays given")
        candidate = self
        for _ in range(7):
            candidate = candidate.succ_day()
            if candidate.weekday in wanted:
                return candidate
        raise AssertionError(f"no day in {wanted!r} found in a week")

    def month_start(self) -> "CalendarMoment":
        return self.substitute(day=1)

    def month_end(self) -> "CalendarMoment":
        return self.substitute(day=calendar.monthrange(self.year, self.month)[1])

    def resolve_ordinal(self, delta: Delta) -> Optional["CalendarMoment"]:
        """Find the n-th weekday within the month of this moment.

        Positive ordinals count from the start of the month, negative ones
        from its end. The time of day is kept.

        Returns: the matching moment, or None if the month has no such day
        """
        if delta.delta == 0:
            raise ValueError("Ordinal must not be zero")
        if delta.delta > 0:
            current = self.month_start()
            step = timedelta(days=1)
        else:
            current = self.month_end()
            step = timedelta(days=-1)
        remaining = abs(delta.delta)
        for _ in range(MAX_MONTH_SCAN):
            if current.month != self.month:
                break
            if current.weekday == delta.weekday:
                remaining -= 1
                if remaining == 0:
                    return current
            current = current + step
        return None

    def next_by_day(self, by_day) -> Optional["CalendarMoment"]:
        if isinstance(by_day, Delta):
            return self.resolve_ordinal(by_day)
        elif isinstance(by_day, WeekdaySet):
            return self.next_weekdays(by_day.weekdays)
        else:
            raise TypeError(by_day)

    def intersects(
        self, start: "CalendarMoment", end: "CalendarMoment"
    ) -> EventOverlap:
        """Classify the interval [start, end] against this moment."""
        return classify_overlap(self, start, end)

    def __add__(self, other):
        if not isinstance(other, timedelta):
            return NotImplemented
        return CalendarMoment(self._value + other)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, timedelta):
            return CalendarMoment(self._value - other)
        if isinstance(other, CalendarMoment):
            return self.as_datetime() - other.as_datetime()
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, CalendarMoment):
            return NotImplemented
        return self.is_whole_day == other.is_whole_day and self._value == other._value

    def __hash__(self) -> int:
        return hash((self.is_whole_day, self._value))

    def __lt__(self, other):
        if not isinstance(other, CalendarMoment):
            return NotImplemented
        return self.as_datetime() < other.as_datetime()

    def __le__(self, other):
        if not isinstance(other, CalendarMoment):
            return NotImplemented
        return self.as_datetime() <= other.as_datetime()

    def __gt__(self, other):
        if not isinstance(other, CalendarMoment):
            return NotImplemented
        return self.as_datetime() > other.as_datetime()

    def __ge__(self, other):
        if not isinstance(other, CalendarMoment):
            return NotImplemented
        return self.as_datetime() >= other.as_datetime()

    def __repr__(self) -> str:
        if self.is_whole_day:
            return f"{self.__class__.__name__}.whole_day({self._value!r})"
        return f"{self.__class__.__name__}.timed({self._value!r})"

    def __str__(self) -> str:
        if self.is_whole_day:
            return self._value.strftime(DATE_FORMAT)
        return self._value.strftime(DATETIME_FORMAT) + "Z"


def classify_overlap(
    reference: CalendarMoment, start: CalendarMoment, end: CalendarMoment
) -> EventOverlap:
    """Classify an interval against a reference moment.

    A whole-day reference compares dates only; a timed reference compares
    instants, treating whole-day endpoints as their midnight.

    Raises:
      IllegalInterval: if the interval starts at the reference but ends
        before it
    """
    if reference.is_whole_day:
        ref = reference.as_date()
        key = (_cmp(start.as_date(), ref), _cmp(end.as_date(), ref))
    else:
        ref = reference.as_datetime()
        key = (_cmp(start.as_datetime(), ref), _cmp(end.as_datetime(), ref))
    try:
        return _OVERLAPS[key]
    except KeyError:
        raise IllegalInterval(start, end) from None


def current_local_offset() -> tzinfo:
    """Return the current UTC offset of the process as a fixed timezone."""
    offset = datetime.now(tz.tzlocal()).utcoffset()
    return timezone(offset)


def string_to_date(text: str) -> date:
    if len(text) != 8:
        raise MomentParseError(text, "expected YYYYMMDD")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise MomentParseError(text, str(exc)) from exc


def string_to_datetime(text: str, local_tz: Optional[tzinfo] = None) -> datetime:
    """Parse a DATE-TIME into an aware UTC datetime.

    Args:
      text: YYYYMMDDTHHMMSS, optionally followed by Z for UTC
      local_tz: Timezone for floating times; defaults to the current
        local offset of the process
    """
    utc = text.endswith("Z")
    body = text[:-1] if utc else text
    if len(body) != 15:
        raise MomentParseError(text, "expected YYYYMMDDTHHMMSS")
    try:
        naive = datetime.strptime(body, DATETIME_FORMAT)
    except ValueError as exc:
        raise MomentParseError(text, str(exc)) from exc
    if utc:
        return naive.replace(tzinfo=timezone.utc)
    if local_tz is None:
        local_tz = current_local_offset()
    return naive.replace(tzinfo=local_tz).astimezone(timezone.utc)


def string_to_date_or_datetime(
    text: str, local_tz: Optional[tzinfo] = None
) -> CalendarMoment:
    """Parse an iCalendar DATE or DATE-TIME value.

    Eight characters make a whole day; anything else must be a DATE-TIME.
    """
    if len(text) == 8:
        return CalendarMoment(string_to_date(text))
    return CalendarMoment(string_to_datetime(text, local_tz))
