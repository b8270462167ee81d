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

"""Recurrence rules.

Only the subset of https://tools.ietf.org/html/rfc5545, section 3.3.10 that
calendars commonly use is understood. A rule is parsed into one of a fixed set
of shapes, depending on its frequency and BY* parts.
"""

import collections
import enum
import logging
from datetime import tzinfo
from typing import Optional, Union

from .byday import ByDayParseError, parse_byday
from .moment import CalendarMoment, MomentParseError, string_to_date_or_datetime

KNOWN_PARTS = {"INTERVAL", "UNTIL", "COUNT", "BYMONTH", "BYMONTHDAY", "BYDAY"}


class Frequency(enum.Enum):
    YEARLY = "YEARLY"
    MONTHLY = "MONTHLY"
    WEEKLY = "WEEKLY"
    DAILY = "DAILY"


class RRuleParseError(ValueError):
    """Base class for recurrence rule parse errors."""

    def __init__(self, line: str, message: str) -> None:
        super().__init__(f"{message} in recurrence rule {line!r}")
        self.line = line


class MissingFrequency(RRuleParseError):
    def __init__(self, line: str) -> None:
        super().__init__(line, "Missing FREQ")


class UnknownFrequency(RRuleParseError):
    def __init__(self, line: str, frequency: str) -> None:
        super().__init__(line, f"Unsupported frequency {frequency!r}")
        self.frequency = frequency


class MissingByMonthCompanion(RRuleParseError):
    def __init__(self, line: str) -> None:
        super().__init__(line, "BYMONTH without BYMONTHDAY or BYDAY")


class MissingByDayOrByMonthDay(RRuleParseError):
    def __init__(self, line: str) -> None:
        super().__init__(line, "Missing either BYDAY or BYMONTHDAY")


class InvalidRuleValue(RRuleParseError):
    def __init__(self, line: str, name: str, value: str) -> None:
        super().__init__(line, f"Invalid value {value!r} for {name}")
        self.name = name
        self.value = value


class InvalidByDay(RRuleParseError):
    def __init__(self, line: str, error: ByDayParseError) -> None:
        super().__init__(line, str(error))
        self.error = error


_CommonOptions = collections.namedtuple(
    "_CommonOptions", ["raw", "until", "interval", "count"]
)


class CommonOptions(_CommonOptions):
    """Bounds shared by all rule shapes.

    raw is the text given to parse_rrule. For rules read from a calendar
    this is the value as serialized by icalendar, with FREQ first and the
    other parts in its canonical order.
    """

    __slots__ = ()

    @property
    def effective_interval(self) -> int:
        if self.interval is None:
            return 1
        return self.interval


class RecurrenceRule:
    """Accessors shared by all rule shapes.

    Subclasses are named tuples with a common_options field.
    """

    __slots__ = ()

    frequency: Frequency
    common_options: CommonOptions

    @property
    def until(self) -> Optional[CalendarMoment]:
        return self.common_options.until

    @property
    def interval(self) -> int:
        return self.common_options.effective_interval

    @property
    def count(self) -> Optional[int]:
        return self.common_options.count

    def is_expired(self, dt: CalendarMoment) -> bool:
        until = self.common_options.until
        return until is not None and dt > until

    def is_out_of_count(self, count: int) -> bool:
        limit = self.common_options.count
        return limit is not None and count >= limit

    def __str__(self) -> str:
        return self.common_options.raw


class Yearly(RecurrenceRule, collections.namedtuple("Yearly", ["common_options"])):
    __slots__ = ()
    frequency = Frequency.YEARLY


class YearlyByMonthByMonthDay(
    RecurrenceRule,
    collections.namedtuple(
        "YearlyByMonthByMonthDay", ["month", "month_day", "common_options"]
    ),
):
    __slots__ = ()
    frequency = Frequency.YEARLY


class YearlyByMonthByDay(
    RecurrenceRule,
    collections.namedtuple("YearlyByMonthByDay", ["month", "day", "common_options"]),
):
    __slots__ = ()
    frequency = Frequency.YEARLY


class MonthlyByMonthDay(
    RecurrenceRule,
    collections.namedtuple("MonthlyByMonthDay", ["month_day", "common_options"]),
):
    __slots__ = ()
    frequency = Frequency.MONTHLY


class MonthlyByDay(
    RecurrenceRule, collections.namedtuple("MonthlyByDay", ["day", "common_options"])
):
    __slots__ = ()
    frequency = Frequency.MONTHLY


class Weekly(RecurrenceRule, collections.namedtuple("Weekly", ["common_options"])):
    __slots__ = ()
    frequency = Frequency.WEEKLY


class WeeklyByDay(
    RecurrenceRule, collections.namedtuple("WeeklyByDay", ["day", "common_options"])
):
    __slots__ = ()
    frequency = Frequency.WEEKLY


class Daily(RecurrenceRule, collections.namedtuple("Daily", ["common_options"])):
    __slots__ = ()
    frequency = Frequency.DAILY


RRule = Union[
    Yearly,
    YearlyByMonthByMonthDay,
    YearlyByMonthByDay,
    MonthlyByMonthDay,
    MonthlyByDay,
    Weekly,
    WeeklyByDay,
    Daily,
]


def _parse_int(line: str, name: str, value: str, minimum: Optional[int] = None) -> int:
    try:
        ret = int(value)
    except ValueError as exc:
        raise InvalidRuleValue(line, name, value) from exc
    if minimum is not None and ret < minimum:
        raise InvalidRuleValue(line, name, value)
    return ret


def _split_parts(line: str, tokens) -> dict[str, str]:
    parts: dict[str, str] = {}
    for token in tokens:
        name, sep, value = token.partition("=")
        if name not in KNOWN_PARTS:
            # This includes WKST, which is accepted but not honoured.
            logging.debug("Ignoring %r in recurrence rule %r", token, line)
            continue
        if not sep:
            raise InvalidRuleValue(line, name, value)
        # The first occurrence of a part wins.
        parts.setdefault(name, value)
    return parts


def parse_rrule(line: str, local_tz: Optional[tzinfo] = None) -> RRule:
    """Parse the value of an RRULE property.

    Args:
      line: Rule text, e.g. "FREQ=WEEKLY;BYDAY=MO,WE;COUNT=4"
      local_tz: Timezone for a floating UNTIL
    Returns: One of the rule shapes
    Raises:
      RRuleParseError: if the rule is malformed or not supported
    """
    tokens = line.split(";")
    if not tokens[0].startswith("FREQ="):
        raise MissingFrequency(line)
    freq = tokens[0][len("FREQ=") :]
    try:
        frequency = Frequency(freq)
    except ValueError as exc:
        raise UnknownFrequency(line, freq) from exc

    parts = _split_parts(line, tokens[1:])

    until = None
    if "UNTIL" in parts:
        try:
            until = string_to_date_or_datetime(parts["UNTIL"], local_tz)
        except MomentParseError as exc:
            raise InvalidRuleValue(line, "UNTIL", parts["UNTIL"]) from exc
    interval = None
    if "INTERVAL" in parts:
        interval = _parse_int(line, "INTERVAL", parts["INTERVAL"], minimum=1)
    count = None
    if "COUNT" in parts:
        count = _parse_int(line, "COUNT", parts["COUNT"], minimum=0)
    by_month = None
    if "BYMONTH" in parts:
        by_month = _parse_int(line, "BYMONTH", parts["BYMONTH"], minimum=1)
        if by_month > 12:
            raise InvalidRuleValue(line, "BYMONTH", parts["BYMONTH"])
    by_month_day = None
    if "BYMONTHDAY" in parts:
        by_month_day = _parse_int(line, "BYMONTHDAY", parts["BYMONTHDAY"])
    by_day = None
    if "BYDAY" in parts:
        try:
            by_day = parse_byday(parts["BYDAY"])
        except ByDayParseError as exc:
            raise InvalidByDay(line, exc) from exc

    common_options = CommonOptions(line, until, interval, count)

    if frequency is Frequency.YEARLY:
        if by_month is None:
            return Yearly(common_options)
        elif by_month_day is not None:
            return YearlyByMonthByMonthDay(by_month, by_month_day, common_options)
        elif by_day is not None:
            return YearlyByMonthByDay(by_month, by_day, common_options)
        else:
            raise MissingByMonthCompanion(line)
    elif frequency is Frequency.MONTHLY:
        if by_month_day is not None:
            return MonthlyByMonthDay(by_month_day, common_options)
        elif by_day is not None:
            return MonthlyByDay(by_day, common_options)
        else:
            raise MissingByDayOrByMonthDay(line)
    elif frequency is Frequency.WEEKLY:
        if by_day is not None:
            return WeeklyByDay(by_day, common_options)
        return Weekly(common_options)
    else:
        return Daily(common_options)
