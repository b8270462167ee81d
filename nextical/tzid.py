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

"""Moments qualified with a TZID or VALUE=DATE parameter.

These appear as the parameter-and-value part of EXDATE, DTSTART and DTEND
lines, e.g. "TZID=Europe/Rome:20220106T154000" or "VALUE=DATE:20220106".
"""

import collections
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .moment import (
    DATETIME_FORMAT,
    CalendarMoment,
    MomentParseError,
    string_to_date,
)

TZID_PREFIX = "TZID="
DATE_PREFIX = "VALUE=DATE:"

UTC = ZoneInfo("UTC")


class TzIdFormatError(MomentParseError):
    """Base class for errors in zone-qualified moments."""


class AmbiguousTimeZone(TzIdFormatError):
    """Local time is ambiguous or skipped in its timezone."""

    def __init__(self, text: str) -> None:
        super().__init__(text, "local time is ambiguous or does not exist")


class MissingTZIDToken(TzIdFormatError):
    def __init__(self, text: str) -> None:
        super().__init__(text, "missing TZID= or VALUE=DATE: prefix")


class UnknownTimeZone(TzIdFormatError):
    def __init__(self, text: str, tzid: str) -> None:
        super().__init__(text, f"unknown timezone {tzid!r}")
        self.tzid = tzid


def localize(naive: datetime, zone: tzinfo) -> datetime:
    """Attach a timezone to a naive local time.

    Raises:
      ValueError: if the local time falls in a DST transition
    """
    local = naive.replace(tzinfo=zone)
    if local.utcoffset() != local.replace(fold=1).utcoffset():
        raise ValueError(f"{naive!r} is ambiguous in {zone!r}")
    return local


_TzIdDateTime = collections.namedtuple("_TzIdDateTime", ["time_zone", "date_time"])


class TzIdDateTime(_TzIdDateTime):
    """A moment along with the timezone it was specified in."""

    __slots__ = ()

    @classmethod
    def from_datetime(cls, dt: datetime) -> "TzIdDateTime":
        return cls(UTC, CalendarMoment.timed(dt.astimezone(timezone.utc)))

    @classmethod
    def parse(cls, text: str) -> "TzIdDateTime":
        if text.startswith(TZID_PREFIX):
            tzid, sep, value = text[len(TZID_PREFIX) :].partition(":")
            if not sep:
                raise MomentParseError(text, "missing ':' after TZID")
            try:
                zone = ZoneInfo(tzid)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise UnknownTimeZone(text, tzid) from exc
            if len(value) != 15:
                raise MomentParseError(text, "expected YYYYMMDDTHHMMSS")
            try:
                naive = datetime.strptime(value, DATETIME_FORMAT)
            except ValueError as exc:
                raise MomentParseError(text, str(exc)) from exc
            try:
                local = localize(naive, zone)
            except ValueError as exc:
                raise AmbiguousTimeZone(text) from exc
            return cls(zone, CalendarMoment.timed(local))
        elif text.startswith(DATE_PREFIX):
            day = string_to_date(text[len(DATE_PREFIX) :])
            return cls(UTC, CalendarMoment.whole_day(day))
        else:
            raise MissingTZIDToken(text)

    def __str__(self) -> str:
        if self.date_time.is_whole_day:
            return DATE_PREFIX + str(self.date_time)
        local = self.date_time.as_datetime().astimezone(self.time_zone)
        return f"{TZID_PREFIX}{self.time_zone.key}:{local.strftime(DATETIME_FORMAT)}"
