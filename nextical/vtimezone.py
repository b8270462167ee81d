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

"""VTIMEZONE components."""

import collections
import logging
from datetime import date, datetime, timedelta

from icalendar.cal import Component

from .event import MissingProperty
from .rrule import RRuleParseError, parse_rrule

OFFSET_KINDS = ("STANDARD", "DAYLIGHT")
OFFSET_PROPERTIES = {"TZNAME", "TZOFFSETFROM", "TZOFFSETTO", "DTSTART", "RRULE"}

VTimezoneOffset = collections.namedtuple(
    "VTimezoneOffset",
    ["kind", "tz_name", "tz_offset_from", "tz_offset_to", "dt_start", "rrule"],
)


class VTimezoneFormatError(ValueError):
    def __init__(self, tz_id: str, error: Exception) -> None:
        super().__init__(f"Invalid timezone {tz_id!r}: {error}")
        self.tz_id = tz_id
        self.error = error


def format_utc_offset(offset: timedelta) -> str:
    """Format a UTC offset the way TZOFFSETFROM and TZOFFSETTO are written.

    Seconds are only included when non-zero, e.g. "+0100" or "-001712".
    """
    sign = "-" if offset < timedelta(0) else "+"
    minutes, seconds = divmod(abs(int(offset.total_seconds())), 60)
    hours, minutes = divmod(minutes, 60)
    if seconds:
        return f"{sign}{hours:02d}{minutes:02d}{seconds:02d}"
    return f"{sign}{hours:02d}{minutes:02d}"


def _offset_from_component(tz_id: str, comp: Component) -> VTimezoneOffset:
    for required in ("TZOFFSETFROM", "TZOFFSETTO", "DTSTART"):
        if required not in comp:
            raise MissingProperty(required)
    for name in comp:
        if name not in OFFSET_PROPERTIES:
            logging.debug("Ignoring %s in %s of timezone %s", name, comp.name, tz_id)
    dt_start = comp["DTSTART"].dt
    if isinstance(dt_start, datetime):
        dt_start = dt_start.date()
    assert isinstance(dt_start, date)
    rrule = None
    if "RRULE" in comp:
        try:
            rrule = parse_rrule(comp["RRULE"].to_ical().decode("utf-8"))
        except RRuleParseError as exc:
            raise VTimezoneFormatError(tz_id, exc) from exc
    tz_name = comp.get("TZNAME")
    return VTimezoneOffset(
        kind=comp.name,
        tz_name=None if tz_name is None else str(tz_name),
        tz_offset_from=format_utc_offset(comp["TZOFFSETFROM"].td),
        tz_offset_to=format_utc_offset(comp["TZOFFSETTO"].td),
        dt_start=dt_start,
        rrule=rrule,
    )


class VTimezone:
    """Timezone definition embedded in a calendar."""

    def __init__(self, tz_id: str, offsets=()) -> None:
        self.tz_id = tz_id
        self.offsets = list(offsets)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.tz_id!r}, offsets={self.offsets!r})"

    @classmethod
    def from_component(cls, comp: Component) -> "VTimezone":
        try:
            tz_id = str(comp["TZID"])
        except KeyError as exc:
            raise MissingProperty("TZID") from exc
        offsets = []
        for subcomp in comp.subcomponents:
            if subcomp.name not in OFFSET_KINDS:
                logging.debug("Ignoring %s in timezone %s", subcomp.name, tz_id)
                continue
            offsets.append(_offset_from_component(tz_id, subcomp))
        return cls(tz_id, offsets)
