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

"""Calendar events and their next occurrence."""

import collections
import logging
from datetime import timedelta, tzinfo
from typing import Optional

from icalendar.cal import Component

from .iterator import OccurrenceIterator
from .moment import (
    CalendarMoment,
    EventOverlap,
    MomentParseError,
    string_to_date_or_datetime,
    string_to_datetime,
)
from .rrule import RRule, RRuleParseError, parse_rrule
from .tzid import DATE_PREFIX, TZID_PREFIX, TzIdDateTime

OccurrenceResult = collections.namedtuple(
    "OccurrenceResult", ["occurrence", "event_overlap"]
)


class MissingProperty(Exception):
    def __init__(self, property_name) -> None:
        super().__init__(f"Property {property_name!r} missing")
        self.property_name = property_name


class VEventFormatError(ValueError):
    """A property of an event could not be parsed."""

    def __init__(self, property_name: str, error: Exception) -> None:
        super().__init__(f"Invalid {property_name}: {error}")
        self.property_name = property_name
        self.error = error


class ExpansionLimitReached(Exception):
    """Too many occurrences were expanded without finding a match."""

    def __init__(self, event, limit: int) -> None:
        super().__init__(f"No matching occurrence in first {limit} of {event!r}")
        self.event = event
        self.limit = limit


def _raw_value(prop) -> str:
    return prop.to_ical().decode("utf-8")


def _qualified_values(prop, local_tz: Optional[tzinfo] = None):
    """Convert a DATE/DATE-TIME property into TzIdDateTime values.

    Comma separated lists are split.
    """
    tzid = prop.params.get("TZID")
    is_date = prop.params.get("VALUE") == "DATE"
    for value in _raw_value(prop).split(","):
        if tzid:
            yield TzIdDateTime.parse(f"{TZID_PREFIX}{tzid}:{value}")
        elif is_date or len(value) == 8:
            yield TzIdDateTime.parse(DATE_PREFIX + value)
        else:
            yield TzIdDateTime.from_datetime(string_to_datetime(value, local_tz))


def _moment_from_prop(prop, local_tz: Optional[tzinfo] = None) -> CalendarMoment:
    if prop.params.get("TZID") or prop.params.get("VALUE") == "DATE":
        values = list(_qualified_values(prop, local_tz))
        if len(values) != 1:
            raise MomentParseError(_raw_value(prop), "expected a single value")
        return values[0].date_time
    return string_to_date_or_datetime(_raw_value(prop), local_tz)


def _as_list(value):
    if isinstance(value, list):
        return value
    return [value]


class VEvent:
    """A calendar event, possibly recurring."""

    def __init__(
        self,
        dt_start: CalendarMoment,
        dt_end: Optional[CalendarMoment] = None,
        rrule: Optional[RRule] = None,
        exdates=(),
        summary: Optional[str] = None,
        description: Optional[str] = None,
        uid: Optional[str] = None,
        sequence: Optional[int] = None,
        status: Optional[str] = None,
        organizer: Optional[str] = None,
        dt_created: Optional[CalendarMoment] = None,
        dt_last_modified: Optional[CalendarMoment] = None,
        dt_stamp: Optional[CalendarMoment] = None,
        google_conference_url: Optional[str] = None,
    ) -> None:
        self.dt_start = dt_start
        # Without DTEND, an event ends when it starts.
        self.dt_end = dt_start if dt_end is None else dt_end
        self.rrule = rrule
        self.exdates = tuple(exdates)
        self.summary = summary
        self.description = description
        self.uid = uid
        self.sequence = sequence
        self.status = status
        self.organizer = organizer
        self.dt_created = dt_created
        self.dt_last_modified = dt_last_modified
        self.dt_stamp = dt_stamp
        self.google_conference_url = google_conference_url

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.dt_start!r}, {self.dt_end!r}, "
            f"rrule={self.rrule!r}, summary={self.summary!r})"
        )

    def __iter__(self) -> OccurrenceIterator:
        return OccurrenceIterator(
            self.dt_start,
            self.dt_end,
            self.rrule,
            [exdate.date_time for exdate in self.exdates],
        )

    def first_occurrence(self) -> CalendarMoment:
        return self.dt_start

    def next_occurrence_since(
        self, dt: CalendarMoment, limit: Optional[int] = None
    ) -> Optional[OccurrenceResult]:
        """Find the first occurrence that has not finished by dt.

        Args:
          dt: Reference moment
          limit: Maximum number of occurrences to expand
        Returns: OccurrenceResult, or None if the event has no further
          occurrences
        Raises:
          ExpansionLimitReached: if limit occurrences were all in the past
          IllegalInterval: if the event ends before it starts
          Unsupported: if the recurrence rule can not be expanded
        """
        for i, occurrence in enumerate(self, 1):
            if limit is not None and i > limit:
                raise ExpansionLimitReached(self, limit)
            start, end = occurrence
            if start.is_whole_day and end.is_whole_day and end > start:
                # DTEND of a whole-day event is exclusive; the event finishes
                # at the last second of the day before.
                start = CalendarMoment.timed(start.as_datetime())
                end = CalendarMoment.timed(end.as_datetime() - timedelta(seconds=1))
            event_overlap = dt.intersects(start, end)
            logging.debug("Overlap of %r with %s: %s", occurrence, dt, event_overlap)
            if event_overlap is not EventOverlap.FINISHES_PAST:
                return OccurrenceResult(occurrence, event_overlap)
        return None

    @classmethod
    def from_component(
        cls, comp: Component, local_tz: Optional[tzinfo] = None
    ) -> "VEvent":
        """Extract an event from a parsed VEVENT component.

        Args:
          comp: icalendar VEVENT component
          local_tz: Timezone for floating times; defaults to the current
            local offset
        Raises:
          MissingProperty: if DTSTART is missing
          VEventFormatError: if a property value can not be parsed
        """
        if comp.name != "VEVENT":
            raise ValueError(f"Expected VEVENT, got {comp.name}")

        def moment(name: str) -> Optional[CalendarMoment]:
            prop = comp.get(name)
            if prop is None:
                return None
            try:
                return _moment_from_prop(prop, local_tz)
            except MomentParseError as exc:
                raise VEventFormatError(name, exc) from exc

        def text(name: str) -> Optional[str]:
            value = comp.get(name)
            if value is None:
                return None
            return str(value)

        dt_start = moment("DTSTART")
        if dt_start is None:
            raise MissingProperty("DTSTART")

        rrule = None
        rrules = _as_list(comp.get("RRULE", []))
        if rrules:
            if len(rrules) > 1:
                logging.warning(
                    "Event %s has %d recurrence rules, only using the first",
                    comp.get("UID"),
                    len(rrules),
                )
            # icalendar re-serializes the rule, which puts FREQ first.
            try:
                rrule = parse_rrule(_raw_value(rrules[0]), local_tz)
            except RRuleParseError as exc:
                raise VEventFormatError("RRULE", exc) from exc

        exdates = []
        for prop in _as_list(comp.get("EXDATE", [])):
            try:
                exdates.extend(_qualified_values(prop, local_tz))
            except MomentParseError as exc:
                raise VEventFormatError("EXDATE", exc) from exc

        sequence = comp.get("SEQUENCE")
        if sequence is not None:
            try:
                sequence = int(sequence)
            except ValueError as exc:
                raise VEventFormatError("SEQUENCE", exc) from exc

        return cls(
            dt_start=dt_start,
            dt_end=moment("DTEND"),
            rrule=rrule,
            exdates=exdates,
            summary=text("SUMMARY"),
            description=text("DESCRIPTION"),
            uid=text("UID"),
            sequence=sequence,
            status=text("STATUS"),
            organizer=text("ORGANIZER"),
            dt_created=moment("CREATED"),
            dt_last_modified=moment("LAST-MODIFIED"),
            dt_stamp=moment("DTSTAMP"),
            google_conference_url=text("X-GOOGLE-CONFERENCE"),
        )
