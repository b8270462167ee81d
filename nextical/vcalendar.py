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

"""Calendars: collections of events and timezones."""

import logging
from typing import Optional, Union

from icalendar.cal import Calendar, Component

from .config import CalendarConfig
from .event import MissingProperty, VEvent, VEventFormatError
from .iterator import Unsupported
from .moment import CalendarMoment, EventOverlap
from .vtimezone import VTimezone, VTimezoneFormatError


class InvalidCalendar(ValueError):
    """Calendar text could not be parsed."""


class VCalendar:
    """A parsed calendar."""

    def __init__(
        self, timezones=(), events=(), max_occurrences: Optional[int] = None
    ) -> None:
        self.timezones = list(timezones)
        self.events = list(events)
        self.max_occurrences = max_occurrences

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(timezones={self.timezones!r}, "
            f"events={self.events!r})"
        )

    @classmethod
    def from_ical(
        cls,
        text: Union[str, bytes],
        skip_invalid: bool = False,
        config: Optional[CalendarConfig] = None,
    ) -> "VCalendar":
        """Parse calendar text.

        Args:
          text: iCalendar text
          skip_invalid: Skip (and log) events that can not be parsed,
            rather than failing
          config: Optional calendar configuration
        Raises:
          InvalidCalendar: if the text is not a calendar
        """
        try:
            cal = Calendar.from_ical(text)
        except ValueError as exc:
            raise InvalidCalendar(str(exc)) from exc
        return cls.from_component(cal, skip_invalid=skip_invalid, config=config)

    @classmethod
    def from_component(
        cls,
        cal: Component,
        skip_invalid: bool = False,
        config: Optional[CalendarConfig] = None,
    ) -> "VCalendar":
        if cal.name != "VCALENDAR":
            raise InvalidCalendar(f"root component is {cal.name}, not VCALENDAR")
        if config is None:
            config = CalendarConfig()
        local_tz = config.get_local_timezone()
        timezones = []
        events = []
        for comp in cal.subcomponents:
            if comp.name == "VTIMEZONE":
                try:
                    timezones.append(VTimezone.from_component(comp))
                except (MissingProperty, VTimezoneFormatError) as exc:
                    if not skip_invalid:
                        raise
                    logging.warning(
                        "Ignoring timezone %s, due to: %s", comp.get("TZID"), exc
                    )
            elif comp.name == "VEVENT":
                try:
                    events.append(VEvent.from_component(comp, local_tz))
                except (MissingProperty, VEventFormatError) as exc:
                    if not skip_invalid:
                        raise
                    logging.warning(
                        "Ignoring event %s, due to: %s", comp.get("UID"), exc
                    )
            else:
                logging.debug("Ignoring unsupported component %s", comp.name)
        return cls(timezones, events, max_occurrences=config.get_max_occurrences())

    def occurrences_on(self, dt: CalendarMoment, skip_unsupported: bool = False):
        """Find the events taking place at a moment.

        Args:
          dt: Reference moment; a whole day matches any event that day
          skip_unsupported: Skip (and log) events whose recurrence rule can
            not be expanded, rather than failing
        Returns: iterator over (event, OccurrenceResult) tuples
        """
        for event in self.events:
            try:
                result = event.next_occurrence_since(dt, self.max_occurrences)
            except Unsupported as exc:
                if not skip_unsupported:
                    raise
                logging.warning("Ignoring event %s: %s", event.uid, exc)
                continue
            if result is None:
                continue
            if result.event_overlap in (
                EventOverlap.STARTS_FUTURE,
                EventOverlap.FINISHES_PAST,
            ):
                continue
            yield event, result
