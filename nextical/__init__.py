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

"""Expansion of recurring iCalendar events."""

from .byday import Delta, Weekday, WeekdaySet, parse_byday
from .config import CalendarConfig
from .event import MissingProperty, OccurrenceResult, VEvent
from .iterator import Occurrence, OccurrenceIterator, Unsupported
from .moment import (
    CalendarMoment,
    EventOverlap,
    IllegalInterval,
    classify_overlap,
    string_to_date_or_datetime,
)
from .rrule import Frequency, parse_rrule
from .tzid import TzIdDateTime
from .vcalendar import VCalendar
from .vtimezone import VTimezone

__version__ = (0, 1, 0)

__all__ = [
    "CalendarConfig",
    "CalendarMoment",
    "Delta",
    "EventOverlap",
    "Frequency",
    "IllegalInterval",
    "MissingProperty",
    "Occurrence",
    "OccurrenceIterator",
    "OccurrenceResult",
    "TzIdDateTime",
    "Unsupported",
    "VCalendar",
    "VEvent",
    "VTimezone",
    "Weekday",
    "WeekdaySet",
    "classify_overlap",
    "parse_byday",
    "parse_rrule",
    "string_to_date_or_datetime",
]
