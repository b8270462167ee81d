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

"""Expansion of recurring events into occurrences."""

import collections
import logging
from datetime import timedelta
from typing import Callable, Optional

from .byday import Delta
from .moment import CalendarMoment
from .rrule import (
    Daily,
    MonthlyByDay,
    MonthlyByMonthDay,
    RRule,
    Weekly,
    WeeklyByDay,
    Yearly,
    YearlyByMonthByDay,
    YearlyByMonthByMonthDay,
)

# Number of months searched for one that contains the n-th weekday.
MAX_MONTHS_WITHOUT_MATCH = 12

Occurrence = collections.namedtuple("Occurrence", ["start", "end"])


class Unsupported(NotImplementedError):
    """Stepping is not implemented for this kind of rule."""

    def __init__(self, rrule) -> None:
        super().__init__(
            f"Expanding {type(rrule).__name__} rules is not supported: {rrule}"
        )
        self.rrule = rrule


def _step_yearly(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    return last.increment_year(1)


def _step_unsupported(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    raise Unsupported(rrule)


def _step_monthly_by_month_day(
    last: CalendarMoment, rrule
) -> Optional[CalendarMoment]:
    return last.increment_month(1)


def _step_monthly_by_day(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    month = last.month_start()
    for _ in range(MAX_MONTHS_WITHOUT_MATCH):
        month = month.increment_month(1)
        if isinstance(rrule.day, Delta):
            found = month.resolve_ordinal(rrule.day)
        elif month.weekday in rrule.day.weekdays:
            found = month
        else:
            found = month.next_weekdays(rrule.day.weekdays)
        if found is not None:
            return found
        logging.debug("No %r in month of %s, trying next month", rrule.day, month)
    logging.warning(
        "No month matching %s found after %s, ending recurrence", rrule, last
    )
    return None


def _step_weekly(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    return last + timedelta(days=7)


def _step_weekly_by_day(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    if isinstance(rrule.day, Delta):
        # Ordinals have no meaning within a week.
        return last.next_weekday(rrule.day.weekday)
    return last.next_weekdays(rrule.day.weekdays)


def _step_daily(last: CalendarMoment, rrule) -> Optional[CalendarMoment]:
    return last + timedelta(days=1)


StepFunction = Callable[[CalendarMoment, RRule], Optional[CalendarMoment]]

rule_steps: dict[type, StepFunction] = {
    Yearly: _step_yearly,
    YearlyByMonthByMonthDay: _step_yearly,
    YearlyByMonthByDay: _step_unsupported,
    MonthlyByMonthDay: _step_monthly_by_month_day,
    MonthlyByDay: _step_monthly_by_day,
    Weekly: _step_weekly,
    WeeklyByDay: _step_weekly_by_day,
    Daily: _step_daily,
}


class OccurrenceIterator:
    """Iterator over the occurrences of a (possibly recurring) event.

    The first occurrence is the event start; later ones are found by
    stepping the recurrence rule. Dates listed in exdates are skipped and
    do not count towards COUNT.

    Iterators can not be reset; create a new one to start over.
    """

    def __init__(
        self,
        dt_start: CalendarMoment,
        dt_end: CalendarMoment,
        rrule: Optional[RRule] = None,
        exdates=(),
    ) -> None:
        self.dt_start = dt_start
        self.dt_end = dt_end
        self.rrule = rrule
        self.exdates = tuple(exdates)
        self.duration = dt_end - dt_start
        self.last_occurrence: Optional[CalendarMoment] = None
        self.count = 0
        self._exhausted = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.dt_start!r}, {self.dt_end!r}, "
            f"rrule={self.rrule!r}, exdates={self.exdates!r})"
        )

    def __iter__(self):
        return self

    def is_excluded(self, dt: CalendarMoment) -> bool:
        # Exclusions are matched by date only, since EXDATE times often come
        # with a different timezone than DTSTART.
        day = dt.as_date()
        return any(exdate.as_date() == day for exdate in self.exdates)

    def _step(self, last: CalendarMoment) -> Optional[CalendarMoment]:
        if self.rrule is None:
            return None
        try:
            step = rule_steps[type(self.rrule)]
        except KeyError as exc:
            raise Unsupported(self.rrule) from exc
        current: Optional[CalendarMoment] = last
        for _ in range(self.rrule.interval):
            current = step(current, self.rrule)
            if current is None or self.rrule.is_expired(current):
                return None
        return current

    def _next_candidate(self) -> Optional[CalendarMoment]:
        if self.last_occurrence is None:
            return self.dt_start
        if self.rrule is None or self.rrule.is_out_of_count(self.count):
            return None
        return self._step(self.last_occurrence)

    def __next__(self) -> Occurrence:
        if self._exhausted:
            raise StopIteration
        candidate = self._next_candidate()
        while candidate is not None:
            self.last_occurrence = candidate
            if not self.is_excluded(candidate):
                self.count += 1
                return Occurrence(candidate, candidate + self.duration)
            logging.debug("Skipping excluded occurrence %s", candidate)
            candidate = self._step(candidate)
        self._exhausted = True
        raise StopIteration
