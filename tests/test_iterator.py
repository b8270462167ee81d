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

"""Tests for nextical.iterator."""

import unittest
from datetime import date, datetime, timedelta, timezone
from itertools import islice

from dateutil.rrule import rrulestr

from nextical.iterator import Occurrence, OccurrenceIterator, Unsupported
from nextical.moment import CalendarMoment
from nextical.rrule import parse_rrule


def whole_day(year, month, day):
    return CalendarMoment.whole_day(date(year, month, day))


def timed(year, month, day, hour=0, minute=0):
    return CalendarMoment.timed(
        datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    )


def starts(iterator, limit=None):
    return [occurrence.start for occurrence in islice(iterator, limit)]


def expand(start, rule, limit=None, exdates=(), end=None):
    if end is None:
        end = start
    rrule = None if rule is None else parse_rrule(rule)
    return starts(OccurrenceIterator(start, end, rrule, exdates), limit)


class OccurrenceIteratorTests(unittest.TestCase):
    def test_no_rule(self):
        start = timed(2022, 2, 7, 10)
        end = timed(2022, 2, 7, 11)
        self.assertEqual(
            [Occurrence(start, end)], list(OccurrenceIterator(start, end))
        )

    def test_exhausted_stays_exhausted(self):
        it = OccurrenceIterator(whole_day(2022, 2, 7), whole_day(2022, 2, 8))
        next(it)
        self.assertRaises(StopIteration, next, it)
        self.assertRaises(StopIteration, next, it)

    def test_duration(self):
        it = OccurrenceIterator(
            timed(2022, 2, 7, 10), timed(2022, 2, 7, 11, 30), parse_rrule("FREQ=DAILY")
        )
        next(it)
        self.assertEqual(
            Occurrence(timed(2022, 2, 8, 10), timed(2022, 2, 8, 11, 30)), next(it)
        )
        self.assertEqual(timedelta(hours=1, minutes=30), it.duration)

    def test_whole_day_duration(self):
        it = OccurrenceIterator(
            whole_day(2022, 2, 7), whole_day(2022, 2, 8), parse_rrule("FREQ=WEEKLY")
        )
        next(it)
        occurrence = next(it)
        self.assertEqual(
            Occurrence(whole_day(2022, 2, 14), whole_day(2022, 2, 15)), occurrence
        )
        self.assertTrue(occurrence.end.is_whole_day)

    def test_weekly_by_day(self):
        # 2022-02-07 is a Monday.
        self.assertEqual(
            [
                whole_day(2022, 2, 7),
                whole_day(2022, 2, 9),
                whole_day(2022, 2, 14),
                whole_day(2022, 2, 16),
                whole_day(2022, 2, 21),
            ],
            expand(whole_day(2022, 2, 7), "FREQ=WEEKLY;BYDAY=MO,WE", 5),
        )

    def test_weekly_by_day_ordinal(self):
        self.assertEqual(
            [whole_day(2022, 2, 7), whole_day(2022, 2, 14)],
            expand(whole_day(2022, 2, 7), "FREQ=WEEKLY;BYDAY=1MO", 2),
        )

    def test_weekly_interval(self):
        self.assertEqual(
            [timed(2022, 2, 7, 9), timed(2022, 2, 21, 9), timed(2022, 3, 7, 9)],
            expand(timed(2022, 2, 7, 9), "FREQ=WEEKLY;INTERVAL=2", 3),
        )

    def test_count(self):
        self.assertEqual(
            [whole_day(2022, 2, 7), whole_day(2022, 2, 8), whole_day(2022, 2, 9)],
            expand(whole_day(2022, 2, 7), "FREQ=DAILY;COUNT=3"),
        )

    def test_count_zero(self):
        self.assertEqual(
            [whole_day(2022, 2, 7)],
            expand(whole_day(2022, 2, 7), "FREQ=DAILY;COUNT=0"),
        )

    def test_until(self):
        self.assertEqual(
            [timed(2022, 2, 7, 10), timed(2022, 2, 8, 10), timed(2022, 2, 9, 10)],
            expand(timed(2022, 2, 7, 10), "FREQ=DAILY;UNTIL=20220209T100000Z"),
        )

    def test_until_within_interval(self):
        self.assertEqual(
            [whole_day(2022, 2, 7), whole_day(2022, 2, 10)],
            expand(whole_day(2022, 2, 7), "FREQ=DAILY;INTERVAL=3;UNTIL=20220211"),
        )

    def test_excluded_not_counted(self):
        self.assertEqual(
            [whole_day(2022, 2, 7), whole_day(2022, 2, 9), whole_day(2022, 2, 10)],
            expand(
                whole_day(2022, 2, 7),
                "FREQ=DAILY;COUNT=3",
                exdates=[whole_day(2022, 2, 8)],
            ),
        )

    def test_excluded_by_date(self):
        self.assertEqual(
            [timed(2022, 2, 7, 10), timed(2022, 2, 9, 10)],
            expand(
                timed(2022, 2, 7, 10),
                "FREQ=DAILY;COUNT=2",
                exdates=[timed(2022, 2, 8, 18)],
            ),
        )

    def test_first_excluded(self):
        self.assertEqual(
            [whole_day(2022, 2, 14), whole_day(2022, 2, 21)],
            expand(
                whole_day(2022, 2, 7),
                "FREQ=WEEKLY;COUNT=2",
                exdates=[whole_day(2022, 2, 7)],
            ),
        )

    def test_all_excluded(self):
        self.assertEqual(
            [], expand(whole_day(2022, 2, 7), None, exdates=[whole_day(2022, 2, 7)])
        )

    def test_monthly_by_month_day(self):
        self.assertEqual(
            [whole_day(2022, 1, 15), whole_day(2022, 3, 15), whole_day(2022, 5, 15)],
            expand(whole_day(2022, 1, 15), "FREQ=MONTHLY;INTERVAL=2;BYMONTHDAY=15", 3),
        )

    def test_monthly_by_month_day_skips_short_months(self):
        self.assertEqual(
            [
                whole_day(2022, 1, 31),
                whole_day(2022, 3, 31),
                whole_day(2022, 5, 31),
                whole_day(2022, 7, 31),
                whole_day(2022, 8, 31),
            ],
            expand(whole_day(2022, 1, 31), "FREQ=MONTHLY;BYMONTHDAY=31", 5),
        )

    def test_monthly_last_sunday(self):
        self.assertEqual(
            [
                whole_day(2022, 1, 30),
                whole_day(2022, 2, 27),
                whole_day(2022, 3, 27),
                whole_day(2022, 4, 24),
            ],
            expand(whole_day(2022, 1, 30), "FREQ=MONTHLY;BYDAY=-1SU", 4),
        )

    def test_monthly_second_friday_keeps_time(self):
        self.assertEqual(
            [timed(2022, 2, 11, 9), timed(2022, 3, 11, 9), timed(2022, 4, 8, 9)],
            expand(timed(2022, 2, 11, 9), "FREQ=MONTHLY;BYDAY=2FR", 3),
        )

    def test_monthly_skips_months_without_match(self):
        self.assertEqual(
            [whole_day(2022, 4, 29), whole_day(2022, 7, 29)],
            expand(whole_day(2022, 4, 29), "FREQ=MONTHLY;BYDAY=5FR", 2),
        )

    def test_monthly_never_matching(self):
        with self.assertLogs(level="WARNING"):
            self.assertEqual(
                [whole_day(2022, 2, 7)],
                expand(whole_day(2022, 2, 7), "FREQ=MONTHLY;BYDAY=9MO"),
            )

    def test_monthly_weekday_set(self):
        # The first Monday or Wednesday on or after the 1st of the next month.
        self.assertEqual(
            [whole_day(2022, 2, 7), whole_day(2022, 3, 2), whole_day(2022, 4, 4)],
            expand(whole_day(2022, 2, 7), "FREQ=MONTHLY;BYDAY=MO,WE", 3),
        )

    def test_yearly(self):
        self.assertEqual(
            [whole_day(2022, 2, 10), whole_day(2023, 2, 10)],
            expand(whole_day(2022, 2, 10), "FREQ=YEARLY;BYMONTH=2;BYMONTHDAY=10", 2),
        )

    def test_yearly_leap_day(self):
        self.assertEqual(
            [whole_day(2024, 2, 29), whole_day(2025, 3, 1), whole_day(2026, 3, 1)],
            expand(whole_day(2024, 2, 29), "FREQ=YEARLY;COUNT=3"),
        )

    def test_yearly_by_month_by_day_unsupported(self):
        it = OccurrenceIterator(
            whole_day(2022, 10, 30),
            whole_day(2022, 10, 30),
            parse_rrule("FREQ=YEARLY;BYMONTH=10;BYDAY=-1SU"),
        )
        self.assertEqual(whole_day(2022, 10, 30), next(it).start)
        self.assertRaises(Unsupported, next, it)
        self.assertRaises(NotImplementedError, next, it)


class CompareWithDateutilTests(unittest.TestCase):
    def assertSameAsDateutil(self, rule, start):
        dtstart = start.as_datetime()
        expected = list(rrulestr(rule, dtstart=dtstart))
        got = [
            occurrence.start.as_datetime()
            for occurrence in OccurrenceIterator(start, start, parse_rrule(rule))
        ]
        self.assertEqual(expected, got)

    def test_daily(self):
        self.assertSameAsDateutil(
            "FREQ=DAILY;INTERVAL=3;COUNT=10", timed(2022, 2, 7, 10)
        )

    def test_weekly(self):
        self.assertSameAsDateutil(
            "FREQ=WEEKLY;BYDAY=MO,WE;COUNT=10", timed(2022, 2, 7, 10)
        )

    def test_monthly_by_month_day(self):
        self.assertSameAsDateutil(
            "FREQ=MONTHLY;BYMONTHDAY=31;COUNT=7", timed(2022, 1, 31, 8)
        )

    def test_monthly_last_sunday(self):
        self.assertSameAsDateutil(
            "FREQ=MONTHLY;BYDAY=-1SU;COUNT=6", timed(2022, 1, 30, 18)
        )

    def test_until(self):
        self.assertSameAsDateutil(
            "FREQ=WEEKLY;INTERVAL=2;UNTIL=20220601T000000Z", timed(2022, 2, 7, 10)
        )
