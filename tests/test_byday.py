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

"""Tests for nextical.byday."""

import unittest

from nextical.byday import (
    Delta,
    InvalidOrdinal,
    InvalidWeekday,
    Weekday,
    WeekdaySet,
    parse_byday,
    parse_delta,
    to_weekday,
)


class ParseByDayTests(unittest.TestCase):
    def test_weekday_set(self):
        self.assertEqual(
            WeekdaySet((Weekday.MO, Weekday.TU, Weekday.FR)),
            parse_byday("MO,TU,FR"),
        )

    def test_single_weekday(self):
        self.assertEqual(WeekdaySet((Weekday.SU,)), parse_byday("SU"))

    def test_empty_entries_dropped(self):
        self.assertEqual(WeekdaySet((Weekday.MO, Weekday.WE)), parse_byday("MO,,WE,"))

    def test_delta(self):
        self.assertEqual(Delta(-1, Weekday.SU), parse_byday("-1SU"))
        self.assertEqual(Delta(2, Weekday.FR), parse_byday("2FR"))
        self.assertEqual(Delta(1, Weekday.MO), parse_byday("+1MO"))
        self.assertEqual(Delta(-20, Weekday.MO), parse_byday("-20MO"))

    def test_delta_ignores_rest(self):
        self.assertEqual(Delta(1, Weekday.MO), parse_byday("1MO,2TU"))

    def test_invalid_weekday(self):
        for text in ["XX", "MO,XY", "mo", "", ",", "2XX"]:
            self.assertRaises(InvalidWeekday, parse_byday, text)

    def test_invalid_ordinal(self):
        for text in ["AFR", "0MO", "-0SU", "1.5TU"]:
            self.assertRaises(InvalidOrdinal, parse_byday, text)

    def test_errors_are_value_errors(self):
        self.assertRaises(ValueError, parse_byday, "ZZ")
        self.assertRaises(ValueError, parse_delta, "0MO")


class WeekdayTests(unittest.TestCase):
    def test_numbering(self):
        self.assertEqual(0, Weekday.MO)
        self.assertEqual(6, Weekday.SU)

    def test_to_weekday(self):
        self.assertEqual(Weekday.TH, to_weekday("TH"))

    def test_invalid_code_kept(self):
        with self.assertRaises(InvalidWeekday) as cm:
            to_weekday("TX")
        self.assertEqual("TX", cm.exception.code)
