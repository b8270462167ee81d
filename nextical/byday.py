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

"""BYDAY weekday selectors.

See https://tools.ietf.org/html/rfc5545, section 3.3.10.
"""

import collections
import enum


class Weekday(enum.IntEnum):
    """Weekday, numbered like datetime.date.weekday()."""

    MO = 0
    TU = 1
    WE = 2
    TH = 3
    FR = 4
    SA = 5
    SU = 6


class ByDayParseError(ValueError):
    """Base class for BYDAY parse errors."""


class InvalidWeekday(ByDayParseError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Invalid weekday {code!r}")
        self.code = code


class InvalidOrdinal(ByDayParseError):
    def __init__(self, ordinal: str) -> None:
        super().__init__(f"Invalid weekday ordinal {ordinal!r}")
        self.ordinal = ordinal


# An explicit set of weekdays; a date matches if it falls on any of them.
WeekdaySet = collections.namedtuple("WeekdaySet", ["weekdays"])

# The n-th (or, if negative, n-th from last) given weekday of a month.
Delta = collections.namedtuple("Delta", ["delta", "weekday"])


def to_weekday(code: str) -> Weekday:
    try:
        return Weekday[code]
    except KeyError as exc:
        raise InvalidWeekday(code) from exc


def parse_delta(token: str) -> Delta:
    weekday = to_weekday(token[-2:])
    ordinal = token[:-2]
    try:
        delta = int(ordinal)
    except ValueError as exc:
        raise InvalidOrdinal(ordinal) from exc
    if delta == 0:
        raise InvalidOrdinal(ordinal)
    return Delta(delta, weekday)


def parse_byday(text: str):
    """Parse the value of a BYDAY rule part.

    Args:
      text: Comma-separated value, e.g. "MO,WE" or "-1SU"
    Returns: either a WeekdaySet or a Delta
    Raises:
      InvalidWeekday: if a weekday code is not recognized
      InvalidOrdinal: if the ordinal prefix is not a non-zero integer
    """
    tokens = [token for token in text.split(",") if token]
    if not tokens:
        raise InvalidWeekday(text)
    # Only a single ordinal entry is supported; the rest of the list is
    # ignored in that case.
    if len(tokens[0]) > 2:
        return parse_delta(tokens[0])
    return WeekdaySet(tuple(to_weekday(token) for token in tokens))
