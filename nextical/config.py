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

"""Calendar configuration file."""

import configparser
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

FILENAME = ".nextical"


class InvalidConfig(Exception):
    def __init__(self, key: str, value: str) -> None:
        super().__init__(f"Invalid value {value!r} for {key}")
        self.key = key
        self.value = value


class CalendarConfig:
    """Settings used while reading and expanding calendars.

    Stored as an INI file; all settings live in the DEFAULT section.
    """

    def __init__(self, cp=None) -> None:
        if cp is None:
            cp = configparser.ConfigParser()
        self._configparser = cp

    @classmethod
    def from_file(cls, f):
        cp = configparser.ConfigParser()
        cp.read_file(f)
        return cls(cp)

    def write(self, f) -> None:
        self._configparser.write(f)

    def get_timezone(self) -> str:
        return self._configparser["DEFAULT"]["timezone"]

    def set_timezone(self, tzid: Optional[str]) -> None:
        if tzid is not None:
            self._configparser["DEFAULT"]["timezone"] = tzid
        else:
            del self._configparser["DEFAULT"]["timezone"]

    def get_local_timezone(self) -> Optional[tzinfo]:
        """Timezone for floating times, or None for the process' local offset."""
        try:
            tzid = self.get_timezone()
        except KeyError:
            return None
        try:
            return ZoneInfo(tzid)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidConfig("timezone", tzid) from exc

    def get_max_occurrences(self) -> Optional[int]:
        try:
            value = self._configparser["DEFAULT"]["max-occurrences"]
        except KeyError:
            return None
        try:
            ret = int(value)
        except ValueError as exc:
            raise InvalidConfig("max-occurrences", value) from exc
        if ret < 1:
            raise InvalidConfig("max-occurrences", value)
        return ret

    def set_max_occurrences(self, limit: Optional[int]) -> None:
        if limit is not None:
            self._configparser["DEFAULT"]["max-occurrences"] = str(limit)
        else:
            del self._configparser["DEFAULT"]["max-occurrences"]
