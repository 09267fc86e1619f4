# Copyright (C) 2015-2020  Chris Lalancette <clalancette@gmail.com>

# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation;
# version 2.1 of the License.

# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.

# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301  USA

"""
Classes and utilities for ISO date support.
"""

import struct
import time
from functools import lru_cache

from pycidata import pycidataexception

# For mypy annotations
if False:  # pylint: disable=using-constant-test
    from typing import Optional, Sequence  # NOQA pylint: disable=unused-import

# The recording date stamped into every Directory Record unless the caller
# asks for another one.  Keeping it fixed makes the output reproducible.
DEFAULT_RECORD_DATE = (2026, 2, 21, 0, 0, 0)


@lru_cache(maxsize=256)
def string_to_timestruct(input_string):
    # type: (bytes) -> time.struct_time
    """
    A cacheable function to take an input string and decode it into a
    time.struct_time from the time module.  If the string cannot be decoded
    because of an illegal value, then the all-zero time.struct_time will be
    returned instead.

    Parameters:
     input_string - The string to attempt to parse.
    Returns:
     A time.struct_time object representing the time.
    """
    try:
        timestruct = time.strptime(input_string.decode('utf-8'), VolumeDescriptorDate.TIME_FMT)
    except ValueError:
        # Ecma-119, 8.4.26.1 says an all-'0' string with a trailing zero byte
        # means the date is not specified; strptime() refuses that.
        timestruct = time.struct_time((0, 0, 0, 0, 0, 0, 0, 0, 0))

    return timestruct


class DirectoryRecordDate(object):
    """
    A class to represent a Directory Record date as described in Ecma-119
    section 9.1.5.  The Directory Record date consists of the number of years
    since 1900, the month, the day of the month, the hour, the minute, the
    second, and the offset from GMT in 15 minute intervals.  Either parse()
    a recorded date, or create a new one from a date tuple with new().
    """
    FMT = '=BBBBBBb'

    __slots__ = ('_initialized', 'years_since_1900', 'month', 'day_of_month',
                 'hour', 'minute', 'second', 'gmtoffset')

    def __init__(self):
        # type: () -> None
        self._initialized = False

    def parse(self, datestr):
        # type: (bytes) -> None
        """
        Parse a Directory Record date out of a string.

        Parameters:
         datestr - The string to parse the date out of.
        Returns:
         Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record Date already initialized')

        (self.years_since_1900, self.month, self.day_of_month, self.hour,
         self.minute, self.second,
         self.gmtoffset) = struct.unpack_from(self.FMT, datestr, 0)

        self._initialized = True

    def new(self, tm=None, gmtoffset=0):
        # type: (Optional[Sequence[int]], int) -> None
        """
        Create a new Directory Record date.

        Parameters:
         tm - A sequence whose first six items are the year, month, day of
              month, hour, minute and second (a time.struct_time works), or
              None to use DEFAULT_RECORD_DATE.
         gmtoffset - The offset from GMT in 15 minute intervals.
        Returns:
         Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record Date already initialized')

        if tm is None:
            tm = DEFAULT_RECORD_DATE

        year, month, day_of_month, hour, minute, second = tuple(tm)[:6]

        if year < 1900 or year > 1900 + 255:
            raise pycidataexception.PyCidataInvalidInput('Directory Record years must be between 1900 and 2155')
        if month < 1 or month > 12:
            raise pycidataexception.PyCidataInvalidInput('Directory Record month must be between 1 and 12')
        if day_of_month < 1 or day_of_month > 31:
            raise pycidataexception.PyCidataInvalidInput('Directory Record day must be between 1 and 31')
        if hour < 0 or hour > 23:
            raise pycidataexception.PyCidataInvalidInput('Directory Record hour must be between 0 and 23')
        if minute < 0 or minute > 59:
            raise pycidataexception.PyCidataInvalidInput('Directory Record minute must be between 0 and 59')
        if second < 0 or second > 59:
            raise pycidataexception.PyCidataInvalidInput('Directory Record second must be between 0 and 59')
        if gmtoffset < -48 or gmtoffset > 52:
            raise pycidataexception.PyCidataInvalidInput('GMT offset must be between -48 and 52')

        self.years_since_1900 = year - 1900
        self.month = month
        self.day_of_month = day_of_month
        self.hour = hour
        self.minute = minute
        self.second = second
        self.gmtoffset = gmtoffset
        self._initialized = True

    def record(self):
        # type: () -> bytes
        """
        Return a string representation of the Directory Record date.

        Parameters:
         None.
        Returns:
         A string representing this Directory Record Date.
        """
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record Date not initialized')

        return struct.pack(self.FMT, self.years_since_1900, self.month,
                           self.day_of_month, self.hour, self.minute,
                           self.second, self.gmtoffset)

    def __ne__(self, other):
        return self.years_since_1900 != other.years_since_1900 or self.month != other.month or self.day_of_month != other.day_of_month or self.hour != other.hour or self.minute != other.minute or self.second != other.second or self.gmtoffset != other.gmtoffset

    def __eq__(self, other):
        return not self.__ne__(other)


class VolumeDescriptorDate(object):
    """
    A class to represent a Volume Descriptor Date as described in Ecma-119
    section 8.4.26.1.  Seed images always record the "not specified" form of
    this date: sixteen ASCII '0' digits followed by a zero GMT offset byte.
    """

    TIME_FMT = '%Y%m%d%H%M%S'

    EMPTY_STRING = b'0' * 16 + b'\x00'

    __slots__ = ('_initialized', 'year', 'month', 'dayofmonth', 'hour',
                 'minute', 'second', 'hundredthsofsecond', 'gmtoffset',
                 'date_str')

    def __init__(self):
        # type: () -> None
        self._initialized = False

    def parse(self, datestr):
        # type: (bytes) -> None
        """
        Parse a Volume Descriptor Date out of a string.  A string of all zeros
        is valid, which means that the date in this field was not specified.

        Parameters:
          datestr - string to be parsed
        Returns:
          Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('This Volume Descriptor Date object is already initialized')

        if len(datestr) != 17:
            raise pycidataexception.PyCidataInvalidISO('Invalid ISO9660 date string')

        timestruct = string_to_timestruct(datestr[:-3])
        self.year = timestruct.tm_year
        self.month = timestruct.tm_mon
        self.dayofmonth = timestruct.tm_mday
        self.hour = timestruct.tm_hour
        self.minute = timestruct.tm_min
        self.second = timestruct.tm_sec
        if self.year == 0:
            self.hundredthsofsecond = 0
            self.gmtoffset = 0
        else:
            try:
                self.hundredthsofsecond = int(datestr[14:16])
            except ValueError:
                self.hundredthsofsecond = 0
            self.gmtoffset, = struct.unpack_from('=b', datestr, 16)
        self.date_str = datestr

        self._initialized = True

    def new(self):
        # type: () -> None
        """
        Create a new, unspecified, Volume Descriptor Date.

        Parameters:
          None.
        Returns:
          Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('This Volume Descriptor Date object is already initialized')

        self.year = 0
        self.month = 0
        self.dayofmonth = 0
        self.hour = 0
        self.minute = 0
        self.second = 0
        self.hundredthsofsecond = 0
        self.gmtoffset = 0
        self.date_str = self.EMPTY_STRING

        self._initialized = True

    def record(self):
        # type: () -> bytes
        """
        Return the date string for this object.

        Parameters:
          None.
        Returns:
          Date as a string.
        """
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Volume Descriptor Date is not initialized')

        return self.date_str

    def is_unspecified(self):
        # type: () -> bool
        """
        Determine whether this date is the "not specified" date.

        Parameters:
          None.
        Returns:
          True if no date was recorded, False otherwise.
        """
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Volume Descriptor Date is not initialized')

        return self.year == 0
