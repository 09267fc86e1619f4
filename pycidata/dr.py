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
The class to support ISO9660 Directory Records.
"""

import bisect
import struct

from pycidata import dates
from pycidata import pycidataexception
from pycidata import utils

# For mypy annotations
if False:  # pylint: disable=using-constant-test
    from typing import List, Optional, Sequence  # NOQA pylint: disable=unused-import


class DirectoryRecord(object):
    """A class that represents an ISO9660 directory record."""
    __slots__ = ('initialized', 'new_extent_loc', 'orig_extent_loc', 'dr_len',
                 'xattr_len', 'data_length', 'file_flags', 'file_unit_size',
                 'interleave_gap_size', 'seqnum', 'len_fi', 'file_ident',
                 'date', 'isdir', 'is_root', 'parent', 'children', 'data',
                 'system_use')

    FILE_FLAG_DIRECTORY_BIT = 1

    FMT = '<BBLLLL7sBBBHHB'

    def __init__(self):
        # type: () -> None
        self.initialized = False
        self.new_extent_loc = -1
        self.orig_extent_loc = None  # type: Optional[int]
        self.children = []  # type: List[DirectoryRecord]
        self.is_root = False
        self.isdir = False
        self.parent = None  # type: Optional[DirectoryRecord]
        self.data = None  # type: Optional[bytes]

    @staticmethod
    def length(len_fi):
        # type: (int) -> int
        """
        Static method to return the length of a Directory Record with a file
        identifier of the given length.

        Parameters:
         len_fi - The length of the file identifier.
        Returns:
         The length of the Directory Record, including padding.
        """
        dr_len = struct.calcsize(DirectoryRecord.FMT) + len_fi
        return dr_len + (dr_len % 2)

    def parse(self, record, parent):
        # type: (bytes, Optional[DirectoryRecord]) -> None
        """
        Parse a directory record out of a string.

        Parameters:
         record - The string to parse for this record.
         parent - The parent of this record, or None for the root record
                  embedded in the Primary Volume Descriptor.
        Returns:
         Nothing.
        """
        if self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record already initialized')

        if len(record) > 255:
            # Since the length is supposed to be 8 bits, this should never
            # happen.
            raise pycidataexception.PyCidataInvalidISO('Directory record longer than 255 bytes!')

        if len(record) < struct.calcsize(self.FMT):
            raise pycidataexception.PyCidataInvalidISO('Directory record shorter than 33 bytes')

        (self.dr_len, self.xattr_len, extent_location_le, extent_location_be,
         data_length_le, data_length_be, dr_date, self.file_flags,
         self.file_unit_size, self.interleave_gap_size, seqnum_le, seqnum_be,
         self.len_fi) = struct.unpack_from(self.FMT, record, 0)

        if extent_location_le != utils.swab_32bit(extent_location_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian (%d) and big-endian (%d) extent location disagree' % (extent_location_le, utils.swab_32bit(extent_location_be)))
        self.orig_extent_loc = extent_location_le

        if data_length_le != utils.swab_32bit(data_length_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian (%d) and big-endian (%d) data length disagree' % (data_length_le, utils.swab_32bit(data_length_be)))
        self.data_length = data_length_le

        if seqnum_le != utils.swab_16bit(seqnum_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian seqnum disagree')
        self.seqnum = seqnum_le

        self.date = dates.DirectoryRecordDate()
        self.date.parse(dr_date)

        record_offset = struct.calcsize(self.FMT)
        if record_offset + self.len_fi > len(record):
            raise pycidataexception.PyCidataInvalidISO('File identifier runs past the end of the directory record')
        self.file_ident = record[record_offset:record_offset + self.len_fi]
        record_offset += self.len_fi
        if self.len_fi % 2 == 0:
            record_offset += 1

        # Anything after the padding is System Use data (Rock Ridge, XA);
        # it is carried through unchanged.
        self.system_use = record[record_offset:self.dr_len]

        self.parent = parent
        if self.parent is None:
            # The root record always has the identifier \x00, whatever was
            # recorded.
            self.is_root = True
            self.isdir = True
            self.file_ident = b'\x00'
            self.len_fi = 1
        else:
            self.isdir = bool(self.file_flags & (1 << self.FILE_FLAG_DIRECTORY_BIT))

        self.initialized = True

    def _new(self, name, parent, seqnum, isdir, length, tm):
        # type: (bytes, Optional[DirectoryRecord], int, bool, int, Optional[Sequence[int]]) -> None
        """
        Internal method to create a new Directory Record.

        Parameters:
         name - The name for this directory record.
         parent - The parent of this directory record.
         seqnum - The sequence number to associate with this directory record.
         isdir - Whether this directory record represents a directory.
         length - The length of the data for this directory record.
         tm - The recording date for this directory record, or None for
              the default date.
        Returns:
         Nothing.
        """
        self.date = dates.DirectoryRecordDate()
        self.date.new(tm)

        if length > 2**32 - 1:
            raise pycidataexception.PyCidataInvalidInput('Maximum supported file length is 2^32-1')

        self.data_length = length

        self.file_ident = name
        self.system_use = b''

        self.isdir = isdir

        self.seqnum = seqnum
        # A new record has no original extent; it is assigned during layout.
        self.orig_extent_loc = None
        self.len_fi = len(self.file_ident)
        # Ecma-119 9.1.12: the record is padded to an even length.
        self.dr_len = self.length(self.len_fi)
        if self.dr_len > 255:
            raise pycidataexception.PyCidataInvalidInput('File identifier too long; the maximum is %d bytes' % (255 - struct.calcsize(self.FMT) - 1))

        # From Ecma-119, 9.1.6, the file flag bits are:
        #
        # Bit 0 - Existence - 0 for existence known, 1 for hidden
        # Bit 1 - Directory - 0 for file, 1 for directory
        # Bit 2 - Associated File - 0 for not associated, 1 for associated
        # Bit 3 - Record - 0=structure not in xattr, 1=structure in xattr
        # Bit 4 - Protection - 0=no owner and group, 1=owner and group in xattr
        # Bit 5 - Reserved
        # Bit 6 - Reserved
        # Bit 7 - Multi-extent - 0=final directory record, 1=not final directory record
        self.file_flags = 0
        if self.isdir:
            self.file_flags |= (1 << self.FILE_FLAG_DIRECTORY_BIT)
        self.file_unit_size = 0
        self.interleave_gap_size = 0
        self.xattr_len = 0

        self.parent = parent
        if parent is None:
            self.is_root = True

        self.initialized = True

    def new_root(self, seqnum, log_block_size, tm=None):
        # type: (int, int, Optional[Sequence[int]]) -> None
        """
        Create a new root Directory Record.

        Parameters:
         seqnum - The sequence number for this directory record.
         log_block_size - The logical block size to use.
         tm - The recording date for this directory record.
        Returns:
         Nothing.
        """
        if self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record already initialized')

        self._new(b'\x00', None, seqnum, True, log_block_size, tm)

    def new_dot(self, parent, seqnum, log_block_size, tm=None):
        # type: (DirectoryRecord, int, int, Optional[Sequence[int]]) -> None
        """
        Create a new 'dot' Directory Record.

        Parameters:
         parent - The parent of this directory record.
         seqnum - The sequence number for this directory record.
         log_block_size - The logical block size to use.
         tm - The recording date for this directory record.
        Returns:
         Nothing.
        """
        if self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record already initialized')

        self._new(b'\x00', parent, seqnum, True, log_block_size, tm)

    def new_dotdot(self, parent, seqnum, log_block_size, tm=None):
        # type: (DirectoryRecord, int, int, Optional[Sequence[int]]) -> None
        """
        Create a new 'dotdot' Directory Record.

        Parameters:
         parent - The parent of this directory record.
         seqnum - The sequence number for this directory record.
         log_block_size - The logical block size to use.
         tm - The recording date for this directory record.
        Returns:
         Nothing.
        """
        if self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record already initialized')

        self._new(b'\x01', parent, seqnum, True, log_block_size, tm)

    def new_file(self, data, isoname, parent, seqnum, tm=None):
        # type: (bytes, bytes, DirectoryRecord, int, Optional[Sequence[int]]) -> None
        """
        Create a new file Directory Record.

        Parameters:
         data - The contents of the file.
         isoname - The name for this directory record.
         parent - The parent of this directory record.
         seqnum - The sequence number for this directory record.
         tm - The recording date for this directory record.
        Returns:
         Nothing.
        """
        if self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record already initialized')

        self._new(isoname, parent, seqnum, False, len(data), tm)
        self.data = data

    def add_child(self, child):
        # type: (DirectoryRecord) -> None
        """
        Add a child to this directory, keeping the children in ISO9660 sort
        order.

        Parameters:
         child - The child directory record object to add.
        Returns:
         Nothing.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')

        if not self.isdir:
            raise pycidataexception.PyCidataInvalidInput('Trying to add a child to a record that is not a directory')

        # bisect_left always lands to the left of an existing duplicate, so
        # only that one slot has to be checked.
        index = bisect.bisect_left(self.children, child)
        if index != len(self.children) and self.children[index].file_ident == child.file_ident:
            raise pycidataexception.PyCidataInvalidInput('Failed adding duplicate name to parent')
        self.children.insert(index, child)

    def is_dir(self):
        # type: () -> bool
        """
        Determine whether this Directory Record is a directory.

        Parameters:
         None.
        Returns:
         True if this DirectoryRecord object is a directory, False otherwise.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self.isdir

    def is_file(self):
        # type: () -> bool
        """
        Determine whether this Directory Record is a file.

        Parameters:
         None.
        Returns:
         True if this DirectoryRecord object is a file, False otherwise.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return not self.isdir

    def is_dot(self):
        # type: () -> bool
        """
        Determine whether this Directory Record is a 'dot' entry.

        Parameters:
         None.
        Returns:
         True if this DirectoryRecord object is a 'dot' entry, False otherwise.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self.file_ident == b'\x00'

    def is_dotdot(self):
        # type: () -> bool
        """
        Determine whether this Directory Record is a 'dotdot' entry.

        Parameters:
         None.
        Returns:
         True if this DirectoryRecord object is a 'dotdot' entry, False otherwise.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self.file_ident == b'\x01'

    def directory_record_length(self):
        # type: () -> int
        """
        Determine the length of this Directory Record.

        Parameters:
         None.
        Returns:
         The length of this Directory Record.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self.dr_len

    def _extent_location(self):
        # type: () -> int
        if self.new_extent_loc < 0:
            if self.orig_extent_loc is None:
                raise pycidataexception.PyCidataInternalError('Directory Record has no extent assigned')
            return self.orig_extent_loc
        return self.new_extent_loc

    def extent_location(self):
        # type: () -> int
        """
        Get the location of this Directory Record on the ISO.

        Parameters:
         None.
        Returns:
         Extent location of this Directory Record on the ISO.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self._extent_location()

    def set_data_location(self, current_extent):
        # type: (int) -> None
        """
        Set the new extent location that the data for this Directory Record
        should live at.

        Parameters:
         current_extent - The new extent.
        Returns:
         Nothing.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')

        self.new_extent_loc = current_extent

    def file_identifier(self):
        # type: () -> bytes
        """
        Get the printable identifier of this Directory Record.

        Parameters:
         None.
        Returns:
         String representing the identifier of this Directory Record.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')

        if self.is_root:
            return b'/'
        if self.file_ident == b'\x00':
            return b'.'
        if self.file_ident == b'\x01':
            return b'..'
        return self.file_ident

    def get_data_length(self):
        # type: () -> int
        """
        Get the length of the data that this Directory Record points to.

        Parameters:
         None.
        Returns:
         The length of the data that this Directory Record points to.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        return self.data_length

    def set_data_length(self, length):
        # type: (int) -> None
        """
        Set the length of the data that this Directory Record points to.

        Parameters:
         length - The new length for the data.
        Returns:
         Nothing.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')
        self.data_length = length

    def record(self):
        # type: () -> bytes
        """
        Generate the string representing this Directory Record.

        Parameters:
         None.
        Returns:
         String representing this Directory Record.
        """
        if not self.initialized:
            raise pycidataexception.PyCidataInternalError('Directory Record not initialized')

        padlen = struct.calcsize(self.FMT) + self.len_fi
        padstr = b'\x00' * (padlen % 2)

        extent_loc = self._extent_location()

        return struct.pack(self.FMT, self.dr_len, self.xattr_len,
                           extent_loc, utils.swab_32bit(extent_loc),
                           self.data_length, utils.swab_32bit(self.data_length),
                           self.date.record(), self.file_flags,
                           self.file_unit_size, self.interleave_gap_size,
                           self.seqnum, utils.swab_16bit(self.seqnum),
                           self.len_fi) + self.file_ident + padstr + self.system_use

    def __lt__(self, other):
        # ISO9660 sorting order: the \x00 'dot' record is always first, the
        # \x01 'dotdot' record is always second, and everything else sorts
        # lexically on the file identifier.
        if self.file_ident == b'\x00':
            if other.file_ident == b'\x00':
                return False
            return True
        if other.file_ident == b'\x00':
            return False

        if self.file_ident == b'\x01':
            if other.file_ident == b'\x00':
                return False
            return True

        if other.file_ident == b'\x01':
            return False
        return self.file_ident < other.file_ident

    def __ne__(self, other):
        # type: (object) -> bool
        if not isinstance(other, DirectoryRecord):
            return NotImplemented
        # Extent locations are not compared.
        return self.dr_len != other.dr_len or self.xattr_len != other.xattr_len or self.data_length != other.data_length or self.date != other.date or self.file_flags != other.file_flags or self.file_unit_size != other.file_unit_size or self.interleave_gap_size != other.interleave_gap_size or self.seqnum != other.seqnum or self.len_fi != other.len_fi or self.file_ident != other.file_ident

    def __eq__(self, other):
        # type: (object) -> bool
        ne = self.__ne__(other)
        if ne is NotImplemented:
            return ne
        return not ne
