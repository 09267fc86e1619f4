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

"""Main PyCidata class and the seed ISO helper built on it."""

import io
import logging
import struct

from pycidata import dr
from pycidata import headervd
from pycidata import layout
from pycidata import pycidataexception
from pycidata import utils

# For mypy annotations
if False:  # pylint: disable=using-constant-test
    from typing import BinaryIO, Generator, Optional, Sequence, Union  # NOQA pylint: disable=unused-import

_logger = logging.getLogger(__name__)

# The names the cloud-init NoCloud datasource looks for.  The Linux isofs
# driver lowercases them on read when mounted with map=normal.
USER_DATA_NAME = b'USER-DATA'
META_DATA_NAME = b'META-DATA'

# There are a number of specific ways that numerical data is stored in the
# ISO9660/Ecma-119 standard.  In the text these are reference by the section
# number they are stored in.  A brief synopsis:
#
# 7.1.1 - 8-bit number
# 7.2.3 - 16-bit number, stored first as little-endian then as big-endian (4 bytes total)
# 7.3.1 - 32-bit number, stored as little-endian
# 7.3.2 - 32-bit number, stored as big-endian
# 7.3.3 - 32-bit number, stored first as little-endian then as big-endian (8 bytes total)


class PyCidata(object):
    """The main class for creating and reading seed ISOs."""
    __slots__ = ('_initialized', '_cdfp', 'pvd', 'vdst', 'logical_block_size',
                 '_record_date')

    def __init__(self):
        # type: () -> None
        self._initialize()

    def _initialize(self):
        # type: () -> None
        """
        An internal method to re-initialize the object.  Called from
        both __init__ and close.

        Parameters:
         None.
        Returns:
         Nothing.
        """
        self._cdfp = None  # type: Optional[io.BytesIO]
        self.pvd = None  # type: Optional[headervd.PrimaryVolumeDescriptor]
        self.vdst = None  # type: Optional[headervd.VolumeDescriptorSetTerminator]
        self.logical_block_size = 2048
        self._record_date = None  # type: Optional[Sequence[int]]
        self._initialized = False

    def _check_initialized(self):
        # type: () -> None
        if not self._initialized:
            raise pycidataexception.PyCidataInvalidInput('This object is not initialized; call either open() or new() to create an ISO')

    def _root(self):
        # type: () -> dr.DirectoryRecord
        if self.pvd is None:
            raise pycidataexception.PyCidataInternalError('No Primary Volume Descriptor')
        return self.pvd.root_directory_record()

    def _file_children(self):
        # type: () -> Generator
        for child in self._root().children:
            if child.is_dot() or child.is_dotdot():
                continue
            yield child

    def _reshuffle_extents(self):
        # type: () -> layout.Layout
        """
        An internal method to plan the layout of the ISO and assign the
        resulting extents to the descriptors and the directory records.

        Parameters:
         None.
        Returns:
         The Layout that was applied.
        """
        if self.pvd is None or self.vdst is None:
            raise pycidataexception.PyCidataInternalError('Volume descriptors are missing')

        root = self._root()
        files = [(child.file_ident, child.get_data_length()) for child in self._file_children()]
        dir_size = sum([child.directory_record_length() for child in root.children])
        plan = layout.plan_layout(files, self.logical_block_size, dir_size)

        self.pvd.set_extent_location(plan.pvd_extent)
        self.vdst.set_extent_location(plan.vdst_extent)

        # The root directory is a single extent, and is its own parent.
        root.set_data_location(plan.root_extent)
        root.set_data_length(self.logical_block_size)
        for child in root.children:
            if child.is_dot() or child.is_dotdot():
                child.set_data_location(plan.root_extent)
                child.set_data_length(self.logical_block_size)
            else:
                child.set_data_location(plan.extent_for(child.file_ident))

        self.pvd.set_space_size(plan.total_extents)

        return plan

    def _parse_volume_descriptors(self):
        # type: () -> None
        """
        An internal method to parse the volume descriptors on an ISO.

        Parameters:
         None.
        Returns:
         Nothing.
        """
        if self._cdfp is None:
            raise pycidataexception.PyCidataInternalError('No ISO to parse')

        # Ecma-119, 6.2.1 says that the Volume Space is divided into a System
        # Area and a Data Area, where the System Area is in logical sectors 0
        # to 15, and whose contents is not specified by the standard.
        self._cdfp.seek(layout.SYSTEM_AREA_EXTENTS * 2048)
        while True:
            # All volume descriptors are exactly 2048 bytes long
            curr_extent = self._cdfp.tell() // 2048
            vd = self._cdfp.read(2048)
            if len(vd) != 2048:
                raise pycidataexception.PyCidataInvalidISO('Failed to read entire volume descriptor')
            (desc_type, ident) = struct.unpack_from('=B5s', vd, 0)
            if ident != b'CD001':
                raise pycidataexception.PyCidataInvalidISO('Invalid volume descriptor identifier at extent %d' % (curr_extent))
            if desc_type == headervd.VOLUME_DESCRIPTOR_TYPE_PRIMARY:
                # The first PVD wins; Ecma-119 allows it to be recorded more
                # than once.
                if self.pvd is None:
                    pvd = headervd.PrimaryVolumeDescriptor()
                    pvd.parse(vd, curr_extent)
                    self.pvd = pvd
            elif desc_type == headervd.VOLUME_DESCRIPTOR_TYPE_SET_TERMINATOR:
                vdst = headervd.VolumeDescriptorSetTerminator()
                vdst.parse(vd, curr_extent)
                self.vdst = vdst
                break
            # Boot records and supplementary descriptors are skipped.

        if self.pvd is None:
            raise pycidataexception.PyCidataInvalidISO('Valid ISO9660 filesystems must have at least one PVD')

        self.logical_block_size = self.pvd.logical_block_size()
        if self.logical_block_size != 2048:
            raise pycidataexception.PyCidataInvalidISO('Only a logical block size of 2048 is supported')

    def _walk_root_directory(self):
        # type: () -> None
        """
        An internal method to parse every directory record in the root
        directory, loading the data of each file.

        Parameters:
         None.
        Returns:
         Nothing.
        """
        if self._cdfp is None:
            raise pycidataexception.PyCidataInternalError('No ISO to parse')

        iso_data = self._cdfp.getvalue()
        root = self._root()

        start = root.extent_location() * self.logical_block_size
        length = root.get_data_length()
        data = iso_data[start:start + length]
        if len(data) != length:
            raise pycidataexception.PyCidataInvalidISO('Root directory extends past the end of the ISO')

        offset = 0
        while offset < length:
            lenbyte = data[offset]
            if lenbyte == 0:
                # A zero length is the padding at the end of an extent; move
                # on to the start of the next extent.
                padsize = self.logical_block_size - (offset % self.logical_block_size)
                if data[offset:offset + padsize] != b'\x00' * len(data[offset:offset + padsize]):
                    raise pycidataexception.PyCidataInvalidISO('Invalid padding on ISO')
                offset += padsize
                continue

            new_record = dr.DirectoryRecord()
            new_record.parse(data[offset:offset + lenbyte], root)
            offset += lenbyte

            if new_record.is_dir():
                if not new_record.is_dot() and not new_record.is_dotdot():
                    raise pycidataexception.PyCidataInvalidISO('Subdirectories are not supported')
            else:
                file_start = new_record.extent_location() * self.logical_block_size
                file_data = iso_data[file_start:file_start + new_record.get_data_length()]
                if len(file_data) != new_record.get_data_length():
                    raise pycidataexception.PyCidataInvalidISO('File %s extends past the end of the ISO' % (new_record.file_identifier().decode('ascii', 'replace')))
                new_record.data = file_data

            for child in root.children:
                if child.file_ident == new_record.file_ident:
                    raise pycidataexception.PyCidataInvalidISO('Duplicate name in the root directory')
            root.add_child(new_record)

        if len(root.children) < 2 or not root.children[0].is_dot() or not root.children[1].is_dotdot():
            raise pycidataexception.PyCidataInvalidISO('Root directory is missing the dot or dotdot record')

    def _open_fp(self, fp):
        # type: (BinaryIO) -> None
        """
        An internal method to open an existing ISO for inspection and
        modification.

        Parameters:
         fp - The file object containing the ISO to open up.
        Returns:
         Nothing.
        """
        self._cdfp = io.BytesIO(fp.read())

        try:
            self._parse_volume_descriptors()
            self._walk_root_directory()
        except pycidataexception.PyCidataException:
            self._initialize()
            raise

        self._initialized = True

    def _master(self):
        # type: () -> bytearray
        """
        An internal method to master the ISO into a zero-initialized buffer.

        Parameters:
         None.
        Returns:
         The buffer containing the whole ISO.
        """
        plan = self._reshuffle_extents()
        if self.pvd is None or self.vdst is None:
            raise pycidataexception.PyCidataInternalError('Volume descriptors are missing')

        block = self.logical_block_size
        outbuf = bytearray(plan.total_bytes())

        def _place(extent, data):
            # type: (int, bytes) -> None
            offset = extent * block
            outbuf[offset:offset + len(data)] = data

        _place(self.pvd.extent_location(), self.pvd.record())
        _place(self.vdst.extent_location(), self.vdst.record())

        root = self._root()
        dir_records = b''.join([child.record() for child in root.children])
        if len(dir_records) > block:
            raise pycidataexception.PyCidataInternalError('Root directory records overflow their extent')
        _place(root.extent_location(), dir_records)

        for child in self._file_children():
            if child.data is None:
                raise pycidataexception.PyCidataInternalError('File %s has no data' % (child.file_ident.decode('ascii')))
            _place(child.extent_location(), child.data)

        _logger.debug('Mastered ISO of %d extents (%d bytes)', plan.total_extents, len(outbuf))

        return outbuf

    def new(self, vol_ident='CIDATA', record_date=None):
        # type: (Union[str, bytes], Optional[Sequence[int]]) -> None
        """
        Create a new, empty, seed ISO.

        Parameters:
         vol_ident - The volume identification string to use on the new ISO.
         record_date - The date to stamp into the directory records, as a
                       sequence of (year, month, day, hour, minute, second)
                       or a time.struct_time.  None keeps the fixed default
                       date, so the same input always gives the same ISO.
        Returns:
         Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInvalidInput('This object already has an ISO; either close it or create a new object')

        if not isinstance(vol_ident, bytes):
            try:
                vol_ident = vol_ident.encode('ascii')
            except UnicodeEncodeError:
                raise pycidataexception.PyCidataInvalidInput('The volume identifier must be ASCII')

        self.logical_block_size = 2048
        self._record_date = record_date

        seqnum = 1
        self.pvd = headervd.pvd_factory(vol_ident, 1, seqnum,
                                        self.logical_block_size, record_date)
        self.vdst = headervd.vdst_factory()

        root = self.pvd.root_directory_record()
        dot = dr.DirectoryRecord()
        dot.new_dot(root, seqnum, self.logical_block_size, record_date)
        root.add_child(dot)
        dotdot = dr.DirectoryRecord()
        dotdot.new_dotdot(root, seqnum, self.logical_block_size, record_date)
        root.add_child(dotdot)

        self._reshuffle_extents()

        self._initialized = True

    def open(self, filename):
        # type: (str) -> None
        """
        Open up an existing ISO for inspection and modification.

        Parameters:
         filename - The filename containing the ISO to open up.
        Returns:
         Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInvalidInput('This object already has an ISO; either close it or create a new object')

        with open(filename, 'rb') as fp:
            self._open_fp(fp)

    def open_fp(self, fp):
        # type: (BinaryIO) -> None
        """
        Open up an existing ISO for inspection and modification.  The whole
        ISO is read into memory, so the file object may be closed once this
        returns.

        Parameters:
         fp - The file object containing the ISO to open up.
        Returns:
         Nothing.
        """
        if self._initialized:
            raise pycidataexception.PyCidataInvalidInput('This object already has an ISO; either close it or create a new object')

        self._open_fp(fp)

    def add_data(self, data, iso_path):
        # type: (bytes, Union[str, bytes]) -> None
        """
        Add a file to the root directory of the ISO.

        Parameters:
         data - The contents of the file.
         iso_path - The name of the file on the ISO; it is uppercased, and no
                    ';1' version is added.
        Returns:
         Nothing.
        """
        self._check_initialized()

        name = utils.normalize_iso_name(iso_path)

        rec = dr.DirectoryRecord()
        rec.new_file(bytes(data), name, self._root(), self.pvd.seqnum,
                     self._record_date)

        dir_size = sum([child.directory_record_length() for child in self._root().children])
        dir_size += rec.directory_record_length()
        if dir_size > self.logical_block_size:
            raise pycidataexception.PyCidataInvalidInput('Adding %s would need %d bytes of directory records; the root directory holds %d' % (name.decode('ascii'), dir_size, self.logical_block_size))

        self._root().add_child(rec)
        self._reshuffle_extents()

    def add_fp(self, fp, length, iso_path):
        # type: (BinaryIO, int, Union[str, bytes]) -> None
        """
        Add a file to the root directory of the ISO, reading its contents from
        a file object.

        Parameters:
         fp - The file object to read the contents from.
         length - The number of bytes to read.
         iso_path - The name of the file on the ISO.
        Returns:
         Nothing.
        """
        self._check_initialized()

        data = fp.read(length)
        if len(data) != length:
            raise pycidataexception.PyCidataInvalidInput('Could only read %d of %d bytes from the file object' % (len(data), length))

        self.add_data(data, iso_path)

    def rm_file(self, iso_path):
        # type: (Union[str, bytes]) -> None
        """
        Remove a file from the root directory of the ISO.

        Parameters:
         iso_path - The name of the file to remove.
        Returns:
         Nothing.
        """
        self._check_initialized()

        rec = self.get_record(iso_path)
        self._root().children.remove(rec)
        self._reshuffle_extents()

    def get_record(self, iso_path):
        # type: (Union[str, bytes]) -> dr.DirectoryRecord
        """
        Get the directory record for a file.

        Parameters:
         iso_path - The name of the file to look up.
        Returns:
         The directory record for the file.
        """
        self._check_initialized()

        name = utils.normalize_iso_name(iso_path)
        for child in self._file_children():
            if child.file_ident == name:
                return child

        raise pycidataexception.PyCidataInvalidInput('Could not find path %s' % (name.decode('ascii')))

    def list_children(self):
        # type: () -> Generator
        """
        Generate a list of all of the directory records in the root directory
        of the ISO, including the dot and dotdot records.

        Parameters:
         None.
        Yields:
         Children of the root directory.
        Returns:
         Nothing.
        """
        self._check_initialized()

        for child in self._root().children:
            yield child

    def get_file_from_iso_fp(self, outfp, iso_path):
        # type: (BinaryIO, Union[str, bytes]) -> None
        """
        Fetch a single file from the ISO and write it out to the file object.
        Exactly the recorded data length is written; the padding at the end of
        the last extent is not.

        Parameters:
         outfp - The file object to write data to.
         iso_path - The name of the file on the ISO.
        Returns:
         Nothing.
        """
        rec = self.get_record(iso_path)
        if rec.data is None:
            raise pycidataexception.PyCidataInternalError('File has no data')
        outfp.write(rec.data)

    def get_file_from_iso(self, local_path, iso_path):
        # type: (str, Union[str, bytes]) -> None
        """
        Fetch a single file from the ISO and write it out to a local file.

        Parameters:
         local_path - The local file to write to.
         iso_path - The name of the file on the ISO.
        Returns:
         Nothing.
        """
        with open(local_path, 'wb') as fp:
            self.get_file_from_iso_fp(fp, iso_path)

    def get_bytes(self):
        # type: () -> bytes
        """
        Master the ISO and return it.

        Parameters:
         None.
        Returns:
         The bytes of the whole ISO.
        """
        self._check_initialized()

        return bytes(self._master())

    def write_fp(self, outfp):
        # type: (BinaryIO) -> None
        """
        Write a properly formatted ISO out to the file object.

        Parameters:
         outfp - The file object to write the data to.
        Returns:
         Nothing.
        """
        self._check_initialized()

        outfp.write(self._master())

    def write(self, filename):
        # type: (str) -> None
        """
        Write a properly formatted ISO out to the filename passed in.

        Parameters:
         filename - The filename to write the data to.
        Returns:
         Nothing.
        """
        with open(filename, 'wb') as fp:
            self.write_fp(fp)

    def close(self):
        # type: () -> None
        """
        Close the PyCidata object, and re-initialize the object to the
        defaults.  The object can then be re-used for another ISO.

        Parameters:
         None.
        Returns:
         Nothing.
        """
        self._check_initialized()

        self._initialize()


def make_cloud_init_iso(user_data, meta_data, record_date=None):
    # type: (str, str, Optional[Sequence[int]]) -> bytes
    """
    Build a cloud-init NoCloud seed ISO in memory.  The ISO has the volume
    identifier CIDATA and holds USER-DATA and META-DATA in its root directory.
    Any pair of strings, including empty ones, gives a valid ISO.

    Parameters:
     user_data - The cloud-config user-data content.
     meta_data - The cloud-init meta-data content.
     record_date - An optional date to stamp into the directory records.
    Returns:
     The bytes of the ISO.
    """
    iso = PyCidata()
    iso.new(vol_ident=headervd.CIDATA_VOLUME_IDENTIFIER, record_date=record_date)
    iso.add_data(utils.encode_text(user_data), USER_DATA_NAME)
    iso.add_data(utils.encode_text(meta_data), META_DATA_NAME)
    data = iso.get_bytes()
    iso.close()
    return data
