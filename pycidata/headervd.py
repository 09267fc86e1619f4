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

'''
Implementation of header Volume Descriptors for Ecma-119/ISO9660.
'''

import struct

from pycidata import dates
from pycidata import dr
from pycidata import pycidataexception
from pycidata import utils

VOLUME_DESCRIPTOR_TYPE_PRIMARY = 1
VOLUME_DESCRIPTOR_TYPE_SET_TERMINATOR = 255

# The label the cloud-init NoCloud datasource looks for.
CIDATA_VOLUME_IDENTIFIER = b'CIDATA'


class PrimaryVolumeDescriptor(object):
    '''
    A class representing the Primary Volume Descriptor on this ISO.  This is
    the first thing on the ISO that is parsed, and contains all of the basic
    information about the ISO.
    '''
    __slots__ = ('_initialized', 'system_identifier', 'volume_identifier',
                 'path_table_location_le', 'optional_path_table_location_le',
                 'path_table_location_be', 'optional_path_table_location_be',
                 'volume_set_identifier', 'copyright_file_identifier',
                 'abstract_file_identifier', 'bibliographic_file_identifier',
                 'file_structure_version', 'application_use', 'set_size',
                 'publisher_identifier', 'preparer_identifier',
                 'application_identifier', 'volume_creation_date',
                 'volume_modification_date', 'volume_expiration_date',
                 'volume_effective_date', 'escape_sequences', 'flags',
                 'version', 'space_size', 'log_block_size', 'root_dir_record',
                 'path_tbl_size', 'seqnum', 'new_extent_loc',
                 'orig_extent_loc')

    FMT = '=B5sBB32s32sQLL32sHHHHHHLLLLLL34s128s128s128s128s37s37s37s17s17s17s17sBB512s653s'

    def __init__(self):
        self._initialized = False
        self.space_size = None
        self.log_block_size = None
        self.root_dir_record = None
        self.path_tbl_size = None
        self.seqnum = None
        self.new_extent_loc = None
        self.orig_extent_loc = None

    def parse(self, vd, extent_loc):
        '''
        Parse a Primary Volume Descriptor out of a string.

        Parameters:
         vd - The string containing the Volume Descriptor.
         extent_loc - The location on the ISO of this Volume Descriptor.
        Returns:
         Nothing.
        '''
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is already initialized')

        if len(vd) != struct.calcsize(self.FMT):
            raise pycidataexception.PyCidataInvalidISO('Primary Volume Descriptor must be 2048 bytes')

        (descriptor_type, identifier, self.version, self.flags,
         self.system_identifier, self.volume_identifier, unused1,
         space_size_le, space_size_be, self.escape_sequences, set_size_le,
         set_size_be, seqnum_le, seqnum_be, logical_block_size_le,
         logical_block_size_be, path_table_size_le, path_table_size_be,
         self.path_table_location_le, self.optional_path_table_location_le,
         self.path_table_location_be, self.optional_path_table_location_be,
         root_dir_record, self.volume_set_identifier,
         self.publisher_identifier, self.preparer_identifier,
         self.application_identifier, self.copyright_file_identifier,
         self.abstract_file_identifier, self.bibliographic_file_identifier,
         vol_create_date_str, vol_mod_date_str, vol_expire_date_str,
         vol_effective_date_str, self.file_structure_version, unused2,
         self.application_use, unused3) = struct.unpack_from(self.FMT, vd, 0)

        # According to Ecma-119, 8.4.1, the primary volume descriptor type
        # should be 1.
        if descriptor_type != VOLUME_DESCRIPTOR_TYPE_PRIMARY:
            raise pycidataexception.PyCidataInvalidISO('Invalid volume descriptor')
        # According to Ecma-119, 8.4.2, the identifier should be 'CD001'.
        if identifier != b'CD001':
            raise pycidataexception.PyCidataInvalidISO('invalid CD isoIdentification')
        # According to Ecma-119, 8.4.3, the version should be 1.
        if self.version != 1:
            raise pycidataexception.PyCidataInvalidISO('Invalid volume descriptor version %d' % (self.version))
        # According to Ecma-119, 8.4.4, the flags field should be 0.
        if self.flags != 0:
            raise pycidataexception.PyCidataInvalidISO('PVD flags field is not zero')
        # According to Ecma-119, 8.4.5, the first unused field should be 0.
        if unused1 != 0:
            raise pycidataexception.PyCidataInvalidISO('data in 1st unused field not zero')
        # According to Ecma-119, 8.4.31, the second unused field should be 0.
        if unused2 != 0:
            raise pycidataexception.PyCidataInvalidISO('data in 2nd unused field not zero')

        # Check to make sure that the little-endian and big-endian versions
        # of the parsed data agree with each other.
        if space_size_le != utils.swab_32bit(space_size_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian space size disagree')
        self.space_size = space_size_le

        if set_size_le != utils.swab_16bit(set_size_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian set size disagree')
        self.set_size = set_size_le

        if seqnum_le != utils.swab_16bit(seqnum_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian seqnum disagree')
        self.seqnum = seqnum_le

        if logical_block_size_le != utils.swab_16bit(logical_block_size_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian logical block size disagree')
        self.log_block_size = logical_block_size_le

        if path_table_size_le != utils.swab_32bit(path_table_size_be):
            raise pycidataexception.PyCidataInvalidISO('Little-endian and big-endian path table size disagree')
        self.path_tbl_size = path_table_size_le

        self.path_table_location_be = utils.swab_32bit(self.path_table_location_be)

        self.volume_creation_date = dates.VolumeDescriptorDate()
        self.volume_creation_date.parse(vol_create_date_str)
        self.volume_modification_date = dates.VolumeDescriptorDate()
        self.volume_modification_date.parse(vol_mod_date_str)
        self.volume_expiration_date = dates.VolumeDescriptorDate()
        self.volume_expiration_date.parse(vol_expire_date_str)
        self.volume_effective_date = dates.VolumeDescriptorDate()
        self.volume_effective_date.parse(vol_effective_date_str)
        self.root_dir_record = dr.DirectoryRecord()
        self.root_dir_record.parse(root_dir_record, None)

        self.orig_extent_loc = extent_loc
        self.new_extent_loc = None

        self._initialized = True

    def new(self, vol_ident, set_size, seqnum, log_block_size, tm):
        '''
        Create a new Primary Volume Descriptor.

        Parameters:
         vol_ident - The volume identification string to use on the new ISO.
         set_size - The size of the set of ISOs this ISO is a part of.
         seqnum - The sequence number of the set of this ISO.
         log_block_size - The logical block size to use for the ISO.
         tm - The recording date for the root directory record, or None for
              the default date.
        Returns:
         Nothing.
        '''
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is already initialized')

        self.escape_sequences = b'\x00' * 32
        self.file_structure_version = 1
        self.version = 1
        self.flags = 0

        self.system_identifier = utils.encode_space_pad(b'', 32)

        if len(vol_ident) > 32:
            raise pycidataexception.PyCidataInvalidInput('The volume identifier has a maximum length of 32')
        self.volume_identifier = utils.encode_space_pad(vol_ident, 32)

        # The space_size is the number of extents (2048-byte blocks) in the
        # ISO.  We know we will at least have the system area (16 extents),
        # and this VD (1 extent) to start with; the rest is filled in once the
        # layout is planned.
        self.space_size = 17
        self.set_size = set_size
        if seqnum > set_size:
            raise pycidataexception.PyCidataInvalidInput('Sequence number must be less than or equal to set size')
        self.seqnum = seqnum
        self.log_block_size = log_block_size
        # Seed images carry no path tables.
        self.path_tbl_size = 0
        self.path_table_location_le = 0
        self.path_table_location_be = 0
        self.optional_path_table_location_le = 0
        self.optional_path_table_location_be = 0
        self.root_dir_record = dr.DirectoryRecord()
        self.root_dir_record.new_root(seqnum, self.log_block_size, tm)

        self.volume_set_identifier = utils.encode_space_pad(b'', 128)
        self.publisher_identifier = utils.encode_space_pad(b'', 128)
        self.preparer_identifier = utils.encode_space_pad(b'', 128)
        self.application_identifier = utils.encode_space_pad(b'', 128)
        self.copyright_file_identifier = utils.encode_space_pad(b'', 37)
        self.abstract_file_identifier = utils.encode_space_pad(b'', 37)
        self.bibliographic_file_identifier = utils.encode_space_pad(b'', 37)

        self.volume_creation_date = dates.VolumeDescriptorDate()
        self.volume_creation_date.new()
        self.volume_modification_date = dates.VolumeDescriptorDate()
        self.volume_modification_date.new()
        self.volume_expiration_date = dates.VolumeDescriptorDate()
        self.volume_expiration_date.new()
        self.volume_effective_date = dates.VolumeDescriptorDate()
        self.volume_effective_date.new()

        self.application_use = b'\x00' * 512

        self.orig_extent_loc = None
        # This is wrong but will be set by the layout.
        self.new_extent_loc = 0

        self._initialized = True

    def record(self):
        '''
        A method to generate the string representing this Primary Volume
        Descriptor.

        Parameters:
         None.
        Returns:
         A string representing this Primary Volume Descriptor.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        return struct.pack(self.FMT,
                           VOLUME_DESCRIPTOR_TYPE_PRIMARY,
                           b'CD001',
                           self.version,
                           self.flags,
                           self.system_identifier,
                           self.volume_identifier,
                           0,
                           self.space_size,
                           utils.swab_32bit(self.space_size),
                           self.escape_sequences,
                           self.set_size,
                           utils.swab_16bit(self.set_size),
                           self.seqnum,
                           utils.swab_16bit(self.seqnum),
                           self.log_block_size,
                           utils.swab_16bit(self.log_block_size),
                           self.path_tbl_size,
                           utils.swab_32bit(self.path_tbl_size),
                           self.path_table_location_le,
                           self.optional_path_table_location_le,
                           utils.swab_32bit(self.path_table_location_be),
                           self.optional_path_table_location_be,
                           self.root_dir_record.record(),
                           self.volume_set_identifier,
                           self.publisher_identifier,
                           self.preparer_identifier,
                           self.application_identifier,
                           self.copyright_file_identifier,
                           self.abstract_file_identifier,
                           self.bibliographic_file_identifier,
                           self.volume_creation_date.record(),
                           self.volume_modification_date.record(),
                           self.volume_expiration_date.record(),
                           self.volume_effective_date.record(),
                           self.file_structure_version, 0, self.application_use,
                           b'\x00' * 653)

    def set_space_size(self, total_extents):
        '''
        Set the total number of extents on the ISO.

        Parameters:
         total_extents - The volume space size, in logical blocks.
        Returns:
         Nothing.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        if total_extents > 2**32 - 1:
            raise pycidataexception.PyCidataInvalidInput('Volume space size does not fit in 32 bits')
        self.space_size = total_extents

    def root_directory_record(self):
        '''
        A method to get a handle to this Primary Volume Descriptor's root
        directory record.

        Parameters:
         None.
        Returns:
         DirectoryRecord object representing this Primary Volume Descriptor's
         root directory record.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        return self.root_dir_record

    def logical_block_size(self):
        '''
        A method to get this Primary Volume Descriptor's logical block size.

        Parameters:
         None.
        Returns:
         Size of this Primary Volume Descriptor's logical block size in bytes.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        return self.log_block_size

    def extent_location(self):
        '''
        A method to get this Primary Volume Descriptor's extent location.

        Parameters:
         None.
        Returns:
         Integer of this Primary Volume Descriptor's extent location.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        if self.new_extent_loc is None:
            return self.orig_extent_loc
        return self.new_extent_loc

    def set_extent_location(self, extent):
        '''
        A method to set the extent location of this Primary Volume Descriptor.

        Parameters:
         extent - The new extent location.
        Returns:
         Nothing.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('This Primary Volume Descriptor is not yet initialized')

        self.new_extent_loc = extent


class VolumeDescriptorSetTerminator(object):
    '''
    A class that represents a Volume Descriptor Set Terminator.  The VDST
    signals the end of volume descriptors on the ISO.
    '''
    __slots__ = ('_initialized', 'orig_extent_loc', 'new_extent_loc')

    FMT = '=B5sB2041s'

    def __init__(self):
        self._initialized = False

    def parse(self, vd, extent_loc):
        '''
        A method to parse a Volume Descriptor Set Terminator out of a string.

        Parameters:
         vd - The string to parse.
         extent_loc - The extent this VDST is currently located at.
        Returns:
         Nothing.
        '''
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('Volume Descriptor Set Terminator already initialized')

        (descriptor_type, identifier, version,
         zero_unused) = struct.unpack_from(self.FMT, vd, 0)

        # According to Ecma-119, 8.3.1, the volume descriptor set terminator
        # type should be 255
        if descriptor_type != VOLUME_DESCRIPTOR_TYPE_SET_TERMINATOR:
            raise pycidataexception.PyCidataInvalidISO('Invalid descriptor type')
        # According to Ecma-119, 8.3.2, the identifier should be 'CD001'
        if identifier != b'CD001':
            raise pycidataexception.PyCidataInvalidISO('Invalid identifier')
        # According to Ecma-119, 8.3.3, the version should be 1
        if version != 1:
            raise pycidataexception.PyCidataInvalidISO('Invalid version')
        # Ecma-119, 8.3.4 wants the rest zeroed, but other mastering tools
        # have been seen to put data there, so it is not checked.

        self.orig_extent_loc = extent_loc
        self.new_extent_loc = None

        self._initialized = True

    def new(self):
        '''
        A method to create a new Volume Descriptor Set Terminator.

        Parameters:
         None.
        Returns:
         Nothing.
        '''
        if self._initialized:
            raise pycidataexception.PyCidataInternalError('Volume Descriptor Set Terminator already initialized')

        self.orig_extent_loc = None
        # This will get set by the layout.
        self.new_extent_loc = 0

        self._initialized = True

    def record(self):
        '''
        A method to generate a string representing this Volume Descriptor Set
        Terminator.

        Parameters:
         None.
        Returns:
         String representing this Volume Descriptor Set Terminator.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('Volume Descriptor Set Terminator not yet initialized')
        return struct.pack(self.FMT, VOLUME_DESCRIPTOR_TYPE_SET_TERMINATOR,
                           b'CD001', 1, b'\x00' * 2041)

    def extent_location(self):
        '''
        A method to get this Volume Descriptor Set Terminator's extent location.

        Parameters:
         None.
        Returns:
         Integer extent location.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('Volume Descriptor Set Terminator not yet initialized')

        if self.new_extent_loc is None:
            return self.orig_extent_loc
        return self.new_extent_loc

    def set_extent_location(self, extent):
        '''
        A method to set the extent location of this Volume Descriptor Set
        Terminator.

        Parameters:
         extent - The new extent location.
        Returns:
         Nothing.
        '''
        if not self._initialized:
            raise pycidataexception.PyCidataInternalError('Volume Descriptor Set Terminator not yet initialized')

        self.new_extent_loc = extent


def pvd_factory(vol_ident=CIDATA_VOLUME_IDENTIFIER, set_size=1, seqnum=1,
                log_block_size=2048, tm=None):
    '''
    An internal function to create a Primary Volume Descriptor.

    Parameters:
     vol_ident - The volume identification string to use on the new ISO.
     set_size - The size of the set of ISOs this ISO is a part of.
     seqnum - The sequence number of the set of this ISO.
     log_block_size - The logical block size to use for the ISO.
     tm - The recording date for the root directory record.
    Returns:
     The newly created Primary Volume Descriptor.
    '''
    pvd = PrimaryVolumeDescriptor()
    pvd.new(vol_ident, set_size, seqnum, log_block_size, tm)
    return pvd


def vdst_factory():
    '''
    An internal function to create a new Volume Descriptor Set Terminator.

    Parameters:
     None.
    Returns:
     The newly created Volume Descriptor Set Terminator.
    '''
    vdst = VolumeDescriptorSetTerminator()
    vdst.new()
    return vdst
