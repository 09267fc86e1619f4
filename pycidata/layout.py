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
The sector layout of a seed ISO.  The layout is fixed: the System Area in
extents 0 to 15, the Primary Volume Descriptor in extent 16, the Volume
Descriptor Set Terminator in extent 17, the root directory in extent 18, and
then the data of each file, in name order, starting at extent 19.
"""

import collections
import logging

from pycidata import dr
from pycidata import pycidataexception
from pycidata import utils

# For mypy annotations
if False:  # pylint: disable=using-constant-test
    from typing import Iterable, List, Optional, Tuple  # NOQA pylint: disable=unused-import

_logger = logging.getLogger(__name__)

SYSTEM_AREA_EXTENTS = 16
PVD_EXTENT = 16
VDST_EXTENT = 17
ROOT_DIR_EXTENT = 18
FIRST_FILE_EXTENT = 19

FileExtent = collections.namedtuple('FileExtent', ['name', 'extent', 'length'])


class Layout(object):
    """
    A class that holds the planned extent of every structure on the ISO.
    """
    __slots__ = ('log_block_size', 'pvd_extent', 'vdst_extent', 'root_extent',
                 'file_extents', 'total_extents')

    def __init__(self, log_block_size, file_extents, total_extents):
        # type: (int, List[FileExtent], int) -> None
        self.log_block_size = log_block_size
        self.pvd_extent = PVD_EXTENT
        self.vdst_extent = VDST_EXTENT
        self.root_extent = ROOT_DIR_EXTENT
        self.file_extents = file_extents
        self.total_extents = total_extents

    def extent_for(self, name):
        # type: (bytes) -> int
        """
        Look up the planned extent for a file.

        Parameters:
         name - The ISO9660 name of the file.
        Returns:
         The extent the data for the file starts at.
        """
        for fe in self.file_extents:
            if fe.name == name:
                return fe.extent
        raise pycidataexception.PyCidataInternalError('No extent planned for %s' % (name.decode('ascii')))

    def total_bytes(self):
        # type: () -> int
        """
        The size of the whole ISO in bytes.

        Parameters:
         None.
        Returns:
         The number of bytes the ISO occupies.
        """
        return self.total_extents * self.log_block_size


def root_directory_size(names):
    # type: (Iterable[bytes]) -> int
    """
    Compute the number of bytes the root directory records take, including the
    dot and dotdot records.

    Parameters:
     names - The names of the files in the root directory.
    Returns:
     The packed size of all of the root directory records.
    """
    size = 2 * dr.DirectoryRecord.length(1)
    for name in names:
        size += dr.DirectoryRecord.length(len(name))
    return size


def plan_layout(files, log_block_size=2048, dir_size=None):
    # type: (Iterable[Tuple[bytes, int]], int, Optional[int]) -> Layout
    """
    Plan the extents of every structure on the ISO.

    Parameters:
     files - An iterable of (name, data length) tuples, in any order.
     log_block_size - The logical block size of the ISO.
     dir_size - The packed size of the root directory records, or None to
                compute it from the file names.
    Returns:
     The Layout for the ISO.
    """
    # Extents are handed out in directory order, which is name order and not
    # the order the files were added in.
    ordered = sorted(files, key=lambda f: f[0])

    if dir_size is None:
        dir_size = root_directory_size([name for name, length_unused in ordered])
    if dir_size > log_block_size:
        raise pycidataexception.PyCidataInvalidInput('Root directory records need %d bytes, but the root directory is a single %d byte extent' % (dir_size, log_block_size))

    current_extent = FIRST_FILE_EXTENT
    file_extents = []  # type: List[FileExtent]
    for name, length in ordered:
        file_extents.append(FileExtent(name, current_extent, length))
        current_extent += utils.extents_for_length(length, log_block_size)

    _logger.debug('Planned %d files over %d extents', len(file_extents), current_extent)

    return Layout(log_block_size, file_extents, current_extent)
