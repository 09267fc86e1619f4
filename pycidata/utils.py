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

"""Various utilities for PyCidata."""

import struct

from pycidata import pycidataexception

# For mypy annotations
if False:  # pylint: disable=using-constant-test
    from typing import Union  # NOQA pylint: disable=unused-import

# Uppercase letters, digits, underscore, dash and dot.  ISO9660 "d1"
# characters are only A-Z, 0-9 and _, but the NoCloud names need the dash.
_allowed_name_characters = set(tuple(range(65, 91)) + tuple(range(48, 58)) + tuple((ord(b'_'), ord(b'-'), ord(b'.'))))


def swab_32bit(x):
    # type: (int) -> int
    """
    A function to swab a 32-bit integer.

    Parameters:
     x - The 32-bit integer to swab.
    Returns:
     The swabbed version of the 32-bit integer.
    """
    if x > (((1 << 32) - 1) & 0xFFFFFFFF) or x < 0:
        raise pycidataexception.PyCidataInternalError('Invalid integer passed to swab; must be unsigned 32-bits!')

    return struct.unpack('<I', struct.pack('>I', x))[0]


def swab_16bit(x):
    # type: (int) -> int
    """
    A function to swab a 16-bit integer.

    Parameters:
     x - The 16-bit integer to swab.
    Returns:
     The swabbed version of the 16-bit integer.
    """
    if x > (((1 << 16) - 1) & 0xFFFF) or x < 0:
        raise pycidataexception.PyCidataInternalError('Invalid integer passed to swab; must be unsigned 16-bits!')

    return struct.unpack('<H', struct.pack('>H', x))[0]


def ceiling_div(numer, denom):
    # type: (int, int) -> int
    """
    A function to do ceiling division; that is, dividing numerator by
    denominator and taking the ceiling.

    Parameters:
     numer - The numerator for the division.
     denom - The denominator for the division.
    Returns:
     The ceiling after dividing numerator by denominator.
    """
    # Upside-down floor division gives the ceiling.
    return -(-numer // denom)


def extents_for_length(length, log_block_size):
    # type: (int, int) -> int
    """
    A function to compute how many logical blocks a piece of data occupies.
    Zero-length data still occupies a single block.

    Parameters:
     length - The length of the data in bytes.
     log_block_size - The logical block size.
    Returns:
     The number of logical blocks needed to hold the data.
    """
    return max(1, ceiling_div(length, log_block_size))


def encode_space_pad(instr, length):
    # type: (bytes, int) -> bytes
    """
    A function to pad out an input string with spaces to the length specified.

    Parameters:
     instr - The input string to pad.
     length - The length to pad the input string to.
    Returns:
     The input string padded with spaces.
    """
    if len(instr) > length:
        raise pycidataexception.PyCidataInvalidInput('Input string too long!')

    return instr.ljust(length, b' ')


def normalize_iso_name(name):
    # type: (Union[str, bytes]) -> bytes
    """
    A function to turn a caller-supplied file name into the identifier that
    will be recorded on the ISO.  The name is uppercased, and an optional
    leading slash is removed.  No ';1' version is appended.

    Parameters:
     name - The name to normalize, as a str or as bytes.
    Returns:
     The normalized name as bytes.
    """
    if isinstance(name, bytes):
        try:
            name = name.decode('ascii')
        except UnicodeDecodeError:
            raise pycidataexception.PyCidataInvalidInput('File names must be ASCII')

    if name.startswith('/'):
        name = name[1:]

    if not name:
        raise pycidataexception.PyCidataInvalidInput('File names must not be empty')

    try:
        encoded = name.upper().encode('ascii')
    except UnicodeEncodeError:
        raise pycidataexception.PyCidataInvalidInput('File names must be ASCII')

    for char in bytearray(encoded):
        if char not in _allowed_name_characters:
            raise pycidataexception.PyCidataInvalidInput('%s is not a valid ISO9660 file name; only A-Z, 0-9, _, - and . are allowed' % (name))

    return encoded


def encode_text(text):
    # type: (str) -> bytes
    """
    A function to encode a text payload as UTF-8.  Lone surrogates cannot be
    encoded as UTF-8, so each one is replaced with U+FFFD; a high and low
    surrogate that form a pair are joined into the character they stand for.

    Parameters:
     text - The string to encode.
    Returns:
     The UTF-8 encoding of the string.
    """
    # A round trip through UTF-16 pairs up surrogates, and the 'replace'
    # decode turns every unpaired one into a single U+FFFD.
    utf16 = text.encode('utf-16-le', 'surrogatepass')
    return utf16.decode('utf-16-le', 'replace').encode('utf-8')
