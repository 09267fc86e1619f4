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

"""Contains exceptions that can be raised by PyCidata."""


class PyCidataException(Exception):
    """The custom Exception class for PyCidata."""
    def __init__(self, msg):
        # type: (str) -> None
        Exception.__init__(self, msg)


class PyCidataInvalidISO(PyCidataException):
    """The custom Exception class for invalid ISOs in PyCidata."""
    def __init__(self, msg):
        # type: (str) -> None
        PyCidataException.__init__(self, msg)


class PyCidataInvalidInput(PyCidataException):
    """The custom Exception class for invalid input to PyCidata."""
    def __init__(self, msg):
        # type: (str) -> None
        PyCidataException.__init__(self, msg)


class PyCidataInternalError(PyCidataException):
    """The custom Exception class for internal errors in PyCidata."""
    def __init__(self, msg):
        # type: (str) -> None
        PyCidataException.__init__(self, msg)
