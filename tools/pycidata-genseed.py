#!/usr/bin/python3

# Copyright (C) 2018  Chris Lalancette <clalancette@gmail.com>

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
The main code for the pycidata-genseed tool, which builds a cloud-init
NoCloud seed ISO out of a user-data file and a meta-data file.
'''

import argparse
import logging
import sys
import time

import pycidata
from pycidata import pycidataexception
from pycidata import utils

log = logging.getLogger('pycidata-genseed')


def parse_arguments():
    '''
    A function to parse all of the arguments passed to the executable.

    Parameters:
     None.
    Returns:
     An ArgumentParser object with the parsed command-line arguments.
    '''
    parser = argparse.ArgumentParser()
    parser.add_argument('-o', '--output', help='Set the filename of the output seed ISO', action='store', required=True)
    parser.add_argument('--user-data', help='File holding the cloud-config user-data', action='store', required=True)
    parser.add_argument('--meta-data', help='File holding the cloud-init meta-data', action='store', required=True)
    parser.add_argument('--volume-id', help='Set the volume identifier of the ISO', action='store', default='CIDATA')
    parser.add_argument('--record-date', help='Date (YYYY-MM-DD) to stamp into the directory records', action='store', default=None)
    parser.add_argument('-v', '--verbose', help='Enable debug logging', action='store_true')
    return parser.parse_args()


def read_text(filename):
    '''
    A function to read a UTF-8 text payload from a file.

    Parameters:
     filename - The file to read.
    Returns:
     The contents of the file as a string.
    '''
    # Read as bytes so line endings reach the ISO untouched.
    with open(filename, 'rb') as infp:
        return infp.read().decode('utf-8')


def main():
    '''
    The main function for this executable that does the work of generating
    the seed ISO given the parameters specified by the user.
    '''
    args = parse_arguments()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    record_date = None
    if args.record_date is not None:
        try:
            record_date = time.strptime(args.record_date, '%Y-%m-%d')
        except ValueError:
            log.error('Invalid record date %s; expected YYYY-MM-DD', args.record_date)
            return 1

    try:
        user_data = read_text(args.user_data)
        meta_data = read_text(args.meta_data)
    except (OSError, UnicodeDecodeError) as e:
        log.error('Failed to read input: %s', e)
        return 1

    iso = pycidata.PyCidata()
    try:
        iso.new(vol_ident=args.volume_id, record_date=record_date)
        iso.add_data(utils.encode_text(user_data), 'USER-DATA')
        iso.add_data(utils.encode_text(meta_data), 'META-DATA')
        iso_bytes = iso.get_bytes()
    except pycidataexception.PyCidataException as e:
        log.error('Failed to build seed ISO: %s', e)
        return 1

    iso.close()

    with open(args.output, 'wb') as outfp:
        outfp.write(iso_bytes)

    log.info('Generated cloud-init seed ISO: %d bytes', len(iso_bytes))

    return 0


if __name__ == '__main__':
    sys.exit(main())
