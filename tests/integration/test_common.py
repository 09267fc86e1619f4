import collections
import struct

# Helpers that pick a seed ISO apart straight from its bytes, without going
# through the library's own parser.

BLOCK = 2048

RawRecord = collections.namedtuple('RawRecord', ['length', 'extent', 'data_length', 'date', 'flags', 'name'])

def sector(iso, lba):
    return iso[lba * BLOCK:(lba + 1) * BLOCK]

def u16le(buf, offset):
    return struct.unpack_from('<H', buf, offset)[0]

def u16be(buf, offset):
    return struct.unpack_from('>H', buf, offset)[0]

def u32le(buf, offset):
    return struct.unpack_from('<L', buf, offset)[0]

def u32be(buf, offset):
    return struct.unpack_from('>L', buf, offset)[0]

def parse_raw_record(buf, offset):
    length = buf[offset]
    extent_le = u32le(buf, offset + 2)
    assert(extent_le == u32be(buf, offset + 6))
    data_length_le = u32le(buf, offset + 10)
    assert(data_length_le == u32be(buf, offset + 14))
    assert(u16le(buf, offset + 28) == 1)
    assert(u16be(buf, offset + 30) == 1)
    len_fi = buf[offset + 32]
    name = bytes(buf[offset + 33:offset + 33 + len_fi])
    return RawRecord(length, extent_le, data_length_le,
                     bytes(buf[offset + 18:offset + 25]), buf[offset + 25],
                     name)

def parse_raw_root(iso, lba=18):
    buf = sector(iso, lba)
    records = []
    offset = 0
    while offset < BLOCK and buf[offset] != 0:
        rec = parse_raw_record(buf, offset)
        records.append(rec)
        offset += rec.length
    return records

def raw_file_content(iso, name):
    for rec in parse_raw_root(iso):
        if rec.name == name:
            start = rec.extent * BLOCK
            return iso[start:start + rec.data_length]
    return None

def internal_check_image(iso):
    # Sector aligned, and larger than the System Area.
    assert(len(iso) % BLOCK == 0)
    assert(len(iso) > 16 * BLOCK)

    assert(iso[0:16 * BLOCK] == b'\x00' * (16 * BLOCK))

    pvd = sector(iso, 16)
    assert(pvd[0] == 1)
    assert(pvd[1:6] == b'CD001')
    assert(pvd[6] == 1)
    assert(pvd[40:72].rstrip(b' ') == b'CIDATA')
    assert(u16le(pvd, 128) == 2048)
    assert(u16be(pvd, 130) == 2048)
    assert(u32le(pvd, 80) == u32be(pvd, 84))
    assert(u32le(pvd, 80) * BLOCK == len(iso))

    root = parse_raw_record(pvd, 156)
    assert(root.extent == 18)
    assert(root.data_length == BLOCK)

    vdst = sector(iso, 17)
    assert(vdst[0] == 255)
    assert(vdst[1:6] == b'CD001')
    assert(vdst[6] == 1)

def internal_check_seed_directory(iso):
    records = parse_raw_root(iso)
    assert(len(records) == 4)
    assert(records[0].name == b'\x00')
    assert(records[1].name == b'\x01')
    assert(records[0].flags == 2)
    assert(records[1].flags == 2)
    assert(records[0].extent == 18)
    assert(records[1].extent == 18)
    assert(records[2].name == b'META-DATA')
    assert(records[3].name == b'USER-DATA')
    for rec in records[2:]:
        assert(rec.flags == 0)
        assert(rec.extent >= 19)
    return records
