import pytest
import os
import struct
import sys

prefix = '.'
for i in range(0, 3):
    if os.path.isdir(os.path.join(prefix, 'pycidata')):
        sys.path.insert(0, prefix)
        break
    else:
        prefix = '../' + prefix

import pycidata.headervd
import pycidata.pycidataexception

def make_pvd(**kwargs):
    pvd = pycidata.headervd.pvd_factory(**kwargs)
    pvd.root_directory_record().set_data_location(18)
    return pvd

def test_pvd_record_not_initialized():
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInternalError) as excinfo:
        pvd.record()
    assert(str(excinfo.value) == 'This Primary Volume Descriptor is not yet initialized')

def test_pvd_new_twice():
    pvd = make_pvd()
    with pytest.raises(pycidata.pycidataexception.PyCidataInternalError) as excinfo:
        pvd.new(b'CIDATA', 1, 1, 2048, None)
    assert(str(excinfo.value) == 'This Primary Volume Descriptor is already initialized')

def test_pvd_new_vol_ident_too_long():
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidInput) as excinfo:
        pvd.new(b'a' * 33, 1, 1, 2048, None)
    assert(str(excinfo.value) == 'The volume identifier has a maximum length of 32')

def test_pvd_new_bad_seqnum():
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidInput) as excinfo:
        pvd.new(b'CIDATA', 1, 2, 2048, None)
    assert(str(excinfo.value) == 'Sequence number must be less than or equal to set size')

def test_pvd_record_layout():
    pvd = make_pvd()
    pvd.set_space_size(21)
    rec = pvd.record()
    assert(len(rec) == 2048)
    assert(rec[0:7] == b'\x01CD001\x01')
    assert(rec[7:8] == b'\x00')
    assert(rec[8:40] == b' ' * 32)
    assert(rec[40:72] == b'CIDATA' + b' ' * 26)
    assert(rec[72:80] == b'\x00' * 8)
    assert(rec[80:88] == struct.pack('<L', 21) + struct.pack('>L', 21))
    assert(rec[88:120] == b'\x00' * 32)
    assert(rec[120:124] == b'\x01\x00\x00\x01')
    assert(rec[124:128] == b'\x01\x00\x00\x01')
    assert(rec[128:132] == b'\x00\x08\x08\x00')
    assert(rec[132:156] == b'\x00' * 24)
    assert(rec[156] == 34)
    assert(rec[158:166] == struct.pack('<L', 18) + struct.pack('>L', 18))
    assert(rec[166:174] == struct.pack('<L', 2048) + struct.pack('>L', 2048))
    assert(rec[174:181] == b'\x7e\x02\x15\x00\x00\x00\x00')
    assert(rec[181] == 2)
    assert(rec[188:190] == b'\x01\x00')
    assert(rec[190:813] == b' ' * 623)
    for offset in (813, 830, 847, 864):
        assert(rec[offset:offset + 17] == b'0' * 16 + b'\x00')
    assert(rec[881] == 1)
    assert(rec[882:2048] == b'\x00' * 1166)

def test_pvd_record_volume_identifier():
    pvd = make_pvd(vol_ident=b'SEED')
    assert(pvd.record()[40:72] == b'SEED' + b' ' * 28)

def test_pvd_set_space_size_too_large():
    pvd = make_pvd()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidInput) as excinfo:
        pvd.set_space_size(2**32)
    assert(str(excinfo.value) == 'Volume space size does not fit in 32 bits')

def test_pvd_parse_round_trip():
    pvd = make_pvd()
    pvd.set_space_size(21)
    rec = pvd.record()

    parsed = pycidata.headervd.PrimaryVolumeDescriptor()
    parsed.parse(rec, 16)
    assert(parsed.space_size == 21)
    assert(parsed.logical_block_size() == 2048)
    assert(parsed.volume_identifier == b'CIDATA' + b' ' * 26)
    assert(parsed.extent_location() == 16)
    assert(parsed.root_directory_record().extent_location() == 18)
    assert(parsed.record() == rec)

def test_pvd_parse_twice():
    rec = make_pvd().record()
    parsed = pycidata.headervd.PrimaryVolumeDescriptor()
    parsed.parse(rec, 16)
    with pytest.raises(pycidata.pycidataexception.PyCidataInternalError) as excinfo:
        parsed.parse(rec, 16)
    assert(str(excinfo.value) == 'This Primary Volume Descriptor is already initialized')

def test_pvd_parse_bad_length():
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(b'\x00' * 2047, 16)
    assert(str(excinfo.value) == 'Primary Volume Descriptor must be 2048 bytes')

def test_pvd_parse_bad_type():
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(b'\x00' * 2048, 16)
    assert(str(excinfo.value) == 'Invalid volume descriptor')

def test_pvd_parse_bad_identifier():
    rec = bytearray(make_pvd().record())
    rec[1:6] = b'CD002'
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'invalid CD isoIdentification')

def test_pvd_parse_bad_version():
    rec = bytearray(make_pvd().record())
    rec[6] = 2
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'Invalid volume descriptor version 2')

def test_pvd_parse_bad_flags():
    rec = bytearray(make_pvd().record())
    rec[7] = 1
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'PVD flags field is not zero')

def test_pvd_parse_bad_unused1():
    rec = bytearray(make_pvd().record())
    rec[72] = 1
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'data in 1st unused field not zero')

def test_pvd_parse_bad_unused2():
    rec = bytearray(make_pvd().record())
    rec[882] = 1
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'data in 2nd unused field not zero')

def test_pvd_parse_bad_space_size():
    rec = bytearray(make_pvd().record())
    rec[87] = 0xff
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'Little-endian and big-endian space size disagree')

def test_pvd_parse_bad_set_size():
    rec = bytearray(make_pvd().record())
    rec[123] = 2
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'Little-endian and big-endian set size disagree')

def test_pvd_parse_bad_log_block_size():
    rec = bytearray(make_pvd().record())
    rec[130] = 0x04
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'Little-endian and big-endian logical block size disagree')

def test_pvd_parse_bad_path_table_size():
    rec = bytearray(make_pvd().record())
    rec[132] = 10
    pvd = pycidata.headervd.PrimaryVolumeDescriptor()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        pvd.parse(bytes(rec), 16)
    assert(str(excinfo.value) == 'Little-endian and big-endian path table size disagree')

def test_vdst_record():
    vdst = pycidata.headervd.vdst_factory()
    assert(vdst.record() == b'\xffCD001\x01' + b'\x00' * 2041)

def test_vdst_record_not_initialized():
    vdst = pycidata.headervd.VolumeDescriptorSetTerminator()
    with pytest.raises(pycidata.pycidataexception.PyCidataInternalError) as excinfo:
        vdst.record()
    assert(str(excinfo.value) == 'Volume Descriptor Set Terminator not yet initialized')

def test_vdst_new_twice():
    vdst = pycidata.headervd.vdst_factory()
    with pytest.raises(pycidata.pycidataexception.PyCidataInternalError) as excinfo:
        vdst.new()
    assert(str(excinfo.value) == 'Volume Descriptor Set Terminator already initialized')

def test_vdst_parse():
    vdst = pycidata.headervd.VolumeDescriptorSetTerminator()
    vdst.parse(b'\xffCD001\x01' + b'\x00' * 2041, 17)
    assert(vdst.extent_location() == 17)
    vdst.set_extent_location(20)
    assert(vdst.extent_location() == 20)

def test_vdst_parse_bad_type():
    vdst = pycidata.headervd.VolumeDescriptorSetTerminator()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        vdst.parse(b'\xfeCD001\x01' + b'\x00' * 2041, 17)
    assert(str(excinfo.value) == 'Invalid descriptor type')

def test_vdst_parse_bad_identifier():
    vdst = pycidata.headervd.VolumeDescriptorSetTerminator()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        vdst.parse(b'\xffCD002\x01' + b'\x00' * 2041, 17)
    assert(str(excinfo.value) == 'Invalid identifier')

def test_vdst_parse_bad_version():
    vdst = pycidata.headervd.VolumeDescriptorSetTerminator()
    with pytest.raises(pycidata.pycidataexception.PyCidataInvalidISO) as excinfo:
        vdst.parse(b'\xffCD001\x02' + b'\x00' * 2041, 17)
    assert(str(excinfo.value) == 'Invalid version')
