import pytest

from jbodraid.jbod import BLOCK_SIZE, DISK_SIZE, BlockDevice
from jbodraid.mdadm import Mdadm, MdadmError

SIZE = 16
TEST3_SIZE = 258
THREE_BLOCKS = bytes([0xAA] + [0xBB] * 256 + [0xCC])


def fill_pattern(device):
    device.disks[0][0:BLOCK_SIZE] = b"\xaa" * BLOCK_SIZE
    device.disks[0][BLOCK_SIZE:2 * BLOCK_SIZE] = b"\xbb" * BLOCK_SIZE
    device.disks[0][2 * BLOCK_SIZE:3 * BLOCK_SIZE] = b"\xcc" * BLOCK_SIZE
    device.disks[14][:] = b"\xee" * DISK_SIZE
    device.disks[15][:] = b"\xff" * DISK_SIZE


@pytest.fixture
def device():
    return BlockDevice()


@pytest.fixture
def mounted(device):
    array = Mdadm(device)
    array.mount()
    return array


@pytest.fixture
def writable(mounted):
    mounted.grant_write_permission()
    return mounted


def test_mount_unmount(device):
    array = Mdadm(device)
    array.mount()
    assert array.mounted and device.mounted
    with pytest.raises(MdadmError):
        array.mount()
    array.unmount()
    assert not array.mounted and not device.mounted
    with pytest.raises(MdadmError):
        array.unmount()


def test_context_manager(device):
    with Mdadm(device) as array:
        assert device.mounted
        assert array.read(0, 4) == bytes(4)
    assert not device.mounted


def test_read_before_mount(device):
    with pytest.raises(MdadmError):
        Mdadm(device).read(0, SIZE)


@pytest.mark.parametrize(
    "addr,length",
    [(0x1FFFFFFF, SIZE), (1048570, SIZE), (0, 2049), (-1, SIZE)],
)
def test_read_invalid_parameters(mounted, addr, length):
    with pytest.raises(MdadmError):
        mounted.read(addr, length)


def test_zero_length_read(mounted):
    assert mounted.read(0, 0) == b""


def test_read_within_block(device, mounted):
    fill_pattern(device)
    assert mounted.read(0, SIZE) == b"\xaa" * 16


def test_read_across_blocks(device, mounted):
    fill_pattern(device)
    assert mounted.read(248, SIZE) == b"\xaa" * 8 + b"\xbb" * 8


def test_read_three_blocks(device, mounted):
    fill_pattern(device)
    assert mounted.read(255, TEST3_SIZE) == THREE_BLOCKS


def test_read_across_disks(device, mounted):
    fill_pattern(device)
    assert mounted.read(983032, SIZE) == b"\xee" * 8 + b"\xff" * 8


def test_read_maximum_size(device, mounted):
    fill_pattern(device)
    data = mounted.read(0, 2048)
    assert len(data) == 2048
    assert data[:BLOCK_SIZE] == b"\xaa" * BLOCK_SIZE


def test_write_before_mount(device):
    with pytest.raises(MdadmError):
        Mdadm(device).write(0, bytes(SIZE))


def test_write_before_permission(mounted):
    with pytest.raises(MdadmError):
        mounted.write(0, bytes(SIZE))


@pytest.mark.parametrize(
    "addr,length",
    [(0x1FFFFFFF, SIZE), (1048570, SIZE), (0, 2049)],
)
def test_write_invalid_parameters(writable, addr, length):
    with pytest.raises(MdadmError):
        writable.write(addr, bytes(length))


def test_zero_length_write(writable):
    assert writable.write(0, b"") == 0


def test_write_within_block(device, writable):
    expected = b"\xaa" * SIZE
    assert writable.write(256, expected) == SIZE
    assert bytes(device.disks[0][256:256 + SIZE]) == expected


def test_write_across_blocks(device, writable):
    expected = b"\xaa" * 8 + b"\xbb" * 8
    assert writable.write(327928, expected) == SIZE
    disk, offset = divmod(327928, DISK_SIZE)
    assert bytes(device.disks[disk][offset:offset + SIZE]) == expected


def test_write_three_blocks(device, writable):
    assert writable.write(528383, THREE_BLOCKS) == TEST3_SIZE
    disk, offset = divmod(528383, DISK_SIZE)
    assert bytes(device.disks[disk][offset:offset + TEST3_SIZE]) == THREE_BLOCKS


def test_write_across_disks(device, writable):
    expected = b"\xee" * 8 + b"\xff" * 8
    assert writable.write(917496, expected) == SIZE
    assert bytes(device.disks[13][-8:] + device.disks[14][:8]) == expected


def test_write_read_round_trip(writable):
    payload = bytes(i % 251 for i in range(2048))
    writable.write(DISK_SIZE - 1000, payload)
    assert writable.read(DISK_SIZE - 1000, len(payload)) == payload


def test_revoke_stops_writes(writable):
    writable.revoke_write_permission()
    assert not writable.write_permitted
    with pytest.raises(MdadmError):
        writable.write(0, b"\x01")


def test_grant_twice_fails(writable):
    with pytest.raises(MdadmError):
        writable.grant_write_permission()


def test_write_accepts_bytearray(device, writable):
    assert writable.write(0, bytearray(b"\x05\x06")) == 2
    assert bytes(device.disks[0][:2]) == b"\x05\x06"