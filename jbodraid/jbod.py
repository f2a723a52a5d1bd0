"""In-memory JBOD device: sixteen disks of 256 blocks of 256 bytes each."""

from __future__ import annotations

import hashlib
from enum import IntEnum

NUM_DISKS = 16
BLOCK_SIZE = 256
NUM_BLOCKS_PER_DISK = 256
DISK_SIZE = BLOCK_SIZE * NUM_BLOCKS_PER_DISK


class Command(IntEnum):
    """Commands understood by the device, as encoded in an operation word."""

    MOUNT = 0
    UNMOUNT = 1
    SEEK_TO_DISK = 2
    SEEK_TO_BLOCK = 3
    READ_BLOCK = 4
    WRITE_PERMISSION = 5
    REVOKE_WRITE_PERMISSION = 6
    WRITE_BLOCK = 7
    SIGN_BLOCK = 8


class ErrorCode(IntEnum):
    """Reasons a device operation can fail."""

    NO_ERROR = 0
    UNMOUNTED = 1
    ALREADY_MOUNTED = 2
    ALREADY_UNMOUNTED = 3
    CACHELOAD_FAIL = 4
    CACHEWRITE_FAIL = 5
    BAD_CMD = 6
    BAD_DISK_NUM = 7
    BAD_BLOCK_NUM = 8
    BAD_READ = 9
    BAD_WRITE = 10
    WRITE_PERMISSION_ALREADY_GRANTED = 12
    WRITE_PERMISSION_REVOKED = 13


_MESSAGES = {
    ErrorCode.NO_ERROR: "no error",
    ErrorCode.UNMOUNTED: "the device is not mounted",
    ErrorCode.ALREADY_MOUNTED: "the device is already mounted",
    ErrorCode.ALREADY_UNMOUNTED: "the device is already unmounted",
    ErrorCode.CACHELOAD_FAIL: "failed to load the cache",
    ErrorCode.CACHEWRITE_FAIL: "failed to write the cache",
    ErrorCode.BAD_CMD: "invalid command",
    ErrorCode.BAD_DISK_NUM: "invalid disk number",
    ErrorCode.BAD_BLOCK_NUM: "invalid block number",
    ErrorCode.BAD_READ: "read failed",
    ErrorCode.BAD_WRITE: "write failed",
    ErrorCode.WRITE_PERMISSION_ALREADY_GRANTED: "write permission already granted",
    ErrorCode.WRITE_PERMISSION_REVOKED: "write permission is not granted",
}


class JbodError(Exception):
    """A device operation failed; ``code`` tells why."""

    def __init__(self, code: ErrorCode) -> None:
        self.code = ErrorCode(code)
        super().__init__(_MESSAGES[self.code])


def pack_op(disk_id: int = 0, block_id: int = 0, command: int = 0, reserved: int = 0) -> int:
    """Pack the fields into a 32-bit operation word.

    Bits 0-5 hold the command, 6-9 the disk, 10-17 the block and 18-31
    the reserved field. Out-of-range values are masked to their width.
    """
    return (
        (int(command) & 0x3F)
        | (int(disk_id) & 0xF) << 6
        | (int(block_id) & 0xFF) << 10
        | (int(reserved) & 0x3FFF) << 18
    )


def unpack_op(op: int) -> tuple[int, int, int, int]:
    """Split an operation word into (disk_id, block_id, command, reserved)."""
    return (
        (op >> 6) & 0xF,
        (op >> 10) & 0xFF,
        op & 0x3F,
        (op >> 18) & 0x3FFF,
    )


class BlockDevice:
    """A set of disks driven by packed operation words.

    ``disks`` holds the raw contents, one bytearray per disk.
    """

    def __init__(self) -> None:
        self.disks = [bytearray(DISK_SIZE) for _ in range(NUM_DISKS)]
        self.mounted = False
        self.write_permitted = False
        self.current_disk = 0
        self.current_block = 0

    def operation(self, op: int, block: bytes | None = None) -> bytes | None:
        """Carry out one operation.

        Returns the block contents for READ_BLOCK, the SHA-1 digest of the
        current block for SIGN_BLOCK and None otherwise. Raises JbodError
        on failure.
        """
        disk_id, block_id, command, _ = unpack_op(op)
        try:
            cmd = Command(command)
        except ValueError:
            raise JbodError(ErrorCode.BAD_CMD) from None

        if cmd is Command.MOUNT:
            if self.mounted:
                raise JbodError(ErrorCode.ALREADY_MOUNTED)
            self.mounted = True
            self.current_disk = 0
            self.current_block = 0
            return None
        if cmd is Command.UNMOUNT:
            if not self.mounted:
                raise JbodError(ErrorCode.ALREADY_UNMOUNTED)
            self.mounted = False
            return None
        if cmd is Command.WRITE_PERMISSION:
            if self.write_permitted:
                raise JbodError(ErrorCode.WRITE_PERMISSION_ALREADY_GRANTED)
            self.write_permitted = True
            return None
        if cmd is Command.REVOKE_WRITE_PERMISSION:
            self.write_permitted = False
            return None

        if not self.mounted:
            raise JbodError(ErrorCode.UNMOUNTED)

        if cmd is Command.SEEK_TO_DISK:
            if disk_id >= NUM_DISKS:
                raise JbodError(ErrorCode.BAD_DISK_NUM)
            self.current_disk = disk_id
            return None
        if cmd is Command.SEEK_TO_BLOCK:
            if block_id >= NUM_BLOCKS_PER_DISK:
                raise JbodError(ErrorCode.BAD_BLOCK_NUM)
            self.current_block = block_id
            return None
        if cmd is Command.READ_BLOCK:
            return bytes(self._current_slice())
        if cmd is Command.WRITE_BLOCK:
            if not self.write_permitted:
                raise JbodError(ErrorCode.WRITE_PERMISSION_REVOKED)
            if block is None or len(block) != BLOCK_SIZE:
                raise JbodError(ErrorCode.BAD_WRITE)
            start = self.current_block * BLOCK_SIZE
            self.disks[self.current_disk][start:start + BLOCK_SIZE] = block
            return None
        # SIGN_BLOCK
        return hashlib.sha1(self._current_slice()).digest()

    def _current_slice(self) -> bytearray:
        start = self.current_block * BLOCK_SIZE
        return self.disks[self.current_disk][start:start + BLOCK_SIZE]