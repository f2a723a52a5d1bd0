"""A linear address space spread over the disks of a JBOD device."""

from __future__ import annotations

from collections.abc import Iterator

from jbodraid.jbod import (
    BLOCK_SIZE,
    DISK_SIZE,
    NUM_DISKS,
    BlockDevice,
    Command,
    JbodError,
    pack_op,
)
from jbodraid.util import debug_log

MAX_IO_SIZE = 2048
TOTAL_SIZE = NUM_DISKS * DISK_SIZE


class MdadmError(Exception):
    """An array operation was refused or the device failed."""


def _segments(start: int, length: int) -> Iterator[tuple[int, int, int, int]]:
    """Yield (disk, block, offset, size) pieces covering the address range."""
    end = start + length
    addr = start
    while addr < end:
        disk, within = divmod(addr, DISK_SIZE)
        block, offset = divmod(within, BLOCK_SIZE)
        size = min(end - addr, BLOCK_SIZE - offset)
        yield disk, block, offset, size
        addr += size


class Mdadm:
    """Reads and writes byte ranges of the linear address space of a device."""

    def __init__(self, device: BlockDevice) -> None:
        self.device = device
        self.mounted = False
        self.write_permitted = False

    def __enter__(self) -> Mdadm:
        self.mount()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.mounted:
            self.unmount()

    def _command(
        self,
        command: Command,
        *,
        disk_id: int = 0,
        block_id: int = 0,
        block: bytes | None = None,
    ) -> bytes | None:
        try:
            return self.device.operation(pack_op(disk_id, block_id, command), block)
        except JbodError as exc:
            raise MdadmError(f"{command.name.lower()} failed: {exc}") from exc

    def mount(self) -> None:
        """Mount the device."""
        if self.mounted:
            raise MdadmError("already mounted")
        self._command(Command.MOUNT)
        self.mounted = True

    def unmount(self) -> None:
        """Unmount the device."""
        if not self.mounted:
            raise MdadmError("already unmounted")
        self._command(Command.UNMOUNT)
        self.mounted = False

    def grant_write_permission(self) -> None:
        """Ask the device for permission to write."""
        self._command(Command.WRITE_PERMISSION)
        self.write_permitted = True

    def revoke_write_permission(self) -> None:
        """Give up permission to write."""
        self._command(Command.REVOKE_WRITE_PERMISSION)
        self.write_permitted = False

    @staticmethod
    def _check_range(start_addr: int, length: int) -> None:
        if length > MAX_IO_SIZE:
            raise MdadmError(f"I/O size {length} exceeds {MAX_IO_SIZE} bytes")
        if start_addr < 0 or length < 0 or start_addr + length > TOTAL_SIZE:
            raise MdadmError(
                f"range {start_addr}+{length} is outside the address space"
            )

    def _seek(self, disk: int, block: int) -> None:
        self._command(Command.SEEK_TO_DISK, disk_id=disk)
        self._command(Command.SEEK_TO_BLOCK, block_id=block)

    def read(self, start_addr: int, length: int) -> bytes:
        """Return ``length`` bytes starting at linear address ``start_addr``."""
        if not self.mounted:
            raise MdadmError("not mounted")
        self._check_range(start_addr, length)
        out = bytearray()
        for disk, block, offset, size in _segments(start_addr, length):
            self._seek(disk, block)
            data = self._command(Command.READ_BLOCK)
            out += data[offset:offset + size]
        return bytes(out)

    def write(self, start_addr: int, data: bytes) -> int:
        """Write ``data`` at linear address ``start_addr``; return bytes written."""
        if not self.mounted:
            raise MdadmError("not mounted")
        if not self.write_permitted:
            raise MdadmError("write permission not granted")
        view = memoryview(bytes(data))
        self._check_range(start_addr, len(view))
        written = 0
        for disk, block, offset, size in _segments(start_addr, len(view)):
            self._seek(disk, block)
            current = bytearray(self._command(Command.READ_BLOCK))
            current[offset:offset + size] = view[written:written + size]
            debug_log(
                "Writing: disk_num=%u, block_num=%u, offset=%u, bytes_to_write=%u",
                disk, block, offset, size,
            )
            self._command(Command.WRITE_BLOCK, block=bytes(current))
            written += size
        return written