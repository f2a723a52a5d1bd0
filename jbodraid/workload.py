"""Replay a workload file of commands against an array."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from jbodraid.jbod import NUM_BLOCKS_PER_DISK, NUM_DISKS
from jbodraid.mdadm import MAX_IO_SIZE, Mdadm, MdadmError

_SIMPLE_COMMANDS = ("MOUNT", "UNMOUNT", "WRITE_PERMIT", "WRITE_PERMIT_REVOKE", "SIGNALL")
_IO_COMMANDS = ("READ", "WRITE")
# Widest accepted text for the name, address, length and fill byte fields.
_FIELD_WIDTHS = (7, 7, 4, 3)


class WorkloadError(Exception):
    """A workload file could not be read, parsed or carried out."""


def stringify(data: bytes) -> str:
    """Render bytes as ``0x.. `` groups, sixteen to a line."""
    rows = (
        "".join(f"0x{byte:02x} " for byte in data[start:start + 16])
        for start in range(0, len(data), 16)
    )
    return "\n".join(rows)


def parse_command(line: str) -> tuple[str, tuple[int, ...]]:
    """Parse one workload line into a command name and its numeric arguments.

    ``MOUNT``, ``UNMOUNT``, ``WRITE_PERMIT``, ``WRITE_PERMIT_REVOKE`` and
    ``SIGNALL`` take no arguments. ``READ`` and ``WRITE`` take an address,
    a length and a fill byte.
    """
    text = line.rstrip("\r\n")
    if text.strip() in _SIMPLE_COMMANDS:
        return text.strip(), ()

    fields = text.split()
    if len(fields) != 4 or any(
        len(field) > width for field, width in zip(fields, _FIELD_WIDTHS)
    ):
        raise WorkloadError(f"failed to parse command: [{text}]")
    name, *numbers = fields
    if not all(number.isdigit() for number in numbers):
        raise WorkloadError(f"failed to parse command: [{text}]")
    if name not in _IO_COMMANDS:
        raise WorkloadError(f"unknown command [{text}]")
    return name, tuple(int(number) for number in numbers)


def run_workload(
    path: str | Path,
    array: Mdadm,
    sign_block: Callable[[int, int], object],
) -> int:
    """Carry out every command in the file at ``path``; return the lines run.

    ``sign_block(disk, block)`` is called for every block on ``SIGNALL``.
    Raises WorkloadError naming the line of the first command that fails.
    """
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.readlines()
    except OSError as exc:
        raise WorkloadError(f"cannot open workload file {path}: {exc}") from exc

    buffer = bytearray(MAX_IO_SIZE)
    line_num = 0
    for line_num, line in enumerate(lines, start=1):
        text = line.rstrip("\r\n")
        try:
            name, args = parse_command(text)
        except WorkloadError as exc:
            raise WorkloadError(f"{exc} on line {line_num}") from exc

        try:
            if name == "MOUNT":
                array.mount()
            elif name == "UNMOUNT":
                array.unmount()
            elif name == "WRITE_PERMIT":
                array.grant_write_permission()
            elif name == "WRITE_PERMIT_REVOKE":
                array.revoke_write_permission()
            elif name == "SIGNALL":
                for disk in range(NUM_DISKS):
                    for block in range(NUM_BLOCKS_PER_DISK):
                        sign_block(disk, block)
            else:
                addr, length, fill = args
                if name == "READ":
                    data = array.read(addr, length)
                    buffer[:len(data)] = data
                else:
                    array.write(addr, bytes([fill & 0xFF]) * length)
        except MdadmError as exc:
            raise WorkloadError(
                f"failed when processing command [{text}] on line {line_num}: {exc}"
            ) from exc
    return line_num