"""Debug logging, block signatures and random numbers."""

from __future__ import annotations

import hashlib
import os
import secrets
import sys
from dataclasses import dataclass

_UINT32_MAX = 0xFFFFFFFF


@dataclass
class _DebugLog:
    enabled: bool = False
    fd: int | None = None


_log = _DebugLog()


def enable_debug_log() -> None:
    """Turn debug logging on."""
    _log.enabled = True


def set_debug_logfile(filename: str) -> None:
    """Send debug output to ``filename`` instead of standard error."""
    fd = os.open(filename, os.O_CREAT | os.O_WRONLY, 0o600)
    if _log.fd is not None:
        os.close(_log.fd)
    _log.fd = fd


def debug_log(fmt: str, *args: object) -> None:
    """Write one formatted line to the debug log if logging is enabled."""
    if not _log.enabled:
        return
    line = (fmt % args if args else fmt) + "\n"
    if _log.fd is None:
        sys.stderr.write(line)
    else:
        os.write(_log.fd, line.encode())


def sha1_sig(data: bytes) -> str:
    """Return the first 15 bytes of the SHA-1 digest as ``0x.. `` groups."""
    digest = hashlib.sha1(data).digest()
    return "".join(f"0x{byte:02x} " for byte in digest[:15])


def get_rand(low: int, high: int) -> int:
    """Return a random integer between ``low`` and ``high`` inclusive."""
    span = high - low + 1
    if span <= 0 or span > _UINT32_MAX:
        raise ValueError(f"invalid range [{low}, {high}]")
    value = secrets.randbits(32) // (_UINT32_MAX // span) + low
    return min(value, high)