# jbodraid

`jbodraid` turns a simulated JBOD array into one flat space that you can
address byte by byte. The array has 16 disks. Each disk holds 256 blocks of
256 bytes, so the linear space is 1,048,576 bytes long.

## The device: `jbodraid.jbod`

A `BlockDevice` keeps all of its disks in memory. Its `disks` attribute is a
list of 16 bytearrays. You drive the device with 32-bit operation words:

```python
device.operation(op, block=None)
```

`pack_op(disk_id, block_id, command, reserved)` builds an operation word.
Any value too wide for its field is masked to fit. `unpack_op(op)` takes a
word apart and returns `(disk_id, block_id, command, reserved)`.

| bits  | field    |
|-------|----------|
| 0–5   | command  |
| 6–9   | disk     |
| 10–17 | block    |
| 18–31 | reserved |

The commands are the members of `Command`:

* `MOUNT`, `UNMOUNT`
* `SEEK_TO_DISK`, `SEEK_TO_BLOCK`
* `READ_BLOCK`, which returns the 256 bytes of the current block
* `WRITE_PERMISSION`, `REVOKE_WRITE_PERMISSION`
* `WRITE_BLOCK`, which takes a 256-byte `block`
* `SIGN_BLOCK`, which returns the SHA-1 digest of the current block

The read, write, seek and sign commands all require the device to be
mounted. If the device refuses an operation, it raises `JbodError`. The
error's `code` attribute holds an `ErrorCode`, such as `UNMOUNTED`,
`BAD_DISK_NUM` or `WRITE_PERMISSION_REVOKED`.

## The linear layer: `jbodraid.mdadm`

`Mdadm(device)` wraps a device and does the seeking for you. A single read
or write may cross block and disk boundaries.

```python
from jbodraid.jbod import BlockDevice
from jbodraid.mdadm import Mdadm, MdadmError

array = Mdadm(BlockDevice())
array.mount()
array.grant_write_permission()

array.write(248, b"\xaa" * 16)   # runs from block 0 into block 1
data = array.read(248, 16)        # b"\xaa" * 16

array.revoke_write_permission()
array.unmount()
```

You can also use an `Mdadm` as a context manager. It is mounted on entry,
and on exit it is unmounted if it is still mounted:

```python
with Mdadm(BlockDevice()) as array:
    print(array.read(0, 16))
```

### Rules

* `read(start_addr, length)` returns `bytes` and requires the array to be
  mounted.
* `write(start_addr, data)` returns the number of bytes written. It requires
  the array to be mounted and write permission to have been granted.
* A single request may move at most `MAX_IO_SIZE` bytes, which is 2048.
* A request may not start below zero, and it may not run past `TOTAL_SIZE`.
* Mounting an array that is already mounted fails. Unmounting an array that
  is not mounted also fails.
* Granting write permission twice in a row fails, because the device refuses
  the second grant.

Any broken rule raises `MdadmError`, and so does any `JbodError` from the
device.

## Workloads: `jbodraid.workload`

`run_workload(path, array, sign_block)` replays a text file of commands
against an `Mdadm`. It returns the number of lines it ran. Each line holds
one of the following commands:

```
MOUNT
UNMOUNT
WRITE_PERMIT
WRITE_PERMIT_REVOKE
SIGNALL
READ <addr> <len> <ch>
WRITE <addr> <len> <ch>
```

* `WRITE` writes `len` bytes, each holding the byte value `ch`.
* `READ` reads `len` bytes and ignores `ch`.
* `SIGNALL` calls `sign_block(disk, block)` once for every block in the
  array.

The function below is one way to sign a block with the device itself:

```python
from jbodraid.jbod import BlockDevice, Command, pack_op
from jbodraid.mdadm import Mdadm
from jbodraid.workload import run_workload

device = BlockDevice()
array = Mdadm(device)

def sign(disk, block):
    device.operation(pack_op(disk_id=disk, command=Command.SEEK_TO_DISK))
    device.operation(pack_op(block_id=block, command=Command.SEEK_TO_BLOCK))
    return device.operation(pack_op(command=Command.SIGN_BLOCK))

run_workload("workload.txt", array, sign)
```

`run_workload` raises `WorkloadError` in three cases:

* the file cannot be opened;
* a line cannot be parsed;
* a command fails.

In the last two cases the message gives the line number.

`parse_command(line)` parses a single line and returns
`(name, (addr, len, ch))`. For the commands that take no arguments it returns
`(name, ())`.

`stringify(data)` renders bytes as a hex dump of `0x..` groups, 16 bytes per
row.

## Utilities: `jbodraid.util`

* `enable_debug_log()` turns on the debug log. `debug_log(fmt, *args)` then
  writes one `%`-formatted line per call. The output goes to standard error,
  or to a file chosen with `set_debug_logfile(filename)`. `Mdadm.write` logs
  every block it writes.
* `sha1_sig(data)` returns the first 15 bytes of the data's SHA-1 digest, as
  `0x..` groups.
* `get_rand(low, high)` returns a random integer between `low` and `high`,
  both included. It raises `ValueError` if the range is empty.

## What it does not do

* The disks live in memory only. Nothing is saved to a file, and the
  contents are lost when the `BlockDevice` goes away.
* The package has no command-line program. To replay a workload, call
  `run_workload` from Python.