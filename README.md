# xvkit

Pure-Python models of the pieces of a small 32-bit x86 teaching kernel and
its user-space library: memory layout constants, paging arithmetic, segment
and gate descriptors, ELF headers, trap frames, two-level page tables over a
simulated pool of physical pages, system call argument checking, locks, a
red-black run queue, a first-fit heap allocator, C-style string helpers, a
shell command parser, and two small command-line utilities.

Nothing here needs an emulator or any library outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `xvkit.layout` | Kernel parameters (`NPROC`, `NOFILE`, `MAXARG`, ...), address-space constants (`KERNBASE`, `PHYSTOP`, `DEVSPACE`, ...), `v2p` / `p2v`, the `FileType`, `OpenFlag`, `Trap`, `Irq` and `Syscall` enumerations, and the `Stat` record with `pack` / `unpack` |
| `xvkit.mmu` | `pdx`, `ptx`, `pgaddr`, `pgroundup`, `pgrounddown`, `pte_addr`, `pte_flags`, page-table flag constants, and the `SegDesc` (`seg`, `seg16`) and `GateDesc` (`gate`, `offset`) descriptors packed to and from 8 bytes |
| `xvkit.elf` | `ElfHeader` and `ProgramHeader` with `pack` / `unpack`, and `program_headers(data)` yielding every program header of an image; bad magic or truncated data raises `ElfError` |
| `xvkit.trapframe` | `TrapFrame`, packable to and from its stack layout, with `from_user()` telling whether the trap came from user mode |
| `xvkit.cstring` | `strlen`, `strcmp`, `strncmp`, `strncpy`, `safestrcpy`, `strchr`, `memcmp`, `memmove`, `memset`, `atoi` and `gets`, working on `bytes`, `bytearray` or `str` |
| `xvkit.umalloc` | `Heap`, a first-fit free-list allocator in 8-byte units that grows in steps of at least 4096 units and coalesces neighbours on `free` |
| `xvkit.rbtree` | `RBTree`, a red-black tree ordered by a key function, with `insert`, `delete`, `get_min`, in-order iteration and `check()` of the invariants |
| `xvkit.shell` | `tokenize` and `parse_command`, producing trees of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`; errors raise `ShellSyntaxError` |
| `xvkit.locks` | `SpinLock` (held by a thread, usable with `with`) and `SleepLock` (held on behalf of a pid); misuse of a `SpinLock` raises `LockError` |
| `xvkit.vm` | `PhysicalMemory`, a pool of pages handed out by `kalloc` / `kfree`, and `PageTable`, a page directory stored in those pages |
| `xvkit.syscall` | `UserContext` for checked argument fetching from a process's memory and `SyscallTable` for dispatching by number |
| `xvkit.wc`, `xvkit.rm` | The word-count and remove-file utilities |

## Examples

Address arithmetic:

```python
from xvkit.mmu import pdx, ptx, pgroundup

pdx(0x80401000)      # 513
ptx(0x80401000)      # 1
pgroundup(5000)      # 8192
```

Parsing a shell line:

```python
from xvkit.shell import parse_command, PipeCmd, RedirCmd

cmd = parse_command("cat README | grep kernel > out")
isinstance(cmd, PipeCmd)          # True
isinstance(cmd.right, RedirCmd)   # True: grep's output goes to "out"
```

Redirections are wrapped around the command they apply to; `<` reopens
descriptor 0 read-only, while `>` and `>>` both reopen descriptor 1 with
`OpenFlag.WRONLY | OpenFlag.CREATE`. More than nine words in one command is
an error.

A run queue ordered by virtual runtime:

```python
from dataclasses import dataclass
from xvkit.rbtree import RBTree

@dataclass
class Proc:
    pid: int
    vruntime: int

queue = RBTree(key=lambda proc: proc.vruntime)
a, b = Proc(1, 30), Proc(2, 10)
queue.insert(a)
queue.insert(b)
queue.get_min()   # Proc(pid=2, vruntime=10)
queue.delete(b)   # True
```

Page tables over simulated memory:

```python
from xvkit.vm import PhysicalMemory, PageTable

memory = PhysicalMemory(64)
table = PageTable(memory)
table.alloc_user(0, 8192)
table.copy_out(100, b"hello")
table.read(100, 5)   # b'hello'
child = table.copy(8192)
table.free()
```

Growing past `KERNBASE` raises `VMError`; running out of pages raises
`OutOfMemory`, after the pages taken by the failed call are given back.

System call dispatch:

```python
import struct
from xvkit.layout import Syscall
from xvkit.syscall import SyscallTable, UserContext

memory = bytearray(64)
struct.pack_into("<i", memory, 4, 42)   # first argument above the return address
ctx = UserContext(memory, esp=0, pid=7, name="init")
table = SyscallTable({Syscall.KILL: lambda c: c.arg_int(0)})
table.dispatch(ctx, Syscall.KILL)   # 42
table.dispatch(ctx, 99)             # -1, and logs "7 init: unknown sys call 99"
```

A handler that hits an address outside the process (`BadAddress`) makes
`dispatch` return -1.

Locks:

```python
from xvkit.locks import SpinLock, SleepLock

lock = SpinLock("ticks")
with lock:
    assert lock.holding()

sleep = SleepLock("inode")
sleep.acquire(pid=3)
sleep.holding(3)    # True
sleep.release()
```

## Command-line tools

Count lines, words and bytes in each file, or in standard input when no
file is given:

```
xvkit-wc README.md
```

Remove files (and empty directories), stopping at the first one that
cannot be removed:

```
xvkit-rm old.txt scratch.txt
```

Both print the same messages as their counterparts inside the teaching
system and exit with status 1 on failure.

## What this package does not do

- It is not a kernel and runs nothing: there is no scheduler loop, no
  process table, no file system, no disk or console driver.
- `xvkit.shell` parses command lines but does not execute them.
- `SyscallTable` only dispatches to the handlers you give it; no system
  calls are implemented here.