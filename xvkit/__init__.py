"""Models of a small x86 teaching kernel: layout, paging, descriptors, ELF, traps, locks, run queue, heap, shell parser and utilities."""

__version__ = "0.1.0"

__all__ = [
    "layout",
    "mmu",
    "elf",
    "trapframe",
    "cstring",
    "umalloc",
    "wc",
    "rm",
    "rbtree",
    "shell",
    "locks",
    "vm",
    "syscall",
]