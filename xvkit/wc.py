"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO, Sequence

_CHUNK = 512
_WHITESPACE = frozenset(b" \r\t\n\v")


@dataclass(frozen=True)
class Counts:
    """Line, word and byte counts of one input."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream: BinaryIO) -> Counts:
    """Count the lines, words and bytes read from a binary stream."""
    lines = words = chars = 0
    in_word = False
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in _WHITESPACE:
                in_word = False
            elif not in_word:
                words += 1
                in_word = True
    return Counts(lines, words, chars)


def _report(stream: BinaryIO, name: str) -> int:
    try:
        counts = count(stream)
    except OSError:
        print("wc: read error")
        return 1
    print(f"{counts.lines} {counts.words} {counts.chars} {name}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Print counts for each named file, or for standard input."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _report(sys.stdin.buffer, "")
    for name in args:
        try:
            stream = open(name, "rb")
        except OSError:
            print(f"wc: cannot open {name}")
            return 1
        with stream:
            status = _report(stream, name)
        if status:
            return status
    return 0


if __name__ == "__main__":
    sys.exit(main())