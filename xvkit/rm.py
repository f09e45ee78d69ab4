"""Remove files."""

from __future__ import annotations

import os
import sys
from typing import Sequence


def main(argv: Sequence[str] | None = None) -> int:
    """Remove each named file or empty directory; stop at the first failure."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: rm files...", file=sys.stderr)
        return 1
    for name in args:
        try:
            if os.path.isdir(name) and not os.path.islink(name):
                os.rmdir(name)
            else:
                os.unlink(name)
        except OSError:
            print(f"rm: {name} failed to delete", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())