"""Mutual-exclusion locks: spin locks held by a thread and sleep locks held by a process id."""

from __future__ import annotations

import threading


class LockError(RuntimeError):
    """Raised when a lock is used in a way that signals a bug."""


class SpinLock:
    """A non-reentrant lock that knows which thread holds it."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._owner: int | None = None

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def acquire(self) -> None:
        """Take the lock, waiting if another thread holds it."""
        if self.holding():
            raise LockError(f"acquire: {self.name} already held")
        self._lock.acquire()
        self._owner = threading.get_ident()

    def release(self) -> None:
        """Give up the lock; the calling thread must hold it."""
        if not self.holding():
            raise LockError(f"release: {self.name} not held")
        self._owner = None
        self._lock.release()

    def holding(self) -> bool:
        """Whether the calling thread holds the lock."""
        return self._lock.locked() and self._owner == threading.get_ident()

    def __enter__(self) -> "SpinLock":
        self.acquire()
        return self

    def __exit__(self, *args) -> None:
        self.release()


class SleepLock:
    """A long-term lock that waits while held and records the holder's pid."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.locked = False
        self.pid = 0
        self._cond = threading.Condition(threading.Lock())

    def acquire(self, pid: int) -> None:
        """Wait until the lock is free, then take it on behalf of pid."""
        with self._cond:
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = pid

    def release(self) -> None:
        """Free the lock and wake every waiter."""
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self, pid: int) -> bool:
        """Whether pid holds the lock."""
        with self._cond:
            return self.locked and self.pid == pid